from __future__ import annotations
import json
import re
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple
from esghub.utils.config import AppConfig
from esghub.utils.exception import LocateUnavailable, ViewerNotReady
from esghub.utils.logger import logger
from esghub.utils.scheduling import Scheduler, wait_for

QUOTE_RE = re.compile(r"[\"'“”‘’]")

FIND_SCRIPT = "try {{ window.find({query}, false, false, true, false, true, false); }} catch (e) {{ console.error('Search failed:', e); }}"


def build_search_query(text: Optional[str], max_words: int = 5) -> str:
    """First `max_words` whitespace-separated words of `text`, quote characters removed."""
    if not text:
        return ""
    words = text.split()[:max_words]
    return QUOTE_RE.sub("", " ".join(words)).strip()


class Attempt(Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class LocateOutcome:
    query: str
    strategy: str
    found: bool

    @property
    def notice(self) -> str:
        if not self.found:
            return f'No match for "{self.query}" in the document.'
        if self.strategy == "script":
            return f'Attempted to search for: "{self.query}"'
        return f'Searching for: "{self.query}"'


def use_find_controller(view, query: str) -> Attempt:
    controller = getattr(view, "find_controller", None)
    if controller is None:
        return Attempt.UNAVAILABLE
    controller.execute_command("find", {"query": "", "phraseSearch": True, "highlightAll": False, "findPrevious": False})
    controller.execute_command("find", {"query": query, "phraseSearch": True, "highlightAll": True, "findPrevious": False})
    return Attempt.APPLIED


def use_text_find(view, query: str) -> Attempt:
    find = getattr(view, "find", None)
    if find is None:
        return Attempt.UNAVAILABLE
    found = find(query, False, False, True, False, True)
    return Attempt.APPLIED if found else Attempt.NOT_FOUND


def use_script(view, query: str) -> Attempt:
    run_script = getattr(view, "run_script", None)
    if run_script is None:
        return Attempt.UNAVAILABLE
    run_script(FIND_SCRIPT.format(query=json.dumps(query)))
    return Attempt.APPLIED


STRATEGIES: List[Tuple[str, Callable]] = [
    ("find_controller", use_find_controller),
    ("text_find", use_text_find),
    ("script", use_script),
]


class Locator:
    """Finds a flagged statement inside the rendered view and moves the view to it.

    Strategies run in order; the first one the view supports decides the
    outcome. `request` adds the settle delay and the auto-clearing highlight
    index used by the analysis popup.
    """

    def __init__(self, config: AppConfig, view, scheduler: Optional[Scheduler] = None, strategies=None):
        self.config = config
        self.view = view
        self.scheduler = scheduler or Scheduler()
        self.strategies = list(strategies or STRATEGIES)
        self.in_progress = False
        self.active_index: Optional[int] = None
        self._pending: Optional[Future] = None

    def query_for(self, text: Optional[str]) -> str:
        return build_search_query(text, self.config.search_words)

    def locate_now(self, text: Optional[str]) -> Optional[LocateOutcome]:
        query = self.query_for(text)
        if not query:
            return None
        try:
            wait_for(self.view.is_ready, self.config.viewer_poll_interval, self.config.viewer_ready_timeout)
        except ViewerNotReady as e:
            raise LocateUnavailable(str(e)) from e
        for name, attempt in self.strategies:
            try:
                result = attempt(self.view, query)
            except Exception as e:
                logger.warning("Locate strategy %s failed: %s", name, e)
                continue
            if result is Attempt.UNAVAILABLE:
                continue
            logger.info("Located %r via %s (found=%s)", query, name, result is Attempt.APPLIED)
            return LocateOutcome(query=query, strategy=name, found=result is Attempt.APPLIED)
        raise LocateUnavailable("Could not search in PDF. Try scrolling manually.")

    def request(self, text: Optional[str], index: Optional[int] = None) -> Future:
        """Schedule a locate after the settle delay; a newer request replaces a pending one.

        The returned future resolves to the LocateOutcome (None for an empty
        query) or fails with LocateUnavailable.
        """
        future: Future = Future()
        if not self.query_for(text):
            future.set_result(None)
            return future
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = future
        self.in_progress = True
        self.active_index = index
        self.scheduler.call_later("reset-active", self.config.locate_reset_seconds, self._clear_active)

        def _run():
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(self.locate_now(text))
            except Exception as e:
                future.set_exception(e)
            finally:
                if self._pending is future:
                    self.in_progress = False

        if not self.scheduler.call_later("locate", self.config.locate_settle_seconds, _run):
            future.cancel()
            self.in_progress = False
        return future

    def _clear_active(self) -> None:
        self.active_index = None

    def close(self) -> None:
        self.scheduler.close()
        if self._pending is not None:
            self._pending.cancel()
        self.in_progress = False
        self.active_index = None
