"""Handle to the rendered document view.

The viewer component owns a PdfFrame; the Locator only borrows it. Each search
capability is an attribute that is None when the host cannot provide it:

- find_controller: pdf.js find controller (needs PDFJS_VIEWER_URL and a file URL)
- find: generic text search over the extracted page text
- run_script: script injection into the view's own context; queued scripts are
  rendered with the next draw of the viewer component, inside the frame wrapper
"""
from __future__ import annotations
import base64
import re
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import quote
from esghub.utils.logger import logger


@dataclass(frozen=True)
class FindState:
    query: str
    phrase_search: bool = True
    highlight_all: bool = False
    find_previous: bool = False


def _normalize(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


class PdfJsFindController:
    def __init__(self, frame: "PdfFrame"):
        self.frame = frame
        self.state: Optional[FindState] = None

    def execute_command(self, cmd: str, params: dict) -> None:
        if cmd != "find":
            raise ValueError(f"Unsupported find command: {cmd}")
        self.state = FindState(
            query=params.get("query", ""),
            phrase_search=bool(params.get("phraseSearch", True)),
            highlight_all=bool(params.get("highlightAll", False)),
            find_previous=bool(params.get("findPrevious", False)),
        )
        if not self.state.query:
            self.frame.highlight = None
            return
        self.frame.highlight = self.state.query
        page = self.frame.first_match_page(self.state.query)
        if page:
            self.frame.page = page


class PdfFrame:
    def __init__(
        self,
        file_name: str,
        data: Optional[bytes] = None,
        file_url: Optional[str] = None,
        pages: Optional[List[str]] = None,
        viewer_url: Optional[str] = None,
        allow_scripts: bool = False,
    ):
        self.file_name = file_name
        self.data = data
        self.file_url = file_url
        self.pages = list(pages or [])
        self.viewer_url = viewer_url
        self.page = 1
        self.highlight: Optional[str] = None
        self.find_controller = PdfJsFindController(self) if viewer_url and file_url else None
        self.find = self._find_in_pages if self.pages else None
        self.run_script = self._queue_script if allow_scripts else None
        self._scripts: List[str] = []

    def is_ready(self) -> bool:
        return bool(self.data or self.file_url)

    def first_match_page(self, query: str) -> Optional[int]:
        needle = _normalize(query).lower()
        for number, text in enumerate(self.pages, start=1):
            if needle and needle in _normalize(text).lower():
                return number
        return None

    def _find_in_pages(
        self,
        query: str,
        case_sensitive: bool = False,
        backwards: bool = False,
        wrap_around: bool = True,
        whole_word: bool = False,
        search_in_frames: bool = True,
    ) -> bool:
        needle = _normalize(query)
        if not needle or not self.pages:
            return False
        pattern = re.escape(needle)
        if whole_word:
            pattern = rf"\b{pattern}\b"
        rx = re.compile(pattern, 0 if case_sensitive else re.I)
        count = len(self.pages)
        start = min(max(self.page, 1), count) - 1
        step = -1 if backwards else 1
        order = []
        idx = start
        for _ in range(count):
            order.append(idx)
            idx += step
            if not 0 <= idx < count:
                if not wrap_around:
                    break
                idx %= count
        for i in order:
            if rx.search(_normalize(self.pages[i])):
                self.page = i + 1
                self.highlight = needle
                logger.debug("Text search matched %r on page %d", needle, self.page)
                return True
        return False

    def _queue_script(self, js: str) -> None:
        self._scripts.append(js)

    def take_scripts(self) -> List[str]:
        """Scripts queued since the last draw; the caller renders them once."""
        scripts, self._scripts = self._scripts, []
        return scripts

    def src(self) -> str:
        """URL the view's iframe should load, carrying page and search state."""
        fragment = f"#page={self.page}"
        if self.find_controller is not None:
            state = self.find_controller.state
            if state and state.query:
                fragment += f"&search={quote(state.query)}&phrase={'true' if state.phrase_search else 'false'}"
            return f"{self.viewer_url}?file={quote(self.file_url, safe='')}{fragment}"
        if self.highlight:
            fragment += f"&search={quote(self.highlight)}"
        if self.file_url:
            return self.file_url + fragment
        if self.data:
            return "data:application/pdf;base64," + base64.b64encode(self.data).decode("ascii") + fragment
        return "about:blank"
