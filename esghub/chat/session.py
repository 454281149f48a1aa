from __future__ import annotations
import threading
from typing import List, Optional
from esghub.utils.config import AppConfig
from esghub.utils.exception import ServiceCallError
from esghub.utils.logger import logger
from esghub.utils.text import clip_with_note
from esghub.utils.types import ChatTurn

ANALYST_PROMPT = "You are an expert ESG analyst. You are helping a user analyze this ESG report:\n\n{context}"
WAITING_PROMPT = "You are an expert ESG analyst. Please wait for the document to be loaded."
ERROR_REPLY = "Sorry, there was an error: {message}"


def system_turn(text: Optional[str], limit: int) -> ChatTurn:
    if text:
        return ChatTurn("system", ANALYST_PROMPT.format(context=clip_with_note(text, limit)))
    return ChatTurn("system", WAITING_PROMPT)


def _get_client(config: AppConfig):
    from esghub.llm.openrouter import OpenRouterClient
    return OpenRouterClient(config)


class ChatSession:
    """Conversation about one document.

    The first turn is always the system turn for the attached document.
    Sends are serialized: while one request is outstanding, further sends are
    no-ops. Transport failures become assistant turns so the transcript stays
    continuous.
    """

    def __init__(self, config: AppConfig, client=None):
        self.config = config
        self._client = client
        self._lock = threading.Lock()
        self._generation = 0
        self.document_id: Optional[str] = None
        self.document_text: Optional[str] = None
        self.turns: List[ChatTurn] = [system_turn(None, config.chat_context_chars)]

    @property
    def client(self):
        if self._client is None:
            self._client = _get_client(self.config)
        return self._client

    @property
    def pending(self) -> bool:
        return self._lock.locked()

    @property
    def has_context(self) -> bool:
        return bool(self.document_text)

    def attach(self, document_id: Optional[str], text: Optional[str]) -> bool:
        """Bind the session to a document; resets the conversation when it changes."""
        if document_id == self.document_id and text == self.document_text:
            return False
        self._generation += 1
        self.document_id = document_id
        self.document_text = text or None
        self.turns = [system_turn(self.document_text, self.config.chat_context_chars)]
        logger.debug("Chat reset for document %s (context: %s)", document_id, "yes" if text else "no")
        return True

    def can_send(self, text: str) -> bool:
        return bool(text and text.strip()) and self.has_context and not self.pending

    def visible_turns(self) -> List[ChatTurn]:
        return [t for t in self.turns if t.role != "system"]

    def send(self, text: str) -> Optional[ChatTurn]:
        """Append `text` as a user turn and the service's reply. Returns the reply turn.

        Returns None without contacting the service when the text is blank,
        no document text is attached, or another send is still pending.
        """
        if not self.can_send(text):
            return None
        if not self._lock.acquire(blocking=False):
            return None
        try:
            generation = self._generation
            self.turns = self.turns + [ChatTurn("user", text.strip())]
            messages = [t.as_message() for t in self.turns]
            try:
                content = self.client.complete(messages)
                reply = ChatTurn("assistant", content)
            except ServiceCallError as e:
                logger.error("Chat request failed: %s", e)
                reply = ChatTurn("assistant", ERROR_REPLY.format(message=e))
            if generation != self._generation:
                logger.debug("Discarding chat reply for a document that is no longer attached")
                return None
            self.turns = self.turns + [reply]
            return reply
        finally:
            self._lock.release()
