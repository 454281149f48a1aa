from esghub.chat.session import ChatSession, WAITING_PROMPT
from esghub.utils.exception import NetworkError, ServiceError
from esghub.utils.text import TRUNCATION_NOTE
from esghub.utils.types import ChatTurn


class StubClient:
    def __init__(self, reply="Here is what the report says.", error=None, on_complete=None):
        self.reply = reply
        self.error = error
        self.on_complete = on_complete
        self.requests = []

    def complete(self, messages):
        self.requests.append(messages)
        if self.on_complete:
            self.on_complete()
        if self.error:
            raise self.error
        return self.reply


def test_new_session_has_placeholder_system_turn(config):
    session = ChatSession(config, client=StubClient())
    assert session.turns == [ChatTurn("system", WAITING_PROMPT)]
    assert session.visible_turns() == []


def test_attach_seeds_system_turn_with_document(config):
    session = ChatSession(config, client=StubClient())
    session.attach("doc-1", "Page 1: emissions fell")
    assert len(session.turns) == 1
    assert session.turns[0].role == "system"
    assert "emissions fell" in session.turns[0].content


def test_changing_document_resets_conversation(config):
    client = StubClient()
    session = ChatSession(config, client=client)
    session.attach("doc-1", "first report")
    session.send("What is the scope 3 target?")
    assert len(session.turns) == 3
    assert session.attach("doc-2", "second report") is True
    assert len(session.turns) == 1
    assert "second report" in session.turns[0].content
    assert "first report" not in session.turns[0].content


def test_reattaching_same_document_keeps_history(config):
    session = ChatSession(config, client=StubClient())
    session.attach("doc-1", "report")
    session.send("hello")
    assert session.attach("doc-1", "report") is False
    assert len(session.turns) == 3


def test_detaching_document_restores_placeholder(config):
    session = ChatSession(config, client=StubClient())
    session.attach("doc-1", "report")
    session.attach(None, None)
    assert session.turns == [ChatTurn("system", WAITING_PROMPT)]


def test_send_without_context_issues_no_request(config):
    client = StubClient()
    session = ChatSession(config, client=client)
    assert session.send("Is this report credible?") is None
    assert client.requests == []
    assert session.visible_turns() == []


def test_blank_message_is_ignored(config):
    client = StubClient()
    session = ChatSession(config, client=client)
    session.attach("doc-1", "report")
    assert session.send("   ") is None
    assert client.requests == []


def test_send_sends_full_history_with_system_first(config):
    client = StubClient(reply="Answer one")
    session = ChatSession(config, client=client)
    session.attach("doc-1", "report text")
    session.send("first question")
    client.reply = "Answer two"
    reply = session.send("second question")
    assert reply == ChatTurn("assistant", "Answer two")
    last_request = client.requests[-1]
    assert [m["role"] for m in last_request] == ["system", "user", "assistant", "user"]
    assert last_request[-1]["content"] == "second question"
    assert [t.role for t in session.visible_turns()] == ["user", "assistant", "user", "assistant"]


def test_failure_becomes_assistant_turn(config):
    client = StubClient(error=ServiceError("Failed to get a response from the AI (HTTP 502)."))
    session = ChatSession(config, client=client)
    session.attach("doc-1", "report")
    reply = session.send("question")
    assert reply.role == "assistant"
    assert reply.content.startswith("Sorry, there was an error:")
    assert "HTTP 502" in reply.content
    assert [t.role for t in session.visible_turns()] == ["user", "assistant"]
    assert session.visible_turns()[0].content == "question"
    assert not session.pending


def test_network_failure_keeps_conversation_usable(config):
    client = StubClient(error=NetworkError("timed out"))
    session = ChatSession(config, client=client)
    session.attach("doc-1", "report")
    session.send("first")
    client.error = None
    assert session.send("retry") is not None
    assert len(client.requests) == 2


def test_send_while_pending_is_noop(config):
    nested = []
    session = None

    def send_again():
        assert session.pending
        assert session.can_send("second") is False
        nested.append(session.send("second"))

    client = StubClient(on_complete=send_again)
    session = ChatSession(config, client=client)
    session.attach("doc-1", "report")
    session.send("first")
    assert nested == [None]
    assert len(client.requests) == 1
    assert [t.role for t in session.visible_turns()] == ["user", "assistant"]


def test_reply_dropped_when_document_changes_mid_request(config):
    session = None

    def switch_document():
        session.attach("doc-2", "another report")

    client = StubClient(on_complete=switch_document)
    session = ChatSession(config, client=client)
    session.attach("doc-1", "report")
    assert session.send("question") is None
    assert len(session.turns) == 1
    assert "another report" in session.turns[0].content


def test_long_context_is_clipped_with_note(config):
    session = ChatSession(config, client=StubClient())
    text = "a" * (config.chat_context_chars + 10)
    session.attach("doc-1", text)
    content = session.turns[0].content
    assert "a" * (config.chat_context_chars + 1) not in content
    assert TRUNCATION_NOTE.format(shown=config.chat_context_chars, total=len(text)) in content
