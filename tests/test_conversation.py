"""Unit tests for conversation messages and the transcript."""
import pytest

from parley.conversation import (
    ChatMessage,
    ConversationTranscript,
    Role,
    TranscriptInvariantError,
    get_file_name,
    new_assistant_message,
    new_system_message,
    new_user_message,
    normalize_content,
)


class TestNormalizeContent:
    """Tests for HTML container stripping."""

    @pytest.mark.parametrize(
        "content,expected",
        [
            ("<p>Hello</p>", "Hello"),
            ("<div><p>Hi</p></div>", "Hi"),
            ('<p class="x">Hi</p>', "Hi"),
            ("  plain  ", "plain"),
            ("<b>bold</b> text", "<b>bold</b> text"),
            ("<p>a</p><p>b</p>", "<p>a</p><p>b</p>"),
            ("<p>unclosed", "<p>unclosed"),
            ("<file>a.pdf</file>", "<file>a.pdf</file>"),
            ("<p><FILE>a.pdf</FILE></p>", "<FILE>a.pdf</FILE>"),
        ],
    )
    def test_normalize(self, content: str, expected: str):
        """Test stripping of outer containers."""
        assert normalize_content(content) == expected

    def test_blank_content_is_returned_unchanged(self):
        """Test that empty and whitespace-only text pass through."""
        assert normalize_content("") == ""
        assert normalize_content("   ") == "   "


class TestMessageFactories:
    """Tests for message constructors."""

    def test_user_message_is_normalized(self):
        """Test that user input is unwrapped and trimmed."""
        message = new_user_message("  <p>Hello</p> ")
        assert message.role == Role.USER
        assert message.content == "Hello"

    def test_user_message_keeps_bare_file_reference(self):
        """Test that a message holding only a file tag keeps the reference."""
        message = new_user_message("<file>a.pdf</file>")
        assert message.content == "<file>a.pdf</file>"
        assert get_file_name(message) == "a.pdf"

    def test_assistant_message_drops_empty_thoughts(self):
        """Test that empty thoughts are stored as None."""
        message = new_assistant_message("Answer", thoughts_content="")
        assert message.thoughts_content is None

    def test_system_message(self):
        """Test creating a system message."""
        message = new_system_message("You are helpful.")
        assert message.role == Role.SYSTEM
        assert message.content == "You are helpful."

    def test_to_wire_omits_missing_thoughts(self):
        """Test the wire shape of a message."""
        assert new_user_message("Hi").to_wire() == {"role": "user", "content": "Hi"}
        wire = new_assistant_message("A", thoughts_content="T").to_wire()
        assert wire == {"role": "assistant", "content": "A", "thoughts_content": "T"}


class TestConversationTranscript:
    """Tests for ConversationTranscript."""

    def test_system_message_must_be_first(self):
        """Test that a late system message is rejected."""
        transcript = ConversationTranscript([new_user_message("Hi")])
        with pytest.raises(TranscriptInvariantError):
            transcript.append(new_system_message("prompt"))

    def test_replace_system_message_inserts_when_missing(self):
        """Test installing a system message in front of user turns."""
        transcript = ConversationTranscript([new_user_message("Hi")])
        system = new_system_message("prompt")
        transcript.replace_system_message(system)

        assert transcript[0] is system
        assert transcript.system_message is system
        assert len(transcript) == 2

    def test_replace_system_message_replaces_existing(self):
        """Test that a second system message replaces the first."""
        transcript = ConversationTranscript([new_system_message("old")])
        system = new_system_message("new")
        transcript.replace_system_message(system)

        assert len(transcript) == 1
        assert transcript[0] is system

    def test_replace_system_message_rejects_other_roles(self):
        """Test that only system messages can be installed."""
        with pytest.raises(TranscriptInvariantError):
            ConversationTranscript().replace_system_message(new_user_message("Hi"))

    def test_remove_suffix_from(self):
        """Test truncating the transcript."""
        messages = [new_user_message("a"), new_assistant_message("b"), new_user_message("c")]
        transcript = ConversationTranscript(messages)

        removed = transcript.remove_suffix_from(1)

        assert removed == messages[1:]
        assert transcript.messages == (messages[0],)

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_remove_suffix_out_of_bounds_is_noop(self, index: int):
        """Test that out of range indexes remove nothing."""
        transcript = ConversationTranscript([new_user_message("a")] * 3)
        assert transcript.remove_suffix_from(index) == []
        assert len(transcript) == 3

    def test_index_of_is_identity_based(self):
        """Test that equal copies are not found."""
        message = new_user_message("Hi")
        transcript = ConversationTranscript([message])

        assert transcript.index_of(message) == 0
        assert transcript.index_of(ChatMessage(role=Role.USER, content="Hi")) == -1

    def test_user_message_lookups(self):
        """Test last and preceding user message lookups."""
        u1, a1, u2, a2 = (
            new_user_message("u1"),
            new_assistant_message("a1"),
            new_user_message("u2"),
            new_assistant_message("a2"),
        )
        transcript = ConversationTranscript([new_system_message("s"), u1, a1, u2, a2])

        assert transcript.last_user_message() is u2
        assert transcript.preceding_user_message(4) is u2
        assert transcript.preceding_user_message(3) is u1
        assert transcript.preceding_user_message(1) is None
        assert transcript.messages_from(3) == (u2, a2)
        assert transcript.messages_from(-1) == ()

    def test_clear(self):
        """Test removing every message."""
        transcript = ConversationTranscript([new_user_message("a")])
        transcript.clear()
        assert len(transcript) == 0
        assert transcript.system_message is None
