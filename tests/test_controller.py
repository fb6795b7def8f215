"""Unit tests for the chat session controller."""
import asyncio
from unittest.mock import Mock
from uuid import uuid4

import pytest

from parley.conversation import Role, new_assistant_message, new_system_message, new_user_message
from parley.errors import NoActiveAgentError, SessionNotFoundError, StreamInterruptedError
from parley.memory import ChatSession, InMemoryChatHistoryStore
from parley.session import AgentProfile, ChatSessionController, ViewEvent
from parley.streaming import SERVER_PLACEHOLDER_TITLE


async def _wait_for(predicate, attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition not reached")


def _roles(controller: ChatSessionController) -> list[str]:
    return [m.role.value for m in controller.transcript]


def _contents(controller: ChatSessionController) -> list[str]:
    return [m.content for m in controller.transcript if m.role is not Role.SYSTEM]


class TestSendMessage:
    """Tests for sending user turns."""

    @pytest.mark.asyncio
    async def test_requires_agent(self, fake_service, fragment):
        """Test that sending without an agent changes nothing."""
        controller = ChatSessionController(fake_service([fragment("Hi")]))

        with pytest.raises(NoActiveAgentError):
            await controller.send_message("Hello")

        assert len(controller.transcript) == 0
        assert len(controller.views) == 0

    @pytest.mark.asyncio
    async def test_turn_appends_system_user_and_answer(self, fake_service, fragment, agent):
        """Test a complete request/response cycle."""
        service = fake_service([
            fragment("Let me think", thinking=True),
            None,
            fragment("Hello"),
            fragment(" there"),
        ])
        controller = ChatSessionController(service)
        controller.select_agent(agent)

        answer = await controller.send_message("<p>Hi</p>")

        assert _roles(controller) == ["system", "user", "assistant"]
        assert controller.transcript[1].content == "Hi"
        assert answer is controller.transcript[2]
        assert answer.content == "Hello there"
        assert answer.thoughts_content == "Let me think"
        assert not controller.is_streaming

        assert len(controller.views) == 3
        assert controller.views.last.message is answer
        assert controller.views.last.is_loaded

    @pytest.mark.asyncio
    async def test_request_carries_conversation_and_options(self, fake_service, fragment, thinking_agent):
        """Test the request built for the backend."""
        service = fake_service([fragment("ok")])
        controller = ChatSessionController(service, user="alice")
        await controller.new_session()
        controller.select_agent(thinking_agent)

        await controller.send_message("Question", file_name="data.csv")

        request = service.requests[0]
        assert request.model == "test-model"
        assert request.chat_session_id == controller.session.id
        assert request.user == "alice"
        assert request.enable_thinking is True
        assert request.think == "high"
        assert [m.role for m in request.messages] == [Role.SYSTEM, Role.USER]
        assert request.messages[1].content == "<file>data.csv</file>Question"
        assert controller.views[1].file_name == "data.csv"

    @pytest.mark.asyncio
    async def test_thinking_options_off_by_default(self, fake_service, fragment, agent):
        """Test that agents without thinking send no thinking options."""
        service = fake_service([fragment("ok")])
        controller = ChatSessionController(service)
        controller.select_agent(agent)

        await controller.send_message("Hi")

        assert service.requests[0].enable_thinking is None
        assert service.requests[0].think is None

    @pytest.mark.asyncio
    async def test_views_track_streaming(self, fake_service, fragment, agent):
        """Test that the placeholder view receives buffer updates."""
        controller = ChatSessionController(fake_service([fragment("a"), fragment("b")]))
        controller.select_agent(agent)
        events = []
        controller.views.add_listener(lambda event, index, view: events.append((event, view.is_loaded if view else None)))

        await controller.send_message("Hi")

        kinds = [event for event, _ in events]
        assert kinds.count(ViewEvent.ADDED) == 3
        assert kinds.count(ViewEvent.UPDATED) == 3
        assert events[2] == (ViewEvent.ADDED, False)

    @pytest.mark.asyncio
    async def test_debug_callback_receives_session_messages(self, fake_service, fragment, agent):
        """Test that trace messages reach the debug callback."""
        callback = Mock()
        controller = ChatSessionController(fake_service([fragment("a")]))
        controller.set_debug_callback(callback)
        controller.select_agent(agent)

        await controller.send_message("Hi")

        components = {call.args[1] for call in callback.call_args_list}
        assert {"Session", "Stream"} <= components


class TestTitle:
    """Tests for session title capture."""

    @pytest.mark.asyncio
    async def test_first_meaningful_title_is_kept(self, fake_service, fragment, agent):
        """Test that the server title replaces the placeholder."""
        service = fake_service([
            fragment("a", title=SERVER_PLACEHOLDER_TITLE),
            fragment("b", title="Weather in Paris"),
            fragment("c", title="Ignored"),
        ])
        controller = ChatSessionController(service)
        controller.select_agent(agent)

        await controller.send_message("Weather?")

        assert controller.title == "Weather in Paris"

    @pytest.mark.asyncio
    async def test_placeholder_title_is_ignored(self, fake_service, fragment, agent):
        """Test that placeholder titles never overwrite a real one."""
        service = fake_service(
            [fragment("a", title="Real title")],
            [fragment("b", title=SERVER_PLACEHOLDER_TITLE)],
        )
        controller = ChatSessionController(service)
        controller.select_agent(agent)

        await controller.send_message("first")
        await controller.send_message("second")

        assert controller.title == "Real title"
        assert service.requests[1].title == "Real title"


class TestRegeneration:
    """Tests for regenerating answers."""

    async def _two_turns(self, fake_service, fragment, agent):
        service = fake_service([fragment("A1")], [fragment("A2")], [fragment("A3")])
        controller = ChatSessionController(service)
        controller.select_agent(agent)
        await controller.send_message("U1")
        await controller.send_message("U2")
        return service, controller

    @pytest.mark.asyncio
    async def test_regenerate_from_assistant(self, fake_service, fragment, agent):
        """Test replacing an earlier answer and everything after it."""
        service, controller = await self._two_turns(fake_service, fragment, agent)
        first_answer = controller.transcript[2]

        await controller.regenerate_from_assistant(first_answer)

        assert _contents(controller) == ["U1", "A3"]
        assert [m.content for m in service.requests[2].messages][1:] == ["U1"]
        assert len(controller.views) == len(controller.transcript)

    @pytest.mark.asyncio
    async def test_regenerate_from_user(self, fake_service, fragment, agent):
        """Test re-answering a user message."""
        service, controller = await self._two_turns(fake_service, fragment, agent)
        first_question = controller.transcript[1]

        await controller.regenerate_from_user(first_question)

        assert _contents(controller) == ["U1", "A3"]
        assert controller.transcript[1] is first_question

    @pytest.mark.asyncio
    async def test_regenerate_from_latest_user(self, fake_service, fragment, agent):
        """Test that re-asking the last question keeps earlier turns."""
        service, controller = await self._two_turns(fake_service, fragment, agent)
        second_question = controller.transcript[3]

        await controller.regenerate_from_user(second_question)

        assert _contents(controller) == ["U1", "A1", "U2", "A3"]
        assert [m.content for m in service.requests[2].messages][1:] == ["U1", "A1", "U2"]

    @pytest.mark.asyncio
    async def test_regenerate_last(self, fake_service, fragment, agent):
        """Test regenerating the latest answer."""
        _, controller = await self._two_turns(fake_service, fragment, agent)

        await controller.regenerate_last()

        assert _contents(controller) == ["U1", "A1", "U2", "A3"]

    @pytest.mark.asyncio
    async def test_regenerate_unknown_message_is_noop(self, fake_service, fragment, agent):
        """Test that messages outside the transcript are ignored."""
        service, controller = await self._two_turns(fake_service, fragment, agent)

        assert await controller.regenerate_from_user(new_user_message("U1")) is None
        assert await controller.regenerate_from_assistant(new_assistant_message("A1")) is None
        assert await controller.regenerate(controller.transcript[0]) is None
        assert _contents(controller) == ["U1", "A1", "U2", "A2"]
        assert len(service.requests) == 2

    @pytest.mark.asyncio
    async def test_regenerate_on_empty_transcript(self, fake_service, agent):
        """Test that regenerate_last does nothing without messages."""
        controller = ChatSessionController(fake_service())
        controller.select_agent(agent)

        assert await controller.regenerate_last() is None

    @pytest.mark.asyncio
    async def test_regenerate_requires_agent(self, fake_service):
        """Test that regeneration needs an active agent."""
        controller = ChatSessionController(fake_service())
        with pytest.raises(NoActiveAgentError):
            await controller.regenerate_last()

    @pytest.mark.asyncio
    async def test_regenerate_without_agent_leaves_transcript(self, fake_service, fragment, agent):
        """Test that a deselected agent blocks regeneration before truncation."""
        service, controller = await self._two_turns(fake_service, fragment, agent)
        messages = list(controller.transcript)
        views = [view.message for view in controller.views]
        controller.select_agent(None)

        with pytest.raises(NoActiveAgentError):
            await controller.regenerate_from_assistant(controller.transcript[2])
        with pytest.raises(NoActiveAgentError):
            await controller.regenerate_from_user(controller.transcript[1])

        assert list(controller.transcript) == messages
        assert [view.message for view in controller.views] == views
        assert len(service.requests) == 2

    @pytest.mark.asyncio
    async def test_regenerate_checks_message_role(self, fake_service, fragment, agent):
        """Test that each entry point only accepts its own role."""
        service, controller = await self._two_turns(fake_service, fragment, agent)
        first_question = controller.transcript[1]
        first_answer = controller.transcript[2]

        assert await controller.regenerate_from_user(first_answer) is None
        assert await controller.regenerate_from_assistant(first_question) is None
        assert _contents(controller) == ["U1", "A1", "U2", "A2"]
        assert len(service.requests) == 2


class TestFailuresAndCancellation:
    """Tests for interrupted and cancelled streams."""

    @pytest.mark.asyncio
    async def test_interrupted_stream_keeps_partial_answer(self, fake_service, fragment, agent):
        """Test that a broken stream keeps and saves what arrived."""
        history = InMemoryChatHistoryStore()
        service = fake_service([fragment("Par", title="Topic"), ConnectionError("reset")])
        controller = ChatSessionController(service, history=history)
        controller.select_agent(agent)

        with pytest.raises(StreamInterruptedError):
            await controller.send_message("Hi")

        assert _contents(controller) == ["Hi", "Par"]
        assert controller.title == "Topic"
        stored = await history.get_session(controller.session.id)
        assert [m.content for m in stored.messages][1:] == ["Hi", "Par"]

    @pytest.mark.asyncio
    async def test_failure_before_content_leaves_turn_unanswered(self, fake_service, fragment, agent):
        """Test that an empty failed answer is dropped and can be retried."""
        service = fake_service([ConnectionError("refused")], [fragment("Retry answer")])
        controller = ChatSessionController(service)
        controller.select_agent(agent)

        with pytest.raises(StreamInterruptedError):
            await controller.send_message("Hi")

        assert _roles(controller) == ["system", "user"]
        assert len(controller.views) == 2

        await controller.regenerate_last()
        assert _contents(controller) == ["Hi", "Retry answer"]

    @pytest.mark.asyncio
    async def test_cancel_discards_streaming_answer(self, fake_service, fragment, agent):
        """Test cancelling the in-flight cycle."""
        service = fake_service([fragment("partial"), fake_service.HANG])
        controller = ChatSessionController(service)
        controller.select_agent(agent)

        send = asyncio.create_task(controller.send_message("Hi"))
        await _wait_for(lambda: controller.views.last is not None and controller.views.last.text == "partial")

        assert controller.is_streaming
        assert await controller.cancel()
        assert await send is None

        assert _roles(controller) == ["system", "user"]
        assert all(view.is_loaded for view in controller.views)
        assert not controller.is_streaming
        assert not await controller.cancel()

    @pytest.mark.asyncio
    async def test_new_send_cancels_running_cycle(self, fake_service, fragment, agent):
        """Test that a second send supersedes the running stream."""
        service = fake_service([fragment("slow"), fake_service.HANG], [fragment("fast")])
        controller = ChatSessionController(service)
        controller.select_agent(agent)

        first = asyncio.create_task(controller.send_message("first"))
        await _wait_for(lambda: controller.is_streaming and len(service.requests) == 1)
        await _wait_for(lambda: controller.views.last.text == "slow")

        answer = await controller.send_message("second")

        assert await first is None
        assert answer.content == "fast"
        assert _contents(controller) == ["first", "second", "fast"]
        assert len(controller.views) == len(controller.transcript)

    @pytest.mark.asyncio
    async def test_regenerate_from_user_cancels_running_cycle(self, fake_service, fragment, agent):
        """Test that regenerating supersedes the running stream."""
        service = fake_service([fragment("A1")], [fragment("slow"), fake_service.HANG], [fragment("fast")])
        controller = ChatSessionController(service)
        controller.select_agent(agent)
        await controller.send_message("U1")
        first_question = controller.transcript[1]

        pending = asyncio.create_task(controller.send_message("U2"))
        await _wait_for(lambda: controller.views.last.text == "slow")

        answer = await controller.regenerate_from_user(first_question)

        assert await pending is None
        assert answer.content == "fast"
        assert _contents(controller) == ["U1", "fast"]
        assert len(controller.views) == len(controller.transcript)
        assert not controller.is_streaming

    @pytest.mark.asyncio
    async def test_regenerate_last_cancels_running_cycle(self, fake_service, fragment, agent):
        """Test that regenerate_last answers the interrupted turn again."""
        service = fake_service([fragment("slow"), fake_service.HANG], [fragment("fast")])
        controller = ChatSessionController(service)
        controller.select_agent(agent)

        pending = asyncio.create_task(controller.send_message("U1"))
        await _wait_for(lambda: controller.views.last is not None and controller.views.last.text == "slow")

        answer = await controller.regenerate_last()

        assert await pending is None
        assert answer.content == "fast"
        assert _contents(controller) == ["U1", "fast"]
        assert "slow" not in [m.content for m in controller.transcript]
        assert len(controller.views) == len(controller.transcript)

    @pytest.mark.asyncio
    async def test_outer_cancellation_propagates(self, fake_service, agent):
        """Test that cancelling the caller's task is not swallowed."""
        controller = ChatSessionController(fake_service([fake_service.HANG]))
        controller.select_agent(agent)

        send = asyncio.create_task(controller.send_message("Hi"))
        await _wait_for(lambda: controller.is_streaming)
        send.cancel()

        with pytest.raises(asyncio.CancelledError):
            await send
        await _wait_for(lambda: not controller.is_streaming)
        assert _roles(controller) == ["system", "user"]


class TestSessions:
    """Tests for starting, saving and loading sessions."""

    @pytest.mark.asyncio
    async def test_completed_turn_is_saved(self, fake_service, fragment, agent):
        """Test that sessions are persisted after each turn."""
        history = InMemoryChatHistoryStore()
        controller = ChatSessionController(fake_service([fragment("Answer", title="Chat")]), history=history)
        controller.select_agent(agent)

        await controller.send_message("Question")

        items = await history.list_sessions()
        assert [(i.id, i.title) for i in items] == [(controller.session.id, "Chat")]

    @pytest.mark.asyncio
    async def test_new_session_resets_state(self, fake_service, fragment, agent):
        """Test that a new session starts from just the system message."""
        controller = ChatSessionController(fake_service([fragment("a")]))
        controller.select_agent(agent)
        await controller.send_message("Hi")
        old_id = controller.session.id

        await controller.new_session()

        assert controller.session.id != old_id
        assert _roles(controller) == ["system"]
        assert len(controller.views) == 1

    @pytest.mark.asyncio
    async def test_load_session_rebuilds_system_message(self, fake_service, agent):
        """Test that stored system messages are replaced on load."""
        history = InMemoryChatHistoryStore()
        stored = ChatSession(
            title="Old chat",
            messages=[
                new_system_message("stale prompt"),
                new_user_message("Hi"),
                new_assistant_message("Hello"),
            ],
        )
        await history.save_session(stored)
        controller = ChatSessionController(fake_service(), history=history)
        controller.select_agent(agent)

        session = await controller.load_session(str(stored.id))

        assert session.id == stored.id
        assert controller.title == "Old chat"
        assert _roles(controller) == ["system", "user", "assistant"]
        assert controller.transcript[0].content != "stale prompt"
        assert [view.message for view in controller.views] == list(controller.transcript)

    @pytest.mark.asyncio
    async def test_load_unknown_session(self, fake_service):
        """Test that unknown ids raise SessionNotFoundError."""
        controller = ChatSessionController(fake_service(), history=InMemoryChatHistoryStore())
        with pytest.raises(SessionNotFoundError):
            await controller.load_session(uuid4())

    @pytest.mark.asyncio
    async def test_load_without_history(self, fake_service):
        """Test loading when no store is configured."""
        controller = ChatSessionController(fake_service())
        with pytest.raises(SessionNotFoundError):
            await controller.load_session(uuid4())

    @pytest.mark.asyncio
    async def test_select_agent_refreshes_system_message(self, fake_service, fragment, agent):
        """Test switching agents mid-conversation."""
        controller = ChatSessionController(fake_service([fragment("a")]))
        controller.select_agent(agent)
        await controller.send_message("Hi")

        custom = AgentProfile(name="Brief", model="m2", persona="custom", custom_prompt="Be brief.")
        controller.select_agent(custom)

        assert controller.transcript[0].content == "Be brief."
        assert controller.views[0].message is controller.transcript[0]
        assert len(controller.transcript) == 3
