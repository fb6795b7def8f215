"""Chat session controller.

Hidden design decisions:
- The transcript holds completed messages only; the streaming answer lives
  in a placeholder view until the stream ends
- One response cycle in flight at a time; a new send, regeneration or
  session switch cancels the running cycle and waits for it to unwind
- Regeneration truncates the transcript and its views, then re-issues the
  nearest user message
- Sessions are persisted after every completed or interrupted turn
"""

import asyncio
from typing import Any
from uuid import UUID

from ..conversation import (
    ChatMessage,
    ConversationTranscript,
    Role,
    add_file,
    new_user_message,
)
from ..errors import NoActiveAgentError, SessionNotFoundError, StreamInterruptedError
from ..llm import ChatRequest, ChatService, Conversation
from ..memory import ChatHistoryStore, ChatSession
from ..rendering import MarkdownRenderer
from ..streaming import BufferUpdate, Presenter, StreamAssembler, is_meaningful_title
from .models import AgentProfile
from .views import MessageView, MessageViewList


def _is_being_cancelled() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


class ChatSessionController:
    """Owns the transcript of the active chat session.

    Every transcript mutation goes through this class. The UI observes
    :attr:`views` and calls the async operations from its own event loop.

    Usage:
        controller = ChatSessionController(service, history=store)
        controller.select_agent(agent)
        answer = await controller.send_message("Hello")
    """

    def __init__(
        self,
        service: ChatService,
        history: ChatHistoryStore | None = None,
        presenter: Presenter | None = None,
        renderer: MarkdownRenderer | None = None,
        user: str | None = None,
        pacing_delay: float = 0.0,
    ) -> None:
        """Initialize the controller.

        Args:
            service: Chat backend producing response streams
            history: Optional store sessions are saved to and loaded from
            presenter: Presentation context for streaming view updates
            renderer: Markdown renderer shared by views and streams
            user: User id recorded on new sessions
            pacing_delay: Seconds to yield after each streamed fragment
        """
        self._service = service
        self._history = history
        self._presenter = presenter
        self._renderer = renderer or MarkdownRenderer()
        self._user = user
        self._pacing_delay = pacing_delay

        self._transcript = ConversationTranscript()
        self._session = self._new_chat_session()
        self._agent: AgentProfile | None = None
        self._active_task: asyncio.Task | None = None
        self._generation = 0
        self._debug_callback: Any | None = None

        self.views = MessageViewList()

    # -- state ------------------------------------------------------------

    @property
    def transcript(self) -> ConversationTranscript:
        return self._transcript

    @property
    def session(self) -> ChatSession:
        return self._session

    @property
    def title(self) -> str:
        return self._session.title

    @property
    def agent(self) -> AgentProfile | None:
        return self._agent

    @property
    def service(self) -> ChatService:
        return self._service

    @property
    def history(self) -> ChatHistoryStore | None:
        return self._history

    @property
    def active_stream(self) -> asyncio.Task | None:
        """The in-flight response task, or None when idle."""
        task = self._active_task
        if task is None or task.done():
            return None
        return task

    @property
    def is_streaming(self) -> bool:
        return self.active_stream is not None

    def set_debug_callback(self, callback: Any) -> None:
        """Set the debug callback.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Session", message)

    # -- agents and sessions ----------------------------------------------

    def _new_chat_session(self) -> ChatSession:
        if self._user:
            return ChatSession(user_id=self._user)
        return ChatSession()

    def _require_agent(self) -> AgentProfile:
        if self._agent is None:
            raise NoActiveAgentError()
        return self._agent

    def select_agent(self, agent: AgentProfile | None) -> None:
        """Make ``agent`` active and refresh the system message.

        Passing None deselects the agent and leaves the transcript alone.
        """
        self._agent = agent
        if agent is None:
            self._debug("info", "Agent deselected")
            return
        self._debug("info", f"Agent selected: {agent.name} ({agent.model})")
        if len(self._transcript) == 0:
            return

        message = agent.system_message()
        current = self._transcript.system_message
        existing = self.views.find_by_message(current) if current is not None else None
        self._transcript.replace_system_message(message)
        if existing is not None:
            existing.bind(message, self._renderer)
            self.views.notify_updated(existing)
        else:
            self.views.insert(0, MessageView.from_message(message, self._renderer))

    def _ensure_system_message(self) -> None:
        if self._transcript.system_message is not None or self._agent is None:
            return
        message = self._agent.system_message()
        self._transcript.replace_system_message(message)
        self.views.insert(0, MessageView.from_message(message, self._renderer))

    def _reset_views(self) -> None:
        self.views.clear()
        for message in self._transcript:
            self.views.append(MessageView.from_message(message, self._renderer))

    async def new_session(self) -> ChatSession:
        """Start an empty chat session."""
        await self.cancel()
        self._session = self._new_chat_session()
        self._transcript = ConversationTranscript()
        self._ensure_system_message()
        self._reset_views()
        self._debug("info", f"New session {self._session.id}")
        return self._session

    async def load_session(self, session_id: UUID | str) -> ChatSession:
        """Load a stored session and make it active.

        Stored system messages are discarded; the active agent's persona
        provides a fresh one.

        Raises:
            SessionNotFoundError: If the store has no such session
        """
        if self._history is None:
            raise SessionNotFoundError(str(session_id))

        sid = session_id if isinstance(session_id, UUID) else UUID(str(session_id))
        stored = await self._history.get_session(sid)
        if stored is None:
            raise SessionNotFoundError(str(session_id))

        await self.cancel()
        self._session = stored
        self._transcript = ConversationTranscript(stored.conversation_messages())
        self._ensure_system_message()
        self._reset_views()
        self._debug("info", f"Loaded session {stored.id} ({len(self._transcript)} message(s))")
        return stored

    # -- turns ------------------------------------------------------------

    async def send_message(self, text: str, file_name: str | None = None) -> ChatMessage | None:
        """Send a user turn and stream the answer.

        Args:
            text: Raw user input
            file_name: Optional file reference attached to the message

        Returns:
            The assistant message, or None if the cycle was cancelled

        Raises:
            NoActiveAgentError: If no agent is selected (nothing is changed)
            StreamInterruptedError: If the stream failed; the partial answer
                is kept
        """
        self._require_agent()
        await self.cancel()

        message = new_user_message(text)
        if file_name:
            add_file(message, file_name)

        self._ensure_system_message()
        self._transcript.append(message)
        self.views.append(MessageView.from_message(message, self._renderer))
        return await self._run_cycle()

    async def regenerate_from_user(self, user_message: ChatMessage) -> ChatMessage | None:
        """Discard everything after ``user_message`` and answer it again."""
        self._require_agent()
        if user_message.role is not Role.USER or self._transcript.index_of(user_message) < 0:
            return None

        await self.cancel()
        index = self._transcript.index_of(user_message)
        self._truncate(index + 1)
        self._debug("info", f"Regenerating from user message at {index}")
        return await self._run_cycle()

    async def regenerate_from_assistant(self, assistant_message: ChatMessage) -> ChatMessage | None:
        """Discard ``assistant_message`` and everything after, then re-ask the preceding user turn."""
        self._require_agent()
        if assistant_message.role is not Role.ASSISTANT:
            return None
        index = self._transcript.index_of(assistant_message)
        if index <= 0 or self._transcript.preceding_user_message(index) is None:
            return None

        await self.cancel()
        index = self._transcript.index_of(assistant_message)
        self._truncate(index)
        self._debug("info", f"Regenerating assistant message at {index}")
        return await self._run_cycle()

    async def regenerate(self, message: ChatMessage) -> ChatMessage | None:
        """Regenerate from any transcript message, dispatching on its role."""
        if message.role is Role.USER:
            return await self.regenerate_from_user(message)
        if message.role is Role.ASSISTANT:
            return await self.regenerate_from_assistant(message)
        return None

    async def regenerate_last(self) -> ChatMessage | None:
        """Regenerate the latest answer, or answer a trailing unanswered user turn."""
        self._require_agent()
        await self.cancel()
        if len(self._transcript) == 0:
            return None
        return await self.regenerate(self._transcript[-1])

    async def cancel(self) -> bool:
        """Cancel the in-flight cycle and wait for it to unwind.

        Returns:
            True if a cycle was cancelled
        """
        task = self.active_stream
        if task is None:
            return False
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            if _is_being_cancelled():
                raise
        except Exception:  # noqa: BLE001 - reported by the cycle's own caller
            pass
        return True

    def _truncate(self, index: int) -> None:
        first = None
        if 0 <= index < len(self._transcript):
            first = self.views.find_by_message(self._transcript[index])
        removed = self._transcript.remove_suffix_from(index)
        if first is not None:
            self.views.remove_from(self.views.index_of(first))
        if removed:
            self._debug("debug", f"Removed {len(removed)} message(s) from {index}")

    def _build_request(self, agent: AgentProfile) -> ChatRequest:
        session = self._session
        return ChatRequest(
            model=agent.model,
            chat_session_id=session.id,
            title=session.title,
            chat_session_updated_at=session.updated_at,
            conversation=Conversation(
                id=session.conversation_id,
                messages=list(self._transcript.messages),
            ),
            temperature=agent.temperature,
            max_tokens=agent.max_tokens,
            user=session.user_id,
            enable_thinking=agent.allow_thinking or None,
            think=agent.think if agent.allow_thinking else None,
            tools=list(agent.tools),
        )

    async def _run_cycle(self) -> ChatMessage | None:
        agent = self._require_agent()
        self._generation += 1
        generation = self._generation

        placeholder = MessageView.placeholder()
        self.views.append(placeholder)
        request = self._build_request(agent)

        task = asyncio.create_task(self._stream_cycle(generation, placeholder, request))
        self._active_task = task
        try:
            return await task
        except asyncio.CancelledError:
            # Cancelled through cancel(), not by our own caller
            if task.cancelled() and not _is_being_cancelled():
                return None
            raise
        finally:
            if self._active_task is task:
                self._active_task = None

    async def _stream_cycle(
        self,
        generation: int,
        view: MessageView,
        request: ChatRequest,
    ) -> ChatMessage | None:
        def on_update(update: BufferUpdate) -> None:
            if generation != self._generation:
                return
            view.apply(update)
            self.views.notify_updated(view)

        assembler = StreamAssembler(
            renderer=self._renderer,
            presenter=self._presenter,
            on_update=on_update,
            pacing_delay=self._pacing_delay,
        )
        assembler.set_debug_callback(self._debug_callback)

        try:
            title = await assembler.consume(self._service.stream_chat(request))
        except asyncio.CancelledError:
            self.views.remove(view)
            raise
        except StreamInterruptedError as e:
            if generation == self._generation:
                await self._complete(view, assembler, e.title)
            raise

        if generation != self._generation:
            self.views.remove(view)
            return None
        return await self._complete(view, assembler, title)

    async def _complete(
        self,
        view: MessageView,
        assembler: StreamAssembler,
        title: str,
    ) -> ChatMessage | None:
        message = assembler.to_message()
        if not message.content and not message.thoughts_content:
            # Nothing arrived; keep the user turn unanswered
            self.views.remove(view)
            message = None
        else:
            self._transcript.append(message)
            view.bind(message, self._renderer)
            self.views.notify_updated(view)

        if is_meaningful_title(title) and title != self._session.title:
            self._debug("info", f"Session title: {title!r}")
            self._session.title = title

        await self._save()
        return message

    async def _save(self) -> None:
        self._session.messages = list(self._transcript.messages)
        self._session.touch()
        if self._history is not None:
            await self._history.save_session(self._session)
