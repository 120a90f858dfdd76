import asyncio
import inspect
import logging
from enum import Enum
from typing import Awaitable, Callable

from attachments import Attachment
from llm import LLM
from request import DEFAULT_IMAGE_PROMPT, build
from store import ConversationStore, Role, Turn, welcome_turn

log = logging.getLogger(__name__)

HINT_PROMPT = "I'm stuck. Could you give me a specific hint to help me move forward?"
ANALYZE_PROMPT = "I've uploaded an image. Can you analyze this problem and guide me?"
ERROR_REPLY = (
    "I encountered an error trying to analyze that. "
    "Please check your connection and try again."
)
RESET_QUESTION = "Are you sure you want to clear the board? This will remove the image and chat history."


class OrchestratorState(Enum):
    IDLE = "idle"
    PENDING = "pending"


class TurnOrchestrator:
    """Drives one tutoring session: user intents in, turns out.

    At most one request to the model is in flight. Intents that arrive while
    a request is pending are rejected, not queued. Remote failures become a
    visible MODEL turn and never escape.
    """

    def __init__(
        self,
        llm: LLM,
        store: ConversationStore | None = None,
        on_turn: Callable[[Turn], Awaitable[None]] | None = None,
    ):
        self.llm = llm
        self.store = store if store is not None else ConversationStore()
        self.on_turn = on_turn
        self.state = OrchestratorState.IDLE
        self.attachment: Attachment | None = None
        self.draft = ""
        self._last_analyzed: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.state is OrchestratorState.PENDING

    async def send(self, text: str) -> bool:
        """Submit one user turn. Returns False when the intent is rejected."""
        if self.is_pending:
            log.info("Send rejected: request already in flight")
            return False

        text = (text or "").strip()
        attachment = self.attachment
        if not text and attachment is None:
            return False

        self.state = OrchestratorState.PENDING
        try:
            history = self.store.snapshot(include_welcome=False)
            request = build(history, text, attachment)
            await self._append(Role.USER, text or DEFAULT_IMAGE_PROMPT)

            log.info("Calling LLM (%d prior turns, image=%s)...", len(history), attachment is not None)
            try:
                loop = asyncio.get_running_loop()
                reply = await loop.run_in_executor(None, self.llm.complete, request)
            except Exception:
                log.exception("Tutor request failed")
                reply = ERROR_REPLY
            else:
                log.info("LLM response: %s", reply[:80])

            await self._append(Role.MODEL, reply)
        finally:
            self.state = OrchestratorState.IDLE
        return True

    async def submit(self) -> bool:
        """Send the typed draft, clearing it once the send is accepted."""
        accepted = await self.send(self.draft)
        if accepted:
            self.draft = ""
        return accepted

    async def request_hint(self) -> bool:
        return await self.send(HINT_PROMPT)

    async def on_attachment_changed(self, attachment: Attachment | None) -> bool:
        """Make ``attachment`` the active image; auto-analyze it if it is new.

        Returns True when an analysis request was sent.
        """
        self.attachment = attachment
        if attachment is None:
            self._last_analyzed = None
            return False
        if attachment.key == self._last_analyzed or self.is_pending:
            return False

        self._last_analyzed = attachment.key
        return await self.send(ANALYZE_PROMPT)

    def clear_attachment(self) -> None:
        self.attachment = None
        self._last_analyzed = None

    async def reset(self, confirm: Callable[[str], Awaitable[bool] | bool]) -> bool:
        """Clear the board after the user confirms. No-op while a request is pending."""
        if self.is_pending:
            return False

        answer = confirm(RESET_QUESTION)
        if inspect.isawaitable(answer):
            answer = await answer
        # the confirmation prompt is itself a suspension point
        if not answer or self.is_pending:
            return False

        self.store.replace_all([welcome_turn()])
        self.attachment = None
        self.draft = ""
        self._last_analyzed = None
        log.info("Board reset")
        await self._render(self.store.snapshot()[0])
        return True

    async def _append(self, role: Role, text: str) -> Turn:
        turn = self.store.append(role, text)
        await self._render(turn)
        return turn

    async def _render(self, turn: Turn) -> None:
        if self.on_turn:
            try:
                await self.on_turn(turn)
            except Exception:
                log.exception("Render callback failed")
