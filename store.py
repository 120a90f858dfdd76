import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

WELCOME_ID = "welcome"
WELCOME_TEXT = (
    "Hello! I'm your Socratic Tutor. Upload a problem or ask me a question, "
    "and let's work through it together."
)


class Role(Enum):
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True)
class Turn:
    role: Role
    text: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def welcome_turn() -> Turn:
    """The local greeting shown first. Never sent to the model."""
    return Turn(role=Role.MODEL, text=WELCOME_TEXT, id=WELCOME_ID)


class ConversationStore:
    """Append-only, ordered log of turns for one tutoring session."""

    def __init__(self, turns: list[Turn] | None = None):
        self._turns: list[Turn] = list(turns) if turns is not None else [welcome_turn()]

    def append(self, turn: Turn | Role, text: str | None = None) -> Turn:
        if isinstance(turn, Role):
            turn = Turn(role=turn, text=text or "")
        self._turns.append(turn)
        return turn

    def replace_all(self, turns: list[Turn]) -> None:
        self._turns = list(turns)

    def snapshot(self, include_welcome: bool = True) -> tuple[Turn, ...]:
        if include_welcome:
            return tuple(self._turns)
        return tuple(t for t in self._turns if t.id != WELCOME_ID)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self):
        return iter(self.snapshot())
