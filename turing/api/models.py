"""
API Models - Framework-agnostic request and response shapes.

These dataclasses are what InterrogationService returns. The HTTP
adapter converts them to the Pydantic schemas in schemas.py; the CLI
prints them directly.

Design principles:
- No framework imports
- Never expose the imposter while the round is active
- Every operation returns a ServiceResult, never raises
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from ..engine_core.errors import ErrorKind


T = TypeVar("T")


# =============================================================================
# Result wrapper
# =============================================================================

@dataclass
class ServiceResult(Generic[T]):
    """
    Discriminated outcome of a service operation.

    degraded is True when the round was rebuilt from its identifier,
    so player name and earlier history are not authoritative.
    """
    success: bool
    data: T | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    degraded: bool = False

    @classmethod
    def ok(cls, data: T, degraded: bool = False) -> ServiceResult[T]:
        """Create a success result."""
        return cls(success=True, data=data, degraded=degraded)

    @classmethod
    def failure(
        cls,
        error: str,
        error_kind: ErrorKind,
        degraded: bool = False,
    ) -> ServiceResult[T]:
        """Create a failure result."""
        return cls(success=False, error=error, error_kind=error_kind, degraded=degraded)


# =============================================================================
# Shared Models
# =============================================================================

@dataclass
class CharacterInfo:
    """Public character information for display."""
    id: str
    name: str
    role: str
    portrait: str = ""
    location: str = ""


@dataclass
class MessageInfo:
    """One line of dialogue."""
    role: str  # "player" or "character"
    content: str
    timestamp: str | None = None


@dataclass
class CharacterStateInfo:
    """Per-character progress within a round."""
    character_id: str
    stress_level: int
    stress_state: str
    message_count: int  # Messages in the history, both sides


# =============================================================================
# Responses
# =============================================================================

@dataclass
class StartRoundResponse:
    """A freshly started round."""
    session_id: str
    player_name: str
    message: str
    characters: list[CharacterInfo] = field(default_factory=list)


@dataclass
class ChatResponse:
    """Result of one exchange with a character."""
    session_id: str
    character_id: str
    character_name: str
    reply: str
    stress_level: int
    stress_state: str
    stress_change: int
    message_count: int  # Completed exchanges with this character
    upstream_failed: bool = False  # Reply is the stand-in line
    new_clues: list[str] = field(default_factory=list)


@dataclass
class HistoryResponse:
    """Conversation so far with one character."""
    session_id: str
    character_id: str
    history: list[MessageInfo] = field(default_factory=list)
    stress_level: int = 0
    stress_state: str = "calm"


@dataclass
class SessionSummary:
    """Round overview. imposter_id is only set once the round is decided."""
    session_id: str
    player_name: str
    status: str
    clues_discovered: list[str] = field(default_factory=list)
    characters: list[CharacterStateInfo] = field(default_factory=list)
    final_guess: str | None = None
    imposter_id: str | None = None
    started_at: str | None = None
    ended_at: str | None = None


@dataclass
class AccusationResponse:
    """How the round ended."""
    session_id: str
    correct: bool
    status: str
    accused_id: str
    message: str
    revelation: str
    imposter_id: str
    imposter_name: str


@dataclass
class CluesResponse:
    """Clues discovered so far."""
    session_id: str
    clues: list[str] = field(default_factory=list)

