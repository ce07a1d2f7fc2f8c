"""
Session State - The record of one interrogation round.

Design principles:
- Plain dataclasses, mutated only by the interaction and accusation modules
- Serializable: to_dict()/from_dict() produce the persisted record shape
  shared by every storage tier
- Cloneable: stores hand out copies, never their own instances
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from copy import deepcopy
from enum import Enum


DEFAULT_PLAYER_NAME = "Detective"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _format_ts(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_ts(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SessionStatus(Enum):
    """Round status. ACTIVE moves to WON or LOST exactly once."""
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"


class MessageRole(Enum):
    """Who spoke a message."""
    PLAYER = "player"
    CHARACTER = "character"


@dataclass
class Message:
    """One line of dialogue."""
    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": _format_ts(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        return cls(
            role=MessageRole(data["role"]),
            content=data.get("content", ""),
            timestamp=_parse_ts(data.get("timestamp")) or utc_now(),
        )


@dataclass
class InteractionRecord:
    """
    Conversation state between the player and one character.

    History is append-only and strictly alternates player/character.
    Pairs are appended together, so a completed exchange never leaves
    an unanswered player turn behind.
    """
    character_id: str
    history: list[Message] = field(default_factory=list)
    stress_level: int = 0
    secrets_revealed: list[str] = field(default_factory=list)
    last_interaction_at: datetime | None = None

    @property
    def message_count(self) -> int:
        return len(self.history)

    def to_dict(self) -> dict[str, Any]:
        return {
            "characterId": self.character_id,
            "history": [message.to_dict() for message in self.history],
            "stressLevel": self.stress_level,
            "secretsRevealed": list(self.secrets_revealed),
            "lastInteractionAt": _format_ts(self.last_interaction_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InteractionRecord:
        return cls(
            character_id=data["characterId"],
            history=[Message.from_dict(m) for m in data.get("history", [])],
            stress_level=int(data.get("stressLevel", 0)),
            secrets_revealed=list(data.get("secretsRevealed", [])),
            last_interaction_at=_parse_ts(data.get("lastInteractionAt")),
        )


@dataclass
class Session:
    """
    One interrogation round.

    The imposter is fixed at creation. Status is terminal once WON or
    LOST; the accusation resolver is the only writer of status,
    final_guess and ended_at.
    """
    session_id: str
    imposter_id: str
    player_name: str = DEFAULT_PLAYER_NAME
    status: SessionStatus = SessionStatus.ACTIVE
    final_guess: str | None = None
    started_at: datetime = field(default_factory=utc_now)
    ended_at: datetime | None = None
    clues_discovered: list[str] = field(default_factory=list)
    interactions: dict[str, InteractionRecord] = field(default_factory=dict)
    # Recovered from the identifier alone: name and prior history are placeholders
    degraded: bool = False

    def is_active(self) -> bool:
        """Check if the round is still undecided."""
        return self.status == SessionStatus.ACTIVE

    def add_clue(self, text: str) -> bool:
        """Record a discovered clue once. Returns True if it was new."""
        if text in self.clues_discovered:
            return False
        self.clues_discovered.append(text)
        return True

    def clone(self) -> Session:
        """Deep copy the session."""
        return deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Persisted record shape (identical for every tier)."""
        data: dict[str, Any] = {
            "id": self.session_id,
            "playerName": self.player_name,
            "imposterId": self.imposter_id,
            "status": self.status.value,
            "startedAt": _format_ts(self.started_at),
            "cluesDiscovered": list(self.clues_discovered),
            "interactions": {
                character_id: record.to_dict()
                for character_id, record in self.interactions.items()
            },
        }
        if self.final_guess is not None:
            data["finalGuess"] = self.final_guess
        if self.ended_at is not None:
            data["endedAt"] = _format_ts(self.ended_at)
        if self.degraded:
            data["degraded"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        return cls(
            session_id=data["id"],
            imposter_id=data["imposterId"],
            player_name=data.get("playerName") or DEFAULT_PLAYER_NAME,
            status=SessionStatus(data.get("status", SessionStatus.ACTIVE.value)),
            final_guess=data.get("finalGuess"),
            started_at=_parse_ts(data.get("startedAt")) or utc_now(),
            ended_at=_parse_ts(data.get("endedAt")),
            clues_discovered=list(data.get("cluesDiscovered", [])),
            interactions={
                character_id: InteractionRecord.from_dict(record)
                for character_id, record in data.get("interactions", {}).items()
            },
            degraded=bool(data.get("degraded", False)),
        )
