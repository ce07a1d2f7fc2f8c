"""
Interaction State - Per-character conversation history and stress.

Each (session, character) pair owns one InteractionRecord. Records are
created lazily on the first message and are never shared between
characters. Exchanges are appended as a player/character pair so the
history always alternates and never ends on an unanswered player turn.
"""

from __future__ import annotations
from datetime import datetime

from .state import InteractionRecord, Message, MessageRole, Session, utc_now


def get_or_create(session: Session, character_id: str) -> InteractionRecord:
    """
    Get the record for a character, creating and attaching it if missing.
    """
    record = session.interactions.get(character_id)
    if record is None:
        record = InteractionRecord(character_id=character_id)
        session.interactions[character_id] = record
    return record


def peek(session: Session, character_id: str) -> InteractionRecord:
    """Get the record for a character without attaching a new one."""
    return session.interactions.get(character_id) or InteractionRecord(
        character_id=character_id
    )


def append(
    record: InteractionRecord,
    player_text: str,
    character_reply: str,
    new_stress: int,
    now: datetime | None = None,
) -> InteractionRecord:
    """
    Append one completed exchange.

    Adds exactly two messages (player, then character), each with its
    own timestamp, and sets the stress level and last-interaction time.
    """
    player_at = now or utc_now()
    record.history.append(
        Message(role=MessageRole.PLAYER, content=player_text, timestamp=player_at)
    )
    reply_at = now or utc_now()
    record.history.append(
        Message(role=MessageRole.CHARACTER, content=character_reply, timestamp=reply_at)
    )
    record.stress_level = new_stress
    record.last_interaction_at = reply_at
    return record


def reveal_secret(record: InteractionRecord, clue_id: str) -> bool:
    """Mark a clue as revealed by this character. Returns True if new."""
    if clue_id in record.secrets_revealed:
        return False
    record.secrets_revealed.append(clue_id)
    return True


def completed_turns(record: InteractionRecord) -> int:
    """Number of completed exchanges (history is appended in pairs)."""
    return len(record.history) // 2
