"""
Session Module - Finds and keeps interrogation rounds.

A session represents one round:
- Created when the player starts a game (imposter chosen here)
- Resolved on every request, across storage tiers
- Updated after every chat exchange and on the accusation

Storage tiers:
- Durable (SQLite), optional
- Volatile (process memory)
- Stateless (imposter decoded from the session identifier)
"""

from .identifiers import assign_imposter, new_session_id, decode_session_id, DecodedSessionId
from .stores import SessionStore, MemorySessionStore, SqliteSessionStore, StoreError
from .registry import SessionRegistry, Resolution, Tier
from .locks import KeyedLocks

__all__ = [
    "assign_imposter",
    "new_session_id",
    "decode_session_id",
    "DecodedSessionId",
    "SessionStore",
    "MemorySessionStore",
    "SqliteSessionStore",
    "StoreError",
    "SessionRegistry",
    "Resolution",
    "Tier",
    "KeyedLocks",
]
