"""
Engine Core - Interrogation state and its transitions.

Contains:
- Session state model (Session, InteractionRecord, Message)
- Stress engine (pure scoring and classification)
- Interaction state (per-character history and stress)
- Accusation resolver (terminal transition and reveal)
"""

from .state import (
    Session,
    SessionStatus,
    InteractionRecord,
    Message,
    MessageRole,
    DEFAULT_PLAYER_NAME,
    utc_now,
)
from .errors import ErrorKind
from .stress import StressState, score_delta, apply_delta, classify, effective_threshold
from .accusation import AccusationResolver, AccusationResult, Outcome, RevealTableError

__all__ = [
    "Session",
    "SessionStatus",
    "InteractionRecord",
    "Message",
    "MessageRole",
    "DEFAULT_PLAYER_NAME",
    "utc_now",
    "ErrorKind",
    "StressState",
    "score_delta",
    "apply_delta",
    "classify",
    "effective_threshold",
    "AccusationResolver",
    "AccusationResult",
    "Outcome",
    "RevealTableError",
]
