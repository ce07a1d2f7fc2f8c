"""
API Module - Web client interface.

Exposes the engine via REST API. The client:
1. Starts a round
2. Questions characters and watches their stress
3. Reads history and discovered clues
4. Accuses one character to end the round

All state is round-scoped. No persistent user accounts required.
"""

from .models import (
    ServiceResult,
    # Responses
    StartRoundResponse,
    ChatResponse,
    HistoryResponse,
    SessionSummary,
    AccusationResponse,
    CluesResponse,
    # Shared
    CharacterInfo,
    MessageInfo,
    CharacterStateInfo,
)
from .service import InterrogationService
from .app import create_app

__all__ = [
    "ServiceResult",
    # Responses
    "StartRoundResponse",
    "ChatResponse",
    "HistoryResponse",
    "SessionSummary",
    "AccusationResponse",
    "CluesResponse",
    # Shared
    "CharacterInfo",
    "MessageInfo",
    "CharacterStateInfo",
    # Service
    "InterrogationService",
    "create_app",
]
