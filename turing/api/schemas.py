"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between the game client and the
engine. Request fields accept both snake_case and the camelCase names
used by the web client (sessionId, playerName, npcId).

Error Codes:
- SESSION_NOT_FOUND: Session unknown in every storage tier
- CHARACTER_NOT_FOUND: Character id is not in the catalog (catalog lookups)
- INVALID_INPUT: Unknown character for chat/accuse, empty or oversized message
- ROUND_ALREADY_DECIDED: Accusation on a round that is already won or lost
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================

class RoundStatus(str, Enum):
    """Round status values."""
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"


class StressStateName(str, Enum):
    """Stress state shown to the player."""
    CALM = "calm"
    AGITATED = "agitated"
    HOSTILE = "hostile"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    CHARACTER_NOT_FOUND = "CHARACTER_NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    ROUND_ALREADY_DECIDED = "ROUND_ALREADY_DECIDED"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CharacterInfo(BaseModel):
    """Public character information for display."""
    id: str
    name: str
    role: str
    portrait: str = ""
    location: str = ""

    model_config = {"from_attributes": True}


class MessageInfo(BaseModel):
    """One line of dialogue."""
    role: str = Field(description="player or character")
    content: str
    timestamp: Optional[str] = None

    model_config = {"from_attributes": True}


class CharacterStateInfo(BaseModel):
    """Per-character progress in a round."""
    character_id: str
    stress_level: int = Field(ge=0, le=100)
    stress_state: StressStateName
    message_count: int = 0

    model_config = {"from_attributes": True}


# =============================================================================
# Request Models
# =============================================================================

class StartRoundRequest(BaseModel):
    """Request to start a new round."""
    model_config = ConfigDict(populate_by_name=True)

    player_name: str = Field(
        "Detective", alias="playerName", max_length=64, description="Display name"
    )


class ChatRequest(BaseModel):
    """A player line addressed to a character."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId", description="Round identifier")
    message: str = Field(..., description="What the player says")


class GuessRequest(BaseModel):
    """Final accusation."""
    model_config = ConfigDict(populate_by_name=True)

    character_id: str = Field(..., alias="npcId", description="Accused character id")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")


class StartRoundResponse(BaseModel):
    """A freshly started round with the public cast."""
    success: bool = True
    session_id: str
    player_name: str
    message: str
    characters: list[CharacterInfo] = Field(default_factory=list)


class SessionResponse(BaseModel):
    """Round overview."""
    success: bool = True
    session_id: str
    player_name: str
    status: RoundStatus
    clues_discovered: list[str] = Field(default_factory=list)
    characters: list[CharacterStateInfo] = Field(default_factory=list)
    final_guess: Optional[str] = None
    imposter_id: Optional[str] = Field(None, description="Only set once the round is decided")
    started_at: Optional[str] = None
    ended_at: Optional[str] = None
    degraded: bool = Field(
        False, description="Rebuilt from the identifier; name and history are placeholders"
    )


class ChatResponse(BaseModel):
    """A character's reply and the new stress reading."""
    success: bool = True
    session_id: str
    character_id: str
    character_name: str
    response: str
    stress_level: int = Field(ge=0, le=100)
    stress_state: StressStateName
    stress_change: int
    message_count: int
    upstream_failed: bool = Field(False, description="Reply is the stand-in line")
    new_clues: list[str] = Field(default_factory=list)
    degraded: bool = False


class HistoryResponse(BaseModel):
    """Conversation with one character."""
    success: bool = True
    session_id: str
    character_id: str
    history: list[MessageInfo] = Field(default_factory=list)
    stress_level: int = Field(0, ge=0, le=100)
    stress_state: StressStateName = StressStateName.CALM
    degraded: bool = False


class GuessResponse(BaseModel):
    """How the round ended."""
    success: bool = True
    correct: bool
    game_status: RoundStatus
    accused_id: str
    message: str
    revelation: str
    imposter_id: str
    imposter_name: str
    degraded: bool = False


class CluesResponse(BaseModel):
    """Clues discovered so far."""
    success: bool = True
    session_id: str
    clues: list[str] = Field(default_factory=list)
    degraded: bool = False


class CharacterListResponse(BaseModel):
    """The public cast."""
    success: bool = True
    npcs: list[CharacterInfo]


class CharacterResponse(BaseModel):
    """One public character."""
    success: bool = True
    npc: CharacterInfo


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
