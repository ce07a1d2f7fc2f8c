"""
FastAPI Application - REST API for the web client.

Endpoints:
    POST   /api/game/start                  Start a round
    GET    /api/game/{id}                   Round overview
    POST   /api/game/{id}/guess             Accuse a character (ends the round)
    GET    /api/game/{id}/clues             Clues discovered so far
    GET    /api/npc                         Public cast
    GET    /api/npc/{id}                    One character
    POST   /api/npc/{id}/chat               Talk to a character
    GET    /api/npc/{id}/history            Conversation with a character
    GET    /api/health                      Health check

All responses are JSON with explicit Pydantic schemas. Failures use
ErrorResponse with a machine-readable error_code.
"""

from typing import Optional, Union

from .. import __version__
from ..config import Settings


def create_app(service=None, settings: Optional[Settings] = None):
    """
    Create the FastAPI application.

    Args:
        service: Optional InterrogationService instance (built from settings if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query, Request
        from fastapi.exceptions import RequestValidationError
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import InterrogationService
    from ..engine_core.errors import ErrorKind
    from .schemas import (
        # Request models
        StartRoundRequest,
        ChatRequest,
        GuessRequest,
        # Response models
        StartRoundResponse,
        SessionResponse,
        ChatResponse,
        HistoryResponse,
        GuessResponse,
        CluesResponse,
        CharacterListResponse,
        CharacterResponse,
        ErrorResponse,
        HealthResponse,
        # Enums
        ErrorCode,
        # Nested models
        CharacterInfo,
        CharacterStateInfo,
        MessageInfo,
    )

    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Turing Mystery API",
        description="""
Interrogation game engine - find the imposter among the residents of Digital City.

## Round Flow

1. `POST /api/game/start` returns a `session_id`
2. `POST /api/npc/{id}/chat` to question characters; pressure raises their stress
3. `POST /api/game/{id}/guess` to accuse one character and end the round

Responses carry `degraded=true` when the round was rebuilt from its identifier
after its stored copy was lost.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `CHARACTER_NOT_FOUND` | Character does not exist |
| `INVALID_INPUT` | Unknown character, empty or oversized message |
| `ROUND_ALREADY_DECIDED` | The round already ended |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or InterrogationService.from_settings(settings)

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    ERROR_MAPPING = {
        ErrorKind.NOT_FOUND: (ErrorCode.SESSION_NOT_FOUND, 404),
        ErrorKind.INVALID_INPUT: (ErrorCode.INVALID_INPUT, 400),
        ErrorKind.CONFLICT: (ErrorCode.ROUND_ALREADY_DECIDED, 409),
    }

    def failure_response(result) -> JSONResponse:
        """Map a failed ServiceResult onto an HTTP error."""
        error_code, status_code = ERROR_MAPPING.get(
            result.error_kind, (ErrorCode.INVALID_INPUT, 400)
        )
        details = {"degraded": True} if result.degraded else None
        return make_error_response(error_code, result.error, status_code, details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request body is invalid",
            details={"errors": [str(error.get("msg")) for error in exc.errors()]},
        )

    # =========================================================================
    # Round Endpoints
    # =========================================================================

    @app.post(
        "/api/game/start",
        response_model=StartRoundResponse,
        tags=["Rounds"],
        summary="Start a new round",
    )
    async def start_round(
        body: Optional[StartRoundRequest] = None,
    ) -> StartRoundResponse:
        """
        Start a new round. One character is secretly chosen as the imposter.

        Keep the returned `session_id`; every other round endpoint needs it.
        """
        player_name = body.player_name if body else "Detective"
        result = api_service.start_round(player_name)
        data = result.data

        return StartRoundResponse(
            session_id=data.session_id,
            player_name=data.player_name,
            message=data.message,
            characters=[CharacterInfo.model_validate(c) for c in data.characters],
        )

    @app.get(
        "/api/game/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rounds"],
        summary="Get round overview",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Status, clues and per-character stress. The imposter is hidden until the round ends."""
        result = api_service.get_session(session_id)
        if not result.success:
            return failure_response(result)

        data = result.data
        return SessionResponse(
            session_id=data.session_id,
            player_name=data.player_name,
            status=data.status,
            clues_discovered=data.clues_discovered,
            characters=[CharacterStateInfo.model_validate(c) for c in data.characters],
            final_guess=data.final_guess,
            imposter_id=data.imposter_id,
            started_at=data.started_at,
            ended_at=data.ended_at,
            degraded=result.degraded,
        )

    @app.post(
        "/api/game/{session_id}/guess",
        response_model=GuessResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown character"},
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Round already decided"},
        },
        tags=["Rounds"],
        summary="Accuse a character",
    )
    async def guess(
        session_id: str,
        body: GuessRequest,
    ) -> Union[GuessResponse, JSONResponse]:
        """
        Accuse one character of being the imposter. Ends the round either way.

        **Request Body:**
        ```json
        {"npcId": "mayor"}
        ```
        """
        result = await api_service.accuse(session_id, body.character_id)
        if not result.success:
            return failure_response(result)

        data = result.data
        return GuessResponse(
            correct=data.correct,
            game_status=data.status,
            accused_id=data.accused_id,
            message=data.message,
            revelation=data.revelation,
            imposter_id=data.imposter_id,
            imposter_name=data.imposter_name,
            degraded=result.degraded,
        )

    @app.get(
        "/api/game/{session_id}/clues",
        response_model=CluesResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Rounds"],
        summary="Get discovered clues",
    )
    async def get_clues(session_id: str) -> Union[CluesResponse, JSONResponse]:
        """Clues unlocked so far, in discovery order."""
        result = api_service.read_clues(session_id)
        if not result.success:
            return failure_response(result)

        return CluesResponse(
            session_id=result.data.session_id,
            clues=result.data.clues,
            degraded=result.degraded,
        )

    # =========================================================================
    # Character Endpoints
    # =========================================================================

    @app.get(
        "/api/npc",
        response_model=CharacterListResponse,
        tags=["Characters"],
        summary="List characters",
    )
    async def list_characters() -> CharacterListResponse:
        """Public information for every character."""
        return CharacterListResponse(
            npcs=[CharacterInfo.model_validate(c) for c in api_service.list_characters()],
        )

    @app.get(
        "/api/npc/{character_id}",
        response_model=CharacterResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Characters"],
        summary="Get one character",
    )
    async def get_character(character_id: str) -> Union[CharacterResponse, JSONResponse]:
        """Public information for one character."""
        for character in api_service.list_characters():
            if character.id == character_id:
                return CharacterResponse(npc=CharacterInfo.model_validate(character))

        return make_error_response(
            ErrorCode.CHARACTER_NOT_FOUND,
            f"Character {character_id} not found",
            status_code=404,
        )

    @app.post(
        "/api/npc/{character_id}/chat",
        response_model=ChatResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown character or bad message"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Characters"],
        summary="Talk to a character",
    )
    async def chat(
        character_id: str,
        body: ChatRequest,
    ) -> Union[ChatResponse, JSONResponse]:
        """
        Send one line to a character and get the reply.

        If the reply service is down the character "seems distracted";
        the exchange still counts and `upstream_failed` is set.

        **Request Body:**
        ```json
        {"sessionId": "...", "message": "Where were you last night?"}
        ```
        """
        result = await api_service.chat(body.session_id, character_id, body.message)
        if not result.success:
            return failure_response(result)

        data = result.data
        return ChatResponse(
            session_id=data.session_id,
            character_id=data.character_id,
            character_name=data.character_name,
            response=data.reply,
            stress_level=data.stress_level,
            stress_state=data.stress_state,
            stress_change=data.stress_change,
            message_count=data.message_count,
            upstream_failed=data.upstream_failed,
            new_clues=data.new_clues,
            degraded=result.degraded,
        )

    @app.get(
        "/api/npc/{character_id}/history",
        response_model=HistoryResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown character"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Characters"],
        summary="Get conversation history",
    )
    async def get_history(
        character_id: str,
        session_id: str = Query(..., alias="sessionId", description="Round identifier"),
    ) -> Union[HistoryResponse, JSONResponse]:
        """Every exchange with this character in the round, oldest first."""
        result = api_service.read_history(session_id, character_id)
        if not result.success:
            return failure_response(result)

        data = result.data
        return HistoryResponse(
            session_id=data.session_id,
            character_id=data.character_id,
            history=[MessageInfo.model_validate(m) for m in data.history],
            stress_level=data.stress_level,
            stress_state=data.stress_state,
            degraded=result.degraded,
        )

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="turing-mystery",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Turing Mystery API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/health",
        }

    return app


# For running directly: uvicorn turing.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
