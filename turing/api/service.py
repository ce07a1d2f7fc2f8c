"""
API Service - Business logic layer between the transport and the engine.

The service:
1. Starts rounds (imposter assignment + registry create)
2. Runs chat exchanges (resolve -> stress -> reply -> append -> update)
3. Serves history, clues and round summaries
4. Resolves accusations

Concurrency:
- A chat holds the lock for its (session, character) pair for the whole
  read-modify-write, including the reply generation call
- The chat write-back and every accusation hold the session lock, and the
  write-back merges only its own character's record into the freshest copy
- Locks are released on every exit path, including cancellation; a
  cancelled chat writes nothing

This layer is framework-agnostic (used by the FastAPI adapter and the CLI).
Every public operation returns a ServiceResult and never raises.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import asyncio
import logging

from .models import (
    ServiceResult,
    # Shared
    CharacterInfo,
    MessageInfo,
    CharacterStateInfo,
    # Responses
    StartRoundResponse,
    ChatResponse,
    HistoryResponse,
    SessionSummary,
    AccusationResponse,
    CluesResponse,
)
from ..catalog import (
    Catalog,
    CharacterConfig,
    RevealNarrative,
    create_digital_city_catalog,
    DIGITAL_CITY_REVELATIONS,
    DEFAULT_REVEAL_ID,
)
from ..config import Settings
from ..dialogue import (
    ChatCompletionClient,
    ReplyGenerator,
    build_messages,
    build_system_prompt,
    distracted_reply,
)
from ..engine_core import interaction, stress
from ..engine_core.accusation import AccusationResolver
from ..engine_core.errors import ErrorKind
from ..engine_core.state import Message, Session, DEFAULT_PLAYER_NAME
from ..session import KeyedLocks, SessionRegistry, SqliteSessionStore

logger = logging.getLogger(__name__)


INTRO_MESSAGE = (
    "Welcome, {player_name}. A strange incident has occurred in Digital City. "
    "One of the residents may not be who they claim to be..."
)


@dataclass
class InterrogationService:
    """
    Main service for the interrogation game.

    Usage:
        service = InterrogationService(generator=ChatCompletionClient(api_key=key))

        round_ = service.start_round("Ada").data
        reply = await service.chat(round_.session_id, "mayor", "Tell me about Project Mirror!")
        outcome = await service.accuse(round_.session_id, "mayor")
    """
    catalog: Catalog = field(default_factory=create_digital_city_catalog)
    registry: SessionRegistry | None = None
    generator: ReplyGenerator | None = None
    reveals: dict[str, RevealNarrative] = field(
        default_factory=lambda: dict(DIGITAL_CITY_REVELATIONS)
    )
    default_reveal_id: str = DEFAULT_REVEAL_ID
    reply_timeout: float = 15.0
    max_message_length: int = 1000

    _locks: KeyedLocks = field(default_factory=KeyedLocks)

    def __post_init__(self):
        if self.registry is None:
            self.registry = SessionRegistry(self.catalog)
        # Raises RevealTableError on a mismatched table
        self.resolver = AccusationResolver(
            self.catalog, self.reveals, self.default_reveal_id
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> InterrogationService:
        """Build a service wired to the configured stores and generator."""
        catalog = create_digital_city_catalog()
        durable = SqliteSessionStore(settings.db_path) if settings.db_path else None
        registry = SessionRegistry(
            catalog, durable=durable, session_ttl=settings.session_ttl
        )

        generator = None
        if settings.llm_api_key:
            generator = ChatCompletionClient(
                base_url=settings.llm_base_url,
                model=settings.llm_model,
                api_key=settings.llm_api_key,
                timeout=settings.llm_timeout,
            )
        else:
            logger.warning("No LLM API key configured; characters will not reply")

        return cls(
            catalog=catalog,
            registry=registry,
            generator=generator,
            reply_timeout=settings.llm_timeout,
            max_message_length=settings.max_message_length,
        )

    # =========================================================================
    # Round lifecycle
    # =========================================================================

    def list_characters(self) -> list[CharacterInfo]:
        """Public listing of the cast."""
        return [CharacterInfo(**info) for info in self.catalog.public_listing()]

    def start_round(self, player_name: str = DEFAULT_PLAYER_NAME) -> ServiceResult[StartRoundResponse]:
        """
        Start a new round.
        """
        self.registry.cleanup()
        session = self.registry.create(player_name)
        logger.info("Round %s started for %s", session.session_id, session.player_name)

        return ServiceResult.ok(
            StartRoundResponse(
                session_id=session.session_id,
                player_name=session.player_name,
                message=INTRO_MESSAGE.format(player_name=session.player_name),
                characters=self.list_characters(),
            )
        )

    def get_session(self, session_id: str) -> ServiceResult[SessionSummary]:
        """
        Get a round overview.
        """
        resolution = self.registry.resolve(session_id)
        if resolution is None:
            return self._session_not_found(session_id)

        session = resolution.session
        characters = []
        for character_id, record in session.interactions.items():
            character = self.catalog.get(character_id)
            characters.append(
                CharacterStateInfo(
                    character_id=character_id,
                    stress_level=record.stress_level,
                    stress_state=self._stress_label(character, record.stress_level),
                    message_count=record.message_count,
                )
            )

        decided = not session.is_active()
        return ServiceResult.ok(
            SessionSummary(
                session_id=session.session_id,
                player_name=session.player_name,
                status=session.status.value,
                clues_discovered=list(session.clues_discovered),
                characters=characters,
                final_guess=session.final_guess,
                imposter_id=session.imposter_id if decided else None,
                started_at=session.started_at.isoformat(),
                ended_at=session.ended_at.isoformat() if session.ended_at else None,
            ),
            degraded=resolution.degraded,
        )

    def read_clues(self, session_id: str) -> ServiceResult[CluesResponse]:
        """
        Get clues discovered so far.
        """
        resolution = self.registry.resolve(session_id)
        if resolution is None:
            return self._session_not_found(session_id)

        return ServiceResult.ok(
            CluesResponse(
                session_id=session_id,
                clues=list(resolution.session.clues_discovered),
            ),
            degraded=resolution.degraded,
        )

    def read_history(self, session_id: str, character_id: str) -> ServiceResult[HistoryResponse]:
        """
        Get the conversation with one character.
        """
        character = self.catalog.get(character_id)
        if character is None:
            return ServiceResult.failure(
                f"Unknown character: {character_id}", ErrorKind.INVALID_INPUT
            )

        resolution = self.registry.resolve(session_id)
        if resolution is None:
            return self._session_not_found(session_id)

        record = interaction.peek(resolution.session, character_id)
        return ServiceResult.ok(
            HistoryResponse(
                session_id=session_id,
                character_id=character_id,
                history=[self._message_info(message) for message in record.history],
                stress_level=record.stress_level,
                stress_state=self._stress_label(character, record.stress_level),
            ),
            degraded=resolution.degraded,
        )

    # =========================================================================
    # Chat
    # =========================================================================

    async def chat(
        self,
        session_id: str,
        character_id: str,
        text: str,
    ) -> ServiceResult[ChatResponse]:
        """
        Send one player line to a character and record the exchange.

        A failed or timed-out reply is replaced by a stand-in line; the
        stress change and the history pair are recorded either way.
        """
        character = self.catalog.get(character_id)
        if character is None:
            return ServiceResult.failure(
                f"Unknown character: {character_id}", ErrorKind.INVALID_INPUT
            )

        text = (text or "").strip()
        if not text:
            return ServiceResult.failure("Message is empty", ErrorKind.INVALID_INPUT)
        if len(text) > self.max_message_length:
            return ServiceResult.failure(
                f"Message is longer than {self.max_message_length} characters",
                ErrorKind.INVALID_INPUT,
            )

        async with self._locks.hold((session_id, character_id)):
            resolution = self.registry.resolve(session_id)
            if resolution is None:
                return self._session_not_found(session_id)

            session = resolution.session
            is_imposter = session.imposter_id == character_id
            record = interaction.peek(session, character_id)

            delta = stress.score_delta(character, text)
            new_stress = stress.apply_delta(record.stress_level, delta)

            reply, upstream_failed = await self._generate_reply(
                character,
                record.history,
                text,
                new_stress,
                is_imposter,
            )

            async with self._locks.hold(session_id):
                latest = self.registry.resolve(session_id) or resolution
                target = interaction.get_or_create(latest.session, character_id)
                interaction.append(target, text, reply, new_stress)
                new_clues = self._discover_clues(latest.session, target, character, text)
                saved = self.registry.update(latest)

        return ServiceResult.ok(
            ChatResponse(
                session_id=session_id,
                character_id=character_id,
                character_name=character.name,
                reply=reply,
                stress_level=new_stress,
                stress_state=self._stress_label(character, new_stress),
                stress_change=delta,
                message_count=interaction.completed_turns(target),
                upstream_failed=upstream_failed,
                new_clues=new_clues,
            ),
            degraded=saved.degraded,
        )

    async def _generate_reply(
        self,
        character: CharacterConfig,
        history: list[Message],
        text: str,
        stress_level: int,
        is_imposter: bool,
    ) -> tuple[str, bool]:
        """Reply text and whether the stand-in line was used."""
        if self.generator is None:
            return distracted_reply(character), True

        system_prompt = build_system_prompt(
            character,
            stress_level,
            is_imposter,
            imposter_prompt=self.catalog.imposter_prompt,
        )
        messages = build_messages(history, text)

        try:
            reply = await asyncio.wait_for(
                self.generator.generate(system_prompt, messages),
                timeout=self.reply_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Reply from %s timed out after %.1fs", character.id, self.reply_timeout
            )
            return distracted_reply(character), True
        except Exception as exc:
            logger.warning("Reply from %s failed: %s", character.id, exc)
            return distracted_reply(character), True

        if not reply or not reply.strip():
            return distracted_reply(character), True
        return reply.strip(), False

    def _discover_clues(
        self,
        session: Session,
        record,
        character: CharacterConfig,
        text: str,
    ) -> list[str]:
        """Unlock clues for any trigger keyword in the player's line."""
        hits = stress.matched_triggers(character, text)
        new_clues = []
        for clue in character.clues_for(hits):
            if interaction.reveal_secret(record, clue.clue_id) and session.add_clue(clue.text):
                new_clues.append(clue.text)
        if new_clues:
            logger.info(
                "Session %s discovered %d clue(s) from %s",
                session.session_id, len(new_clues), character.id,
            )
        return new_clues

    # =========================================================================
    # Accusation
    # =========================================================================

    async def accuse(self, session_id: str, character_id: str) -> ServiceResult[AccusationResponse]:
        """
        Accuse a character of being the imposter. Ends the round.
        """
        if character_id not in self.catalog:
            return ServiceResult.failure(
                f"Unknown character: {character_id}", ErrorKind.INVALID_INPUT
            )

        async with self._locks.hold(session_id):
            resolution = self.registry.resolve(session_id)
            if resolution is None:
                return self._session_not_found(session_id)

            result = self.resolver.accuse(resolution.session, character_id)
            if not result.success:
                return ServiceResult.failure(
                    result.error, result.error_kind, degraded=resolution.degraded
                )

            self.registry.update(resolution)

        outcome = result.outcome
        return ServiceResult.ok(
            AccusationResponse(
                session_id=session_id,
                correct=outcome.correct,
                status=outcome.status.value,
                accused_id=outcome.accused_id,
                message=outcome.message,
                revelation=outcome.revelation,
                imposter_id=outcome.imposter_id,
                imposter_name=outcome.imposter_name,
            ),
            degraded=resolution.degraded,
        )

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _session_not_found(self, session_id: str) -> ServiceResult:
        return ServiceResult.failure(
            f"Session not found: {session_id}", ErrorKind.NOT_FOUND
        )

    def _stress_label(self, character: CharacterConfig | None, level: int) -> str:
        """Stress state shown to the player (base threshold, never the imposter's)."""
        if character is None:
            return stress.StressState.CALM.value
        return stress.classify(level, character.threshold).value

    def _message_info(self, message: Message) -> MessageInfo:
        return MessageInfo(
            role=message.role.value,
            content=message.content,
            timestamp=message.timestamp.isoformat() if message.timestamp else None,
        )
