"""
Accusation Resolver - Decides the round.

The resolver:
1. Validates the accused identifier against the catalog
2. Refuses to re-decide a finished round (the first decision stands)
3. Applies the terminal transition (won/lost, final guess, end time)
4. Picks the reveal narrative for the true imposter

The reveal table is checked once, at construction: its key set must equal
the catalog's key set and every entry must have non-empty text. A missing
entry at call time falls back to the designated default entry.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
import logging

from ..catalog import Catalog, RevealNarrative
from .errors import ErrorKind
from .state import Session, SessionStatus, utc_now

logger = logging.getLogger(__name__)


class RevealTableError(ValueError):
    """Raised when the reveal table does not match the catalog."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            f"Reveal table invalid with {len(errors)} error(s): " + "; ".join(errors)
        )


@dataclass
class Outcome:
    """What the player is told once the round is decided."""
    correct: bool
    status: SessionStatus
    accused_id: str
    message: str
    revelation: str
    imposter_id: str
    imposter_name: str


@dataclass
class AccusationResult:
    """
    Result of an accusation.

    success=False carries an error and an ErrorKind; the session is
    left untouched in that case.
    """
    success: bool
    outcome: Outcome | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def failure(cls, error: str, error_kind: ErrorKind) -> AccusationResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_kind=error_kind)


def validate_reveal_table(
    catalog: Catalog,
    reveals: dict[str, RevealNarrative],
    default_reveal_id: str,
) -> list[str]:
    """Collect every mismatch between the reveal table and the catalog."""
    errors: list[str] = []
    catalog_ids = set(catalog.ids)
    table_ids = set(reveals)

    for missing in sorted(catalog_ids - table_ids):
        errors.append(f"no reveal narrative for character '{missing}'")
    for extra in sorted(table_ids - catalog_ids):
        errors.append(f"reveal narrative for unknown character '{extra}'")

    for character_id, narrative in reveals.items():
        if not narrative.message.strip():
            errors.append(f"empty message for '{character_id}'")
        if not narrative.revelation.strip():
            errors.append(f"empty revelation for '{character_id}'")

    if default_reveal_id not in reveals:
        errors.append(f"default reveal '{default_reveal_id}' is not in the table")

    return errors


class AccusationResolver:
    """
    Applies the terminal accusation transition to a session.

    Usage:
        resolver = AccusationResolver(catalog, DIGITAL_CITY_REVELATIONS)
        result = resolver.accuse(session, "mayor")
        if result.success:
            show(result.outcome.message, result.outcome.revelation)
    """

    def __init__(
        self,
        catalog: Catalog,
        reveals: dict[str, RevealNarrative],
        default_reveal_id: str,
    ):
        errors = validate_reveal_table(catalog, reveals, default_reveal_id)
        if errors:
            raise RevealTableError(errors)

        self.catalog = catalog
        self._reveals = dict(reveals)
        self.default_reveal_id = default_reveal_id

    def narrative_for(self, imposter_id: str) -> RevealNarrative:
        """Reveal narrative for an imposter, or the default entry."""
        narrative = self._reveals.get(imposter_id)
        if narrative is None:
            logger.error(
                "No reveal narrative for imposter %s, using default %s",
                imposter_id, self.default_reveal_id,
            )
            narrative = self._reveals[self.default_reveal_id]
        return narrative

    def accuse(
        self,
        session: Session,
        accused_id: str,
        now: datetime | None = None,
    ) -> AccusationResult:
        """
        Accuse a character in this session.

        Mutates the session only on success.
        """
        accused = self.catalog.get(accused_id)
        if accused is None:
            return AccusationResult.failure(
                f"Unknown character: {accused_id}", ErrorKind.INVALID_INPUT
            )

        if not session.is_active():
            return AccusationResult.failure(
                f"Round already decided ({session.status.value})", ErrorKind.CONFLICT
            )

        correct = accused_id == session.imposter_id
        session.status = SessionStatus.WON if correct else SessionStatus.LOST
        session.final_guess = accused_id
        session.ended_at = now or utc_now()

        narrative = self.narrative_for(session.imposter_id)
        imposter = self.catalog.get(session.imposter_id)
        imposter_name = imposter.name if imposter else "Unknown"

        if correct:
            message = narrative.message
            revelation = narrative.revelation
        else:
            message = (
                f"Your accusation was incorrect. {accused.name} is innocent. "
                "The real imposter remains at large, and your credibility is ruined. "
                "The case is closed, but the mystery remains unsolved."
            )
            revelation = (
                f"TRANSCRIPT RECOVERED: The true imposter was {imposter_name}.\n\n"
                f"{narrative.revelation}"
            )

        logger.info(
            "Session %s decided: accused %s, %s",
            session.session_id, accused_id, session.status.value,
        )

        return AccusationResult(
            success=True,
            outcome=Outcome(
                correct=correct,
                status=session.status,
                accused_id=accused_id,
                message=message,
                revelation=revelation,
                imposter_id=session.imposter_id,
                imposter_name=imposter_name,
            ),
        )
