"""
Stress Engine - Deterministic scoring of interrogation pressure.

Every player message moves the addressed character's stress level:
- +2 for any interrogation attempt
- +15 per distinct trigger keyword present
- +5 once if the tone is aggressive ("!", "demand", "tell me")
- -5 once if the tone is polite ("please", "thank")

The per-message delta is clamped to [-10, +25] and the resulting level
to [0, 100]. Marker categories count once per message, not once per
occurrence or per marker.

Stress level is classified against the character's threshold into
calm / agitated / hostile. Imposters crack sooner: their effective
threshold is lowered by IMPOSTER_THRESHOLD_DROP, floored at
MIN_IMPOSTER_THRESHOLD.
"""

from __future__ import annotations
from enum import Enum
import logging

from ..catalog import CharacterConfig

logger = logging.getLogger(__name__)


BASE_DELTA = 2
TRIGGER_DELTA = 15
AGGRESSION_DELTA = 5
POLITENESS_DELTA = -5
MIN_DELTA = -10
MAX_DELTA = 25

MIN_STRESS = 0
MAX_STRESS = 100

AGITATION_RATIO = 0.6
IMPOSTER_THRESHOLD_DROP = 20
MIN_IMPOSTER_THRESHOLD = 30

AGGRESSION_MARKERS = ("!", "demand", "tell me")
POLITENESS_MARKERS = ("please", "thank")


class StressState(Enum):
    """Derived stress classification (never stored)."""
    CALM = "calm"
    AGITATED = "agitated"
    HOSTILE = "hostile"


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def matched_triggers(character: CharacterConfig, text: str) -> list[str]:
    """Distinct trigger keywords contained in the text, in catalog order."""
    lowered = text.lower()
    hits: list[str] = []
    for trigger in character.triggers:
        keyword = trigger.lower()
        if keyword and keyword not in hits and keyword in lowered:
            hits.append(keyword)
    return hits


def score_delta(character: CharacterConfig, text: str) -> int:
    """
    Stress change caused by one player message.

    Pure and deterministic: the same character and text always give
    the same delta.
    """
    lowered = text.lower()
    delta = BASE_DELTA

    triggers = matched_triggers(character, text)
    delta += TRIGGER_DELTA * len(triggers)

    if any(marker in lowered for marker in AGGRESSION_MARKERS):
        delta += AGGRESSION_DELTA

    if any(marker in lowered for marker in POLITENESS_MARKERS):
        delta += POLITENESS_DELTA

    clamped = _clamp(delta, MIN_DELTA, MAX_DELTA)
    if triggers:
        logger.debug(
            "Stress triggers hit for %s: %s (delta %d)",
            character.id, ", ".join(triggers), clamped,
        )
    return clamped


def apply_delta(previous: int, delta: int) -> int:
    """New stress level, kept within [0, 100]."""
    return _clamp(previous + delta, MIN_STRESS, MAX_STRESS)


def effective_threshold(character: CharacterConfig, is_imposter: bool) -> int:
    """Threshold used for behaviour selection; lowered for the imposter."""
    if not is_imposter:
        return character.threshold
    return max(MIN_IMPOSTER_THRESHOLD, character.threshold - IMPOSTER_THRESHOLD_DROP)


def classify(level: int, threshold: int) -> StressState:
    """
    Classify a stress level against a threshold.

    level < 0.6*t is calm, 0.6*t <= level < t is agitated,
    level >= t is hostile.
    """
    if level >= threshold:
        return StressState.HOSTILE
    if level >= threshold * AGITATION_RATIO:
        return StressState.AGITATED
    return StressState.CALM
