"""
Catalog - The closed cast of characters.

Read-only configuration consumed by every other component:
- Character identity, persona and stress tuning
- Hidden clues unlocked by trigger keywords
- Per-imposter reveal narratives
"""

from .characters import Catalog, CatalogError, CharacterConfig, Clue, STRESS_STATES
from .digital_city import create_digital_city_catalog, IMPOSTER_PROMPT
from .revelations import RevealNarrative, DIGITAL_CITY_REVELATIONS, DEFAULT_REVEAL_ID

__all__ = [
    "Catalog",
    "CatalogError",
    "CharacterConfig",
    "Clue",
    "STRESS_STATES",
    "create_digital_city_catalog",
    "IMPOSTER_PROMPT",
    "RevealNarrative",
    "DIGITAL_CITY_REVELATIONS",
    "DEFAULT_REVEAL_ID",
]
