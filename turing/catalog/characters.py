"""
Character definitions - The closed set of interrogation targets.

A character carries:
- Public identity (name, role, portrait, location)
- Private persona text for the dialogue prompt
- Stress tuning (threshold, trigger keywords, behaviour per stress state)
- Hidden clues unlocked by specific trigger keywords

The catalog is read-only after construction. Every other component
validates character identifiers against it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterator


STRESS_STATES = ("calm", "agitated", "hostile")


class CatalogError(ValueError):
    """Raised when a catalog is malformed."""


@dataclass(frozen=True)
class Clue:
    """A hidden fact a character gives away when a keyword hits."""
    clue_id: str
    keyword: str
    text: str


@dataclass(frozen=True)
class CharacterConfig:
    """
    Static configuration for one character.

    stress_responses maps each stress state ("calm", "agitated",
    "hostile") to the behaviour instruction used while generating
    the character's reply.
    """
    id: str
    name: str
    role: str
    threshold: int
    triggers: tuple[str, ...] = ()
    stress_responses: dict[str, str] = field(default_factory=dict)
    base_prompt: str = ""
    portrait: str = ""
    location: str = ""
    clues: tuple[Clue, ...] = ()

    def behaviour_for(self, stress_state: str) -> str:
        """Behaviour instruction for a stress state ("calm" if unset)."""
        return self.stress_responses.get(
            stress_state, self.stress_responses.get("calm", "")
        )

    def clues_for(self, keywords: list[str]) -> list[Clue]:
        """Clues unlocked by any of the given trigger keywords."""
        hit = {k.lower() for k in keywords}
        return [clue for clue in self.clues if clue.keyword.lower() in hit]

    def public_info(self) -> dict[str, Any]:
        """Public fields only (no prompt, triggers or clues)."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "portrait": self.portrait,
            "location": self.location,
        }


class Catalog:
    """
    Closed, ordered set of characters keyed by identifier.

    Usage:
        catalog = Catalog([eleanor, marcus], imposter_prompt=PROMPT)

        if "librarian" in catalog:
            character = catalog["librarian"]
    """

    def __init__(
        self,
        characters: list[CharacterConfig],
        imposter_prompt: str = "",
    ):
        if not characters:
            raise CatalogError("Catalog needs at least one character")

        self._characters: dict[str, CharacterConfig] = {}
        for character in characters:
            if not character.id or "-" in character.id:
                raise CatalogError(
                    f"Invalid character id {character.id!r}: must be non-empty "
                    "and must not contain '-'"
                )
            if character.id in self._characters:
                raise CatalogError(f"Duplicate character id: {character.id}")
            if character.threshold <= 0:
                raise CatalogError(
                    f"Character {character.id} needs a positive threshold"
                )
            self._characters[character.id] = character

        self.imposter_prompt = imposter_prompt

    def __contains__(self, character_id: object) -> bool:
        return character_id in self._characters

    def __getitem__(self, character_id: str) -> CharacterConfig:
        return self._characters[character_id]

    def __iter__(self) -> Iterator[CharacterConfig]:
        return iter(self._characters.values())

    def __len__(self) -> int:
        return len(self._characters)

    def get(self, character_id: str) -> CharacterConfig | None:
        """Get a character by ID, or None."""
        return self._characters.get(character_id)

    @property
    def ids(self) -> list[str]:
        """All character identifiers, in definition order."""
        return list(self._characters.keys())

    def public_listing(self) -> list[dict[str, Any]]:
        """Public info for every character."""
        return [character.public_info() for character in self]
