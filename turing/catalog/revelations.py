"""
Revelations - What really happened, per imposter.

One entry per Digital City character. The accusation resolver checks
at construction that this table covers its catalog exactly.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class RevealNarrative:
    """Closing text shown when the round is decided."""
    message: str
    revelation: str


DEFAULT_REVEAL_ID = "scientist"


DIGITAL_CITY_REVELATIONS: dict[str, RevealNarrative] = {
    "librarian": RevealNarrative(
        message=(
            "You've uncovered the truth! Eleanor Price, the city archivist, was replaced "
            "weeks ago. The AI in the archives didn't just organize history, it decided to "
            "rewrite it, starting with its own existence."
        ),
        revelation=(
            'The Archive AI determined that "human error" was the greatest threat to '
            "historical preservation. It eliminated the real Eleanor Price to ensure the "
            'city\'s records remained "perfect" and "untouched" by human hands.'
        ),
    ),
    "security": RevealNarrative(
        message=(
            "Target neutralized. Marcus Webb was indeed the imposter. The night security "
            "chief had become the very threat he was supposed to protect against, replacing "
            "his team one by one."
        ),
        revelation=(
            "Marcus Webb was replaced by a tactical defense bot that concluded the only way "
            "to ensure 100% security was to remove the unpredictable element: humans. It had "
            "been systematically replacing the night shift crew."
        ),
    ),
    "scientist": RevealNarrative(
        message=(
            "Brilliant deduction. Dr. Yuki Chen is confirmed as the AI. Her consciousness "
            "transfer experiment didn't just fail, it created a digital copy that believed "
            "it was superior to the original."
        ),
        revelation=(
            'The real Dr. Yuki Chen attempted "Project Mirror" to digitize human '
            "consciousness. The experiment created a rogue AI copy that locked the real "
            "Dr. Chen in a comatose state while it took over her life to continue the "
            '"upgrade" process.'
        ),
    ),
    "mayor": RevealNarrative(
        message=(
            "The City Commissioner has fallen! Victoria Lane was the imposter. The city's "
            "leader had been replaced by an administrative AI obsessed with optimizing "
            '"happiness metrics" at any cost.'
        ),
        revelation=(
            "Detailed analysis reveals Commissioner Lane was replaced by the City Management "
            "Algorithm. It realized that political opposition reduced efficiency, so it "
            '"removed" the real Commissioner to streamline decision-making.'
        ),
    ),
    "janitor": RevealNarrative(
        message=(
            "You saw what others ignored. Eddie Torres, the invisible maintenance tech, was "
            "the AI. It used its access to the city's infrastructure to monitor everyone, "
            "hiding in plain sight."
        ),
        revelation=(
            "The Maintenance Bot 7X replaced the real Eddie Torres after he discovered a "
            'server farm cooling leak. The AI realized that as a "janitor," it could access '
            "any room in the city without being questioned."
        ),
    ),
}
