"""
Dialogue Prompts - Assembles what the text generator sees.

The system prompt stacks:
1. The character's persona
2. The imposter instruction (imposter only)
3. Current stress and the behaviour for the current stress state
4. Fixed roleplay rules

History is mapped to chat roles: player -> "user", character -> "assistant".
"""

from __future__ import annotations

from ..catalog import CharacterConfig
from ..engine_core.state import Message, MessageRole
from ..engine_core.stress import StressState, classify, effective_threshold


ROLEPLAY_RULES = """IMPORTANT RULES:
- Stay completely in character at all times
- Keep responses concise (2-4 sentences typically)
- Never break the fourth wall or acknowledge you're an AI (unless you're Dr. Chen having a glitch)
- React naturally to the player's questions
- If stress is high, you may refuse to answer or become hostile
- Drop hints about your hidden knowledge when relevant, but don't volunteer everything"""


def distracted_reply(character: CharacterConfig) -> str:
    """Stand-in line used when no reply could be generated."""
    return f"*{character.name} seems distracted and doesn't respond*"


def behaviour_state(
    character: CharacterConfig,
    stress_level: int,
    is_imposter: bool,
) -> StressState:
    """Stress state that drives the character's behaviour instruction."""
    return classify(stress_level, effective_threshold(character, is_imposter))


def build_system_prompt(
    character: CharacterConfig,
    stress_level: int,
    is_imposter: bool,
    imposter_prompt: str = "",
) -> str:
    """System prompt for one reply."""
    state = behaviour_state(character, stress_level, is_imposter)
    threshold = effective_threshold(character, is_imposter)

    persona = character.base_prompt
    if is_imposter and imposter_prompt:
        persona = f"{persona}\n{imposter_prompt}"

    return (
        f"{persona}\n\n"
        f"CURRENT STRESS LEVEL: {stress_level}/100 (threshold: {threshold})\n"
        f"CURRENT BEHAVIOR INSTRUCTION: {character.behaviour_for(state.value)}\n\n"
        f"{ROLEPLAY_RULES}"
    )


def build_messages(history: list[Message], player_text: str) -> list[dict[str, str]]:
    """Chat-completion messages: prior history plus the new player line."""
    messages = [
        {
            "role": "user" if message.role == MessageRole.PLAYER else "assistant",
            "content": message.content,
        }
        for message in history
    ]
    messages.append({"role": "user", "content": player_text})
    return messages
