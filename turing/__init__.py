"""
Turing Mystery - Interrogation Game Engine

A session and interrogation state engine for a find-the-imposter game.
One resident of Digital City is secretly an imposter; the player questions
characters, watches their stress, and makes one accusation. Provides:
- Round registry with tiered recovery (durable, volatile, stateless)
- Stress scoring and behaviour classification
- Per-character conversation state and clue discovery
- Accusation resolution with reveal narratives
"""

__version__ = "0.1.0"
