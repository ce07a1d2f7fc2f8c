"""
Dialogue - Everything between a player line and a character reply.

The generator itself is an external service; this module only:
- Builds the prompt from persona, stress state and history
- Calls an OpenAI-compatible endpoint
- Supplies the stand-in line used when the call fails
"""

from .prompts import build_system_prompt, build_messages, behaviour_state, distracted_reply
from .llm_client import ChatCompletionClient, LLMClientError, ReplyGenerator

__all__ = [
    "build_system_prompt",
    "build_messages",
    "behaviour_state",
    "distracted_reply",
    "ChatCompletionClient",
    "LLMClientError",
    "ReplyGenerator",
]
