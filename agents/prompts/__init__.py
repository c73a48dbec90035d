# =============================================================================
# agents/prompts/ - System Prompts for AI Agents
# =============================================================================
# - builder_system.py: App Builder prompt (OpenAI backend)
#
# Organized with XML tags for clear structure.
# =============================================================================

from agents.prompts.builder_system import (
    BUILDER_SYSTEM_PROMPT,
    build_builder_prompt,
)

__all__ = [
    "BUILDER_SYSTEM_PROMPT",
    "build_builder_prompt",
]
