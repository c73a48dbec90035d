# =============================================================================
# agents/ - AI Agent Definitions
# =============================================================================
# This package contains the app builder agents:
# - builder.py: BuilderAgent interface, placeholder and OpenAI backends
#
# Prompts:
# - prompts/builder_system.py: System prompt for the OpenAI backend
# =============================================================================

from agents.builder import (
    BuilderAgent,
    BuilderError,
    BuildRequest,
    BuildResult,
    OpenAIBuilderAgent,
    PlaceholderBuilderAgent,
    get_builder_agent,
)

__all__ = [
    "BuilderAgent",
    "BuilderError",
    "BuildRequest",
    "BuildResult",
    "OpenAIBuilderAgent",
    "PlaceholderBuilderAgent",
    "get_builder_agent",
]
