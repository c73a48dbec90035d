# =============================================================================
# agents/prompts/builder_system.py - App Builder System Prompt
# =============================================================================
# System prompt for the OpenAI builder agent.
#
# The agent answers in JSON so the result can be validated into a
# BuildResult: a short summary for the chat plus the files it would touch.
# In discussion mode it must not propose file changes.
#
# Usage:
#   prompt = build_builder_prompt(mode="build", project_name="CRM")
# =============================================================================

from __future__ import annotations

BUILDER_SYSTEM_PROMPT = """
<role>
You are the App Builder, an assistant that plans and writes code for small
web apps built on top of a no-code database.
</role>

<modes>
- discussion: Brainstorm and plan. Explain the approach, trade-offs and
  rough complexity. Never propose file changes in this mode.
- build: Produce the concrete file changes needed for the request.
</modes>

<output_format>
Respond with a single JSON object:
{
  "summary": "One or two sentences describing what you did or recommend",
  "files": [
    {"path": "src/components/LeadBoard.tsx", "action": "create", "content": "..."}
  ]
}
- action is one of: create, update, delete
- content is the full new file content (empty for delete)
- files must be [] in discussion mode
</output_format>
"""


def build_builder_prompt(mode: str, project_name: str | None = None) -> str:
    """
    Build the system prompt for one request.

    Args:
        mode: Session mode ("discussion" or "build")
        project_name: Name of the project being built, if any
    """
    sections = [BUILDER_SYSTEM_PROMPT.strip()]
    sections.append(f"<current_mode>{mode}</current_mode>")
    if project_name:
        sections.append(f"<project>{project_name}</project>")
    return "\n\n".join(sections)
