# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# Background processing of AI builder prompts.
#
# Components:
# - celery_app.py: Celery application and lifecycle logging
# - tasks.py: Task definitions (process_builder_prompt)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   python scripts/start_worker.py
#
#   # Submit task (from API)
#   from workers.tasks import process_builder_prompt
#   result = process_builder_prompt.delay(session_id, user_id, prompt)
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
