# =============================================================================
# tests/test_workers.py - Celery Task Tests
# =============================================================================

from core.services.builder_service import BuilderService
from workers.config import CeleryConfig
from workers.tasks import process_builder_prompt


class TestProcessBuilderPrompt:
    def test_success(self, monkeypatch):
        calls = []

        def fake_submit(session_id, user_id, prompt):
            calls.append((session_id, user_id, prompt))
            return {"message": {"role": "assistant", "content": "Done"}, "change_request": None}

        monkeypatch.setattr(BuilderService, "submit_prompt", staticmethod(fake_submit))

        result = process_builder_prompt.run("session-1", "user-1", "Add a form")

        assert result["success"] is True
        assert result["message"]["content"] == "Done"
        assert calls == [("session-1", "user-1", "Add a form")]

    def test_refused_prompt_reports_code(self, db, user_id):
        session = BuilderService.start_session(user_id)
        BuilderService.end_session(session["id"], user_id)

        result = process_builder_prompt.run(session["id"], user_id, "Add a form")

        assert result["success"] is False
        assert result["code"] == "BUILDER_SESSION_ENDED"

    def test_prompts_are_not_redelivered(self):
        # A replayed prompt would append the message and file the change twice
        assert CeleryConfig.task_acks_late is False
        assert process_builder_prompt.acks_late is False
