# =============================================================================
# agents/builder.py - App Builder Agents
# =============================================================================
# The builder turns a chat prompt into a summary and a list of file changes.
# Generation sits behind one interface so the service never changes with
# the backend:
#
#   BuilderAgent.submit(BuildRequest) -> Future[BuildResult]
#
# Implementations:
# - PlaceholderBuilderAgent: no generation, answers at once (default)
# - OpenAIBuilderAgent: chat completion in JSON mode, run on a thread pool
#
# Selected by settings.BUILDER_BACKEND via get_builder_agent().
# =============================================================================

from __future__ import annotations

import json
import logging
import math
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from app.config import settings
from agents.prompts.builder_system import build_builder_prompt
from core.models.builder import FileChange, SessionMode
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)

# USD per 1K tokens (prompt, completion)
MODEL_PRICING: dict[str, tuple[float, float]] = {
    "gpt-4": (0.03, 0.06),
    "gpt-4-turbo": (0.01, 0.03),
    "gpt-4o": (0.005, 0.015),
    "gpt-4o-mini": (0.00015, 0.0006),
}

# Summaries of change requests keep this much of the prompt
SUMMARY_PROMPT_CHARS = 100


# =============================================================================
# Exceptions
# =============================================================================

class BuilderError(ApplicationError):
    """Error while generating a build result."""

    def __init__(
        self,
        message: str,
        code: str = "BUILDER_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)


# =============================================================================
# Request / Result
# =============================================================================

class BuildRequest(BaseModel):
    """One prompt sent to a builder agent."""
    session_id: str
    user_id: str
    project_id: str | None = None
    project_name: str | None = None
    mode: SessionMode
    prompt: str
    history: list[dict[str, str]] = Field(
        default_factory=list,
        description="Earlier messages as {role, content}, oldest first"
    )


class BuildResult(BaseModel):
    """What a builder agent produced for one prompt."""
    summary: str
    files: list[FileChange] = Field(default_factory=list)
    model: str = "placeholder"
    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    latency_ms: int = Field(default=0, ge=0)

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    @property
    def cost_usd(self) -> float:
        return estimate_cost(self.model, self.prompt_tokens, self.completion_tokens)

    def diff(self) -> dict[str, Any]:
        """Change request diff: {"files": [{path, action, content}, ...]}."""
        return {"files": [f.model_dump() for f in self.files]}


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four characters."""
    return math.ceil(len(text) / 4)


def estimate_cost(model: str, prompt_tokens: int, completion_tokens: int) -> float:
    """USD cost of one call; 0 for models without a known price."""
    prompt_price, completion_price = MODEL_PRICING.get(model, (0.0, 0.0))
    cost = prompt_tokens / 1000 * prompt_price + completion_tokens / 1000 * completion_price
    return round(cost, 6)


# =============================================================================
# Interface
# =============================================================================

class BuilderAgent(ABC):
    """
    Turns a BuildRequest into a BuildResult.

    submit() must not block on generation; callers wait on the Future with
    their own timeout.
    """

    name: str = "builder"

    @abstractmethod
    def submit(self, request: BuildRequest) -> Future[BuildResult]:
        ...


class PlaceholderBuilderAgent(BuilderAgent):
    """
    Builder without generation.

    Answers immediately with a summary derived from the prompt and no file
    changes. Token counts are estimated so usage logging still has numbers.
    """

    name = "placeholder"

    def submit(self, request: BuildRequest) -> Future[BuildResult]:
        excerpt = request.prompt[:SUMMARY_PROMPT_CHARS]
        if request.mode == SessionMode.BUILD:
            summary = f"Implementing: {excerpt}"
        else:
            summary = (
                f'I understand you want to: "{excerpt}". '
                "Switch to Build Mode when you're ready to turn this into a change request."
            )

        future: Future[BuildResult] = Future()
        future.set_result(BuildResult(
            summary=summary,
            files=[],
            model=self.name,
            prompt_tokens=estimate_tokens(request.prompt),
            completion_tokens=estimate_tokens(summary),
            latency_ms=0,
        ))
        return future


class OpenAIBuilderAgent(BuilderAgent):
    """
    Builder backed by an OpenAI chat completion in JSON mode.

    Example:
        agent = OpenAIBuilderAgent()
        result = agent.submit(request).result(timeout=60)
        print(result.summary, [f.path for f in result.files])
    """

    name = "openai"

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        max_history: int | None = None,
        max_workers: int = 4,
    ):
        from openai import OpenAI

        if not settings.OPENAI_API_KEY:
            raise BuilderError(
                message="OPENAI_API_KEY is not set",
                code="OPENAI_NOT_CONFIGURED",
                suggestion="Set OPENAI_API_KEY or use BUILDER_BACKEND=placeholder",
            )

        self.client = OpenAI(api_key=settings.OPENAI_API_KEY)
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature if temperature is not None else settings.BUILDER_TEMPERATURE
        self.max_history = max_history if max_history is not None else settings.BUILDER_MAX_HISTORY
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="builder")

        logger.info(f"OpenAIBuilderAgent initialized with model={self.model}, temp={self.temperature}")

    def submit(self, request: BuildRequest) -> Future[BuildResult]:
        return self._executor.submit(self._generate, request)

    def _build_messages(self, request: BuildRequest) -> list[dict[str, str]]:
        messages = [{
            "role": "system",
            "content": build_builder_prompt(request.mode.value, request.project_name),
        }]
        if self.max_history:
            messages.extend(
                {"role": m["role"], "content": m["content"]}
                for m in request.history[-self.max_history:]
            )
        messages.append({"role": "user", "content": request.prompt})
        return messages

    def _generate(self, request: BuildRequest) -> BuildResult:
        started = time.monotonic()

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                response_format={"type": "json_object"},
                messages=self._build_messages(request),
            )
            response_text = response.choices[0].message.content or ""
            logger.debug(f"OpenAI response: {response_text[:200]}...")

        except Exception as e:
            raise BuilderError(
                message=f"OpenAI API call failed: {e}",
                code="OPENAI_ERROR",
                suggestion="Check your OPENAI_API_KEY and network connection",
                details={"model": self.model}
            )

        latency_ms = int((time.monotonic() - started) * 1000)
        data = self._parse_response(response_text)

        if request.mode == SessionMode.DISCUSSION:
            # Discussion never changes the app
            data["files"] = []

        usage = getattr(response, "usage", None)
        try:
            return BuildResult(
                summary=data.get("summary") or "",
                files=data.get("files") or [],
                model=self.model,
                prompt_tokens=getattr(usage, "prompt_tokens", None) or 0,
                completion_tokens=getattr(usage, "completion_tokens", None) or 0,
                latency_ms=latency_ms,
            )
        except ValidationError as e:
            errors = [f"{err['loc']}: {err['msg']}" for err in e.errors()]
            raise BuilderError(
                message=f"Invalid build result: {'; '.join(errors)}",
                code="VALIDATION_ERROR",
                suggestion="The model's JSON was missing summary or file fields. Try rephrasing.",
                details={"raw_data": data}
            )

    @staticmethod
    def _parse_response(response_text: str) -> dict[str, Any]:
        try:
            data = json.loads(response_text)
        except json.JSONDecodeError as e:
            raise BuilderError(
                message=f"Invalid JSON response from model: {e}",
                code="JSON_PARSE_ERROR",
                suggestion="The model didn't return valid JSON. Try rephrasing your request.",
                details={"raw_response": response_text[:500]}
            )
        if not isinstance(data, dict):
            raise BuilderError(
                message="Model returned JSON that isn't an object",
                code="JSON_PARSE_ERROR",
                details={"raw_response": response_text[:500]}
            )
        return data


# =============================================================================
# Factory
# =============================================================================

# Lazy-loaded agent (one per process)
_agent: BuilderAgent | None = None


def get_builder_agent() -> BuilderAgent:
    """Get or create the agent selected by BUILDER_BACKEND."""
    global _agent
    if _agent is None:
        if settings.BUILDER_BACKEND == "openai":
            _agent = OpenAIBuilderAgent()
        else:
            _agent = PlaceholderBuilderAgent()
        logger.info(f"Using {_agent.name} builder agent")
    return _agent
