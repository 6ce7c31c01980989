"""Model-assisted PII detection using OpenAI (or Azure OpenAI).

The model finds unstructured PII (names, addresses) that pattern rules
cannot. Its reply is validated against the entity schema and reduced to a
tagged outcome, ``Ok(entities)`` or ``Err(reason)``; an ``Err`` is logged
and treated as zero entities so the model is never a single point of failure
for a pipeline run.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Union

import openai
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as SchemaValidationError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .base import BaseDetector
from .prompt_builder import BasePromptBuilder, DefaultPromptBuilder
from ..errors import ModelDetectionError
from ..models.entities import ModelOrigin, PIIEntity

logger = logging.getLogger(__name__)

# Retry on transient OpenAI errors; do not retry auth or bad-request errors.
_RETRYABLE = (
    openai.RateLimitError,
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.InternalServerError,
)

_retry_policy = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    retry=retry_if_exception_type(_RETRYABLE),
    reraise=True,
    before_sleep=before_sleep_log(logger, logging.WARNING),
)


class ModelEntityPayload(BaseModel):
    """One entity as the model must report it."""

    model_config = ConfigDict(extra="forbid")

    type: str
    value: str
    start: int
    end: int
    confidence: float


class ModelReply(BaseModel):
    """Top-level reply object required by the response schema."""

    model_config = ConfigDict(extra="forbid")

    entities: List[ModelEntityPayload]


@dataclass(frozen=True)
class Ok:
    entities: List[PIIEntity]


@dataclass(frozen=True)
class Err:
    reason: str


ModelOutcome = Union[Ok, Err]


class LLMDetector(BaseDetector):
    """Detect PII with a single schema-constrained chat completion call."""

    def __init__(
        self,
        client,
        deployment_name: str,
        prompt_builder: Optional[BasePromptBuilder] = None,
        async_client=None,
        temperature: Optional[float] = None,
        timeout_seconds: float = 30.0,
    ):
        self.client = client
        self.deployment_name = deployment_name
        self.prompt_builder = prompt_builder or DefaultPromptBuilder()
        self.async_client = async_client
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds

    def detect(self, text: str) -> List[PIIEntity]:
        """Detect PII synchronously; failures yield an empty list."""
        return self._unwrap(self.analyze(text))

    async def detect_async(self, text: str) -> List[PIIEntity]:
        """Detect PII asynchronously; failures yield an empty list."""
        return self._unwrap(await self.analyze_async(text))

    def analyze(self, text: str) -> ModelOutcome:
        """Run one model call and report the outcome explicitly."""
        if not text.strip():
            return Ok([])
        ctx = self.prompt_builder.build(text)
        try:
            response = self._call_api(ctx.messages, ctx.response_format)
            return Ok(self._parse_response(response))
        except Exception as e:
            return Err(f"{type(e).__name__}: {e}")

    async def analyze_async(self, text: str) -> ModelOutcome:
        """Async variant of ``analyze``, bounded by ``timeout_seconds`` overall."""
        if not text.strip():
            return Ok([])
        if self.async_client is None:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, self.analyze, text)

        ctx = self.prompt_builder.build(text)
        try:
            response = await asyncio.wait_for(
                self._call_api_async(ctx.messages, ctx.response_format),
                timeout=self.timeout_seconds,
            )
            return Ok(self._parse_response(response))
        except asyncio.TimeoutError:
            return Err(f"model call exceeded {self.timeout_seconds}s")
        except Exception as e:
            return Err(f"{type(e).__name__}: {e}")

    @_retry_policy
    def _call_api(self, messages: List[dict], response_format: dict):
        """Call OpenAI synchronously with retry on transient errors."""
        return self.client.chat.completions.create(**self._request_kwargs(messages, response_format))

    @_retry_policy
    async def _call_api_async(self, messages: List[dict], response_format: dict):
        """Call OpenAI asynchronously with retry on transient errors."""
        return await self.async_client.chat.completions.create(
            **self._request_kwargs(messages, response_format)
        )

    def _request_kwargs(self, messages: List[dict], response_format: dict) -> dict:
        kwargs = dict(
            model=self.deployment_name,
            messages=messages,
            response_format=response_format,
            timeout=self.timeout_seconds,
        )
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        return kwargs

    def _parse_response(self, response) -> List[PIIEntity]:
        """Validate the model reply against the entity schema.

        Raises:
            ModelDetectionError: Empty reply or any schema violation.
        """
        if not response.choices:
            raise ModelDetectionError("model returned no choices")
        content = response.choices[0].message.content
        if not content:
            raise ModelDetectionError("model returned empty content")

        try:
            reply = ModelReply.model_validate_json(content)
        except SchemaValidationError as e:
            raise ModelDetectionError(
                f"reply does not match entity schema ({e.error_count()} errors)"
            ) from e

        return [
            PIIEntity(
                type=item.type.strip().upper(),
                value=item.value,
                start=item.start,
                end=item.end,
                confidence=max(0.0, min(1.0, item.confidence)),
                origin=ModelOrigin(raw_confidence=item.confidence),
            )
            for item in reply.entities
        ]

    @staticmethod
    def _unwrap(outcome: ModelOutcome) -> List[PIIEntity]:
        if isinstance(outcome, Err):
            logger.warning("Model PII detection failed, continuing with pattern results: %s", outcome.reason)
            return []
        logger.info("Model reported %d PII entities", len(outcome.entities))
        return outcome.entities
