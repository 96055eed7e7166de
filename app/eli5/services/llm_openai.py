"""
Purpose: Thin client wrapper around the OpenAI SDK, pointed at Gemini's
OpenAI-compatible endpoint. One place for auth, retries, model options,
response/usage normalization and error classification.

Extensibility:
- Any OpenAI-compatible provider works by changing base_url/model.

Testing: Mock SDK calls; assert it maps usage and errors correctly.
"""

from __future__ import annotations
import time
from typing import Optional, Sequence

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AuthenticationError,
    OpenAI,
    PermissionDeniedError,
    RateLimitError,
)

from ..config.logging import get_logger
from ..errors import (
    INVALID_CREDENTIAL,
    PERMISSION_DENIED,
    QUOTA_EXCEEDED,
    UpstreamError,
    classify_upstream,
)
from ..models import LLMSettings

logger = get_logger(__name__)


class OpenAILLMClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: Optional[str] = None,
        retry_delays: Sequence[float] = (0.5, 1.0, 2.0),
        client: Optional[OpenAI] = None,
    ):
        self.api_key = api_key
        if not self.api_key:
            raise UpstreamError(
                "Missing GEMINI_API_KEY", kind=INVALID_CREDENTIAL
            )
        self.retry_delays = tuple(retry_delays)
        self.client = client or OpenAI(api_key=self.api_key, base_url=base_url)

    def _with_retries(self, fn, *args, **kwargs):
        for delay in self.retry_delays:
            try:
                return fn(*args, **kwargs)
            except (APITimeoutError, APIConnectionError):
                time.sleep(delay)
        return fn(*args, **kwargs)

    def chat(
        self,
        messages: list[dict[str, str]],
        settings: LLMSettings,
        system: Optional[str] = None,
    ) -> tuple[str, dict]:
        payload = []
        if system:
            payload.append({"role": "system", "content": system})
        payload.extend(messages)

        def call_cc():
            return self.client.chat.completions.create(
                model=settings.model,
                messages=payload,
                temperature=settings.temperature,
                top_p=settings.top_p,
                max_tokens=settings.max_tokens,
            )

        try:
            cc = self._with_retries(call_cc)
        except AuthenticationError as e:
            raise UpstreamError(str(e), kind=INVALID_CREDENTIAL) from e
        except PermissionDeniedError as e:
            raise UpstreamError(str(e), kind=PERMISSION_DENIED) from e
        except RateLimitError as e:
            raise UpstreamError(str(e), kind=QUOTA_EXCEEDED) from e
        except APIError as e:
            logger.error("llm_request_failed", model=settings.model, error=str(e))
            raise UpstreamError(str(e), kind=classify_upstream(str(e))) from e

        text = cc.choices[0].message.content or ""
        usage = getattr(cc, "usage", None)
        tokens_in = getattr(usage, "prompt_tokens", 0) if usage else 0
        tokens_out = getattr(usage, "completion_tokens", 0) if usage else 0
        return text, {
            "model": cc.model,
            "tokens_in": tokens_in,
            "tokens_out": tokens_out,
        }

