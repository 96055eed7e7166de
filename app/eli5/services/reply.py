"""
Purpose: Reply Generator strategies. Given a prompt and the prior history,
return the assistant text.

Variants:
- CannedReplyGenerator: the fixed child-friendly quantum computing answer.
  This is the default; replies do not depend on input or reading level.
- DirectReplyGenerator: trusted server context holding the API key.
- ProxyReplyGenerator: untrusted context; posts to the proxy that holds the key.

select_reply_generator() picks one variant once at startup from settings.
"""

from __future__ import annotations
from typing import Optional, Sequence

import httpx

from ..config import ReplyBackend, Settings
from ..config.logging import get_logger
from ..errors import UpstreamError, classify_upstream
from ..interfaces import LLMClient, ReplyGenerator
from ..models import LLMSettings, Message
from ..prompts import DefaultPromptFactory, history_payload
from .llm_openai import OpenAILLMClient

logger = get_logger(__name__)


class CannedReplyGenerator:
    def __init__(self, prompts: Optional[DefaultPromptFactory] = None):
        self.prompts = prompts or DefaultPromptFactory()

    def generate(self, prompt: str, history: Sequence[Message]) -> str:
        return self.prompts.canned_reply()


class DirectReplyGenerator:
    def __init__(
        self,
        llm: LLMClient,
        settings: LLMSettings,
        prompts: Optional[DefaultPromptFactory] = None,
    ):
        self.llm = llm
        self.settings = settings
        self.prompts = prompts or DefaultPromptFactory()

    def generate(self, prompt: str, history: Sequence[Message]) -> str:
        messages = self.prompts.assemble(
            system=self.prompts.build_system(),
            history=history_payload(history),
            user_text=prompt,
        )
        text, meta = self.llm.chat(messages, self.settings)
        logger.info(
            "reply_generated",
            model=meta.get("model"),
            tokens_in=meta.get("tokens_in", 0),
            tokens_out=meta.get("tokens_out", 0),
        )
        return text


class ProxyReplyGenerator:
    def __init__(self, base_url: str, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=None)

    def generate(self, prompt: str, history: Sequence[Message]) -> str:
        try:
            resp = self.client.post(
                f"{self.base_url}/generate",
                json={"prompt": prompt, "history": history_payload(history)},
            )
        except httpx.HTTPError as e:
            logger.error("proxy_request_failed", url=self.base_url, error=str(e))
            raise UpstreamError(f"Proxy unreachable: {e}") from e

        if resp.is_error:
            detail = f"Proxy error: {resp.status_code} {resp.text}"
            logger.error("proxy_request_failed", url=self.base_url, status=resp.status_code)
            raise UpstreamError(detail, kind=classify_upstream(detail))

        return resp.json().get("text") or ""


def build_direct_generator(settings: Settings) -> DirectReplyGenerator:
    llm = OpenAILLMClient(settings.GEMINI_API_KEY, base_url=settings.GEMINI_BASE_URL)
    return DirectReplyGenerator(llm, LLMSettings(model=settings.GEMINI_MODEL))


def select_reply_generator(settings: Settings) -> ReplyGenerator:
    if settings.REPLY_BACKEND == ReplyBackend.CANNED:
        generator: ReplyGenerator = CannedReplyGenerator()
    elif settings.has_direct_credentials:
        generator = build_direct_generator(settings)
    else:
        generator = ProxyReplyGenerator(settings.REPLY_PROXY_URL)
    logger.info("reply_backend_selected", backend=type(generator).__name__)
    return generator
