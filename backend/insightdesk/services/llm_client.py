"""Provider-agnostic completion client for the grounded analyst.

Supported providers (selected via settings.llm_provider):
  - "openai"     - OpenAI chat completions (gpt-4o-mini by default)
  - "anthropic"  - Anthropic Claude
  - "ollama"     - Local Ollama
  - "mock"       - Deterministic answers built from the supplied context

If no valid key/endpoint is found the client falls back to the mock, so the
analyst endpoint still answers (from context only) without credentials.

Usage
-----
    client = get_llm_client()
    text = await client.invoke(system_prompt, message, user_id=user_id)
"""

from __future__ import annotations

import logging
import time
import uuid

from fastapi.concurrency import run_in_threadpool

from insightdesk.config import settings
from insightdesk.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

_LLM_LOG_MAX_CHARS = 4000

# Header line in the system prompt that precedes the data context block.
CONTEXT_MARKER = "Current User Data Context:"
NO_DATA_ANSWER = (
    "I don't have that data yet. Connect a data source such as Stripe, Shopify or "
    "Google Analytics and I'll be able to answer questions about it."
)


# ── LLM adapter base ──────────────────────────────────────────────────


class BaseLLMAdapter:
    provider: str = "base"
    model: str = "unknown"

    async def _raw_invoke(self, system_prompt: str, message: str) -> str:
        raise NotImplementedError

    async def invoke(
        self,
        system_prompt: str,
        message: str,
        user_id: str | None = None,
    ) -> str:
        call_id = uuid.uuid4().hex[:8]
        start = time.perf_counter()
        logger.info(
            "LLM request id=%s provider=%s model=%s prompt_len=%d message_len=%d",
            call_id,
            self.provider,
            self.model,
            len(system_prompt),
            len(message),
        )
        try:
            response = await self._raw_invoke(system_prompt, message)
        except Exception as exc:
            elapsed = int((time.perf_counter() - start) * 1000)
            logger.exception(
                "LLM error id=%s provider=%s model=%s elapsed_ms=%d",
                call_id,
                self.provider,
                self.model,
                elapsed,
            )
            await run_in_threadpool(
                _persist_llm_log,
                call_id,
                user_id,
                self.provider,
                self.model,
                system_prompt,
                message,
                None,
                "error",
                elapsed,
                str(exc),
            )
            raise ExternalServiceError("Failed to get AI response") from exc

        elapsed = int((time.perf_counter() - start) * 1000)
        if not response:
            await run_in_threadpool(
                _persist_llm_log,
                call_id,
                user_id,
                self.provider,
                self.model,
                system_prompt,
                message,
                None,
                "error",
                elapsed,
                "empty completion",
            )
            raise ExternalServiceError("Failed to get AI response")

        logger.info(
            "LLM response id=%s provider=%s elapsed_ms=%d response_len=%d",
            call_id,
            self.provider,
            elapsed,
            len(response),
        )
        await run_in_threadpool(
            _persist_llm_log,
            call_id,
            user_id,
            self.provider,
            self.model,
            system_prompt,
            message,
            response,
            "success",
            elapsed,
            None,
        )
        return response


# ── OpenAI adapter ────────────────────────────────────────────────────


class OpenAIAdapter(BaseLLMAdapter):
    provider = "openai"

    def __init__(self):
        from openai import AsyncOpenAI

        self.model = settings.openai_model or "gpt-4o-mini"
        kwargs: dict = {
            "api_key": settings.openai_api_key,
            "timeout": settings.llm_timeout_seconds,
            "max_retries": 0,
        }
        if settings.openai_base_url:
            kwargs["base_url"] = settings.openai_base_url
            logger.info("OpenAI using custom base_url: %s", settings.openai_base_url)
        self._client = AsyncOpenAI(**kwargs)

    async def _raw_invoke(self, system_prompt: str, message: str) -> str:
        resp = await self._client.chat.completions.create(
            model=self.model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": message},
            ],
        )
        return resp.choices[0].message.content or ""


# ── Anthropic adapter ─────────────────────────────────────────────────


class AnthropicAdapter(BaseLLMAdapter):
    provider = "anthropic"

    def __init__(self):
        from anthropic import AsyncAnthropic

        self.model = settings.anthropic_model or "claude-3-5-sonnet-20241022"
        self._client = AsyncAnthropic(
            api_key=settings.anthropic_api_key,
            timeout=settings.llm_timeout_seconds,
            max_retries=0,
        )

    async def _raw_invoke(self, system_prompt: str, message: str) -> str:
        msg = await self._client.messages.create(
            model=self.model,
            system=system_prompt,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            messages=[{"role": "user", "content": message}],
        )
        return msg.content[0].text if msg.content else ""


# ── Ollama adapter ────────────────────────────────────────────────────


class OllamaAdapter(BaseLLMAdapter):
    provider = "ollama"

    def __init__(self):
        self.model = settings.ollama_model or "llama3"
        self._base_url = (settings.ollama_base_url or "http://localhost:11434").rstrip(
            "/"
        )

    async def _raw_invoke(self, system_prompt: str, message: str) -> str:
        import httpx

        async with httpx.AsyncClient() as client:
            r = await client.post(
                f"{self._base_url}/api/chat",
                json={
                    "model": self.model,
                    "stream": False,
                    "messages": [
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": message},
                    ],
                    "options": {
                        "temperature": settings.llm_temperature,
                        "num_predict": settings.llm_max_tokens,
                    },
                },
                timeout=settings.llm_timeout_seconds,
            )
            if r.status_code != 200:
                raise RuntimeError(f"Ollama error {r.status_code}: {r.text[:200]}")
            return (r.json().get("message") or {}).get("content") or ""


# ── Mock adapter (no credentials) ────────────────────────────────────


class MockAdapter(BaseLLMAdapter):
    provider = "mock"
    model = "mock"

    async def _raw_invoke(self, system_prompt: str, message: str) -> str:
        facts = _context_facts(system_prompt)
        if not facts:
            return NO_DATA_ANSWER
        return "Here is what I can see in your connected data:\n" + "\n".join(facts)


def _context_facts(system_prompt: str) -> list[str]:
    """Bullet lines of the data context block embedded in the system prompt."""
    _, found, block = system_prompt.partition(CONTEXT_MARKER)
    if not found:
        return []
    return [line for line in block.splitlines() if line.startswith("- ")]


# ── Factory ───────────────────────────────────────────────────────────

_cached_client: BaseLLMAdapter | None = None


def get_llm_client() -> BaseLLMAdapter:
    global _cached_client
    if _cached_client is not None:
        return _cached_client

    provider = (settings.llm_provider or "openai").lower()

    if provider == "mock":
        _cached_client = MockAdapter()
    elif provider == "ollama":
        logger.info(
            "LLM client: Ollama model=%s base=%s",
            settings.ollama_model,
            settings.ollama_base_url,
        )
        _cached_client = OllamaAdapter()
    elif provider == "anthropic" and settings.anthropic_api_key:
        logger.info("LLM client: Anthropic model=%s", settings.anthropic_model)
        _cached_client = AnthropicAdapter()
    elif settings.openai_api_key:
        logger.info("LLM client: OpenAI model=%s", settings.openai_model)
        _cached_client = OpenAIAdapter()
    elif settings.anthropic_api_key:
        logger.info("LLM client: Anthropic (fallback) model=%s", settings.anthropic_model)
        _cached_client = AnthropicAdapter()
    else:
        logger.warning("No LLM credentials found - using context-only MockAdapter.")
        _cached_client = MockAdapter()

    return _cached_client


def reset_llm_client() -> None:
    """Force re-initialisation on next call (useful after config change in tests)."""
    global _cached_client
    _cached_client = None


# ── LLM log persistence (best effort) ─────────────────────────────────


def _persist_llm_log(
    call_id: str,
    user_id: str | None,
    provider: str,
    model: str,
    system_prompt: str,
    message: str,
    response: str | None,
    status: str,
    elapsed_ms: int,
    error_message: str | None,
) -> None:
    from sqlalchemy.exc import SQLAlchemyError

    from insightdesk.database import SessionLocal
    from insightdesk.models.llm_log import LlmLog

    db = SessionLocal()
    try:
        row = LlmLog(
            callId=call_id,
            userId=user_id,
            provider=provider,
            model=model,
            systemPrompt=system_prompt[:_LLM_LOG_MAX_CHARS],
            message=message[:_LLM_LOG_MAX_CHARS],
            response=response[:_LLM_LOG_MAX_CHARS] if response else None,
            status=status,
            elapsedMs=elapsed_ms,
            errorMessage=error_message,
        )
        db.add(row)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to persist LLM log")
    finally:
        db.close()
