# src/pomofocus/llm/client.py

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
import openai
from openai import OpenAI

from ..core.ports import ChatMessage
from ..errors import NetworkError

logger = logging.getLogger(__name__)


def _is_auth_error(exc: Exception) -> bool:
    return isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError))


def _is_rate_limit_error(exc: Exception) -> bool:
    return isinstance(exc, openai.RateLimitError)


def _is_connection_error(exc: Exception) -> bool:
    # APITimeoutError is a subclass of APIConnectionError.
    return isinstance(exc, openai.APIConnectionError)


def _is_not_found_error(exc: Exception) -> bool:
    return isinstance(exc, openai.NotFoundError)


def _wrap_error(exc: Exception, model: str) -> NetworkError:
    if _is_auth_error(exc):
        return NetworkError(
            "LLM authentication failed. Check your API key (POMOFOCUS_OPENAI_API_KEY).",
            {"model": model},
        )
    if _is_rate_limit_error(exc):
        return NetworkError("LLM is rate-limited. Try again later.", {"model": model})
    if _is_connection_error(exc):
        return NetworkError("LLM network/timeout error. Try again later.", {"model": model})
    if _is_not_found_error(exc):
        return NetworkError(f"LLM model not available: {model}", {"model": model})
    return NetworkError(f"LLM request failed ({exc.__class__.__name__}).", {"model": model})


class OpenAILLMClient:
    """
    OpenAI-compatible chat completion client.

    IMPORTANT:
    - The API key is checked at construction, so bootstrap can fall back to
      the offline client when none is configured.
    - SDK retries are disabled: a failed call is reported once, never repeated.
    """

    def __init__(self, settings: Any) -> None:
        api_key = getattr(settings, "openai_api_key", None)
        if not api_key or not str(api_key).strip():
            raise RuntimeError("LLM API key is not set. Set POMOFOCUS_OPENAI_API_KEY in your .env.")

        base_url = getattr(settings, "openai_base_url", None) or None
        connect_s = float(getattr(settings, "llm_connect_timeout", 5.0))
        read_s = float(getattr(settings, "llm_read_timeout", 60.0))

        self._default_model = str(getattr(settings, "chat_model", "gpt-3.5-turbo"))
        self._client = OpenAI(
            api_key=str(api_key),
            base_url=base_url,
            timeout=httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s),
            max_retries=0,
        )

    def complete(
        self,
        messages: list[ChatMessage],
        system_prompt: str,
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> str:
        model = (model or self._default_model).strip()
        logger.info("LLM: request model=%s messages=%d", model, len(messages))
        t0 = time.monotonic()

        try:
            completion = self._client.chat.completions.create(
                model=model,
                messages=[{"role": "system", "content": system_prompt}, *messages],
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.OpenAIError as e:
            logger.warning("LLM: error on model=%s (%s)", model, e.__class__.__name__)
            raise _wrap_error(e, model) from e

        content = ""
        if completion.choices:
            content = completion.choices[0].message.content or ""
        elapsed = time.monotonic() - t0
        logger.info("LLM: reply from model=%s (%.2fs, %d chars)", model, elapsed, len(content))
        return content


def friendly_llm_error_message(err: Exception) -> str:
    msg = str(err).strip() or "LLM error."
    if "LLM API key is not set" in msg:
        return "LLM is not configured (missing API key). Set POMOFOCUS_OPENAI_API_KEY in .env (see config.example.py)."
    return msg
