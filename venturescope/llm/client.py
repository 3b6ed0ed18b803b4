"""HTTP client for the hosted Messages API with bounded retry."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from time import perf_counter

import requests

from venturescope.core.config import Config, get_config
from venturescope.core.exceptions import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)

API_VERSION = "2023-06-01"


@dataclass(frozen=True)
class LLMMessage:
    role: str
    content: str


@dataclass(frozen=True)
class LLMResult:
    text: str
    model_name: str
    tokens_used: int
    latency_ms: int


class LLMClient:
    """Sends one conversation per call; retries transport and 5xx failures only."""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or get_config()

    def complete(
        self,
        messages: list[LLMMessage],
        model: str,
        max_tokens: int,
        system: str | None = None,
    ) -> LLMResult:
        if not self.config.LLM_API_KEY:
            raise ConfigurationError("LLM_API_KEY is not configured.")

        payload: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [{"role": message.role, "content": message.content} for message in messages],
        }
        if system:
            payload["system"] = system
        headers = {
            "x-api-key": self.config.LLM_API_KEY,
            "anthropic-version": API_VERSION,
            "content-type": "application/json",
        }

        last_error: Exception | None = None
        total_attempts = self.config.LLM_MAX_RETRIES + 1
        started = perf_counter()
        for attempt in range(1, total_attempts + 1):
            try:
                response = requests.post(
                    self.config.LLM_API_URL,
                    json=payload,
                    headers=headers,
                    timeout=(5, self.config.LLM_TIMEOUT_SECONDS),
                )
                response.raise_for_status()
                return self._parse(response.json(), model=model, started=started)
            except requests.exceptions.HTTPError as exc:
                last_error = exc
                status = exc.response.status_code if exc.response is not None else None
                self._log_failure(attempt, total_attempts, exc)
                if status is not None and status < 500:
                    break
            except (requests.exceptions.RequestException, ValueError) as exc:
                last_error = exc
                self._log_failure(attempt, total_attempts, exc)
            if attempt < total_attempts:
                time.sleep(min(2 * attempt, 5))

        logger.error(
            "llm.call.unavailable",
            extra={
                "event": "llm.call.unavailable",
                "model": model,
                "error": str(last_error) if last_error else "unknown",
            },
        )
        raise ExternalServiceError("Language model request failed")

    @staticmethod
    def _parse(body: dict, model: str, started: float) -> LLMResult:
        text_blocks = [block.get("text", "") for block in body.get("content", []) if block.get("type") == "text"]
        if not text_blocks:
            raise ExternalServiceError("No text response from language model")
        usage = body.get("usage") or {}
        return LLMResult(
            text=text_blocks[0],
            model_name=body.get("model", model),
            tokens_used=int(usage.get("input_tokens", 0)) + int(usage.get("output_tokens", 0)),
            latency_ms=int((perf_counter() - started) * 1000),
        )

    @staticmethod
    def _log_failure(attempt: int, total_attempts: int, exc: Exception) -> None:
        logger.warning(
            "llm.call.failed",
            extra={
                "event": "llm.call.failed",
                "attempt": attempt,
                "attempts_total": total_attempts,
                "error": str(exc),
            },
        )


def get_llm_client() -> LLMClient:
    return LLMClient()
