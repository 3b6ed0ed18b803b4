"""Object storage client for uploaded deal documents.

Talks to a Supabase-compatible storage REST API. Objects are private; callers
hand out short-lived signed URLs and never persist public links.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from urllib.parse import quote

import requests

from venturescope.core.config import Config, get_config
from venturescope.core.exceptions import ConfigurationError, ExternalServiceError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.\-]")


def sanitize_file_name(file_name: str) -> str:
    return _UNSAFE_CHARS.sub("_", file_name)


def build_storage_key(org_id: int, company_id: int, file_name: str, now_ms: int | None = None) -> str:
    """Return ``{org}/{company}/{unix_ms}-{sanitized}``; the org prefix keeps tenants apart in the bucket."""
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{org_id}/{company_id}/{timestamp}-{sanitize_file_name(file_name)}"


@dataclass
class StorageClient:
    base_url: str
    service_key: str
    bucket: str
    timeout_seconds: int = 30
    max_retries: int = 2

    @classmethod
    def from_config(cls, config: Config | None = None) -> "StorageClient":
        cfg = config or get_config()
        if not cfg.STORAGE_URL or not cfg.STORAGE_SERVICE_KEY:
            raise ConfigurationError("Object storage is not configured.")
        return cls(base_url=cfg.STORAGE_URL.rstrip("/"), service_key=cfg.STORAGE_SERVICE_KEY, bucket=cfg.STORAGE_BUCKET)

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.service_key}", "apikey": self.service_key}
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def _object_url(self, *parts: str) -> str:
        return "/".join([f"{self.base_url}/storage/v1/object", *parts])

    def _request(self, operation: str, method: str, url: str, **kwargs) -> requests.Response:
        """Send with bounded retries; transport errors and 5xx are retried, 4xx fail at once."""
        last_error: Exception | None = None
        total_attempts = self.max_retries + 1
        for attempt in range(1, total_attempts + 1):
            try:
                response = requests.request(method, url, timeout=(5, self.timeout_seconds), **kwargs)
                response.raise_for_status()
                return response
            except requests.exceptions.HTTPError as exc:
                last_error = exc
                status = exc.response.status_code if exc.response is not None else None
                self._log_failure(operation, attempt, total_attempts, exc)
                if status is not None and status < 500:
                    break
            except requests.exceptions.RequestException as exc:
                last_error = exc
                self._log_failure(operation, attempt, total_attempts, exc)
            if attempt < total_attempts:
                time.sleep(min(attempt, 3))
        raise ExternalServiceError(f"Storage {operation} failed") from last_error

    @staticmethod
    def _log_failure(operation: str, attempt: int, total_attempts: int, exc: Exception) -> None:
        logger.warning(
            "storage.request.failed",
            extra={
                "event": "storage.request.failed",
                "operation": operation,
                "attempt": attempt,
                "max_attempts": total_attempts,
                "error": str(exc),
            },
        )

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        self._request(
            "upload",
            "POST",
            self._object_url(self.bucket, quote(key)),
            data=data,
            headers={**self._headers(content_type), "x-upsert": "false"},
        )
        return key

    def download(self, key: str) -> bytes:
        return self._request("download", "GET", self._object_url(self.bucket, quote(key)), headers=self._headers()).content

    def create_signed_url(self, key: str, expires_in: int) -> str:
        response = self._request(
            "sign",
            "POST",
            self._object_url("sign", self.bucket, quote(key)),
            json={"expiresIn": expires_in},
            headers=self._headers("application/json"),
        )
        signed = response.json().get("signedURL") or response.json().get("signedUrl")
        if not signed:
            raise ExternalServiceError("Storage sign returned no URL")
        return signed if signed.startswith("http") else f"{self.base_url}/storage/v1{signed}"

    def delete(self, key: str) -> None:
        self._request(
            "delete",
            "DELETE",
            self._object_url(self.bucket),
            json={"prefixes": [key]},
            headers=self._headers("application/json"),
        )


def get_storage_client() -> StorageClient:
    return StorageClient.from_config()
