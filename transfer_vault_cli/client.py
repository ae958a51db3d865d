from __future__ import annotations

import logging
from typing import Any

import requests

from .models import PipelineConfig, StatusMessage

LOGGER = logging.getLogger(__name__)

FLUSH_PATH = "send-to-vault/flush"


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _error_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.reason or ""


class TransferToVaultClient:
    """Thin client for the dd-transfer-to-vault HTTP API of one pipeline."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_sec: int = 30,
        user_agent: str = "dd-transfer-to-vault-cli",
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent, "Accept": "application/json"})

    @classmethod
    def for_pipeline(cls, pipeline: PipelineConfig) -> "TransferToVaultClient":
        return cls(
            pipeline.url,
            timeout_sec=pipeline.http_client.timeout_sec,
            user_agent=pipeline.http_client.user_agent,
        )

    def _post(self, path: str) -> Any:
        url = f"{self.base_url}/{path}"
        LOGGER.debug("POST %s", url)
        try:
            response = self.session.post(url, timeout=self.timeout_sec)
        except requests.RequestException as exc:
            raise ApiError(f"Request to {url} failed: {exc}") from exc
        if not response.ok:
            detail = _error_detail(response)
            message = f"HTTP {response.status_code} from {url}"
            raise ApiError(f"{message}: {detail}" if detail else message, status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON in response from {url}") from exc

    def flush_work_to_vault(self) -> StatusMessage:
        payload = self._post(FLUSH_PATH)
        if not isinstance(payload, dict):
            raise ApiError("Unexpected response to flush request")
        return StatusMessage(message=str(payload.get("message", "")))
