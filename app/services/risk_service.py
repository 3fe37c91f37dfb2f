"""Outbound client for the external risk service that records resolutions."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from app.schemas.api_models import OffenseAnalysisPayload

logger = logging.getLogger(__name__)


class TokenError(RuntimeError):
    """Raised when no bearer token can be obtained for the risk service."""


class SubmissionError(RuntimeError):
    """Raised when the risk service rejects a resolution or cannot be reached."""

    def __init__(self, status_code: int, body: Any) -> None:
        super().__init__(f"Risk API error ({status_code})")
        self.status_code = status_code
        self.body = body


class TokenProvider:
    """Bearer token for the risk service.

    A configured static token wins; otherwise ``gcloud auth print-access-token``
    is asked for a fresh one on every call.
    """

    def __init__(self, static_token: str = "", gcloud_bin: str = "gcloud") -> None:
        self._static_token = static_token
        self._gcloud_bin = gcloud_bin

    async def get_token(self) -> str:
        if self._static_token:
            return self._static_token
        try:
            proc = await asyncio.create_subprocess_exec(
                self._gcloud_bin,
                "auth",
                "print-access-token",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()
        except OSError as exc:
            logger.error("Error getting gcloud token: %s", exc)
            raise TokenError(
                "Failed to get authentication token. Make sure gcloud is installed and authenticated."
            ) from exc
        token = stdout.decode().strip()
        if proc.returncode != 0 or not token:
            logger.error("Error getting gcloud token: %s", stderr.decode().strip())
            raise TokenError(
                "Failed to get authentication token. Make sure gcloud is installed and authenticated."
            )
        return token


def _parse_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"raw": response.text}


class RiskServiceClient:
    def __init__(self, url: str, http: httpx.AsyncClient, tokens: TokenProvider) -> None:
        self.url = url
        self._http = http
        self._tokens = tokens

    async def submit(self, payload: OffenseAnalysisPayload) -> Any:
        """Post a resolution and return the parsed response body.

        Raises ``SubmissionError`` on a non-2xx answer (with the service's
        status and body) or on a transport failure (status 502).
        """
        token = await self._tokens.get_token()
        try:
            response = await self._http.post(
                self.url,
                json=payload.model_dump(mode="json"),
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            logger.error("Risk API unreachable: %s", exc)
            raise SubmissionError(502, {"raw": str(exc)}) from exc

        body = _parse_body(response)
        if not response.is_success:
            logger.error("Risk API error (%d): %s", response.status_code, body)
            raise SubmissionError(response.status_code, body)
        return body

    async def aclose(self) -> None:
        await self._http.aclose()
