"""HTTP transport to the upstream chat endpoint.

The client opens one streaming POST per attempt and forwards the upstream's
SSE ``data:`` lines as ``TransportEvent`` values. It knows nothing about the
payload format; decoding and classification happen in ``src.conversion``.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Any

import httpx

from src.core.config import mask_secret
from src.core.exceptions import TransportError

logger = logging.getLogger(__name__)

CHAT_PATH = "/v2/beta/chat"

# SSE field prefixes that carry no payload for us
_IGNORED_SSE_PREFIXES = (":", "event:", "id:", "retry:")


@dataclass(frozen=True, slots=True)
class TransportEvent:
    """One raw frame from the upstream.

    ``done`` marks the terminal frame of a non-2xx response, whose ``data``
    is the full response body.
    """

    data: str
    done: bool = False
    status: int = 200


def encode_credential(credential: str) -> str:
    return base64.b64encode(credential.encode("utf-8")).decode("ascii")


def build_auth_headers(credential: str) -> dict[str, str]:
    encoded = encode_credential(credential)
    return {
        "Authorization": f"Basic {encoded}",
        "X-Atlassian-EncodedToken": encoded,
        "Content-Type": "application/json",
        "Accept": "text/event-stream",
    }


class UpstreamClient:
    """Async client for the upstream streaming chat API."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 600,
        connect_timeout: float = 30,
        read_timeout: float | None = None,
        proxy_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        # read=None leaves long-running streams open until the overall deadline
        client_kwargs: dict[str, Any] = {
            "timeout": httpx.Timeout(timeout, connect=connect_timeout, read=read_timeout),
        }
        if proxy_url:
            client_kwargs["proxy"] = proxy_url
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)

    @classmethod
    def from_config(cls, cfg: Any) -> UpstreamClient:
        return cls(
            cfg.upstream_base_url,
            timeout=cfg.request_timeout,
            connect_timeout=cfg.streaming_connect_timeout,
            read_timeout=cfg.streaming_read_timeout,
            proxy_url=cfg.proxy_url,
        )

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}{CHAT_PATH}"

    async def stream_chat(
        self, body: dict[str, Any], credential: str
    ) -> AsyncGenerator[TransportEvent, None]:
        """POST ``body`` with ``credential`` and yield raw frames in arrival order.

        Raises:
            TransportError: If the connection fails or times out.
        """
        logger.debug(f"Opening upstream stream with credential {mask_secret(credential)}")
        try:
            async with self._client.stream(
                "POST",
                self.chat_url,
                json=body,
                headers=build_auth_headers(credential),
            ) as response:
                if not response.is_success:
                    await response.aread()
                    logger.debug(f"Upstream returned HTTP {response.status_code}")
                    yield TransportEvent(
                        data=response.text, done=True, status=response.status_code
                    )
                    return

                async for line in response.aiter_lines():
                    stripped = line.strip()
                    if not stripped or stripped.startswith(_IGNORED_SSE_PREFIXES):
                        continue
                    yield TransportEvent(data=stripped, status=response.status_code)
        except httpx.TimeoutException as e:
            raise TransportError(f"Upstream request timed out: {e}", timeout=True) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Upstream connection failed: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()
