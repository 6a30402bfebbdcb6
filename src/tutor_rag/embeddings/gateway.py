"""Client for the OpenAI-compatible AI gateway used by the remote tiers.

Both remote tiers send a system instruction plus the text as a chat
completion and expect a JSON array back in the message content.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx

from tutor_rag.exceptions import GatewayError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://ai.gateway.lovable.dev/v1"
DEFAULT_MODEL = "google/gemini-2.5-flash-lite"

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```")
_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def extract_json_array(content: str) -> list[Any]:
    """Pull the first JSON array out of a model reply.

    Markdown code fences are stripped first.

    Raises:
        ValueError: If no array is present or it does not parse.
    """
    cleaned = _CODE_FENCE_RE.sub("", content).strip()
    match = _JSON_ARRAY_RE.search(cleaned)
    if match is None:
        raise ValueError("no JSON array in gateway reply")

    parsed = json.loads(match.group(0))
    if not isinstance(parsed, list):
        raise ValueError("gateway reply is not a JSON array")
    return parsed


class GatewayClient:
    """Send chat completions to the AI gateway over ``httpx``."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.1,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._api_key = api_key
        self._transport = transport

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def complete(self, system: str, user: str, timeout: float | None = None) -> str:
        """Return the assistant message content for one system/user exchange.

        Raises:
            GatewayError: On transport errors, non-2xx responses, or a body
                without ``choices[0].message.content``.
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": self.temperature,
        }

        try:
            async with self._client(timeout) as client:
                resp = await client.post("/chat/completions", json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise GatewayError(
                f"Gateway returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise GatewayError(f"Gateway request failed: {exc!r}") from exc
        except ValueError as exc:
            raise GatewayError("Gateway returned a non-JSON body") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GatewayError("Gateway response has no message content") from exc

        if not isinstance(content, str):
            raise GatewayError("Gateway message content is not text")
        return content

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _client(self, timeout: float | None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout if timeout is not None else self.timeout,
            transport=self._transport,
        )
