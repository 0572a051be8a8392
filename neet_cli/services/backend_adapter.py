"""Chat-completion backend adapter shared by every configured provider."""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ..config.providers import ProviderConfig
from ..core.errors import NetworkError, ProtocolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderReply:
    """Normalized provider answer.

    ``content`` is None when a 2xx response carried no extractable reply.
    """

    content: Optional[str]
    status_code: int = 200
    model: Optional[str] = None

    @property
    def has_content(self) -> bool:
        return bool(self.content)


NO_CONTENT = ProviderReply(content=None)


def build_payload(prompt_text: str, provider: ProviderConfig) -> Dict[str, Any]:
    """Build a single-turn chat completion request body.

    Only the current prompt is sent; no earlier transcript entries.
    """
    payload: Dict[str, Any] = {
        "model": provider.model_name,
        "messages": [{"role": "user", "content": prompt_text}],
    }
    if provider.temperature is not None:
        payload["temperature"] = provider.temperature
    if provider.max_tokens is not None:
        payload["max_tokens"] = provider.max_tokens
    return payload


def build_headers(credential: str, provider: ProviderConfig) -> Dict[str, str]:
    """Build request headers using the provider's auth convention."""
    scheme = provider.auth_scheme.strip()
    auth_value = f"{scheme} {credential}" if scheme else credential
    return {
        "Content-Type": "application/json",
        provider.auth_header: auth_value,
    }


def extract_content(body: Any) -> Optional[str]:
    """Pull ``choices[0].message.content`` out of a response body."""
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(content, str) or not content:
        return None
    return content


class BackendAdapter:
    """Sends prompts to an OpenAI-style chat completions endpoint.

    Provider differences (endpoint, model, sampling parameters, auth header
    and cache-busting) come from ``ProviderConfig``; control flow is shared.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the adapter.

        Args:
            timeout: Request timeout in seconds (None waits indefinitely)
            transport: Optional httpx transport, used to stub the network
        """
        self.timeout = timeout
        self._transport = transport

    async def complete(
        self, prompt_text: str, credential: str, provider: ProviderConfig
    ) -> ProviderReply:
        """Send one prompt and return the normalized reply.

        Args:
            prompt_text: The user's trimmed message
            credential: API key for the provider
            provider: Provider configuration

        Returns:
            ProviderReply, possibly without content

        Raises:
            NetworkError: On transport failure; message is the transport's
            ProtocolError: On a non-2xx HTTP status
        """
        params = {}
        if provider.cache_bust:
            params["t"] = str(int(time.time() * 1000))

        logger.debug(
            "Sending completion request to %s (model=%s)",
            provider.name,
            provider.model_name,
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    provider.endpoint_url,
                    params=params or None,
                    headers=build_headers(credential, provider),
                    json=build_payload(prompt_text, provider),
                )
        except httpx.TransportError as e:
            logger.warning("Transport failure talking to %s: %s", provider.name, e)
            raise NetworkError(str(e) or e.__class__.__name__) from e

        if not response.is_success:
            logger.warning(
                "Provider %s answered with status %s", provider.name, response.status_code
            )
            raise ProtocolError(
                f"API error: {response.status_code}", status_code=response.status_code
            )

        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Provider %s returned an unparsable body", provider.name)
            return NO_CONTENT

        content = extract_content(body)
        if content is None:
            logger.info("Provider %s returned no reply content", provider.name)
            return NO_CONTENT

        model = body.get("model") if isinstance(body, dict) else None
        return ProviderReply(
            content=content, status_code=response.status_code, model=model
        )
