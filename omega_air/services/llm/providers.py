"""Provider capability contract and the concrete text-generation backends.

Every backend exposes the same two operations:

- ``status()``: availability derived from credential presence, never raises.
- ``generate(prompt, options)``: one completion, or ``ProviderError``.

Backends without a credential either refuse (``offline``) or answer with a
deterministic placeholder (``stub``) so downstream code can be exercised
without live API access.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from omega_air.config.settings import get_credential, has_credential, settings

logger = logging.getLogger(__name__)


class AvailabilityState(str, Enum):
    """Availability classification of a provider."""

    ONLINE = "online"
    OFFLINE = "offline"
    STUB = "stub"


class ProviderError(Exception):
    """A specific backend rejected or failed a generation call."""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
        self.status_code = status_code
        self.cause = cause
        # Filled in by the dispatcher when the error aborts a routing pass.
        self.attempts: List[Any] = []


def _as_int(value: Any) -> int:
    """Accept ints and integral floats or numeric strings; reject bools and fractions."""
    if isinstance(value, bool):
        raise ValueError(f"max_tokens must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"max_tokens must be an integer, got {value!r}") from exc
    if not number.is_integer():
        raise ValueError(f"max_tokens must be an integer, got {value!r}")
    return int(number)


@dataclass
class GenerationOptions:
    """Generation knobs shared by all providers."""

    temperature: float = settings.DEFAULT_TEMPERATURE
    max_tokens: int = settings.DEFAULT_MAX_TOKENS
    model: Optional[str] = None
    system_prompt: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.temperature, bool):
            raise ValueError(f"temperature must be a number, got {self.temperature!r}")
        try:
            temperature = float(self.temperature)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"temperature must be a number, got {self.temperature!r}") from exc
        if not 0.0 <= temperature <= 1.0:
            raise ValueError(f"temperature must be within [0, 1], got {self.temperature}")
        self.temperature = temperature

        self.max_tokens = _as_int(self.max_tokens)
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "GenerationOptions":
        """Build options from a caller-supplied mapping (camelCase or snake_case keys)."""
        if not data:
            return cls()
        max_tokens = data.get("maxTokens", data.get("max_tokens"))
        system_prompt = data.get("systemPrompt", data.get("system_prompt"))
        temperature = data.get("temperature")
        return cls(
            temperature=temperature if temperature is not None else settings.DEFAULT_TEMPERATURE,
            max_tokens=max_tokens if max_tokens is not None else settings.DEFAULT_MAX_TOKENS,
            model=data.get("model"),
            system_prompt=system_prompt,
        )


OptionsLike = Union[GenerationOptions, Mapping[str, Any], None]


def coerce_options(options: OptionsLike) -> GenerationOptions:
    if isinstance(options, GenerationOptions):
        return options
    return GenerationOptions.from_mapping(options)


class AIProvider:
    """Base class for a named text-generation backend."""

    name: str = ""
    label: str = ""
    credential_env: str = ""
    stub_when_unconfigured: bool = False
    models: List[str] = []

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._transport = transport
        self._timeout = timeout if timeout is not None else settings.PROVIDER_TIMEOUT_SECONDS

    def has_api_key(self) -> bool:
        return has_credential(self.credential_env)

    def status(self) -> AvailabilityState:
        if self.has_api_key():
            return AvailabilityState.ONLINE
        if self.stub_when_unconfigured:
            return AvailabilityState.STUB
        return AvailabilityState.OFFLINE

    async def generate(self, prompt: str, options: OptionsLike = None) -> str:
        opts = coerce_options(options)
        state = self.status()
        if state is AvailabilityState.OFFLINE:
            raise ProviderError(self.name, f"{self.credential_env} is not configured")
        if state is AvailabilityState.STUB:
            logger.info("[%s stub] Received input of %d chars", self.label, len(prompt))
            return self.stub_response(prompt)
        return await self._complete(prompt, opts)

    def stub_response(self, prompt: str) -> str:
        return f"{self.label} is currently offline. This is a stubbed response for input: {prompt}"

    async def _complete(self, prompt: str, options: GenerationOptions) -> str:  # pragma: no cover - interface
        raise NotImplementedError

    async def _post_json(self, url: str, headers: Dict[str, str], payload: Dict[str, Any]) -> Dict[str, Any]:
        """Issue one POST and return the decoded JSON body."""
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise ProviderError(self.name, f"request failed: {exc}", cause=exc) from exc

        if not response.is_success:
            raise ProviderError(
                self.name,
                f"API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(self.name, "response body is not valid JSON", cause=exc) from exc


class ChatCompletionsProvider(AIProvider):
    """Backends speaking the ``/chat/completions`` wire format."""

    base_url: str = ""
    default_model: str = ""

    async def _complete(self, prompt: str, options: GenerationOptions) -> str:
        messages = []
        if options.system_prompt:
            messages.append({"role": "system", "content": options.system_prompt})
        messages.append({"role": "user", "content": prompt})

        data = await self._post_json(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {get_credential(self.credential_env)}",
                "Content-Type": "application/json",
            },
            payload={
                "model": options.model or self.default_model,
                "messages": messages,
                "temperature": options.temperature,
                "max_tokens": options.max_tokens,
            },
        )
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError(self.name, "response missing choices[0].message.content", cause=exc) from exc


class OpenAIProvider(ChatCompletionsProvider):
    name = "openai"
    label = "OpenAI"
    credential_env = "OPENAI_API_KEY"
    stub_when_unconfigured = False
    models = ["gpt-4o", "gpt-4-turbo", "gpt-3.5-turbo"]
    base_url = settings.OPENAI_BASE_URL
    default_model = settings.OPENAI_MODEL


class MistralProvider(ChatCompletionsProvider):
    name = "mistral"
    label = "Mistral"
    credential_env = "MISTRAL_API_KEY"
    stub_when_unconfigured = True
    models = ["mistral-large-latest", "mistral-medium-latest"]
    base_url = settings.MISTRAL_BASE_URL
    default_model = settings.MISTRAL_MODEL


class ClaudeProvider(AIProvider):
    name = "claude"
    label = "Claude"
    credential_env = "CLAUDE_API_KEY"
    stub_when_unconfigured = True
    models = ["claude-3-5-sonnet-20241022", "claude-3-haiku-20240307"]

    async def _complete(self, prompt: str, options: GenerationOptions) -> str:
        payload: Dict[str, Any] = {
            "model": options.model or settings.CLAUDE_MODEL,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if options.system_prompt:
            payload["system"] = options.system_prompt

        data = await self._post_json(
            f"{settings.CLAUDE_BASE_URL}/messages",
            headers={
                "x-api-key": get_credential(self.credential_env),
                "anthropic-version": settings.CLAUDE_API_VERSION,
                "Content-Type": "application/json",
            },
            payload=payload,
        )
        try:
            return data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError(self.name, "response missing content[0].text", cause=exc) from exc


__all__ = [
    "AIProvider",
    "AvailabilityState",
    "ChatCompletionsProvider",
    "ClaudeProvider",
    "GenerationOptions",
    "MistralProvider",
    "OpenAIProvider",
    "OptionsLike",
    "ProviderError",
    "coerce_options",
]
