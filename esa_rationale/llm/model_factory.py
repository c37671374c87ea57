import json
from abc import ABC, abstractmethod
from typing import Any
from urllib import error, request

from esa_rationale.config.logger import get_logger
from esa_rationale.config.settings import Settings

_logger = get_logger(__name__)


class BaseModelProvider(ABC):
    """Abstract provider contract for chat model creation."""

    name: str = "base"

    def __init__(self, config: Settings) -> None:
        self.config = config

    @abstractmethod
    def is_available(self, model: str) -> bool:
        """Whether this provider can serve the given model."""

    @abstractmethod
    def create(self, model: str, temperature: float, timeout: float) -> Any:
        """Create provider-specific langchain chat model instance."""


class OpenAIProvider(BaseModelProvider):
    name = "openai"

    def is_available(self, model: str) -> bool:
        return self.config.has_openai_creds()

    def create(self, model: str, temperature: float, timeout: float) -> Any:
        from langchain_openai import ChatOpenAI

        kwargs: dict[str, Any] = {
            "model": model,
            "api_key": self.config.OPENAI_API_KEY,
            "temperature": temperature,
            "timeout": timeout,
            "max_retries": 0,
            "n": 1,
        }
        base_url = self.config.get_base_url(self.name)
        if base_url:
            kwargs["base_url"] = base_url
        return ChatOpenAI(**kwargs)


class OllamaProvider(BaseModelProvider):
    name = "ollama"

    def _base_url(self) -> str:
        return self.config.get_base_url(self.name)

    def _model_exists(self, base_url: str, model: str) -> bool:
        tags_url = f"{base_url.rstrip('/')}/api/tags"
        try:
            with request.urlopen(tags_url, timeout=1.5) as resp:
                payload = json.loads(resp.read().decode("utf-8"))
        except (error.URLError, error.HTTPError, TimeoutError, ValueError):
            return False

        names = {
            (item.get("name", "") or "").strip().lower()
            for item in payload.get("models", [])
        }
        wanted = (model or "").strip().lower()
        if wanted in names:
            return True
        return ":" not in wanted and f"{wanted}:latest" in names

    def is_available(self, model: str) -> bool:
        return self._model_exists(self._base_url(), model)

    def create(self, model: str, temperature: float, timeout: float) -> Any:
        from langchain_ollama import ChatOllama

        return ChatOllama(
            model=model,
            base_url=self._base_url(),
            temperature=temperature,
            client_kwargs={"timeout": timeout},
        )


class ModelFactory:
    """Provider registry + resolution strategy."""

    def __init__(self, config: Settings) -> None:
        self.config = config
        self.providers: dict[str, BaseModelProvider] = {
            OpenAIProvider.name: OpenAIProvider(config),
            OllamaProvider.name: OllamaProvider(config),
        }

    def _resolve_provider(self, model: str, explicit_provider: str) -> BaseModelProvider:
        provider_name = (explicit_provider or "").strip().lower()
        if provider_name and provider_name != "auto":
            provider = self.providers.get(provider_name)
            if provider is None:
                raise ValueError(f"Unknown provider: {provider_name}")
            return provider

        # Auto strategy: OpenAI-compatible when credentials exist, else a local Ollama model.
        if self.providers["openai"].is_available(model):
            return self.providers["openai"]
        ollama = self.providers["ollama"]
        if ollama.is_available(model):
            return ollama
        raise ValueError(
            f"No provider available for model '{model}': set OPENAI_API_KEY or pull it into Ollama"
        )

    def create_chat_model(self) -> Any:
        model = self.config.RATIONALE_MODEL
        provider = self._resolve_provider(model, self.config.get_provider())
        _logger.info("[model_factory] provider=%s model=%s", provider.name, model)
        return provider.create(
            model=model,
            temperature=self.config.RATIONALE_TEMPERATURE,
            timeout=self.config.GENERATION_TIMEOUT_S,
        )
