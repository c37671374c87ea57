"""Rationale generation backed by a LangChain chat model."""

from __future__ import annotations

import asyncio
import re
from typing import Any

from langchain_core.messages import HumanMessage

from esa_rationale.config.logger import get_logger, log_stage
from esa_rationale.config.settings import Settings
from esa_rationale.errors import GenerationError
from esa_rationale.llm.model_factory import ModelFactory
from esa_rationale.pipeline.state import GenerationRequest
from esa_rationale.prompts.prompts import DISCLAIMER, NO_EXPLANATION

_logger = get_logger(__name__)

_FENCE_LINE_PATTERN = re.compile(r"```[\w+-]*[ \t]*$", re.MULTILINE)
_FENCE = "```"
_QUOTES = ('"', "\u201c")


def sanitize_explanation(text: str) -> str:
    """Strip code fences and make the disclaimer the final sentence.

    Anything the model wrote after its last disclaimer is dropped.
    """
    cleaned = _FENCE_LINE_PATTERN.sub("", text or "").replace(_FENCE, "").strip()
    if not cleaned:
        cleaned = NO_EXPLANATION
    end = cleaned.rfind(DISCLAIMER)
    if end == -1:
        return f"{cleaned}\n{DISCLAIMER}"
    head = cleaned[:end].rstrip()
    if head.endswith(_QUOTES):
        head = head[:-1].rstrip()
    if not head:
        head = NO_EXPLANATION
    return f"{head}\n{DISCLAIMER}"


def _content_text(content: Any) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    raise GenerationError(f"Unexpected completion content type: {type(content).__name__}")


class RationaleGenerator:
    """Send a composed prompt to the chat model and clean up the reply.

    The chat model is built lazily so the service can start without provider
    credentials; a misconfigured provider surfaces as ``GenerationError`` on
    the first request. Nothing here retries.
    """

    def __init__(
        self,
        config: Settings,
        chat_model: Any | None = None,
        factory: ModelFactory | None = None,
    ) -> None:
        self.config = config
        self._chat_model = chat_model
        self._factory = factory or ModelFactory(config)

    async def _model(self) -> Any:
        if self._chat_model is None:
            # Provider resolution can block on the Ollama tags request.
            try:
                self._chat_model = await asyncio.to_thread(self._factory.create_chat_model)
            except Exception as exc:
                raise GenerationError(f"Chat model unavailable: {exc}") from exc
        return self._chat_model

    async def generate(self, request: GenerationRequest) -> str:
        model = await self._model()
        try:
            response = await asyncio.wait_for(
                model.ainvoke([HumanMessage(content=request.prompt)]),
                timeout=self.config.GENERATION_TIMEOUT_S,
            )
        except asyncio.TimeoutError as exc:
            raise GenerationError(
                f"Generation timed out after {self.config.GENERATION_TIMEOUT_S}s"
            ) from exc
        except Exception as exc:
            raise GenerationError(f"Generation failed: {exc.__class__.__name__}: {exc}") from exc

        if not hasattr(response, "content"):
            raise GenerationError("Malformed completion: missing content")
        raw = _content_text(response.content)
        explanation = sanitize_explanation(raw)
        log_stage(
            _logger,
            "rationale.generate",
            explanation,
            esa_agent=request.inputs.esa_agent,
            dose=request.rule_output.dose_text(),
        )
        return explanation
