"""Validate -> compose -> generate -> record, one request at a time."""

from __future__ import annotations

from typing import Any

from esa_rationale.config.logger import get_logger
from esa_rationale.errors import GenerationError, PersistenceError, ValidationError
from esa_rationale.pipeline.context import RationaleContext
from esa_rationale.pipeline.state import GenerationRequest
from esa_rationale.pipeline.validation import validate_payload

logger = get_logger(__name__)


async def generate_rationale(context: RationaleContext, payload: Any) -> str:
    try:
        request = validate_payload(payload)
    except ValidationError as exc:
        logger.warning(
            "[rationale.validate] rejected fields=%s",
            [item["field"] for item in exc.details],
        )
        raise

    generation = GenerationRequest(
        inputs=request.inputs,
        rule_output=request.rule_output,
        knowledge_base=context.knowledge_base,
    )
    try:
        explanation = await context.generator.generate(generation)
    except GenerationError:
        logger.exception("[rationale.generate] failed esa_agent=%s", request.inputs.esa_agent)
        raise

    if context.audit_store is not None:
        try:
            record_id = await context.audit_store.record(
                request.inputs, request.rule_output, request.extra, explanation
            )
        except PersistenceError:
            logger.exception("[audit.record] failed; rationale was generated but not audited")
            if context.settings.AUDIT_REQUIRED:
                raise
        else:
            logger.info(
                "[audit.record] stored id=%s esa_agent=%s dose=%s",
                record_id,
                request.inputs.esa_agent,
                request.rule_output.dose_text(),
            )

    return explanation


async def get_history(context: RationaleContext, limit: int | None = None) -> list[dict]:
    if context.audit_store is None:
        raise PersistenceError("Auditing is disabled")
    if limit is None:
        limit = context.settings.HISTORY_LIMIT
    return await context.audit_store.history(limit)
