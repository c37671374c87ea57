from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from esa_rationale.config.settings import Settings
from esa_rationale.guidelines import KDIGO_2025, KnowledgeBase
from esa_rationale.llm.generator import RationaleGenerator
from esa_rationale.utils.db import AuditStore


@dataclass(frozen=True)
class RationaleContext:
    """Collaborators shared by every request, built once at startup.

    ``audit_store`` is ``None`` when auditing is disabled; the recorder and
    history reader are then not wired in.
    """

    settings: Settings
    knowledge_base: KnowledgeBase
    generator: RationaleGenerator
    audit_store: AuditStore | None = None

    @property
    def auditing_enabled(self) -> bool:
        return self.audit_store is not None

    async def startup(self) -> None:
        if self.audit_store is not None:
            await self.audit_store.init()


def build_context(
    config: Settings,
    knowledge_base: KnowledgeBase = KDIGO_2025,
    chat_model: Any | None = None,
) -> RationaleContext:
    audit_store = AuditStore(config.DB_PATH) if config.AUDITING_ENABLED else None
    return RationaleContext(
        settings=config,
        knowledge_base=knowledge_base,
        generator=RationaleGenerator(config, chat_model=chat_model),
        audit_store=audit_store,
    )
