"""Guideline knowledge base."""

from esa_rationale.guidelines.kdigo import KDIGO_2025, GuidelineBullet, KnowledgeBase

__all__ = ["GuidelineBullet", "KDIGO_2025", "KnowledgeBase"]
