"""LLM module."""

from esa_rationale.llm.generator import RationaleGenerator, sanitize_explanation
from esa_rationale.llm.model_factory import ModelFactory

__all__ = ["ModelFactory", "RationaleGenerator", "sanitize_explanation"]
