"""Rationale pipeline: validation, context wiring and request orchestration."""
