from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from esa_rationale.guidelines import KnowledgeBase
    from esa_rationale.pipeline.state import PatientInputs, RuleOutput

RATIONALE_TITLE = "KDIGO-Aligned Rationale"

DISCLAIMER = "This explanation does not modify the underlying rule-based recommendation."

NO_EXPLANATION = "No explanation generated."

ROLE_PREAMBLE = """System:
You are a constrained documentation assistant. You explain rule-based outputs using KDIGO guideline language only.

Developer:
You must not provide medical advice, change values, calculate doses, or introduce new recommendations."""

RATIONALE_PROMPT = """{preamble}

User:
Provide:
- Structured inputs: {inputs_json}
- Deterministic rule outputs: {rule_output_json}
- KDIGO basis bullets (hard-coded):
{kdigo_bullets}

Output format:
Title: "{title}"
4-6 concise sentences explaining WHY the rule utilized the specific KDIGO bullet points based on the patient's Hb, trend, and timing.
Final disclaimer line:
"{disclaimer}"
"""


def _to_json(model) -> str:
    return json.dumps(
        model.model_dump(mode="json", by_alias=True),
        ensure_ascii=False,
        separators=(",", ":"),
    )


def compose_prompt(
    inputs: PatientInputs,
    rule_output: RuleOutput,
    knowledge_base: KnowledgeBase,
) -> str:
    """Build the single instruction block sent to the generator.

    Pure: the same inputs, rule output and knowledge base always produce
    byte-identical text.
    """
    return RATIONALE_PROMPT.format(
        preamble=ROLE_PREAMBLE,
        inputs_json=_to_json(inputs),
        rule_output_json=_to_json(rule_output),
        kdigo_bullets=knowledge_base.render(),
        title=RATIONALE_TITLE,
        disclaimer=DISCLAIMER,
    )
