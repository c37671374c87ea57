from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr

from esa_rationale.guidelines import KnowledgeBase


def _format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


class PatientInputs(BaseModel):
    """Inputs the external rule engine used to compute its recommendation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    hemoglobin: StrictFloat = Field(description="Current Hb in g/dL.")
    previous_hemoglobin: Optional[StrictFloat] = Field(
        default=None,
        alias="previousHemoglobin",
        validation_alias=AliasChoices("previousHemoglobin", "prevHb"),
        description="Previous Hb in g/dL, used for trend.",
    )
    current_dose: Optional[StrictFloat] = Field(default=None, alias="currentDose")
    esa_agent: StrictStr = Field(alias="esaAgent", min_length=1)
    weight: StrictFloat = Field(description="Body weight in kg.")
    weeks_since_last_change: Optional[StrictFloat] = Field(
        default=None,
        alias="weeksSinceLastChange",
        validation_alias=AliasChoices("weeksSinceLastChange", "weeksSinceChange"),
    )


class RuleOutput(BaseModel):
    """Deterministic rule-engine recommendation. Referenced, never recomputed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    weekly_dose: StrictFloat = Field(alias="weeklyDose")
    per_dose: StrictFloat = Field(alias="perDose")
    unit: StrictStr
    note: StrictStr

    def dose_text(self) -> str:
        dose = self.weekly_dose or self.per_dose
        return f"{_format_number(dose)} {self.unit}"


class ExtraIdentity(BaseModel):
    """Optional identity fields stored with the audit row only."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    patient_name: Optional[StrictStr] = Field(default=None, alias="patientName")
    age: Optional[StrictInt] = Field(default=None, ge=0)
    sex: Optional[StrictStr] = None


class RationaleRequest(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    inputs: PatientInputs
    rule_output: RuleOutput = Field(alias="ruleOutput")
    extra: Optional[ExtraIdentity] = None


class GenerationRequest(BaseModel):
    """Validated inputs plus the knowledge base, built once per call."""

    model_config = ConfigDict(frozen=True)

    inputs: PatientInputs
    rule_output: RuleOutput
    knowledge_base: KnowledgeBase

    @property
    def prompt(self) -> str:
        from esa_rationale.prompts.prompts import compose_prompt

        return compose_prompt(self.inputs, self.rule_output, self.knowledge_base)
