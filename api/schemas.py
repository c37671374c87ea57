from pydantic import BaseModel, Field


class FieldErrorItem(BaseModel):
    field: str
    message: str


class RationaleResponse(BaseModel):
    explanation: str


class ValidationErrorResponse(BaseModel):
    error: str = "Invalid inputs"
    details: list[FieldErrorItem] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str


class AuditRecord(BaseModel):
    id: int
    timestamp: str
    patient_name: str | None = None
    age: int | None = None
    sex: str | None = None
    hemoglobin: float | None = None
    weight: float | None = None
    esa_agent: str | None = None
    current_dose: float | None = None
    recommended_dose: str | None = None
    note: str | None = None
    ai_explanation: str | None = None


class HistoryResponse(BaseModel):
    data: list[AuditRecord]


class HealthResponse(BaseModel):
    ok: bool
    auditing: bool
