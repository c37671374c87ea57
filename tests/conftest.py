import sys
from pathlib import Path

import pytest
from langchain_core.messages import AIMessage

sys.path.insert(0, str(Path(__file__).parent.parent))

from esa_rationale.config.settings import Settings


class FakeChatModel:
    """Stands in for a LangChain chat model; records every call."""

    def __init__(self, content="", exc: Exception | None = None):
        self.content = content
        self.exc = exc
        self.calls = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        if self.exc is not None:
            raise self.exc
        return AIMessage(content=self.content)


DARBEPOETIN_PAYLOAD = {
    "inputs": {"hemoglobin": 9.2, "esaAgent": "darbepoetin", "weight": 70},
    "ruleOutput": {
        "weeklyDose": 31.5,
        "perDose": 31.5,
        "unit": "mcg/week",
        "note": "Initial dose within guideline range",
    },
}

DARBEPOETIN_RATIONALE = (
    "KDIGO-Aligned Rationale\n"
    "The patient's Hb of 9.2 g/dL lies within the 9.0-10.0 g/dL initiation band of "
    "Recommendation 3.2.1, which supports starting an ESA. "
    "No previous Hb or recent dose change was supplied, so no trend-based adjustment applies. "
    "Table 7 lists 0.45 mcg/kg/week as the initial darbepoetin dose. "
    "Recommendation 3.3.1 keeps the target below 11.5 g/dL.\n"
    "This explanation does not modify the underlying rule-based recommendation."
)


@pytest.fixture
def make_settings(tmp_path):
    def _make(**overrides) -> Settings:
        values = {
            "DB_PATH": str(tmp_path / "data" / "kdigo_history.db"),
            "LOG_DIR": str(tmp_path / "logs"),
            "WEB_DIR": str(tmp_path / "no-web"),
            "OPENAI_API_KEY": "",
            "OPENAI_BASE_URL": "",
            "RATIONALE_PROVIDER": "",
            "RATIONALE_MODEL": "gpt-4o",
            "RATIONALE_TEMPERATURE": 0.1,
            "GENERATION_TIMEOUT_S": 60.0,
            "HISTORY_LIMIT": 50,
            "AUDITING_ENABLED": True,
            "AUDIT_REQUIRED": False,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make
