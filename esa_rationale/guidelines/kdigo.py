"""KDIGO anemia-in-CKD excerpts used as the only justification material."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GuidelineBullet(BaseModel):
    model_config = ConfigDict(frozen=True)

    anchor: str = Field(description="Recommendation, table or practice-point identifier.")
    rule: str = Field(description="Operative rule quoted from the guideline.")

    def render(self) -> str:
        return f"- {self.anchor}: {self.rule}"


class KnowledgeBase(BaseModel):
    """Ordered, immutable set of bullets for one guideline edition.

    A new edition is shipped as a whole new instance; bullets are never
    edited in place.
    """

    model_config = ConfigDict(frozen=True)

    edition: str
    bullets: tuple[GuidelineBullet, ...]

    def render(self) -> str:
        return "\n".join(bullet.render() for bullet in self.bullets)


def _bullet(anchor: str, rule: str) -> GuidelineBullet:
    return GuidelineBullet(anchor=anchor, rule=rule)


KDIGO_2025 = KnowledgeBase(
    edition="KDIGO 2025 Anemia in CKD",
    bullets=(
        _bullet(
            "Recommendation 3.2.1 (CKD G5D)",
            "Initiate ESA when Hb is between 9.0 and 10.0 g/dL.",
        ),
        _bullet("Recommendation 3.3.1", "In adults, target Hb < 11.5 g/dL."),
        _bullet("Table 7", "Initial epoetin alfa/beta dose: 50-100 units/kg/dose, 3x/week."),
        _bullet(
            "Table 7",
            "Initial darbepoetin dose: 0.45 mcg/kg/week or 0.75 mcg/kg every 2 weeks.",
        ),
        _bullet("Table 7", "Initial Mircera dose: 0.6 mcg/kg every 2 weeks."),
        _bullet(
            "Practice Point 3.4.1.2",
            "Avoid adjusting ESA dose more frequently than every 4 weeks.",
        ),
        _bullet(
            "Practice Point 3.4.1.2 Exception",
            "If Hb increases by > 1.0 g/dL in 2-4 weeks after initiation, reduce dose by 25-50%.",
        ),
        _bullet(
            "Practice Point 3.4.1.3",
            "Use the lowest ESA dose to achieve and maintain Hb goals.",
        ),
        _bullet(
            "Table 7 Adjustment",
            "If Hb rise < 1.0 g/dL over 4 weeks, increase dose (+25% or specific amount).",
        ),
        _bullet(
            "Table 7 Adjustment",
            "If Hb rise > 2.0 g/dL over 4 weeks, decrease dose (-25% or specific amount).",
        ),
    ),
)
