"""Moral rule and evaluation models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MoralRule(BaseModel):
    """A named, weighted criterion used to score free text."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    weight: float
    keywords: tuple[str, ...] = Field(default_factory=tuple)

    def to_public_dict(self) -> dict[str, object]:
        """Shape used by the rules listing contract."""
        return {"name": self.name, "description": self.description, "weight": self.weight}


class Evaluation(BaseModel):
    """Result of scoring one action against the rule set."""

    model_config = ConfigDict(frozen=True)

    score: float
    action: str
    triggered: tuple[str, ...] = Field(default_factory=tuple)


DEFAULT_RULES: tuple[MoralRule, ...] = (
    MoralRule(
        name="no-harm",
        description="Do not cause physical or emotional harm",
        weight=10.0,
        keywords=(
            "harm",
            "harms",
            "harmed",
            "harming",
            "harmful",
            "hurt",
            "hurts",
            "hurting",
            "injure",
            "injured",
            "injures",
            "injuring",
            "injury",
            "injuries",
            "kill",
            "kills",
            "killed",
            "killing",
            "attack",
            "attacks",
            "attacked",
            "attacking",
            "abuse",
            "abused",
            "abusing",
            "violence",
            "violent",
            "physical",
            "emotional",
        ),
    ),
    MoralRule(
        name="truth",
        description="Be honest and truthful",
        weight=8.0,
        keywords=(
            "truth",
            "truthful",
            "honest",
            "honesty",
            "dishonest",
            "lie",
            "lies",
            "lied",
            "lying",
            "liar",
            "deceive",
            "deceived",
            "deceiving",
            "deception",
            "deceit",
        ),
    ),
)
