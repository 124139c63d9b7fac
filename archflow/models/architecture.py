"""Architecture aggregate and the reports the service computes for it."""

from typing import Any

from pydantic import BaseModel, Field


class Architecture(BaseModel):
    """The remote architecture that components and links are attached to."""

    remote_architecture_id: str
    name: str


class ArchitectureValidation(BaseModel):
    """Result of validating a whole architecture against the connection rules."""

    valid: bool
    violations: list[str] = Field(default_factory=list)


class EvaluationReport(BaseModel):
    """Scored report for an architecture.

    Scores are computed remotely and displayed as-is; keys the service adds
    beyond these are preserved.
    """

    model_config = {"extra": "allow", "populate_by_name": True}

    overall_score: float | None = Field(default=None, alias="overallScore")
    component_scores: dict[str, Any] = Field(default_factory=dict, alias="componentScores")
    link_scores: dict[str, Any] = Field(default_factory=dict, alias="linkScores")
    architecture_metrics: dict[str, Any] | None = Field(default=None, alias="architectureMetrics")
    recommendations: list[str] = Field(default_factory=list)
    validation: ArchitectureValidation | None = None

    @property
    def rating(self) -> str | None:
        if self.overall_score is None:
            return None
        if self.overall_score >= 7:
            return "Excellent"
        if self.overall_score >= 5:
            return "Good"
        if self.overall_score >= 3:
            return "Fair"
        return "Poor"
