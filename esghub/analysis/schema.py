"""Shape of the structured ESG analysis returned by the analysis service.

Every key is required; metadata values may be null. Anything else is a
schema deviation and fails validation.
"""
from __future__ import annotations
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

RiskLevel = Literal["Major", "Minor"]

MAJOR_RISK_THRESHOLD = 70


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ReportMetadata(_Frozen):
    company_name: Optional[str]
    reporting_year: Optional[str]
    country_or_region: Optional[str]
    report_type: Optional[str]

    @field_validator("reporting_year", mode="before")
    @classmethod
    def _year_as_text(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class FlaggedStatement(_Frozen):
    statement: str
    esg_category: str
    reason: str
    risk_level: RiskLevel


class AnalysisResult(_Frozen):
    report_metadata: ReportMetadata
    confidence_score: float = Field(ge=0, le=100)
    classification: RiskLevel
    frameworks_claimed: List[str]
    other_frameworks: List[str]
    flagged_statements: List[FlaggedStatement]

    @property
    def greenwashing_risk(self) -> RiskLevel:
        return greenwashing_label(self.confidence_score)


def greenwashing_label(score: float) -> RiskLevel:
    return "Major" if score > MAJOR_RISK_THRESHOLD else "Minor"
