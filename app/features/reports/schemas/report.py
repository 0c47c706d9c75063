"""
Report Schemas

Wire models for reports, AI suggestion bundles and trends. Field names are
serialized in camelCase (`by_alias=True`) because the history and trend
clients read `axeResults`, `accessibilityScore`, `aiSuggestions`, ...
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Reports
# ============================================================================

class AnalyzeRequest(BaseModel):
    """Request to scan a single URL."""
    url: str

    class Config:
        json_schema_extra = {
            "example": {
                "url": "https://example.com"
            }
        }


class ReportSummary(CamelModel):
    violations: int
    passes: int
    incomplete: int
    inapplicable: int
    accessibility_score: int = Field(ge=0, le=100)


class NewReport(CamelModel):
    """A scan result that has not been stored yet (no id, no timestamp)."""
    user_id: str
    url: str
    axe_results: Dict[str, List[Dict[str, Any]]]
    summary: ReportSummary


class ReportOut(CamelModel):
    id: str = Field(alias="_id")
    user_id: str
    url: str
    timestamp: datetime
    axe_results: Dict[str, Any]
    summary: ReportSummary
    ai_suggestions: Optional[Dict[str, Any]] = None
    ai_generated_at: Optional[datetime] = None


class ReportListItem(CamelModel):
    """List projection: never carries the audit payload."""
    id: str = Field(alias="_id")
    url: str
    timestamp: datetime
    summary: ReportSummary


class TrendPoint(CamelModel):
    index: int
    violations: int
    incomplete: int
    passes: int
    timestamp: datetime


# ============================================================================
# AI suggestions
# ============================================================================

class CodeExample(CamelModel):
    before: Optional[str] = ""
    after: Optional[str] = ""
    css: Optional[str] = ""
    javascript: Optional[str] = ""

    @field_validator("before", "after", "css", "javascript", mode="before")
    @classmethod
    def null_to_empty(cls, value):
        return "" if value is None else value


class Suggestion(CamelModel):
    violation_id: str
    priority: Literal["high", "medium", "low"]
    title: str
    problem: str
    wcag_guidelines: Optional[List[str]] = []
    impact: Optional[str] = ""
    solution: str
    code_example: Optional[CodeExample] = None
    additional_tips: Optional[List[str]] = []
    testing_instructions: Optional[str] = ""

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, value):
        # Models sometimes answer "High" or " medium "
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("wcag_guidelines", "additional_tips", mode="before")
    @classmethod
    def null_to_empty_list(cls, value):
        return [] if value is None else value

    @field_validator("impact", "testing_instructions", mode="before")
    @classmethod
    def null_to_empty(cls, value):
        return "" if value is None else value


class ResourceLink(CamelModel):
    title: str
    url: str


class SuggestionBundle(CamelModel):
    suggestions: List[Suggestion]
    general_recommendations: Optional[List[str]] = []
    resource_links: Optional[List[ResourceLink]] = []

    @field_validator("general_recommendations", "resource_links", mode="before")
    @classmethod
    def null_to_empty_list(cls, value):
        return [] if value is None else value


class EnrichmentResult(CamelModel):
    """A bundle plus which path produced it."""
    bundle: SuggestionBundle
    source: Literal["ai", "fallback", "empty"]
    generated_at: datetime
