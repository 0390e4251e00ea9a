"""
Compliance Pipeline Models
Pydantic models for extraction results and the persisted records.

Python attributes are snake_case; the wire/storage names are kept exact via aliases.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from . import schema

logger = logging.getLogger(__name__)

# =============================================================================
# ENUMS
# =============================================================================

class ContentType(str, Enum):
    CASE = "case"
    REGULATION = "regulation"

class RiskLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

class CaseStatus(str, Enum):
    ACTIVE = "active"
    SETTLED = "settled"
    APPEALED = "appealed"
    CLOSED = "closed"
    DECIDED = "decided"

class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"

# =============================================================================
# RISK ASSESSMENT
# =============================================================================

class QuantitativeScore(BaseModel):
    """Three 1-5 ratings combined with the fixed 0.4/0.4/0.2 weighting"""
    model_config = ConfigDict(populate_by_name=True)

    business_relevance: int = Field(alias="businessRelevance", ge=1, le=5)
    penalty_severity: int = Field(alias="penaltySeverity", ge=1, le=5)
    compliance_urgency: int = Field(alias="complianceUrgency", ge=1, le=5)
    total_score: Optional[float] = Field(default=None, alias="totalScore")
    risk_level: Optional[str] = Field(default=None, alias="riskLevel")

    @model_validator(mode="after")
    def derive_total(self):
        """Recompute the total and band locally; the model's arithmetic is not trusted."""
        computed = schema.weighted_score(
            self.business_relevance, self.penalty_severity, self.compliance_urgency
        )
        if self.total_score is not None and abs(self.total_score - computed) > 0.05:
            logger.warning(f"Model reported totalScore {self.total_score}, recomputed {computed}")
        self.total_score = computed
        self.risk_level = schema.score_band(computed)
        return self


class RiskAssessment(BaseModel):
    """Risk judgment attached to every extraction"""
    model_config = ConfigDict(populate_by_name=True)

    level: RiskLevel = Field(description="critical / high / medium / low")
    reasoning: str = Field(default="", description="Why the level was chosen")
    factors: List[str] = Field(default_factory=list, description="Contributing factor tags")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    quantitative_score: Optional[QuantitativeScore] = Field(default=None, alias="quantitativeScore")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("factors", mode="before")
    @classmethod
    def normalize_factors(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

# =============================================================================
# EXTRACTION RESULT
# =============================================================================

class ExtractionResult(BaseModel):
    """Validated, allow-list filtered output of the risk analyzer"""
    model_config = ConfigDict(populate_by_name=True)

    role: str = "risk-analyzer"
    content_type: ContentType = Field(alias="contentType")
    extracted_data: Dict[str, Any] = Field(default_factory=dict, alias="extractedData")
    risk_assessment: RiskAssessment = Field(alias="riskAssessment")
    analysis_summary: str = Field(default="", alias="analysisSummary")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    legal_basis: Optional[Any] = None


class ChatReply(BaseModel):
    """Free-text answer from the chat assistant role"""
    role: str = "chat-assistant"
    content: str
    timestamp: str
    company_context_used: bool = False


class ChatMessage(BaseModel):
    role: ChatRole
    content: str

    def to_api(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}

# =============================================================================
# PERSISTED RECORDS
# =============================================================================

class _RecordBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    title: str
    source_url: str = ""
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or v.strip() == "":
            raise ValueError("title cannot be empty")
        return v.strip()

    @field_validator("source_url", mode="before")
    @classmethod
    def default_source_url(cls, v):
        return v or ""

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class CaseRecord(_RecordBase):
    """Court case as stored in cases-data.json"""
    court: str
    jurisdiction: str
    case_type: str = Field(alias="caseType")
    filing_date: str = Field(alias="filingDate", description="YYYY-MM-DD")
    status: CaseStatus
    parties: List[str] = Field(min_length=1)
    description: str
    impact_level: RiskLevel = Field(alias="impactLevel")
    outcome: str = ""
    key_issues: List[str] = Field(default_factory=list)

    @field_validator("court", "jurisdiction", "case_type", "description")
    @classmethod
    def validate_not_blank(cls, v):
        if not v or v.strip() == "":
            raise ValueError("value cannot be empty")
        return v.strip()

    @field_validator("filing_date")
    @classmethod
    def validate_filing_date(cls, v):
        if not schema.is_valid_calendar_date(v):
            raise ValueError("must be a valid YYYY-MM-DD date")
        return v

    @field_validator("parties")
    @classmethod
    def validate_parties(cls, v):
        if any(p.strip() == "" for p in v):
            raise ValueError("party names cannot be blank")
        return [p.strip() for p in v]

    @field_validator("outcome", mode="before")
    @classmethod
    def default_outcome(cls, v):
        return v or ""

    @field_validator("key_issues", mode="before")
    @classmethod
    def default_key_issues(cls, v):
        return v or []


class RegulationRecord(_RecordBase):
    """Regulatory alert as stored in compliance-data.json"""
    region: str
    severity: RiskLevel
    summary: str
    timestamp: str = Field(description="YYYY-MM-DD or ISO-8601 datetime")
    category: str

    @field_validator("region", "summary", "category")
    @classmethod
    def validate_not_blank(cls, v):
        if not v or v.strip() == "":
            raise ValueError("value cannot be empty")
        return v.strip()

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v):
        if not schema.is_valid_date_or_datetime(v):
            raise ValueError("must be a valid YYYY-MM-DD date or ISO-8601 datetime")
        return v


RECORD_MODELS = {
    schema.CASE: CaseRecord,
    schema.REGULATION: RegulationRecord,
}

# =============================================================================
# SAVE RESULT
# =============================================================================

@dataclass
class SaveResult:
    """Outcome of one pass through the strict save gate."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    cannot_save: bool = False           # structural: operator must edit first
    retryable: bool = False             # transient: safe to resubmit unchanged
    error_type: Optional[str] = None    # "MissingRequiredFields", "FormatViolation", ...
    violations: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def invalid_fields(self) -> List[str]:
        return [name for name, _ in self.violations]

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success}
        if self.message:
            result["message"] = self.message
        if self.error:
            result["error"] = self.error
        if self.data is not None:
            result["data"] = self.data
        if not self.success:
            result["cannotSave"] = self.cannot_save
            result["retryable"] = self.retryable
        return result
