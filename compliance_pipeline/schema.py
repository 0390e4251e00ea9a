"""
Record Schema
Field lists, enumerations and per-field rules shared by the prompt builder,
the classifier, the editable workspace and the save gate.

The field names are the storage/UI contract and must stay bit-exact.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from dateutil import parser as date_parser

# =============================================================================
# CONTENT TYPES & FIELD LISTS
# =============================================================================

CASE = "case"
REGULATION = "regulation"
CONTENT_TYPES = (CASE, REGULATION)

CASE_REQUIRED_FIELDS = [
    "title", "court", "jurisdiction", "caseType", "filingDate",
    "status", "parties", "description", "impactLevel",
]
CASE_OPTIONAL_FIELDS = ["id", "source_url", "outcome", "key_issues"]

REGULATION_REQUIRED_FIELDS = [
    "title", "region", "severity", "summary", "timestamp", "category",
]
REGULATION_OPTIONAL_FIELDS = ["id", "source_url"]

REQUIRED_FIELDS: Dict[str, List[str]] = {
    CASE: CASE_REQUIRED_FIELDS,
    REGULATION: REGULATION_REQUIRED_FIELDS,
}

# Only these fields survive the allow-list filter
ALLOWED_FIELDS: Dict[str, List[str]] = {
    CASE: CASE_REQUIRED_FIELDS + CASE_OPTIONAL_FIELDS,
    REGULATION: REGULATION_REQUIRED_FIELDS + REGULATION_OPTIONAL_FIELDS,
}

# Persistence targets: dataType -> (file name, list key)
STORAGE_TARGETS: Dict[str, Tuple[str, str]] = {
    CASE: ("cases-data.json", "cases"),
    REGULATION: ("compliance-data.json", "alerts"),
}

# =============================================================================
# ENUMERATIONS
# =============================================================================

CASE_STATUSES = ["active", "settled", "appealed", "closed", "decided"]
RISK_LEVELS = ["critical", "high", "medium", "low"]

ENUM_FIELDS: Dict[str, Dict[str, List[str]]] = {
    CASE: {"status": CASE_STATUSES, "impactLevel": RISK_LEVELS},
    REGULATION: {"severity": RISK_LEVELS},
}

# Date-only fields vs. fields that also accept an ISO datetime
DATE_FIELDS: Dict[str, List[str]] = {
    CASE: ["filingDate"],
    REGULATION: [],
}
DATE_OR_DATETIME_FIELDS: Dict[str, List[str]] = {
    CASE: [],
    REGULATION: ["timestamp"],
}

# List-valued fields; every other schema field holds a string
LIST_FIELDS: Dict[str, List[str]] = {
    CASE: ["parties", "key_issues"],
    REGULATION: [],
}

# Quantitative risk rubric
SCORE_WEIGHTS = {
    "businessRelevance": 0.4,
    "penaltySeverity": 0.4,
    "complianceUrgency": 0.2,
}
HIGH_RISK_THRESHOLD = 4.0
MEDIUM_RISK_THRESHOLD = 2.5

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# =============================================================================
# FIELD RULES
# =============================================================================

def is_empty(value: Any) -> bool:
    """A required value is empty when missing, blank, or an empty list."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def is_valid_calendar_date(value: Any) -> bool:
    """Strict YYYY-MM-DD that is also a real calendar date (no Feb 30)."""
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def is_valid_date_or_datetime(value: Any) -> bool:
    """Calendar date, or a full ISO-8601 datetime such as 2024-08-02T00:00:00Z."""
    if is_valid_calendar_date(value):
        return True
    if not isinstance(value, str) or "T" not in value:
        return False
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        return False
    return isinstance(parsed, datetime)


def required_fields(content_type: str) -> List[str]:
    return list(REQUIRED_FIELDS.get(content_type, []))


def missing_required_fields(content_type: str, data: Dict[str, Any]) -> List[str]:
    """All required fields that are absent or empty, in schema order."""
    return [field for field in required_fields(content_type) if is_empty(data.get(field))]


def check_format(content_type: str, field: str, value: Any) -> Optional[str]:
    """
    Format rule for a single field.

    Returns:
        Reason string when the value violates the rule, None otherwise.
        Empty values are left to the required-field rule.
    """
    if is_empty(value):
        return None

    if field in LIST_FIELDS.get(content_type, []):
        if not isinstance(value, list):
            return "must be a list"
    elif field in ALLOWED_FIELDS.get(content_type, []) and not isinstance(value, str):
        return "must be a string"

    allowed = ENUM_FIELDS.get(content_type, {}).get(field)
    if allowed is not None and value not in allowed:
        return f"must be one of: {', '.join(allowed)}"

    if field in DATE_FIELDS.get(content_type, []) and not is_valid_calendar_date(value):
        return "must be a valid YYYY-MM-DD date"

    if field in DATE_OR_DATETIME_FIELDS.get(content_type, []) and not is_valid_date_or_datetime(value):
        return "must be a valid YYYY-MM-DD date or ISO-8601 datetime"

    if content_type == CASE and field == "parties":
        if any(not isinstance(p, str) for p in value):
            return "party names must be strings"
        if any(p.strip() == "" for p in value):
            return "party names cannot be blank"

    if content_type == CASE and field == "key_issues":
        if not isinstance(value, list) or any(not isinstance(i, str) for i in value):
            return "must be a list of strings"

    return None


def validate_field(content_type: str, field: str, value: Any) -> Optional[str]:
    """Required + format rule for one field; the same rules the save gate applies."""
    if field in REQUIRED_FIELDS.get(content_type, []) and is_empty(value):
        return "is required"
    return check_format(content_type, field, value)


def format_violations(content_type: str, data: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Every format violation in the record (not just the first)."""
    violations = []
    for field in ALLOWED_FIELDS.get(content_type, []):
        reason = check_format(content_type, field, data.get(field))
        if reason:
            violations.append((field, reason))
    return violations


def filter_allowed(content_type: str, data: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    """
    Apply the allow-list filter.

    Returns:
        (kept fields, names of dropped fields)
    """
    allowed = ALLOWED_FIELDS.get(content_type, [])
    kept = {k: v for k, v in data.items() if k in allowed}
    dropped = [k for k in data if k not in allowed]
    return kept, dropped


def weighted_score(business_relevance: int, penalty_severity: int, compliance_urgency: int) -> float:
    total = (
        business_relevance * SCORE_WEIGHTS["businessRelevance"]
        + penalty_severity * SCORE_WEIGHTS["penaltySeverity"]
        + compliance_urgency * SCORE_WEIGHTS["complianceUrgency"]
    )
    return round(total, 2)


def score_band(total: float) -> str:
    if total >= HIGH_RISK_THRESHOLD:
        return "High"
    if total >= MEDIUM_RISK_THRESHOLD:
        return "Medium"
    return "Low"
