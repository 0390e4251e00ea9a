"""
Result Classifier / Validator
Turns the untrusted model JSON into a trusted ExtractionResult.

    parse:   str -> dict                 (sanitizer)
    project: dict x schema -> ExtractionResult

The allow-list filter in ``project`` is the only bridge between the two.
Format rules (enums, dates) are not checked here: they are fixed in the
editable workspace and enforced by the save gate.
"""

import logging
from typing import Any, Dict

from pydantic import ValidationError

from . import schema
from .errors import MalformedModelOutput, MissingRequiredFields, RoleMismatch, UnknownContentType
from .models import ExtractionResult, QuantitativeScore, RiskAssessment
from .prompts import PromptRole
from .sanitizer import parse_payload

logger = logging.getLogger(__name__)


class ResultClassifier:
    """Validate a risk-analyzer response and keep only storage-relevant fields."""

    def __init__(self, expected_role: PromptRole = PromptRole.RISK_ANALYZER):
        self.expected_role = PromptRole(expected_role)

    def classify(self, raw_text: str) -> ExtractionResult:
        """
        Parse and project raw model output.

        Raises:
            MalformedModelOutput, RoleMismatch, UnknownContentType, MissingRequiredFields
        """
        payload = parse_payload(raw_text)
        return self.project(payload)

    def project(self, payload: Dict[str, Any]) -> ExtractionResult:
        # Step 1: role discriminator
        role = payload.get("role")
        known_roles = [r.value for r in PromptRole]
        if not isinstance(role, str) or role not in known_roles or role != self.expected_role.value:
            raise RoleMismatch(self.expected_role.value, role)

        # Step 2: content type
        content_type = payload.get("contentType")
        if content_type not in schema.CONTENT_TYPES:
            raise UnknownContentType(content_type)

        # Step 3: required fields - collect them all
        extracted = payload.get("extractedData")
        if extracted is None:
            extracted = {}
        if not isinstance(extracted, dict):
            raise MalformedModelOutput("extractedData must be a JSON object")

        missing = schema.missing_required_fields(content_type, extracted)
        if missing:
            logger.warning(f"Extraction missing required {content_type} fields: {missing}")
            raise MissingRequiredFields(missing, content_type)

        # Allow-list filter
        kept, dropped = schema.filter_allowed(content_type, extracted)
        if dropped:
            logger.info(f"Dropped fields not in the {content_type} schema: {dropped}")

        # legal_basis may come at the top level or inside extractedData
        legal_basis = payload.get("legal_basis") or extracted.get("legal_basis")

        risk = self._parse_risk_assessment(payload.get("riskAssessment"))
        confidence = payload.get("confidence")
        if confidence is None:
            confidence = risk.confidence

        try:
            return ExtractionResult(
                role=role,
                content_type=content_type,
                extracted_data=kept,
                risk_assessment=risk,
                analysis_summary=str(payload.get("analysisSummary") or ""),
                confidence=confidence,
                legal_basis=legal_basis,
            )
        except ValidationError as e:
            raise MalformedModelOutput(f"Invalid analysis envelope: {_summarize(e)}", cause=e)

    @staticmethod
    def _parse_risk_assessment(data: Any) -> RiskAssessment:
        if not isinstance(data, dict):
            raise MalformedModelOutput("riskAssessment is missing or not an object")
        data = dict(data)
        score_data = data.pop("quantitativeScore", None)
        try:
            risk = RiskAssessment.model_validate(data)
        except ValidationError as e:
            raise MalformedModelOutput(f"Invalid riskAssessment: {_summarize(e)}", cause=e)

        # The sub-score is optional: a bad one is dropped, not fatal
        if score_data is not None:
            try:
                risk.quantitative_score = QuantitativeScore.model_validate(score_data)
            except ValidationError as e:
                logger.warning(f"Ignoring invalid quantitativeScore: {_summarize(e)}")
        return risk


def _summarize(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)
