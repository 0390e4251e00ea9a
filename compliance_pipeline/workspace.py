"""
Editable Analysis Workspace
Mutable copy of an extraction that the operator corrects field by field
before committing it through the save gate.
"""

import copy
import logging
from typing import Any, Dict, Optional

from . import schema
from .models import ExtractionResult, RiskAssessment

logger = logging.getLogger(__name__)


class EditableAnalysis:
    """
    Record under edit plus a field -> reason map of validation errors.

    Errors are sparse: a field only has an entry while its current value
    breaks a rule. ``has_errors()`` is what the UI uses to disable saving.
    """

    def __init__(
        self,
        content_type: str,
        extracted_data: Dict[str, Any],
        risk_assessment: RiskAssessment,
        confidence: float = 0.0,
        analysis_summary: str = "",
        legal_basis: Optional[Any] = None,
    ):
        self.content_type = content_type
        self.extracted_data: Dict[str, Any] = dict(extracted_data)
        self.risk_assessment = risk_assessment
        self.confidence = confidence
        self.analysis_summary = analysis_summary
        self.legal_basis = legal_basis
        self._errors: Dict[str, str] = {}

    @classmethod
    def from_result(cls, result: ExtractionResult) -> 'EditableAnalysis':
        return cls(
            content_type=result.content_type.value,
            extracted_data=copy.deepcopy(result.extracted_data),
            risk_assessment=result.risk_assessment,
            confidence=result.confidence,
            analysis_summary=result.analysis_summary,
            legal_basis=result.legal_basis,
        )

    def set_field(self, name: str, value: Any) -> Optional[str]:
        """
        Write a value and re-validate that field alone.

        Returns:
            The error reason now recorded for the field, or None if it is valid
        """
        self.extracted_data[name] = value
        reason = schema.validate_field(self.content_type, name, value)
        if reason:
            self._errors[name] = reason
            logger.debug(f"Field '{name}' invalid: {reason}")
        else:
            self._errors.pop(name, None)
        return reason

    def has_errors(self) -> bool:
        return bool(self._errors)

    def error_for(self, name: str) -> Optional[str]:
        return self._errors.get(name)

    @property
    def field_errors(self) -> Dict[str, str]:
        return dict(self._errors)

    def revalidate(self) -> Dict[str, str]:
        """Validate every schema field at once, replacing the error map."""
        self._errors = {}
        for name in schema.ALLOWED_FIELDS.get(self.content_type, []):
            reason = schema.validate_field(self.content_type, name, self.extracted_data.get(name))
            if reason:
                self._errors[name] = reason
        return self.field_errors

    def record(self) -> Dict[str, Any]:
        """Deep copy of the record as it would be handed to the save gate."""
        return copy.deepcopy(self.extracted_data)
