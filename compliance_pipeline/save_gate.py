"""
Strict Save Gate
Final validation barrier before a record is persisted.

    START -> required-field check -> format check
          -> id/timestamp assignment -> persist -> SUCCESS | REJECTED

One pass per request, no internal retry. Structural failures come back with
``cannot_save=True`` (the operator must edit first); persistence failures come
back ``retryable=True`` (nothing was committed, resubmitting is safe).
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import ValidationError

from . import schema
from .errors import (
    FormatViolation,
    MissingRequiredFields,
    PersistenceFailure,
    PipelineError,
    UnknownContentType,
)
from .models import RECORD_MODELS, SaveResult
from .workspace import EditableAnalysis

logger = logging.getLogger(__name__)

ID_PREFIXES = {
    schema.CASE: "case",
    schema.REGULATION: "alert",
}

SUCCESS_MESSAGES = {
    schema.CASE: "Case data saved successfully",
    schema.REGULATION: "Regulation data saved successfully",
}


def generate_id(content_type: str) -> str:
    """e.g. case_1722556800000_3f9a1c2b7"""
    prefix = ID_PREFIXES.get(content_type, "id")
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class StrictSaveGate:
    """Re-validate and persist one record through a record store."""

    def __init__(self, store):
        """
        Args:
            store: Persistence collaborator with save({data, dataType}) -> {success, ...}.
                Any exception it raises is reported as a retryable PersistenceFailure.
        """
        self.store = store

    def save_workspace(self, workspace: EditableAnalysis) -> SaveResult:
        return self.save(workspace.record(), workspace.content_type)

    def save(self, record: Dict[str, Any], content_type: str) -> SaveResult:
        """
        Run the full gate for one record.

        Args:
            record: Extracted (possibly edited) record
            content_type: "case" or "regulation"

        Returns:
            SaveResult - never raises for validation or persistence problems
        """
        try:
            if content_type not in schema.CONTENT_TYPES:
                raise UnknownContentType(content_type)

            # Step 1: required fields (re-run, the workspace may have changed)
            missing = schema.missing_required_fields(content_type, record)
            if missing:
                raise MissingRequiredFields(missing, content_type)

            # Step 2: field formats - every violation, not just the first
            violations = schema.format_violations(content_type, record)
            if violations:
                raise FormatViolation(violations)

            # Step 3: id + timestamps, normalised through the typed record model
            final_data = self._finalize(record, content_type)

            # Step 4: persist
            self._persist(final_data, content_type)

        except (MissingRequiredFields, FormatViolation, UnknownContentType) as e:
            logger.warning(f"Save rejected: {e.message}")
            return SaveResult(
                success=False,
                error=e.message,
                cannot_save=True,
                retryable=False,
                error_type=type(e).__name__,
                violations=_violations_of(e),
            )
        except PersistenceFailure as e:
            logger.error(f"Save failed: {e.message}")
            return SaveResult(
                success=False,
                error=e.message,
                cannot_save=False,
                retryable=True,
                error_type=type(e).__name__,
            )

        logger.info(f"Saved {content_type} record {final_data['id']}")
        return SaveResult(success=True, message=SUCCESS_MESSAGES[content_type], data=final_data)

    def _finalize(self, record: Dict[str, Any], content_type: str) -> Dict[str, Any]:
        data = dict(record)
        if schema.is_empty(data.get("id")):
            data["id"] = generate_id(content_type)
        now = _now_iso()
        data.setdefault("createdAt", now)
        data["updatedAt"] = now

        model = RECORD_MODELS[content_type]
        try:
            return model.model_validate(data).to_storage()
        except ValidationError as e:
            violations = []
            for err in e.errors():
                loc = err.get("loc") or ("record",)
                violations.append((str(loc[0]), err.get("msg", "invalid value")))
            raise FormatViolation(violations)

    def _persist(self, data: Dict[str, Any], content_type: str) -> None:
        try:
            response = self.store.save({"data": data, "dataType": content_type})
        except Exception as e:
            raise PersistenceFailure(f"Database save failed: {e}", cause=e)

        if not response or not response.get("success"):
            error = (response or {}).get("error") or "unknown error"
            raise PersistenceFailure(f"Database save failed: {error}")


def _violations_of(error: PipelineError):
    if isinstance(error, MissingRequiredFields):
        return [(name, "is required") for name in error.fields]
    if isinstance(error, FormatViolation):
        return list(error.violations)
    return []
