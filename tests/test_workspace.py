"""
Tests for the editable analysis workspace.
"""

import pytest

from compliance_pipeline.models import ExtractionResult, RiskAssessment
from compliance_pipeline.workspace import EditableAnalysis


@pytest.fixture
def workspace(case_data, risk_assessment):
    result = ExtractionResult(
        content_type="case",
        extracted_data=case_data,
        risk_assessment=RiskAssessment.model_validate(risk_assessment),
        confidence=0.8,
        analysis_summary="summary",
    )
    return EditableAnalysis.from_result(result)


class TestSetField:
    """Tests for per-field editing."""

    def test_valid_value_has_no_error(self, workspace):
        assert workspace.set_field("status", "settled") is None
        assert not workspace.has_errors()
        assert workspace.extracted_data["status"] == "settled"

    def test_same_valid_value_twice(self, workspace):
        """Setting the same valid value repeatedly never flags an error."""
        workspace.set_field("impactLevel", "low")
        assert not workspace.has_errors()
        workspace.set_field("impactLevel", "low")
        assert not workspace.has_errors()

    def test_invalid_enum_flags_field(self, workspace):
        reason = workspace.set_field("status", "pending")

        assert reason is not None
        assert workspace.has_errors()
        assert workspace.error_for("status") == reason

    def test_correction_clears_error(self, workspace):
        workspace.set_field("filingDate", "2024-02-30")
        assert workspace.error_for("filingDate") == "must be a valid YYYY-MM-DD date"

        workspace.set_field("filingDate", "2024-02-28")

        assert workspace.error_for("filingDate") is None
        assert not workspace.has_errors()

    def test_clearing_required_field(self, workspace):
        assert workspace.set_field("court", "") == "is required"
        assert workspace.field_errors == {"court": "is required"}

    def test_only_edited_field_is_checked(self, workspace):
        """Errors on other fields are not recomputed by set_field."""
        workspace.extracted_data["status"] = "pending"

        workspace.set_field("title", "New title")

        assert not workspace.has_errors()

    def test_field_errors_is_a_copy(self, workspace):
        workspace.set_field("status", "pending")
        workspace.field_errors.clear()

        assert workspace.has_errors()


class TestRevalidate:
    """Tests for full-record validation."""

    def test_finds_every_problem(self, workspace):
        workspace.extracted_data["status"] = "pending"
        workspace.extracted_data["court"] = ""

        errors = workspace.revalidate()

        assert set(errors) == {"status", "court"}
        assert workspace.has_errors()

    def test_clean_record(self, workspace):
        assert workspace.revalidate() == {}


class TestRecord:
    """Tests for handing the record to the save gate."""

    def test_record_is_deep_copy(self, workspace):
        record = workspace.record()
        record["parties"].append("Intervenor")

        assert workspace.extracted_data["parties"] == ["John Smith", "DataCorp Inc."]

    def test_from_result_copies_data(self, case_data, risk_assessment):
        result = ExtractionResult(
            content_type="case",
            extracted_data=case_data,
            risk_assessment=RiskAssessment.model_validate(risk_assessment),
        )
        ws = EditableAnalysis.from_result(result)
        ws.set_field("title", "Changed")

        assert result.extracted_data["title"] == "Smith v. DataCorp"
        assert ws.content_type == "case"


class TestAgreementWithSaveGate:
    """The workspace flags exactly what the save gate rejects."""

    def test_wrong_types_flagged(self, workspace):
        workspace.set_field("title", 12345)
        workspace.set_field("court", ["Supreme Court"])

        assert workspace.field_errors == {"title": "must be a string", "court": "must be a string"}

    def test_flagged_record_rejected_with_same_fields(self, workspace, gate):
        workspace.set_field("title", 12345)
        workspace.set_field("parties", "Smith vs DataCorp")

        result = gate.save_workspace(workspace)

        assert not result.success
        assert sorted(result.invalid_fields) == sorted(workspace.field_errors)

    def test_regulation_category_list(self, regulation_data, risk_assessment, gate):
        result = ExtractionResult(
            content_type="regulation",
            extracted_data=regulation_data,
            risk_assessment=RiskAssessment.model_validate(risk_assessment),
        )
        ws = EditableAnalysis.from_result(result)

        ws.set_field("category", ["AI"])

        assert ws.has_errors()
        assert gate.save_workspace(ws).invalid_fields == ["category"]

    def test_clean_workspace_saves(self, workspace, gate):
        workspace.set_field("title", "Smith v. DataCorp (amended)")

        assert not workspace.has_errors()
        assert gate.save_workspace(workspace).success
