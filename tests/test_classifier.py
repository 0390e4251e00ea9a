"""
Tests for the result classifier: role, content type, required fields and
the allow-list filter.
"""

import json

import pytest

from compliance_pipeline import schema
from compliance_pipeline.classifier import ResultClassifier
from compliance_pipeline.errors import (
    MalformedModelOutput,
    MissingRequiredFields,
    RoleMismatch,
    UnknownContentType,
)
from compliance_pipeline.models import ContentType, RiskLevel


@pytest.fixture
def classifier():
    return ResultClassifier()


class TestRoleAndContentType:
    """Tests for the discriminator checks."""

    def test_accepts_regulation(self, classifier, make_response, regulation_data):
        result = classifier.classify(make_response("regulation", regulation_data))

        assert result.content_type == ContentType.REGULATION
        assert result.extracted_data == regulation_data
        assert result.risk_assessment.level == RiskLevel.CRITICAL
        assert result.confidence == 0.9

    def test_missing_role(self, classifier, make_response, case_data):
        payload = json.loads(make_response("case", case_data))
        del payload["role"]

        with pytest.raises(RoleMismatch) as exc:
            classifier.project(payload)
        assert exc.value.actual is None

    def test_chat_role_rejected(self, classifier, make_response, case_data):
        raw = make_response("case", case_data, role="chat-assistant")

        with pytest.raises(RoleMismatch) as exc:
            classifier.classify(raw)
        assert exc.value.expected == "risk-analyzer"
        assert exc.value.actual == "chat-assistant"

    def test_unknown_role_rejected(self, classifier, make_response, case_data):
        with pytest.raises(RoleMismatch):
            classifier.classify(make_response("case", case_data, role="summarizer"))

    @pytest.mark.parametrize("role", [["risk-analyzer"], {"name": "risk-analyzer"}, 1])
    def test_non_string_role_rejected(self, classifier, make_response, case_data, role):
        """A list or object role is a role mismatch, not a crash."""
        with pytest.raises(RoleMismatch) as exc:
            classifier.classify(make_response("case", case_data, role=role))
        assert exc.value.actual == role

    def test_unknown_content_type(self, classifier, make_response, case_data):
        with pytest.raises(UnknownContentType) as exc:
            classifier.classify(make_response("contract", case_data))
        assert exc.value.content_type == "contract"

    def test_role_checked_before_content_type(self, classifier, make_response, case_data):
        with pytest.raises(RoleMismatch):
            classifier.classify(make_response("contract", case_data, role="other"))


class TestRequiredFields:
    """Tests for required-field enforcement."""

    @pytest.mark.parametrize("missing", schema.CASE_REQUIRED_FIELDS)
    def test_each_missing_case_field_is_named(self, classifier, make_response, case_data, missing):
        del case_data[missing]

        with pytest.raises(MissingRequiredFields) as exc:
            classifier.classify(make_response("case", case_data))
        assert exc.value.fields == [missing]
        assert missing in exc.value.message

    @pytest.mark.parametrize("missing", schema.REGULATION_REQUIRED_FIELDS)
    def test_each_missing_regulation_field_is_named(self, classifier, make_response, regulation_data, missing):
        regulation_data[missing] = ""

        with pytest.raises(MissingRequiredFields) as exc:
            classifier.classify(make_response("regulation", regulation_data))
        assert exc.value.fields == [missing]

    def test_all_missing_fields_reported(self, classifier, make_response, case_data):
        case_data["parties"] = []
        case_data["court"] = None

        with pytest.raises(MissingRequiredFields) as exc:
            classifier.classify(make_response("case", case_data))
        assert exc.value.fields == ["court", "parties"]

    def test_missing_extracted_data(self, classifier, make_response):
        with pytest.raises(MissingRequiredFields) as exc:
            classifier.classify(make_response("regulation", None))
        assert exc.value.fields == schema.REGULATION_REQUIRED_FIELDS

    def test_format_errors_not_checked_here(self, classifier, make_response, case_data):
        """Bad enums and dates pass through to the workspace."""
        case_data["status"] = "pending"
        case_data["filingDate"] = "2024-02-30"

        result = classifier.classify(make_response("case", case_data))

        assert result.extracted_data["status"] == "pending"
        assert result.extracted_data["filingDate"] == "2024-02-30"


class TestAllowListFilter:
    """Tests for dropping invented fields."""

    def test_random_field_dropped(self, classifier, make_response):
        extracted = {
            "title": "X", "court": "Y", "jurisdiction": "Z", "caseType": "Civil",
            "filingDate": "2024-01-01", "status": "active", "parties": ["A", "B"],
            "description": "d", "impactLevel": "high", "randomField": "drop-me",
        }

        result = classifier.classify(make_response("case", extracted))

        assert "randomField" not in result.extracted_data
        assert set(result.extracted_data) <= set(schema.ALLOWED_FIELDS["case"])
        assert result.extracted_data["parties"] == ["A", "B"]

    def test_optional_fields_kept(self, classifier, make_response, case_data):
        case_data["outcome"] = "Settled for 2M"
        case_data["key_issues"] = ["biometric consent"]

        result = classifier.classify(make_response("case", case_data))

        assert result.extracted_data["outcome"] == "Settled for 2M"
        assert result.extracted_data["key_issues"] == ["biometric consent"]

    def test_legal_basis_lifted_out_of_extracted_data(self, classifier, make_response, case_data):
        case_data["legal_basis"] = "Civil Code Article 311"

        result = classifier.classify(make_response("case", case_data))

        assert "legal_basis" not in result.extracted_data
        assert result.legal_basis == "Civil Code Article 311"

    def test_top_level_legal_basis(self, classifier, make_response, case_data):
        result = classifier.classify(make_response("case", case_data, legal_basis="Civil Code Article 122"))
        assert result.legal_basis == "Civil Code Article 122"


class TestRiskAssessment:
    """Tests for risk assessment parsing."""

    def test_missing_risk_assessment(self, classifier, make_response, case_data):
        payload = json.loads(make_response("case", case_data))
        del payload["riskAssessment"]

        with pytest.raises(MalformedModelOutput):
            classifier.project(payload)

    def test_invalid_level(self, classifier, make_response, case_data):
        payload = json.loads(make_response("case", case_data))
        payload["riskAssessment"]["level"] = "catastrophic"

        with pytest.raises(MalformedModelOutput) as exc:
            classifier.project(payload)
        assert "level" in exc.value.message

    def test_level_case_normalised(self, classifier, make_response, case_data):
        payload = json.loads(make_response("case", case_data))
        payload["riskAssessment"]["level"] = "High"

        assert classifier.project(payload).risk_assessment.level == RiskLevel.HIGH

    def test_quantitative_score_recomputed(self, classifier, make_response, case_data):
        payload = json.loads(make_response("case", case_data))
        payload["riskAssessment"]["quantitativeScore"] = {
            "businessRelevance": 5,
            "penaltySeverity": 4,
            "complianceUrgency": 3,
            "totalScore": 2.0,
            "riskLevel": "Low",
        }

        score = classifier.project(payload).risk_assessment.quantitative_score

        assert score.total_score == 4.2
        assert score.risk_level == "High"

    @pytest.mark.parametrize("score", [
        {"businessRelevance": 7, "penaltySeverity": 4, "complianceUrgency": 3},
        {"businessRelevance": 4.5, "penaltySeverity": 4, "complianceUrgency": 3},
        {"businessRelevance": 4},
        "high",
    ])
    def test_invalid_quantitative_score_dropped(self, classifier, make_response, case_data, score):
        """A bad optional sub-score is discarded; the extraction still succeeds."""
        payload = json.loads(make_response("case", case_data))
        payload["riskAssessment"]["quantitativeScore"] = score

        result = classifier.project(payload)

        assert result.risk_assessment.quantitative_score is None
        assert result.risk_assessment.level == RiskLevel.CRITICAL
        assert result.risk_assessment.factors == ["fine size", "mandatory"]
        assert result.extracted_data == case_data

    def test_confidence_falls_back_to_risk_confidence(self, classifier, make_response, case_data):
        payload = json.loads(make_response("case", case_data))
        del payload["confidence"]

        assert classifier.project(payload).confidence == 0.9
