"""Shared fixtures for the compliance pipeline tests."""

import json

import pytest

from compliance_pipeline.config import PipelineConfig
from compliance_pipeline.save_gate import StrictSaveGate
from compliance_pipeline.storage import JsonRecordStore


@pytest.fixture
def case_data():
    """A complete, valid case extraction."""
    return {
        "title": "Smith v. DataCorp",
        "court": "Northern District of California",
        "jurisdiction": "USA",
        "caseType": "Civil",
        "filingDate": "2024-01-15",
        "status": "active",
        "parties": ["John Smith", "DataCorp Inc."],
        "description": "Class action over unlawful sale of biometric data.",
        "impactLevel": "high",
    }


@pytest.fixture
def regulation_data():
    """A complete, valid regulation extraction."""
    return {
        "title": "EU AI Regulation",
        "region": "EU",
        "severity": "critical",
        "summary": "Risk-based obligations for AI systems placed on the EU market.",
        "timestamp": "2024-08-02",
        "category": "AI Governance",
    }


@pytest.fixture
def risk_assessment():
    return {
        "level": "critical",
        "reasoning": "Fines up to 20M and mandatory obligations",
        "factors": ["fine size", "mandatory"],
        "confidence": 0.9,
    }


@pytest.fixture
def make_response(risk_assessment):
    """Build a risk-analyzer JSON response string."""
    def _make(content_type, extracted_data, **extra):
        payload = {
            "role": "risk-analyzer",
            "contentType": content_type,
            "extractedData": extracted_data,
            "riskAssessment": risk_assessment,
            "analysisSummary": "Summary of the analysis",
            "confidence": 0.9,
        }
        payload.update(extra)
        return json.dumps(payload)
    return _make


class StubGateway:
    """Stands in for ModelGateway: returns canned replies and records requests."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def complete(self, messages):
        self.calls.append(list(messages))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def config(tmp_path):
    return PipelineConfig(api_key="test-key", data_dir=str(tmp_path / "data"))


@pytest.fixture
def store(config):
    return JsonRecordStore(config.data_dir)


@pytest.fixture
def gate(store):
    return StrictSaveGate(store)
