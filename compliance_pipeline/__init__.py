"""
Compliance Extraction Pipeline
AI-mediated extraction of court cases and regulatory alerts from legal text.

Components:
- build_prompt: Role-specific prompt construction (chat assistant / risk analyzer)
- ModelGateway: One request to an OpenAI-compatible chat-completions endpoint
- sanitize_response: Isolates the JSON payload from raw model text
- ResultClassifier: Role/content-type/required-field checks + allow-list filter
- EditableAnalysis: Field-by-field operator corrections with an error map
- StrictSaveGate: Final validation, id/timestamp assignment, persistence
- JsonRecordStore: Append-only JSON file persistence
- ComplianceAnalyzer: Orchestrates text -> extraction -> workspace -> save
"""

from .config import PipelineConfig
from .errors import (
    ConfigurationError,
    EmptyInput,
    FormatViolation,
    MalformedModelOutput,
    MissingRequiredFields,
    OperationInProgress,
    PersistenceFailure,
    PipelineError,
    RoleMismatch,
    ServiceUnavailable,
    UnknownContentType,
)
from .models import (
    CaseRecord,
    ChatMessage,
    ChatReply,
    ExtractionResult,
    QuantitativeScore,
    RegulationRecord,
    RiskAssessment,
    SaveResult,
)
from .prompts import PromptContext, PromptRole, build_prompt
from .gateway import ModelGateway
from .sanitizer import sanitize_response, parse_payload
from .classifier import ResultClassifier
from .workspace import EditableAnalysis
from .storage import JsonRecordStore
from .save_gate import StrictSaveGate
from .analyzer import AnalysisSession, BatchOutcome, ComplianceAnalyzer

__all__ = [
    # Core pipeline
    'PipelineConfig',
    'PromptRole',
    'PromptContext',
    'build_prompt',
    'ModelGateway',
    'sanitize_response',
    'parse_payload',
    'ResultClassifier',
    'EditableAnalysis',
    'StrictSaveGate',
    'JsonRecordStore',
    'ComplianceAnalyzer',
    'AnalysisSession',
    'BatchOutcome',

    # Models
    'ExtractionResult',
    'RiskAssessment',
    'QuantitativeScore',
    'CaseRecord',
    'RegulationRecord',
    'ChatMessage',
    'ChatReply',
    'SaveResult',

    # Errors
    'PipelineError',
    'ConfigurationError',
    'EmptyInput',
    'OperationInProgress',
    'ServiceUnavailable',
    'MalformedModelOutput',
    'RoleMismatch',
    'UnknownContentType',
    'MissingRequiredFields',
    'FormatViolation',
    'PersistenceFailure',
]
