"""
Compliance Analyzer - Orchestrates the extraction pipeline

Pipeline:
1. Build the role prompt
2. Call the model gateway
3. Sanitize + classify the response
4. Wrap it in an editable workspace
5. Commit through the strict save gate
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from tqdm import tqdm

from .classifier import ResultClassifier
from .config import PipelineConfig
from .errors import EmptyInput, OperationInProgress, PipelineError
from .gateway import ModelGateway
from .models import ChatMessage, ChatReply, ChatRole, SaveResult
from .prompts import PromptContext, PromptRole, build_prompt, find_doctrinal_terms
from .save_gate import StrictSaveGate
from .storage import JsonRecordStore
from .workspace import EditableAnalysis

logger = logging.getLogger(__name__)


def truncate_text(text: str, max_chars: int) -> str:
    """Keep the beginning and end of long inputs."""
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    half = max_chars // 2
    logger.info(f"Text truncated to {max_chars} chars")
    return text[:half] + "\n\n[...middle content truncated...]\n\n" + text[-half:]


@dataclass
class BatchOutcome:
    """Result for one input of a batch run."""
    index: int
    success: bool
    content_type: Optional[str] = None
    record_id: Optional[str] = None
    error_type: Optional[str] = None
    error: Optional[str] = None
    field_errors: dict = field(default_factory=dict)


class ComplianceAnalyzer:
    """
    Main entry point for analysing legal text and saving the result.

    Every call is a single attempt: failures are raised (analyze/chat) or
    returned (save) so the operator decides whether to resubmit.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        gateway: Optional[ModelGateway] = None,
        save_gate: Optional[StrictSaveGate] = None,
    ):
        """
        Args:
            config: PipelineConfig (loaded from env if not provided)
            gateway: ModelGateway instance (created from config if not provided)
            save_gate: StrictSaveGate instance (JSON store under config.data_dir if not provided)
        """
        self.config = config or PipelineConfig.from_env()
        self.gateway = gateway or ModelGateway(self.config)
        self.save_gate = save_gate or StrictSaveGate(
            JsonRecordStore(self.config.data_dir, self.config.mirror_dir)
        )
        self.classifier = ResultClassifier(PromptRole.RISK_ANALYZER)

    def analyze(self, text: str) -> EditableAnalysis:
        """
        Extract a structured case/regulation record from legal text.

        Raises:
            EmptyInput, ServiceUnavailable, MalformedModelOutput,
            RoleMismatch, UnknownContentType, MissingRequiredFields
        """
        if not text or not text.strip():
            raise EmptyInput("Please enter text to analyze")

        text = truncate_text(text, self.config.max_input_chars)
        prompt = build_prompt(PromptRole.RISK_ANALYZER, text)

        raw = self.gateway.complete([ChatMessage(role=ChatRole.USER, content=prompt)])
        result = self.classifier.classify(raw)

        terms = find_doctrinal_terms(text)
        if terms and not result.legal_basis:
            logger.warning(f"Legal terms {terms} detected but the model gave no legal_basis")

        logger.info(
            f"Analysis complete: {result.content_type.value}, "
            f"risk={result.risk_assessment.level.value}, confidence={result.confidence}"
        )
        return EditableAnalysis.from_result(result)

    def chat(
        self,
        message: str,
        history: Optional[List[str]] = None,
        company_context: Optional[str] = None,
    ) -> ChatReply:
        """Free-text compliance Q&A; the reply is returned as-is."""
        if not message or not message.strip():
            raise EmptyInput("Messages are required")

        context = PromptContext(conversation_history=list(history or []), company_context=company_context)
        prompt = build_prompt(PromptRole.CHAT_ASSISTANT, message, context)
        content = self.gateway.complete([ChatMessage(role=ChatRole.USER, content=prompt)])

        return ChatReply(
            content=content,
            timestamp=datetime.now(timezone.utc).isoformat(),
            company_context_used=bool(company_context),
        )

    def save(self, workspace: EditableAnalysis) -> SaveResult:
        return self.save_gate.save_workspace(workspace)

    def analyze_batch(self, texts: Iterable[str], save: bool = True) -> List[BatchOutcome]:
        """
        Analyse many inputs, saving each clean extraction.

        Each item gets exactly one attempt; failures are recorded and the
        batch moves on.
        """
        texts = list(texts)
        outcomes = []

        for index, text in enumerate(tqdm(texts, desc="Analyzing", unit="doc")):
            try:
                workspace = self.analyze(text)
            except PipelineError as e:
                logger.warning(f"[{index}] Analysis failed: {e.message}")
                outcomes.append(BatchOutcome(index=index, success=False, error_type=type(e).__name__, error=e.message))
                continue

            field_errors = workspace.revalidate()
            if not save or field_errors:
                outcomes.append(BatchOutcome(
                    index=index,
                    success=not field_errors,
                    content_type=workspace.content_type,
                    error_type="FormatViolation" if field_errors else None,
                    field_errors=field_errors,
                ))
                continue

            result = self.save(workspace)
            outcomes.append(BatchOutcome(
                index=index,
                success=result.success,
                content_type=workspace.content_type,
                record_id=(result.data or {}).get("id"),
                error_type=result.error_type,
                error=result.error,
            ))

        successful = sum(1 for o in outcomes if o.success)
        logger.info(f"Batch complete: {successful}/{len(outcomes)} successful")
        return outcomes


class AnalysisSession:
    """
    One operator's workspace: at most one analyze or save in flight.

    The workspace is replaced on re-analyze and discarded after a successful save.
    """

    def __init__(self, analyzer: ComplianceAnalyzer):
        self.analyzer = analyzer
        self.workspace: Optional[EditableAnalysis] = None
        self._in_flight = threading.Lock()

    def _acquire(self, operation: str) -> None:
        if not self._in_flight.acquire(blocking=False):
            raise OperationInProgress(f"Cannot {operation}: another request is still running")

    def analyze(self, text: str) -> EditableAnalysis:
        self._acquire("analyze")
        try:
            self.workspace = None
            self.workspace = self.analyzer.analyze(text)
            return self.workspace
        finally:
            self._in_flight.release()

    def save(self) -> SaveResult:
        self._acquire("save")
        try:
            if self.workspace is None:
                raise EmptyInput("Nothing to save: analyze some text first")
            result = self.analyzer.save(self.workspace)
            if result.success:
                self.workspace = None
            return result
        finally:
            self._in_flight.release()
