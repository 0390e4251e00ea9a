#!/usr/bin/env python
"""
Run Pipeline - CLI entry point for the compliance extraction pipeline.

Usage:
    # Analyse a single text and show the extracted record
    python -m compliance_pipeline.run_pipeline --file notice.txt

    # Correct fields and save
    python -m compliance_pipeline.run_pipeline --file notice.txt --set severity=high --save

    # Analyse and save a batch from a CSV column
    python -m compliance_pipeline.run_pipeline --batch --csv crawled.csv --text-column text

    # Ask the compliance assistant
    python -m compliance_pipeline.run_pipeline --chat "What does GDPR Art. 33 require?"
"""

import argparse
import json
import logging
import sys

import pandas as pd

from .analyzer import AnalysisSession, ComplianceAnalyzer
from .config import PipelineConfig
from .errors import MissingRequiredFields, PipelineError
from .gateway import ModelGateway

logger = logging.getLogger(__name__)


def _parse_assignment(raw: str):
    """field=value; JSON lists and objects are decoded (e.g. parties='["A","B"]')."""
    if "=" not in raw:
        raise argparse.ArgumentTypeError(f"Expected field=value, got '{raw}'")
    name, value = raw.split("=", 1)
    try:
        decoded = json.loads(value)
    except ValueError:
        decoded = None
    if isinstance(decoded, (list, dict)):
        value = decoded
    return name.strip(), value


def _print_workspace(workspace):
    print(f"\n{'='*50}")
    print(f"{workspace.content_type.title()} Analysis Result")
    print(f"{'='*50}")
    for name, value in workspace.extracted_data.items():
        marker = "✗" if workspace.error_for(name) else "✓"
        print(f"  {marker} {name}: {value}")
        if workspace.error_for(name):
            print(f"      -> {workspace.error_for(name)}")
    risk = workspace.risk_assessment
    print(f"\n  Risk: {risk.level.value.upper()} (confidence {workspace.confidence * 100:.1f}%)")
    print(f"  Reasoning: {risk.reasoning}")
    if risk.factors:
        print(f"  Factors: {', '.join(risk.factors)}")
    if risk.quantitative_score:
        score = risk.quantitative_score
        print(f"  Score: {score.total_score} ({score.risk_level})")
    if workspace.legal_basis:
        print(f"  Legal basis: {workspace.legal_basis}")
    if workspace.analysis_summary:
        print(f"  Summary: {workspace.analysis_summary}")


def analyze_single(args, analyzer: ComplianceAnalyzer) -> int:
    """Analyse one text, apply edits, optionally save."""
    if args.file:
        with open(args.file, 'r', encoding='utf-8') as f:
            text = f.read()
    else:
        text = args.text

    session = AnalysisSession(analyzer)
    try:
        workspace = session.analyze(text)
    except MissingRequiredFields as e:
        print(f"\n✗ {e.message}")
        print("  Re-analyze, or add the missing details to the input text")
        return 1

    for name, value in args.set or []:
        workspace.set_field(name, value)
    workspace.revalidate()
    _print_workspace(workspace)

    if not args.save:
        return 0

    if workspace.has_errors():
        print("\n✗ Field errors detected, please correct before saving")
        return 1

    result = session.save()
    if result.success:
        print(f"\n✓ {result.message} (id: {result.data['id']})")
        return 0

    print(f"\n✗ {result.error}")
    if result.retryable:
        print("  Nothing was saved; it is safe to retry")
    return 1


def process_batch(args, analyzer: ComplianceAnalyzer) -> int:
    """Analyse every row of a CSV column."""
    df = pd.read_csv(args.csv)
    if args.text_column not in df.columns:
        logger.error(f"Column '{args.text_column}' not found. Available: {list(df.columns)}")
        return 1

    texts = df[args.text_column].fillna("").astype(str).tolist()
    if args.limit:
        texts = texts[:args.limit]

    outcomes = analyzer.analyze_batch(texts, save=not args.dry_run)

    successful = [o for o in outcomes if o.success]
    print(f"\n{'='*50}")
    print(f"Batch Processing Complete")
    print(f"{'='*50}")
    print(f"  Total rows: {len(outcomes)}")
    print(f"  {'Valid' if args.dry_run else 'Saved'}: {len(successful)}")
    print(f"  Failed: {len(outcomes) - len(successful)}")
    for o in outcomes:
        if not o.success:
            detail = o.error or ", ".join(f"{k} {v}" for k, v in o.field_errors.items())
            print(f"    row {o.index}: {o.error_type} - {detail}")

    return 0 if len(successful) == len(outcomes) else 1


def run_chat(args, analyzer: ComplianceAnalyzer) -> int:
    reply = analyzer.chat(args.chat, company_context=args.company_context)
    print(reply.content)
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Compliance Extraction Pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m compliance_pipeline.run_pipeline --text "The EU passed a new AI regulation..."
  python -m compliance_pipeline.run_pipeline --file case.txt --set status=decided --save
  python -m compliance_pipeline.run_pipeline --batch --csv crawled.csv --limit 10
  python -m compliance_pipeline.run_pipeline --chat "Explain PIPL cross-border transfer rules"
  python -m compliance_pipeline.run_pipeline --check-connection
        """
    )

    # Mode selection
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument('--batch', action='store_true', help='Analyse a CSV of texts')
    mode_group.add_argument('--chat', type=str, help='Ask the compliance assistant a question')
    mode_group.add_argument('--check-connection', action='store_true', help='Check the model endpoint is reachable')

    # Single input
    parser.add_argument('--text', type=str, help='Legal text to analyse')
    parser.add_argument('--file', type=str, help='File containing the legal text')
    parser.add_argument('--set', type=_parse_assignment, action='append', metavar='FIELD=VALUE',
                        help='Correct a field before saving (repeatable)')
    parser.add_argument('--save', action='store_true', help='Save the record through the strict save gate')

    # Batch input
    parser.add_argument('--csv', type=str, help='CSV file for --batch')
    parser.add_argument('--text-column', type=str, default='text', help='CSV column holding the text (default: text)')
    parser.add_argument('--limit', type=int, help='Limit number of rows in batch')
    parser.add_argument('--dry-run', action='store_true', help='Validate batch results without saving')

    # Chat
    parser.add_argument('--company-context', type=str, help='Business context for --chat')

    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = PipelineConfig.from_env()

        if args.check_connection:
            ok = ModelGateway(config).test_connection()
            print("✓ Connection OK" if ok else "✗ Connection failed - check logs")
            return 0 if ok else 1

        analyzer = ComplianceAnalyzer(config)

        if args.chat:
            return run_chat(args, analyzer)
        if args.batch:
            if not args.csv:
                parser.error("--batch requires --csv")
            return process_batch(args, analyzer)

        if not args.text and not args.file:
            parser.error("Single analysis requires --text or --file")
        return analyze_single(args, analyzer)

    except PipelineError as e:
        logger.error(f"{type(e).__name__}: {e.message}")
        print(f"\n✗ {e.message}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
