"""Main entry point for resume-ats."""

import argparse
import json
import sys
from datetime import UTC, datetime
from pathlib import Path

from resume_ats import __version__
from resume_ats.config.settings import Settings
from resume_ats.errors import ResumeScoringError
from resume_ats.utils.logging import configure_logging


def _timestamp_run_id(prefix: str) -> str:
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}"


def _resolve_run_dir(
    settings: Settings, *, prefix: str, out_run_dir: Path | None
) -> Path:
    if out_run_dir is not None:
        run_dir = out_run_dir
    else:
        run_dir = settings.output_dir / "runs" / _timestamp_run_id(prefix)
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def _write_json(path: Path, payload: object) -> None:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        return str(value)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(payload, indent=2, default=_default),
        encoding="utf-8",
    )


def _read_resume(path: Path, as_text: bool):
    """Return ``(text, source_format)`` for a resume file."""
    if as_text or path.suffix.lower() == ".txt":
        if not path.exists():
            raise FileNotFoundError(f"Resume not found: {path}")
        return path.read_text(encoding="utf-8"), None

    from resume_ats.extractor.service import extract_file

    return extract_file(path)


def _scoring_config(parsed: argparse.Namespace):
    from resume_ats.scoring.config import ScoringConfig

    overrides: dict[str, object] = {}
    method = getattr(parsed, "method", None)
    if method is not None:
        overrides["scoring_mode"] = method
    if getattr(parsed, "fallback", False):
        overrides["fallback_to_deterministic"] = True
    return ScoringConfig(**overrides)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="resume-ats",
        description="resume-ats: score resumes for ATS readiness",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m resume_ats analyze resume.pdf
  python -m resume_ats analyze resume.docx --method llm --fallback
  python -m resume_ats quick-score resume.txt
  python -m resume_ats score-eval --input resumes/
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="mode",
        title="modes",
        description="Available commands",
    )

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a resume and write the full report (PDF/DOC/DOCX/TXT)",
    )
    analyze_parser.add_argument("file", type=Path, help="Path to the resume")
    analyze_parser.add_argument(
        "--method",
        choices=["deterministic", "llm"],
        default=None,
        help="Analyzer strategy (overrides ATS_SCORING_MODE)",
    )
    analyze_parser.add_argument(
        "--fallback",
        action="store_true",
        help="Fall back to the deterministic analyzer if the LLM analyzer fails",
    )
    analyze_parser.add_argument(
        "--text",
        action="store_true",
        help="Treat the file as plain UTF-8 text regardless of extension",
    )
    analyze_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Where to write the JSON report (defaults under artifacts/runs/)",
    )

    quick_parser = subparsers.add_parser(
        "quick-score",
        help="Print only the ATS score",
    )
    quick_parser.add_argument("file", type=Path, help="Path to the resume")
    quick_parser.add_argument(
        "--method",
        choices=["deterministic", "llm"],
        default=None,
        help="Analyzer strategy (overrides ATS_SCORING_MODE)",
    )
    quick_parser.add_argument(
        "--text",
        action="store_true",
        help="Treat the file as plain UTF-8 text regardless of extension",
    )

    score_eval_parser = subparsers.add_parser(
        "score-eval",
        help="Compare deterministic vs LLM analysis over plain-text resumes",
    )
    score_eval_parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Path to a .txt resume or a directory of .txt resumes",
    )
    score_eval_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Optional limit on resumes evaluated (cost control)",
    )
    score_eval_parser.add_argument(
        "--out-run-dir",
        type=Path,
        default=None,
        help="Optional output run directory (defaults under artifacts/runs/)",
    )

    return parser


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    if parsed.mode is None:
        parser.print_help()
        return 0

    logger.debug("resume-ats v%s running %s", __version__, parsed.mode)

    try:
        return _dispatch(parsed, settings)
    except (ResumeScoringError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _dispatch(parsed: argparse.Namespace, settings: Settings) -> int:
    from resume_ats.scoring.service import create_analyzer, format_report, quick_score

    if parsed.mode == "analyze":
        text, source_format = _read_resume(parsed.file, parsed.text)
        analyzer = create_analyzer(_scoring_config(parsed))
        report = analyzer.analyze(text, source_format)

        print(format_report(report))

        output_path = parsed.out
        if output_path is None:
            run_dir = _resolve_run_dir(settings, prefix="analyze", out_run_dir=None)
            output_path = run_dir / "ats_report.json"
        _write_json(output_path, report.to_dict())
        print(f"Wrote: {output_path}")
        return 0

    if parsed.mode == "quick-score":
        text, source_format = _read_resume(parsed.file, parsed.text)
        analyzer = create_analyzer(_scoring_config(parsed))
        print(quick_score(text, analyzer, source_format))
        return 0

    if parsed.mode == "score-eval":
        from resume_ats.scoring.config import ScoringConfig
        from resume_ats.scoring.evaluation import (
            build_score_eval_report,
            load_resume_texts,
        )
        from resume_ats.scoring.service import DeterministicAnalyzer, RemoteAnalyzer

        run_dir = _resolve_run_dir(
            settings,
            prefix="score-eval",
            out_run_dir=parsed.out_run_dir,
        )

        config = ScoringConfig()
        report = build_score_eval_report(
            resumes=load_resume_texts(parsed.input),
            deterministic_analyzer=DeterministicAnalyzer(config=config),
            llm_analyzer=RemoteAnalyzer(config=config),
            limit=parsed.limit,
        )

        report_path = run_dir / "score_eval_report.json"
        _write_json(report_path, report)
        print(f"Wrote: {report_path}")

        summary = report["summary"]
        print(
            "Resumes: "
            f"total={summary['total_resumes']} evaluated={summary['evaluated']} "
            f"disagreements={summary['disagreements']} llm_failures={summary['llm_failures']}"
        )
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
