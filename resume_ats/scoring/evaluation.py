"""Evaluation harness for comparing deterministic vs LLM resume analysis."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from resume_ats.errors import ResumeScoringError


def load_resume_texts(path: Path) -> dict[str, str]:
    """Load plain-text resumes keyed by file name.

    Supported inputs:
    - A single .txt file
    - A directory containing .txt files (searched recursively)
    """
    if path.is_dir():
        resumes: dict[str, str] = {}
        for txt_path in sorted(path.rglob("*.txt")):
            key = str(txt_path.relative_to(path))
            resumes[key] = txt_path.read_text(encoding="utf-8")
        return resumes

    if path.suffix.lower() != ".txt":
        raise ValueError(f"Expected a .txt resume or a directory: {path}")
    return {path.name: path.read_text(encoding="utf-8")}


def _run(analyzer: Any, text: str) -> tuple[Any, str | None]:
    try:
        return analyzer.analyze(text), None
    except ResumeScoringError as e:
        return None, f"{type(e).__name__}: {e}"


def build_score_eval_report(
    *,
    resumes: dict[str, str],
    deterministic_analyzer: Any,
    llm_analyzer: Any,
    limit: int | None = None,
) -> dict[str, Any]:
    """Run both analyzers over resumes and build a JSON-serializable report."""
    items: list[dict[str, Any]] = []

    for idx, (name, text) in enumerate(resumes.items()):
        if limit is not None and idx >= limit:
            break

        det, det_error = _run(deterministic_analyzer, text)
        llm, llm_error = _run(llm_analyzer, text)

        det_score = getattr(det, "total_score", None)
        llm_score = getattr(llm, "total_score", None)
        det_rating = getattr(getattr(det, "rating", None), "value", None)
        llm_rating = getattr(getattr(llm, "rating", None), "value", None)

        items.append(
            {
                "resume": name,
                "deterministic": {
                    "score": det_score,
                    "rating": det_rating,
                    "breakdown": getattr(det, "breakdown", None),
                    "error": det_error,
                },
                "llm": {
                    "score": llm_score,
                    "rating": llm_rating,
                    "breakdown": getattr(llm, "breakdown", None),
                    "method": getattr(getattr(llm, "metadata", None), "method", None),
                    "error": llm_error,
                },
                "delta_score": (llm_score - det_score)
                if isinstance(det_score, int) and isinstance(llm_score, int)
                else None,
                "rating_changed": det_rating != llm_rating,
            }
        )

    return {
        "summary": summarize_score_eval_items(total_resumes=len(resumes), items=items),
        "items": items,
    }


def summarize_score_eval_items(
    *, total_resumes: int, items: list[dict[str, Any]]
) -> dict[str, Any]:
    det_counts: dict[str, int] = {}
    llm_counts: dict[str, int] = {}

    disagreements = 0
    llm_failures = 0
    score_deltas: list[float] = []

    for item in items:
        det_rating = item["deterministic"]["rating"]
        llm = item["llm"]

        det_counts[str(det_rating)] = det_counts.get(str(det_rating), 0) + 1
        llm_counts[str(llm["rating"])] = llm_counts.get(str(llm["rating"]), 0) + 1

        if det_rating != llm["rating"]:
            disagreements += 1

        # A fallback report counts as a failed remote analysis.
        if llm["error"] or llm["method"] == "deterministic":
            llm_failures += 1

        if item["delta_score"] is not None:
            score_deltas.append(float(item["delta_score"]))

    avg_delta = sum(score_deltas) / len(score_deltas) if score_deltas else 0.0
    avg_abs_delta = (
        sum(abs(d) for d in score_deltas) / len(score_deltas) if score_deltas else 0.0
    )

    return {
        "total_resumes": total_resumes,
        "evaluated": len(items),
        "disagreements": disagreements,
        "agreement_rate": (1.0 - (disagreements / len(items))) if items else 1.0,
        "avg_score_delta": avg_delta,
        "avg_abs_score_delta": avg_abs_delta,
        "llm_failures": llm_failures,
        "deterministic_ratings": det_counts,
        "llm_ratings": llm_counts,
    }
