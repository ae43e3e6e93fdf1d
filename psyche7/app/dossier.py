from __future__ import annotations

"""Plain-text rendering of the dossier and rankings shown by the views."""

from typing import List, Sequence

from ..session.schema import PersonalityReport
from ..storage.schema import LeaderboardEntry

NO_RISKS = "NO CRITICAL ANOMALIES DETECTED."
DISCLAIMER = (
    "This evaluation is AI-generated and for entertainment purposes only. "
    "Do not use for clinical diagnosis."
)


def _section(title: str, items: Sequence[str], bullet: str) -> List[str]:
    lines = [f"[ {title} ]"]
    lines.extend(f"  {bullet} {item}" for item in items)
    lines.append("")
    return lines


def format_dossier(report: PersonalityReport, ref: str) -> str:
    lines = [
        f"DOSSIER: {report.subject_name}",
        f"REF: {ref.upper()} // CLASSIFIED",
        f"GENERATED: {report.generated_at.strftime('%Y-%m-%d %H:%M UTC')}",
        f"STABILITY SCORE: {report.score}/100",
        "",
    ]
    lines += _section("DOMINANT TRAITS", report.dominant_traits, "#")
    lines += _section("BEHAVIORAL ANALYSIS", report.behavioral_tendencies, "::")
    lines += _section("OPERATIONAL STRENGTHS", report.strengths, "+")
    lines += _section("VULNERABILITIES", report.weaknesses, "!")
    if report.risk_indicators:
        lines += _section("RISK ASSESSMENT", report.risk_indicators, "WARNING:")
    else:
        lines += ["[ RISK ASSESSMENT ]", f"  {NO_RISKS}", ""]
    lines.append(f"ALGORITHM CONFIDENCE: {report.confidence_score}% VERIFIED")
    return "\n".join(lines)


def ranking_rows(entries: Sequence[LeaderboardEntry]) -> List[tuple]:
    """(rank, agent, stability, date) rows in leaderboard order."""
    return [
        (idx, e.username, str(e.score), e.date.strftime("%Y-%m-%d"))
        for idx, e in enumerate(entries, start=1)
    ]
