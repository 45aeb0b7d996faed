"""Render a GateVerdict as plain text or Markdown."""

from typing import List

from ..config import DEFAULT_TITLE
from .base import GateVerdict, SummaryLine, Verdict

COMMENT_MARKER = "<!-- quality-gate -->"

_EMOJI = {
    Verdict.PASS: "✅",
    Verdict.FAIL: "❌",
    Verdict.WARN: "⚠️",
}


def _effect(line: SummaryLine) -> str:
    if line.blocked:
        return "blocking"
    if line.warned:
        return "warning"
    if not line.required:
        return "informational"
    return "ok"


def _status_label(line: SummaryLine) -> str:
    label = line.status.value
    if line.missing:
        return f"{label} (missing)"
    if line.reported != line.status.value:
        return f"{label} (reported: {line.reported})"
    return label


def render_text(verdict: GateVerdict) -> str:
    lines: List[str] = []
    for line in verdict.summary:
        flags = []
        if line.required:
            flags.append("[required]")
        if line.blocked:
            flags.append("BLOCKING")
        if line.warned:
            flags.append("WARN")
        suffix = (" " + " ".join(flags)) if flags else ""
        lines.append(f"{line.name}: {_status_label(line)}{suffix}")

    lines.append(f"Overall: {verdict.overall.value.upper()}")
    if verdict.overall is Verdict.FAIL:
        lines.append(f"Blocking: {', '.join(verdict.blocking_ordered)}")
    elif verdict.warned:
        lines.append(f"Skipped required stages: {', '.join(verdict.warned)}")
    return "\n".join(lines) + "\n"


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def render_markdown(verdict: GateVerdict, title: str = DEFAULT_TITLE) -> str:
    """
    Markdown report for a pull-request comment or a run step summary.

    The first line is a hidden marker so an existing comment can be found and
    updated instead of posting a new one on every run.
    """
    overall = verdict.overall
    out: List[str] = [
        COMMENT_MARKER,
        f"## {_EMOJI[overall]} {title}: {overall.value.upper()}",
        "",
    ]

    if verdict.summary:
        out.append("| Stage | Status | Required | Effect |")
        out.append("|-------|--------|----------|--------|")
        for line in verdict.summary:
            out.append(
                "| {} | {} | {} | {} |".format(
                    _escape_cell(line.name),
                    _escape_cell(_status_label(line)),
                    "yes" if line.required else "no",
                    _effect(line),
                )
            )
        out.append("")
    else:
        out.append("_No stages were configured._")
        out.append("")

    if overall is Verdict.FAIL:
        names = ", ".join(f"`{n}`" for n in verdict.blocking_ordered)
        out.append(f"**Blocked by:** {names}")
    elif overall is Verdict.WARN:
        names = ", ".join(f"`{n}`" for n in verdict.warned)
        out.append(f"**Required stages skipped:** {names}")
    else:
        out.append("All required stages passed.")

    return "\n".join(out) + "\n"
