"""Quality gate core: data model, evaluator and report rendering."""

from .base import GateVerdict, StageResult, StageStatus, SummaryLine, Verdict
from .evaluator import evaluate
from .report import COMMENT_MARKER, render_markdown, render_text

__all__ = [
    "COMMENT_MARKER",
    "GateVerdict",
    "StageResult",
    "StageStatus",
    "SummaryLine",
    "Verdict",
    "evaluate",
    "render_markdown",
    "render_text",
]
