"""Quality gate: combine upstream CI stage results into one verdict."""

from .config import GateConfig
from .gates import GateVerdict, StageResult, StageStatus, Verdict, evaluate, render_markdown, render_text

__version__ = "0.1.0"

__all__ = [
    "GateConfig",
    "GateVerdict",
    "StageResult",
    "StageStatus",
    "Verdict",
    "evaluate",
    "render_markdown",
    "render_text",
]
