"""
Quality gate evaluation.

Combines the terminal status of upstream stages into one verdict:
- any required stage failed or cancelled  => FAIL (all such stages block)
- else any required stage skipped without being allowed to skip => WARN
- else => PASS
Optional stages are reported but never change the verdict.
A required stage missing from the input counts as failed.
"""

import logging
from typing import Iterable, List, Optional

from ..config import GateConfig
from .base import GateVerdict, StageResult, StageStatus, SummaryLine, Verdict

logger = logging.getLogger(__name__)

MISSING_TOKEN = "missing"

_BLOCKING_STATUSES = (StageStatus.FAILURE, StageStatus.CANCELLED)


def _with_missing(stages: List[StageResult], config: GateConfig) -> List[StageResult]:
    present = {s.name for s in stages}
    out = list(stages)
    for name in config.required:
        if name not in present:
            logger.debug("Required stage %s is missing from input", name)
            out.append(StageResult(name, StageStatus.FAILURE, True, MISSING_TOKEN))
    return out


def evaluate(stages: Iterable[StageResult], config: Optional[GateConfig] = None) -> GateVerdict:
    """Evaluate stage results into a GateVerdict. Never raises on model input."""
    cfg = config or GateConfig()
    given = list(stages)
    given_count = len(given)
    all_stages = _with_missing(given, cfg)

    summary: List[SummaryLine] = []
    blocking: List[str] = []
    warned = False

    for idx, stage in enumerate(all_stages):
        required = stage.required if stage.required is not None else cfg.is_required(stage.name)
        blocked = False
        warn = False

        if required:
            if stage.status in _BLOCKING_STATUSES:
                blocked = True
                if stage.name not in blocking:
                    blocking.append(stage.name)
            elif stage.status is StageStatus.SKIPPED and not cfg.skip_allowed(stage.name):
                warn = True
                warned = True

        logger.debug(
            "Stage %s: status=%s required=%s blocked=%s warned=%s",
            stage.name, stage.status.value, required, blocked, warn,
        )
        summary.append(
            SummaryLine(
                name=stage.name,
                status=stage.status,
                required=required,
                blocked=blocked,
                warned=warn,
                reported=stage.reported,
                missing=idx >= given_count,
            )
        )

    if blocking:
        overall = Verdict.FAIL
    elif warned:
        overall = Verdict.WARN
    else:
        overall = Verdict.PASS

    logger.info("Gate verdict: %s (blocking: %s)", overall.value, ", ".join(blocking) or "none")
    return GateVerdict(overall=overall, summary=tuple(summary), blocking=frozenset(blocking))

