"""
Stage inputs: command-line stage arguments, CI job-result documents and the
coverage threshold check.

These adapters turn whatever the CI runner hands over into StageResult entries.
Malformed structure raises StageInputError; odd status tokens are passed
through untouched so the evaluator can degrade them to failure.
"""

import json
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Collection, List, Mapping, Optional, Tuple

from .errors import StageInputError
from .gates.base import StageResult, StageStatus
from .utils import read_text

logger = logging.getLogger(__name__)

_REQUIRED_SUFFIX = "required"
_OPTIONAL_SUFFIX = "optional"


# -----------------------------
# --stage NAME=STATUS[:required|:optional]
# -----------------------------
def parse_stage_arg(arg: str) -> Tuple[str, str, Optional[bool]]:
    """
    Parse one --stage argument.

    Returns (name, token, required) where required is None when the argument
    carries no explicit :required / :optional suffix.
    """
    if "=" not in arg:
        raise StageInputError(f"Stage argument must look like NAME=STATUS, got {arg!r}")
    name, _, rest = arg.partition("=")
    name = name.strip()
    if not name:
        raise StageInputError(f"Stage argument has an empty name: {arg!r}")

    token, sep, flag = rest.rpartition(":")
    if not sep:
        return name, rest.strip(), None

    flag_norm = flag.strip().lower()
    if flag_norm == _REQUIRED_SUFFIX:
        return name, token.strip(), True
    if flag_norm == _OPTIONAL_SUFFIX:
        return name, token.strip(), False
    # Not a known flag: keep the whole thing as the status token.
    return name, rest.strip(), None


def stages_from_args(args: List[str], required: Collection[str] = ()) -> List[StageResult]:
    stages: List[StageResult] = []
    for arg in args:
        name, token, flag = parse_stage_arg(arg)
        is_required = flag if flag is not None else name in required
        stages.append(StageResult.from_token(name, token, is_required))
    return stages


# -----------------------------
# CI job-result documents
# -----------------------------
def _result_token(name: str, entry: object) -> Optional[str]:
    if entry is None or isinstance(entry, str):
        return entry
    if isinstance(entry, Mapping):
        token = entry.get("result", entry.get("status"))
        if token is None or isinstance(token, str):
            return token
        logger.warning("Stage %s has a non-string result %r", name, token)
        return str(token)
    raise StageInputError(f"Stage {name!r}: expected a string or an object with a 'result' key")


def stages_from_needs(payload: object, required: Collection[str] = ()) -> List[StageResult]:
    """
    Convert a job-results mapping into StageResult entries, keeping key order.

    Accepts {"backend": {"result": "success", "outputs": {...}}} as exposed by
    the CI runner, or the flat form {"backend": "success"}.
    """
    if not isinstance(payload, Mapping):
        raise StageInputError("Job results must be a JSON object mapping stage names to results")

    stages: List[StageResult] = []
    for name, entry in payload.items():
        token = _result_token(str(name), entry)
        if token is None:
            logger.warning("Stage %s reported no result", name)
        stages.append(StageResult.from_token(str(name), token, str(name) in required))
    return stages


def parse_needs_json(text: str, required: Collection[str] = ()) -> List[StageResult]:
    try:
        payload = json.loads(text) if text.strip() else {}
    except json.JSONDecodeError as e:
        raise StageInputError(f"Job results are not valid JSON: {e}") from e
    return stages_from_needs(payload, required)


def load_stage_file(path: Path, required: Collection[str] = ()) -> List[StageResult]:
    """Read a job-results JSON document from disk."""
    if not path.is_file():
        raise StageInputError(f"Job results file not found: {path}")
    return parse_needs_json(read_text(path), required)


# -----------------------------
# Coverage threshold
# -----------------------------
def check_coverage(percent: object, threshold: float) -> StageStatus:
    """Reduce a coverage percentage to success/failure against a threshold."""
    try:
        value = float(percent)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        logger.warning("Coverage value %r is not a number", percent)
        return StageStatus.FAILURE
    if value != value:  # NaN
        return StageStatus.FAILURE
    return StageStatus.SUCCESS if value >= threshold else StageStatus.FAILURE


def _coverage_from_xml(text: str) -> Optional[float]:
    try:
        root = ET.fromstring(text)
    except ET.ParseError:
        return None
    rate = root.get("line-rate")
    if rate is None:
        return None
    try:
        return float(rate) * 100.0
    except ValueError:
        return None


def _coverage_from_json(text: str) -> Optional[float]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    totals = data.get("totals") if isinstance(data, dict) else None
    if not isinstance(totals, dict):
        return None
    value = totals.get("percent_covered")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None


def read_coverage_percent(path: Path) -> Optional[float]:
    """
    Extract total line coverage from a Cobertura XML or coverage.py JSON report.

    Returns None when the file is missing or the value cannot be found.
    """
    if not path.is_file():
        return None
    text = read_text(path)
    if path.suffix.lower() == ".json":
        return _coverage_from_json(text)
    if path.suffix.lower() == ".xml":
        return _coverage_from_xml(text)
    # Unknown extension: sniff.
    if text.lstrip().startswith("<"):
        return _coverage_from_xml(text)
    return _coverage_from_json(text)
