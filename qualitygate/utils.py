"""Shared utility functions."""

import os
from pathlib import Path
from typing import Mapping, Optional

GITHUB_STEP_SUMMARY = "GITHUB_STEP_SUMMARY"
GITHUB_OUTPUT = "GITHUB_OUTPUT"


def write_text(path: Path, text: str) -> None:
    """Write text to a file, creating parent directories if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def append_text(path: Path, text: str) -> None:
    """Append text to a file, creating parent directories if needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as fh:
        fh.write(text)


def read_text(path: Path) -> str:
    """Read text from a file."""
    return path.read_text(encoding="utf-8", errors="ignore")


def env_path(name: str, environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """Return the path held by an environment variable, or None when unset/empty."""
    env = os.environ if environ is None else environ
    value = (env.get(name) or "").strip()
    return Path(value) if value else None


def append_step_summary(markdown: str, environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Append markdown to the run step summary file.

    Returns False when no step summary file is available (not running in CI).
    """
    path = env_path(GITHUB_STEP_SUMMARY, environ)
    if path is None:
        return False
    append_text(path, markdown if markdown.endswith("\n") else markdown + "\n")
    return True


def write_step_outputs(outputs: Mapping[str, str], environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Append key=value lines to the step output file.

    Returns False when no output file is available (not running in CI).
    """
    path = env_path(GITHUB_OUTPUT, environ)
    if path is None:
        return False
    lines = []
    for key, value in outputs.items():
        if "\n" in value:
            raise ValueError(f"Step output {key!r} must be a single line")
        lines.append(f"{key}={value}\n")
    append_text(path, "".join(lines))
    return True
