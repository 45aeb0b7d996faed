"""Exceptions raised by the input layers of the quality gate."""


class QualityGateError(Exception):
    """Base class for errors that stop the CLI before a verdict is computed."""


class ConfigError(QualityGateError):
    """Raised when gate configuration cannot be loaded or is invalid."""


class StageInputError(QualityGateError):
    """Raised when stage arguments or job-result documents are malformed."""
