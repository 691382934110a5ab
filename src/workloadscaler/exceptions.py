"""Exception taxonomy for the workload scaler."""

from typing import Optional


class WorkloadScalerError(Exception):
    """Base exception for the workload scaler."""

    pass


class ConfigError(WorkloadScalerError):
    """Raised when trigger metadata cannot be turned into a scaler."""

    pass


class MissingFieldError(ConfigError):
    """Raised when a required trigger metadata key is absent or blank."""

    def __init__(self, field: str):
        super().__init__(f"no {field} given")
        self.field = field


class InvalidSelectorSyntaxError(ConfigError):
    """Raised when a pod selector does not parse or selects everything."""

    pass


class InvalidValueError(ConfigError):
    """Raised when a numeric trigger field is malformed or out of range."""

    pass


class ClusterQueryFailure(WorkloadScalerError):
    """Raised when listing pods against the cluster fails."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
