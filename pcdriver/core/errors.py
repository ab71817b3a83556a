"""Domain-specific errors for pcdriver."""


class PCDriverError(Exception):
    """Base error for pcdriver."""


class ParameterError(PCDriverError):
    """Raised when node parameters or driver options are invalid."""


class CatalogLoadError(PCDriverError):
    """Raised when reading a metric catalog file fails."""


class CatalogValidationError(PCDriverError):
    """Raised when a metric catalog does not conform to schema or semantics."""


class UnknownMetricError(PCDriverError, KeyError):
    """Raised when a metric name is not provided by the telemetry source."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class CommandNotImplementedError(PCDriverError, NotImplementedError):
    """Raised when a control request names no registered service."""


class CommandInputError(PCDriverError):
    """Raised when a control request input cannot be parsed for its service."""


class ProbeError(PCDriverError):
    """Base reachability probe error."""


class ProbeResolutionError(ProbeError):
    """Raised when the probe target cannot be resolved."""


class ActionError(PCDriverError):
    """Raised when a local OS action cannot be started."""
