"""Custom exceptions for spatialeval."""


class SpatialEvalError(Exception):
    """Base exception for all spatialeval errors."""

    code: str = "SPATIALEVAL_ERROR"

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self):
        return f"{self.code}: {self.message}"


class InvalidArgumentError(SpatialEvalError):
    """Raised when an input is malformed (bad k, mismatched lengths, NaN labels)."""

    code = "INVALID_ARGUMENT"

    def __init__(self, message: str, **details):
        super().__init__(message, details=details)


class UnsupportedMetricAtLevelError(SpatialEvalError):
    """Raised when a metric is requested at a level it is not defined for."""

    code = "UNSUPPORTED_METRIC_AT_LEVEL"

    def __init__(self, metrics: list[str], level: str, allowed: list[str] | None = None):
        super().__init__(
            f"Metric(s) not available at level '{level}': {', '.join(metrics)}",
            details={"metrics": metrics, "level": level, "allowed": allowed or []},
        )


class UnsupportedCombinationError(SpatialEvalError):
    """Raised when two options are combined in a way that has no definition."""

    code = "UNSUPPORTED_COMBINATION"

    def __init__(self, message: str, **options):
        super().__init__(message, details=options)


class InvalidMetricError(SpatialEvalError):
    """Raised when an invalid metric name is specified."""

    code = "INVALID_METRIC"

    def __init__(self, invalid_names: list[str], valid_names: list[str] | None = None):
        super().__init__(
            f"Unrecognized metric name(s): {', '.join(invalid_names)}",
            details={"invalid": invalid_names, "valid": valid_names or []},
        )


class FileNotFoundError(SpatialEvalError):
    """Raised when a required file does not exist."""

    code = "FILE_NOT_FOUND"

    def __init__(self, path: str):
        super().__init__(f"Could not find file: {path}", details={"path": str(path)})


class InvalidCSVError(SpatialEvalError):
    """Raised when a CSV file is malformed or cannot be parsed."""

    code = "INVALID_CSV"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details=details)


class ColumnNotFoundError(SpatialEvalError):
    """Raised when required columns are missing from the data."""

    code = "COLUMN_NOT_FOUND"

    def __init__(
        self,
        missing: str | list[str],
        available: list[str] | None = None,
        message: str | None = None,
    ):
        if isinstance(missing, str):
            missing = [missing]

        if message:
            msg = message
        else:
            msg = f"Missing required column(s): {', '.join(missing)}"

        super().__init__(msg, details={"missing": missing, "available": available or []})
