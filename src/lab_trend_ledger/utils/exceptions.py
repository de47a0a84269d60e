"""Custom exceptions for the lab trend ledger."""


class LabTrendLedgerError(Exception):
    """Base exception for all lab trend ledger errors."""

    pass


class ConfigurationError(LabTrendLedgerError):
    """Raised when there is a configuration error."""

    pass


class ValidationError(LabTrendLedgerError):
    """Raised when user input fails validation."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class NotFound(LabTrendLedgerError):
    """Raised when a parameter id is not registered."""

    def __init__(self, parameter_id: str) -> None:
        super().__init__(f"Unknown parameter: {parameter_id}")
        self.parameter_id = parameter_id


class UnknownParameter(NotFound):
    """Raised when a measurement operation references an unregistered parameter."""

    pass


class CorruptSnapshot(LabTrendLedgerError):
    """Raised when a persisted snapshot cannot be decoded."""

    pass


class StorageError(LabTrendLedgerError):
    """Raised when the key-value backend fails to read or write."""

    pass
