"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class MissingScopeError(AppError):
    """Raised when an operation needs a user scope and none is available."""

    def __init__(self, operation: str):
        super().__init__(
            f"No user scope available for {operation}",
            code="MISSING_SCOPE",
        )


class ProviderError(AppError):
    """Raised when the item-data provider cannot produce an authoritative answer."""

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        super().__init__(
            f"Upstream call {operation} failed: {reason}",
            code="PROVIDER_ERROR",
        )
