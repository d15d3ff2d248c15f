"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    status_code: int = 400

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class UpstreamError(AppError):
    """Raised when an external service fails or returns an unusable response."""

    status_code = 502

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(f"{service}: {message}", code="UPSTREAM_ERROR")


class PortfolioUnavailableError(AppError):
    """Raised when a portfolio cannot be computed at all."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message, code="PORTFOLIO_UNAVAILABLE")


class CacheWriteError(AppError):
    """Raised when a cache category cannot be persisted."""

    status_code = 500

    def __init__(self, category: str, message: str):
        self.category = category
        super().__init__(f"Cannot write {category} cache: {message}", code="CACHE_WRITE_ERROR")
