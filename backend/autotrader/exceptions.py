"""
Domain exceptions for the application.

Services raise these instead of fastapi.HTTPException to avoid coupling
the service layer to the web framework. A global exception handler in
main.py translates them into plaintext HTTP responses.
"""


class AppError(Exception):
    """Base application error with an HTTP-equivalent status code."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(AppError):
    """Malformed alert, unknown bot, ticker or currency mismatch (400)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class AuthorizationError(AppError):
    """Webhook caller not allowed or wrong webhook key (401)."""

    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(message, status_code=401)


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, status_code=404)


class ConfigurationError(AppError):
    """Missing or unusable deployment/bot configuration (500)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


class CryptoError(AppError):
    """Credential encryption or decryption failed (500)."""

    def __init__(self, message: str = "Decryption failed"):
        super().__init__(message, status_code=500)


class ExecutionError(AppError):
    """Order execution failed after the outcome was recorded (500)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500)


class ExchangeUnavailableError(AppError):
    """Bitvavo unreachable or refused the request (503)."""

    def __init__(self, message: str = "Exchange service unavailable"):
        super().__init__(message, status_code=503)
