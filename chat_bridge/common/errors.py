"""
Error Definitions

Defines custom exception classes used in the application for unified error handling.
"""

from typing import Any, Optional


class AppError(Exception):
    """
    Application Base Exception

    Base class for all custom exceptions, containing error message, type, and code.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "app_error",
        code: str = "internal_error",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Error type
            code: Error code
            details: Extra error details
            status_code: HTTP status code
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        """
        Convert to dictionary format (for API response)

        Args:
            include_details: Whether to include the details block

        Returns:
            dict: Error information dictionary
        """
        result = {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code,
            }
        }
        if include_details and self.details:
            result["error"]["details"] = self.details
        return result


class AuthenticationError(AppError):
    """
    Authentication Error

    Raised when the request carries no upstream credential.
    """

    def __init__(
        self,
        message: str = "Authentication failed",
        code: str = "missing_credential",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="authentication_error",
            code=code,
            details=details,
            status_code=401,
        )


class ValidationError(AppError):
    """
    Parameter Validation Error

    Raised when the request body does not match the chat completion schema.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        code: str = "validation_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="validation_error",
            code=code,
            details=details,
            status_code=422,
        )


class UpstreamError(AppError):
    """
    Upstream Service Error

    Raised when the upstream service answers with a non-success HTTP status or
    cannot be reached. The upstream status code is propagated to the client.
    """

    def __init__(
        self,
        message: str = "Upstream service error",
        code: str = "upstream_error",
        details: Any = None,
        status_code: int = 502,
        status_text: str = "",
    ):
        super().__init__(
            message=message,
            error_type="upstream_error",
            code=code,
            status_code=status_code,
        )
        # Upstream bodies may be JSON objects, lists or raw text
        self.details = details
        self.status_text = status_text

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        result = {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code,
                "status": self.status_code,
                "statusText": self.status_text,
            }
        }
        if include_details:
            result["error"]["details"] = self.details
        return result


class SessionError(AppError):
    """
    Session Creation Error

    Raised when the upstream session endpoint answers 2xx but its body reports
    failure or cannot be parsed.
    """

    def __init__(
        self,
        message: str = "Failed to create upstream conversation",
        code: str = "session_creation_failed",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="session_error",
            code=code,
            details=details,
            status_code=502,
        )
