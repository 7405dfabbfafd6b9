from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class APIError(HTTPException):
    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=status_code, detail=message)
        self.code = code
        self.details = details


class NotFoundError(APIError):
    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_404_NOT_FOUND, "NOT_FOUND", message, details)


class ValidationError(APIError):
    """Trip input violated one of the validator rules; ``rule`` is the stable id."""

    def __init__(self, rule: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", message, details)
        self.rule = rule


class AuthError(APIError):
    def __init__(self, message: str = "No or invalid authorization token"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "AUTH_ERROR", message)


class GenerationError(APIError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_502_BAD_GATEWAY, "GENERATION_ERROR", message, details)


class UpstreamFailure(GenerationError):
    """The generation endpoint could not be reached or answered with a non-2xx status."""

    def __init__(self, status_code: Optional[int], body: str):
        message = f"Gemini API error: {status_code} {body}" if status_code is not None else f"Gemini API error: {body}"
        super().__init__(message.rstrip(), {"status": status_code, "body": body})
        self.upstream_status = status_code
        self.body = body

    @property
    def transient(self) -> bool:
        return self.upstream_status is None or self.upstream_status == 429 or self.upstream_status >= 500


class MalformedResponse(GenerationError):
    def __init__(self, message: str = "Invalid response from Gemini API"):
        super().__init__(message)


class StorageError(APIError):
    def __init__(self, reason: str):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, "STORAGE_ERROR", f"Database error: {reason}")
        self.reason = reason


def error_content(message: str) -> Dict[str, Any]:
    return {"success": False, "error": message}
