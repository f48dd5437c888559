from typing import Any, Dict


class CodeValidationError(Exception):
    """Raised by guards when source fails lint; carries the LintResult."""

    def __init__(self, message: str, result: Any = None):
        super().__init__(message)
        self.result = result


def error_response(request_id: str, code: str, message: str) -> Dict[str, Any]:
    return {
        "request_id": request_id,
        "type": "error",
        "data": None, # Explicitly null for error responses
        "error": {
            "code": code,
            "message": message
        }
    }
