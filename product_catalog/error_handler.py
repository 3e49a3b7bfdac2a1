"""Error taxonomy and envelope conversion for the product catalog service."""
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, *, code: Optional[str] = None, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.payload = payload or {}


class NotFoundError(CatalogError):
    status_code = 404
    code = "NOT_FOUND"


class UnauthorizedError(CatalogError):
    status_code = 401
    code = "UNAUTHORIZED"


class ValidationError(CatalogError):
    status_code = 400
    code = "VALIDATION_ERROR"


class UpstreamServiceError(CatalogError):
    status_code = 502
    code = "UPSTREAM_FAILURE"


class EventPublishError(CatalogError):
    status_code = 500
    code = "EVENT_PUBLISH_FAILED"


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if isinstance(exc, CatalogError):
            logger.warning("%s: %s", exc.code, exc.message)
            return {
                "success": False,
                "message": exc.message,
                "code": exc.code,
                "data": None,
            }
        logger.error("Unhandled exception in product service: %s", exc, exc_info=True)
        return {
            "success": False,
            "message": "An internal error occurred while processing your request. Please try again later.",
            "code": CatalogError.code,
            "data": None,
            "metadata": {"error": str(exc), "context": context or {}},
        }

    def status_code_for(self, exc: Exception) -> int:
        if isinstance(exc, CatalogError):
            return exc.status_code
        return 500
