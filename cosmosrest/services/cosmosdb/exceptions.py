"""
Cosmos DB Exceptions.

Exception hierarchy for the Cosmos DB client: local validation failures,
transport failures, service (HTTP status) errors and decode errors.
"""

from typing import Any, Dict, Optional, Type


class CosmosDBError(Exception):
    """Base exception for Cosmos DB client errors.

    Attributes:
        message: Error message
        error_code: Machine-readable error code
    """

    error_code: str = "CosmosDBError"

    def __init__(self, message: str, error_code: Optional[str] = None):
        """Initialize Cosmos DB error.

        Args:
            message: Error message
            error_code: Error code (defaults to the class code)
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
            }
        }


# ========== Local validation ==========

class ETagRequiredError(CosmosDBError):
    """Raised when a delete or replace is attempted without an ETag."""

    error_code = "ETagRequired"

    def __init__(self, message: str = "ETag is required"):
        super().__init__(message)


class ResourceIdRequiredError(CosmosDBError):
    """Raised when a resource without an id is addressed by its link."""

    error_code = "ResourceIdRequired"

    def __init__(self, message: str = "Resource id is required"):
        super().__init__(message)


# ========== Transport ==========

class CosmosTransportError(CosmosDBError):
    """Raised when a request could not be sent or its response could not be read.

    The underlying httpx error is chained as ``__cause__``.
    """

    error_code = "TransportError"


# ========== Decoding ==========

class CosmosDecodeError(CosmosDBError):
    """Raised when a response body does not match the expected shape."""

    error_code = "DecodeError"


# ========== Service errors ==========

class CosmosHTTPError(CosmosDBError):
    """Raised when the service answers with an unexpected status code.

    Attributes:
        status_code: HTTP status code of the response
        code: Service error code from the response body (may be empty)
        message: Service error message from the response body (may be empty)
    """

    error_code = ""

    def __init__(self, status_code: int, code: str = "", message: str = ""):
        self.status_code = status_code
        super().__init__(message, code)
        self.code = code

    def __str__(self) -> str:
        return f"{self.status_code} {self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        data = super().to_dict()
        data["error"]["status_code"] = self.status_code
        return data


class BadRequestError(CosmosHTTPError):
    """400 Bad Request."""


class UnauthorizedError(CosmosHTTPError):
    """401 Unauthorized (usually a signature mismatch)."""


class ForbiddenError(CosmosHTTPError):
    """403 Forbidden."""


class ResourceNotFoundError(CosmosHTTPError):
    """404 Not Found."""


class ResourceConflictError(CosmosHTTPError):
    """409 Conflict (resource id already exists)."""


class PreconditionFailedError(CosmosHTTPError):
    """412 Precondition Failed (If-Match ETag no longer current)."""


class TooManyRequestsError(CosmosHTTPError):
    """429 Request rate too large."""


_STATUS_ERRORS: Dict[int, Type[CosmosHTTPError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: ResourceNotFoundError,
    409: ResourceConflictError,
    412: PreconditionFailedError,
    429: TooManyRequestsError,
}


def error_for_status(status_code: int, code: str = "", message: str = "") -> CosmosHTTPError:
    """
    Build the service error matching a status code.

    Args:
        status_code: HTTP status code of the response
        code: Service error code
        message: Service error message

    Returns:
        CosmosHTTPError or the subclass registered for the status
    """
    error_class = _STATUS_ERRORS.get(status_code, CosmosHTTPError)
    return error_class(status_code, code, message)


def is_error_status_code(error: BaseException, status_code: int) -> bool:
    """Return True if error is a service error with the given status code."""
    return isinstance(error, CosmosHTTPError) and error.status_code == status_code
