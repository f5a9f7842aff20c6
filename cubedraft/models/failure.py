"""
Failure envelope and draft error kinds.

Every draft operation either succeeds or raises a KnownError subclass whose
message is safe to forward verbatim to the caller. The API layer converts
these into the ApiResponse envelope.

Response types:
- Success: Operation completed successfully
- KnownFailure: Expected, per-request failure (bad seat, unknown card, ...)
- UnknownFailure: Anything else

All user-visible responses pass through `finalize_response()`.
"""

from collections.abc import Sequence
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    INVALID_SEAT = "invalid_seat"

    # Draft state failures
    NO_PACK_AVAILABLE = "no_pack_available"
    SAME_CARD = "same_card"

    # Name resolution failures
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"

    # Token failures
    DECODE_ERROR = "decode_error"

    # Service failures
    SERVICE_UNAVAILABLE = "service_unavailable"
    EXTERNAL_API_ERROR = "external_api_error"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Response envelope for API endpoints.

    Every response is classified into one of three outcome types.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class InvalidSeatError(KnownError):
    """Seat index outside the draft's seats."""

    def __init__(self, seat: int, seat_count: int):
        self.seat = seat
        super().__init__(
            kind=FailureKind.INVALID_SEAT,
            message=f"Seat must be between 0 and {seat_count - 1}, got {seat}",
        )


class NoPackAvailableError(KnownError):
    """Pick attempted while the seat has no pack in front of it."""

    def __init__(self, seat: int):
        self.seat = seat
        super().__init__(
            kind=FailureKind.NO_PACK_AVAILABLE,
            message=f"Seat {seat} has no pack to pick from",
            suggestion="Wait for a neighbouring seat to pass a pack.",
            status_code=409,
        )


class CardNotFoundError(KnownError):
    """A name resolved to no card in the searched scope."""

    def __init__(self, query: str, scope: str = "the cube"):
        self.query = query
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Card {query} isn't in {scope}",
            status_code=404,
        )


class AmbiguousCardError(KnownError):
    """A name resolved to more than one card."""

    def __init__(self, query: str, candidates: Sequence[str]):
        self.query = query
        self.candidates = tuple(candidates)
        super().__init__(
            kind=FailureKind.AMBIGUOUS,
            message=f"{query} could be any of: {', '.join(self.candidates)}",
            suggestion="Type more of the card name.",
        )


class SameCardError(KnownError):
    """Both names of a card fix resolved to one card."""

    def __init__(self, name: str):
        super().__init__(
            kind=FailureKind.SAME_CARD,
            message=f"Both names refer to {name}",
        )


class DecodeError(KnownError):
    """A card token is malformed or references a card outside the cube."""

    def __init__(self, token: str, reason: str):
        self.token = token
        super().__init__(
            kind=FailureKind.DECODE_ERROR,
            message=f"Invalid card token: {reason}",
            detail=token[:100],
        )


class CubeTooSmallError(KnownError):
    """More cards were requested than the cube holds."""

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Cannot deal {requested} cards from a cube of {available} cards",
        )


class DraftNotLoadedError(KnownError):
    """A request arrived before the cube and draft were loaded."""

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message="The draft is still loading",
            suggestion="Try again in a moment.",
            status_code=503,
        )


class SourceFeedError(KnownError):
    """The cube list or a card lookup could not be fetched."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
            suggestion="Try reloading the cube later.",
            status_code=502,
        )


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================

UNKNOWN_FAILURE_MESSAGE = "I failed and I don't know why. Try simplifying the request or retrying."
UNKNOWN_FAILURE_SUGGESTION = "If this persists, please report the issue."

# Track finalized responses (weak reference would be ideal, but dict is simpler)
_finalized_responses: set[int] = set()


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    _finalized_responses.add(id(response))

    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """Check if a response has passed through the authority boundary."""
    return id(response) in _finalized_responses


def create_known_failure(error: KnownError) -> ApiResponse[Any]:
    """Create a finalized known failure response from a KnownError."""
    return finalize_response(error.to_response())


def create_unknown_failure(
    exception: Exception,
    include_type: bool = True,
) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed and cannot be customized.
    """
    detail = None
    if include_type:
        detail = f"{type(exception).__name__}"

    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=UNKNOWN_FAILURE_MESSAGE,
            detail=detail,
            suggestion=UNKNOWN_FAILURE_SUGGESTION,
        ),
    )

    return finalize_response(response)


def create_success(data: T) -> ApiResponse[T]:
    """Create a finalized success response."""
    response = ApiResponse[T](outcome=OutcomeType.SUCCESS, data=data)
    return finalize_response(response)
