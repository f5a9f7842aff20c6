from cubedraft.models.card import Card, CardRecord
from cubedraft.models.failure import (
    AmbiguousCardError,
    ApiResponse,
    CardNotFoundError,
    CubeTooSmallError,
    DecodeError,
    DraftNotLoadedError,
    FailureDetail,
    FailureKind,
    InvalidSeatError,
    KnownError,
    NoPackAvailableError,
    OutcomeType,
    SameCardError,
    SourceFeedError,
    create_known_failure,
    create_success,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)
from cubedraft.models.seat import Pack, Seat

__all__ = [
    "AmbiguousCardError",
    "ApiResponse",
    "Card",
    "CardNotFoundError",
    "CardRecord",
    "CubeTooSmallError",
    "DecodeError",
    "DraftNotLoadedError",
    "FailureDetail",
    "FailureKind",
    "InvalidSeatError",
    "KnownError",
    "NoPackAvailableError",
    "OutcomeType",
    "Pack",
    "SameCardError",
    "Seat",
    "SourceFeedError",
    "create_known_failure",
    "create_success",
    "create_unknown_failure",
    "finalize_response",
    "is_finalized",
]
