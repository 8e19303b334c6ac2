"""
Failure envelope and response classification.

Every user-visible failure is classified and explained with the same
envelope, whether it comes from booster generation, the card source
or a draft session.

Error taxonomy:
- Fatal: no booster-eligible cards for a set (EmptyCardPoolError)
- Retryable: the card source failed (CardSourceError)
- Caller errors: bad settings, unknown draft
- Silent no-ops (bad or duplicate picks) never raise and are not
  represented here.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Why a request or session message failed."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"

    # Booster generation cannot proceed for the set
    EMPTY_CARD_POOL = "empty_card_pool"

    # Joining a room after the packs were dealt
    DRAFT_ALREADY_STARTED = "draft_already_started"

    # Scryfall unreachable or answering with an error
    EXTERNAL_API_ERROR = "external_api_error"

    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """What went wrong, for display to the drafter."""

    kind: FailureKind = Field(..., description="Failure classification")
    message: str = Field(..., description="Explanation shown to the drafter")
    detail: str | None = Field(default=None, description="Technical context, e.g. an HTTP status")
    suggestion: str | None = Field(default=None, description="What the drafter can do next")


class ApiResponse(BaseModel, Generic[T]):
    """Outcome envelope. Error handlers render failures with it."""

    outcome: OutcomeType = Field(..., description="Success or which kind of failure")
    data: T | None = Field(default=None, description="Result, set on success only")
    failure: FailureDetail | None = Field(default=None, description="Set on failure only")

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """Envelope for a failure raised as a KnownError."""
        failure = FailureDetail(kind=kind, message=message, detail=detail, suggestion=suggestion)
        return cls(outcome=OutcomeType.KNOWN_FAILURE, failure=failure)

    @classmethod
    def unknown_failure(cls, detail: str | None = None) -> "ApiResponse[Any]":
        """Envelope for an unexpected exception."""
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message="Something went wrong while running the draft. Please retry.",
                detail=detail,
                suggestion="If this persists, please report the issue.",
            ),
        )


class KnownError(Exception):
    """
    A failure the service can explain.

    Raised from services and turned into an ApiResponse with the error's
    status_code by the handler in main.py. Room sessions send kind and
    message as an error message instead.
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
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class EmptyCardPoolError(KnownError):
    """
    No booster-eligible cards exist for a set.

    This is the one unrecoverable generation failure: no pack can ever be
    produced, so the draft cannot start.
    """

    def __init__(self, set_code: str):
        self.set_code = set_code
        super().__init__(
            kind=FailureKind.EMPTY_CARD_POOL,
            message=(
                f'No booster-eligible cards found for set "{set_code}". '
                "This set may not support booster generation."
            ),
            suggestion="Pick a different set.",
            status_code=422,
        )


class CardSourceError(KnownError):
    """The card source could not be reached or answered with an error."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
            suggestion="Check your connection and try again.",
            status_code=502,
        )


class InvalidSettingsError(KnownError):
    """Draft settings are out of range."""

    def __init__(self, message: str):
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            status_code=400,
        )


class DraftNotFoundError(KnownError):
    """No draft is registered under the requested ID."""

    def __init__(self, draft_id: str):
        self.draft_id = draft_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"Draft '{draft_id}' not found.",
            suggestion="Start a new draft.",
            status_code=404,
        )
