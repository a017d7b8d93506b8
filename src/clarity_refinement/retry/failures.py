"""
Failure normalization at the retry boundary.

Operations may fail with exceptions that carry no message, or a caller may
hand us a bare value instead of an exception. Before classification every
failure is reduced to a ``KnownError`` with a usable message.

    Failure = KnownError(message) | UnknownFailure(raw)
"""

from dataclasses import dataclass
from typing import Union

from clarity_refinement.retry.exceptions import AgentFailure

UNKNOWN_ERROR_MESSAGE = "Unknown error"


@dataclass(frozen=True)
class KnownError:
    """Failure with a non-empty message."""

    message: str


@dataclass(frozen=True)
class UnknownFailure:
    """Failure we could not extract a message from."""

    raw: object


Failure = Union[KnownError, UnknownFailure]


def classify_failure(raw: object) -> Failure:
    """
    Sort a raw failure value into the Failure sum type.

    Exceptions use ``str(exc)``; strings are taken as the message; anything
    else, or an empty message, is an UnknownFailure.
    """
    if isinstance(raw, BaseException):
        message = str(raw).strip()
    elif isinstance(raw, str):
        message = raw.strip()
    else:
        return UnknownFailure(raw)

    if message:
        return KnownError(message)
    return UnknownFailure(raw)


def normalize_failure(raw: object) -> KnownError:
    """
    Reduce any failure value to a KnownError.

    Unknown failures get the fixed message ``"Unknown error (<TypeName>)"``.
    """
    failure = classify_failure(raw)
    if isinstance(failure, KnownError):
        return failure
    return KnownError(f"{UNKNOWN_ERROR_MESSAGE} ({type(failure.raw).__name__})")


def as_exception(raw: object) -> Exception:
    """
    Return the failure as an exception for the error history.

    Exceptions are kept as they are so callers can still inspect their type;
    other values become AgentFailure with the normalized message.
    """
    if isinstance(raw, Exception):
        return raw
    return AgentFailure(normalize_failure(raw).message, raw=raw)


def failure_message(raw: object) -> str:
    """Normalized message of any failure value."""
    return normalize_failure(raw).message
