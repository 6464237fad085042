"""Error taxonomy for the review-status engine.

ValidationError: one malformed input record; callers skip it and move on.
DomainError: a logically impossible state (e.g. an unknown lifecycle
status). Never coerced silently.
EmptyCollectionWarning: not an error; empty inputs aggregate to defaults.
"""

from __future__ import annotations


class PRDashError(Exception):
    """Base class for all prdash errors."""


class ValidationError(PRDashError, ValueError):
    """A single input record is malformed and must be excluded."""


class DomainError(PRDashError):
    """Input data describes a state the engine cannot represent."""


class ApiError(PRDashError):
    """The dashboard backend could not be reached or answered with an error."""


class EmptyCollectionWarning(UserWarning):
    """An empty PR or review collection was aggregated."""
