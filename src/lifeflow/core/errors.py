"""Exceptions raised by the lifeflow layout core.

The core raises only on contract violations. Degenerate but valid inputs
(an empty event list, a single event, zero-duration spans, extreme zoom)
always produce a valid, possibly trivial, result instead of an error.
"""


class TimelineError(Exception):
    """Base exception for timeline layout errors.

    All core exceptions inherit from this class so callers can handle
    them at a single boundary.
    """

    pass


class InvalidInputError(TimelineError, ValueError):
    """Raised when a caller passes input that breaks a documented contract.

    Raised when:
    - A cluster is built from an empty event list
    - An event payload cannot be validated into a TimelineEvent
    """

    pass
