"""Error types for the high score service."""


class LeaderboardError(RuntimeError):
    """Base class for backend failures."""


class StoreFault(LeaderboardError):
    """The durable high score store could not complete an operation."""


class CacheFault(LeaderboardError):
    """The ranked leaderboard cache could not complete an operation."""


class SubmissionValidationError(ValueError):
    """A score submission was missing fields or carried a non-numeric score."""
