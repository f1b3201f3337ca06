"""Business logic for score submissions and leaderboard queries."""

from typing import Any

from aws_lambda_powertools import Logger
from pydantic import ValidationError

from .cache import RankedLeaderboardCache
from .database import HighScoreTable
from .exceptions import CacheFault, SubmissionValidationError
from .models import (
    LeaderboardOutcome,
    RankedEntry,
    ScoreSubmission,
    SubmissionResult,
    SubmissionStatus,
)
from .outcome import classify

BOARD_ID = "GlobalLeaderboard"
CAPACITY = 10

SUBMITTED_MESSAGE = "Score submitted successfully!"
CACHE_FAILED_MESSAGE = "Failed to update leaderboard. Please try again."

logger = Logger(child=True)


def parse_submission(payload: Any) -> ScoreSubmission:
    """Validate a raw request body.

    Raises:
        SubmissionValidationError: If username or score is missing, or the
            score is not a number
    """
    try:
        return ScoreSubmission.model_validate(payload)
    except ValidationError as e:
        message = e.errors()[0]["msg"].removeprefix("Value error, ")
        raise SubmissionValidationError(message) from e


class SubmissionCoordinator:
    """Runs one score submission against the durable store and the ranked cache.

    The durable write and the cache write are not transactional. Once the
    personal best has been written, a cache failure only degrades the
    leaderboard part of the result.
    """

    def __init__(
        self,
        store: HighScoreTable | None = None,
        cache: RankedLeaderboardCache | None = None,
        board_id: str = BOARD_ID,
        capacity: int = CAPACITY,
    ) -> None:
        self.board_id = board_id
        self.capacity = capacity
        self.store = store or HighScoreTable()
        self.cache = cache or RankedLeaderboardCache(board_id)

    def submit(self, payload: Any) -> SubmissionResult:
        """Submit a score.

        Args:
            payload: Decoded request body, expected to carry username and score

        Returns:
            SubmissionResult whose status tells apart a rejected request,
            a failed durable write, a degraded cache update and full success
        """
        try:
            submission = parse_submission(payload)
        except SubmissionValidationError as e:
            logger.warning("Invalid score submission", extra={"error": str(e)})
            return SubmissionResult(
                status=SubmissionStatus.INVALID_INPUT, message=str(e)
            )

        update = self.store.conditional_update_high_score(
            self.board_id, submission.username, submission.score
        )
        if update.failed:
            logger.error(
                "High score update failed",
                extra={"username": submission.username, "error": update.message},
            )
            return SubmissionResult(
                status=SubmissionStatus.STORE_FAILED,
                message=update.message or "Failed to update high score.",
                high_score_state=update.state,
            )

        # Runs for rejected personal bests too: the board shows the latest score.
        status = SubmissionStatus.COMPLETED
        try:
            outcome = self._update_board(submission)
        except CacheFault as e:
            logger.warning(
                "Leaderboard update failed",
                extra={"username": submission.username, "error": str(e)},
            )
            status = SubmissionStatus.CACHE_DEGRADED
            outcome = LeaderboardOutcome(
                made_top_n=False,
                rank=None,
                boundary_score=None,
                message=CACHE_FAILED_MESSAGE,
                error=str(e),
            )

        return SubmissionResult(
            status=status,
            message=SUBMITTED_MESSAGE,
            high_score_state=update.state,
            outcome=outcome,
        )

    def _update_board(self, submission: ScoreSubmission) -> LeaderboardOutcome:
        self.cache.upsert(submission.username, submission.score)
        self.cache.trim(self.capacity)
        rank = self.cache.rank_of(submission.username)
        return classify(rank, self.capacity, self._boundary_score)

    def _boundary_score(self) -> int | None:
        # After a trim the board holds at most `capacity` members, so the last
        # qualifying place only exists once the board is full.
        entries = self.cache.range_by_rank(self.capacity - 1, self.capacity - 1)
        if not entries:
            return None
        return entries[0][1]


class LeaderboardQueryService:
    """Read-only view of the ranked board."""

    def __init__(
        self,
        cache: RankedLeaderboardCache | None = None,
        board_id: str = BOARD_ID,
        capacity: int = CAPACITY,
    ) -> None:
        self.capacity = capacity
        self.cache = cache or RankedLeaderboardCache(board_id)

    def health_check(self) -> dict[str, str]:
        """Perform health check."""
        try:
            cache_status = "ok" if self.cache.ping() else "unavailable"
        except CacheFault as e:
            logger.warning("Leaderboard cache unreachable", extra={"error": str(e)})
            cache_status = "unavailable"
        return {"status": "healthy", "service": "highscores", "cache": cache_status}

    def get_top(self, n: int | None = None) -> list[RankedEntry]:
        """Get the best ``n`` entries (the whole board by default), ranked from 1.

        Raises:
            CacheFault: If the ranked cache cannot be read
        """
        limit = self.capacity if n is None else n
        return [
            RankedEntry(username=username, score=score, rank=rank)
            for rank, (username, score) in enumerate(self.cache.top_n(limit), 1)
        ]
