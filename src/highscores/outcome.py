"""Turns a post-submission rank into player-facing feedback."""

from collections.abc import Callable

from .models import LeaderboardOutcome


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def classify(
    rank: int | None,
    capacity: int,
    boundary_lookup: Callable[[], int | None],
) -> LeaderboardOutcome:
    """Classify a submission by its 0-based rank on the board.

    Args:
        rank: 0-based rank after the upsert and trim, or None if the player
            is no longer on the board
        capacity: number of places the board keeps
        boundary_lookup: returns the score in last qualifying place, or None
            if the board is not full yet

    Returns:
        LeaderboardOutcome with a 1-based rank when the player made the board
    """
    if rank is not None and rank < capacity:
        position = rank + 1
        return LeaderboardOutcome(
            made_top_n=True,
            rank=position,
            boundary_score=boundary_lookup(),
            message=f"Congratulations! You are #{position} on the leaderboard!",
        )

    boundary = boundary_lookup()
    if boundary is None:
        return LeaderboardOutcome(
            made_top_n=False,
            rank=None,
            boundary_score=0,
            message=(
                "The leaderboard is still filling up! "
                "Be among the first to reach the top!"
            ),
        )

    return LeaderboardOutcome(
        made_top_n=False,
        rank=None,
        boundary_score=boundary,
        message=(
            f"Great effort! The {ordinal(capacity)} place score is {boundary}. "
            f"Reach {boundary} or more to enter the top {capacity}!"
        ),
    )
