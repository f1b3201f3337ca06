"""Valkey sorted set operations backing the ranked leaderboard."""

import os

import redis

from .exceptions import CacheFault


def leaderboard_key(board_id: str) -> str:
    return f"leaderboard:{board_id}"


def create_client() -> redis.Redis:
    """Build a Valkey client from the environment."""
    return redis.Redis(
        host=os.environ.get("VALKEY_URL", "localhost"),
        port=int(os.environ.get("VALKEY_PORT", "6379")),
        ssl=os.environ.get("VALKEY_TLS", "true").lower() == "true",
        socket_timeout=float(os.environ.get("VALKEY_TIMEOUT_SECONDS", "2.0")),
        decode_responses=True,
    )


class RankedLeaderboardCache:
    """Score-descending ranking for a single board.

    Ranks are 0-based here; callers convert to 1-based for display. Equal
    scores are ordered however the sorted set orders them.
    """

    def __init__(self, board_id: str, client: redis.Redis | None = None) -> None:
        self.board_id = board_id
        self.key = leaderboard_key(board_id)
        self.client = client or create_client()

    def upsert(self, username: str, score: int) -> None:
        """Set the member's score, overwriting any previous one."""
        try:
            self.client.zadd(self.key, {username: score})
        except redis.RedisError as e:
            raise CacheFault(f"Failed to add score: {e}") from e

    def trim(self, capacity: int) -> None:
        """Drop every member ranked below ``capacity``."""
        try:
            self.client.zremrangebyrank(self.key, 0, -(capacity + 1))
        except redis.RedisError as e:
            raise CacheFault(f"Failed to trim leaderboard: {e}") from e

    def rank_of(self, username: str) -> int | None:
        try:
            return self.client.zrevrank(self.key, username)
        except redis.RedisError as e:
            raise CacheFault(f"Failed to get rank: {e}") from e

    def range_by_rank(self, start: int, end: int) -> list[tuple[str, int]]:
        """Members between two ranks, inclusive, best first.

        Negative ranks count back from last place (-1 is last).
        """
        try:
            rows = self.client.zrevrange(self.key, start, end, withscores=True)
        except redis.RedisError as e:
            raise CacheFault(f"Failed to read leaderboard range: {e}") from e
        return [(username, int(score)) for username, score in rows]

    def top_n(self, n: int) -> list[tuple[str, int]]:
        if n <= 0:
            return []
        return self.range_by_rank(0, n - 1)

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            raise CacheFault(f"Failed to reach leaderboard cache: {e}") from e
