"""DynamoDB operations for player personal bests."""

import os
from datetime import datetime, UTC

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import StoreFault
from .models import HighScoreState, HighScoreUpdate, PlayerRecord

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


def partition_key(board_id: str) -> str:
    return f"LB#{board_id}"


def sort_key(username: str) -> str:
    return f"USER#{username}"


class HighScoreTable:
    """Durable personal best store with a conditional, monotonic update."""

    def __init__(self, table_name: str | None = None) -> None:
        """Initialize database connection."""
        resolved_table_name = table_name or os.environ.get(
            "HIGHSCORE_TABLE", "player-high-scores"
        )
        if not resolved_table_name:
            raise ValueError("Table name must be provided")
        self.table_name = resolved_table_name
        region = os.environ.get("AWS_DEFAULT_REGION", "us-east-1")
        self.dynamodb = boto3.resource("dynamodb", region_name=region)
        self.table = self.dynamodb.Table(self.table_name)

    def conditional_update_high_score(
        self, board_id: str, username: str, score: int
    ) -> HighScoreUpdate:
        """Store ``score`` as the player's high score if it beats the current one.

        The comparison runs inside DynamoDB's condition expression, so of two
        racing writes the larger score always ends up stored.

        Returns:
            HighScoreUpdate with NEW_HIGHSCORE when the write applied,
            NOT_HIGHSCORE when an equal or higher score is already stored,
            and FAILED (with a detail message) for anything else.
        """
        if isinstance(score, bool) or not isinstance(score, int):
            return HighScoreUpdate(
                state=HighScoreState.FAILED,
                message=f"Score must be an integer, got {type(score).__name__}",
            )

        now_ms = int(datetime.now(UTC).timestamp() * 1000)
        try:
            self.table.update_item(
                Key={"PK": partition_key(board_id), "SK": sort_key(username)},
                UpdateExpression="SET #score = :newScore, #lastUpdated = :currentTime",
                ConditionExpression="#score < :newScore OR attribute_not_exists(#score)",
                ExpressionAttributeNames={
                    "#score": "HighScore",
                    "#lastUpdated": "LastUpdated",
                },
                ExpressionAttributeValues={
                    ":newScore": score,
                    ":currentTime": now_ms,
                },
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED:
                return HighScoreUpdate(
                    state=HighScoreState.NOT_HIGHSCORE,
                    message="Score was not a new high score.",
                )
            return HighScoreUpdate(
                state=HighScoreState.FAILED,
                message=f"Failed to update high score: {e}",
            )
        except BotoCoreError as e:
            return HighScoreUpdate(
                state=HighScoreState.FAILED,
                message=f"Failed to update high score: {e}",
            )

        return HighScoreUpdate(state=HighScoreState.NEW_HIGHSCORE)

    def get_player_record(self, board_id: str, username: str) -> PlayerRecord | None:
        """Get the stored personal best for a player, if any.

        Not used by the submission path, which only needs the conditional
        write. Kept for operational tooling and for checking stored records
        in tests.

        Raises:
            StoreFault: If the table cannot be read
        """
        try:
            response = self.table.get_item(
                Key={"PK": partition_key(board_id), "SK": sort_key(username)},
                ConsistentRead=True,
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreFault(f"Failed to read high score: {e}") from e

        item = response.get("Item")
        if item is None:
            return None

        return PlayerRecord(
            board_id=board_id,
            username=username,
            high_score=int(item["HighScore"]),
            last_updated=datetime.fromtimestamp(
                int(item["LastUpdated"]) / 1000, tz=UTC
            ),
        )
