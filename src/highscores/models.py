"""Data models for the high score service."""

import math
import re
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

REQUIRED_FIELDS_MESSAGE = "Username and score are required."
INVALID_SCORE_MESSAGE = "Score must be a valid number."
MAX_SCORE_MAGNITUDE = 10**38

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class HighScoreState(str, Enum):
    """Outcome of a conditional personal best write."""

    FAILED = "FAILED"
    NOT_HIGHSCORE = "NOT_HIGHSCORE"
    NEW_HIGHSCORE = "NEW_HIGHSCORE"


class SubmissionStatus(str, Enum):
    """How far a submission got through the durable and cache writes."""

    COMPLETED = "COMPLETED"
    CACHE_DEGRADED = "CACHE_DEGRADED"
    INVALID_INPUT = "INVALID_INPUT"
    STORE_FAILED = "STORE_FAILED"


class HighScoreUpdate(BaseModel):
    """Result of DurableScoreStore.conditional_update_high_score."""

    state: HighScoreState
    message: str | None = None

    @property
    def failed(self) -> bool:
        return self.state == HighScoreState.FAILED


class PlayerRecord(BaseModel):
    """Personal best stored for one player on one board."""

    board_id: str
    username: str
    high_score: int
    last_updated: datetime


class ScoreSubmission(BaseModel):
    """Model for score submission requests."""

    username: str
    score: int

    @model_validator(mode="before")
    @classmethod
    def require_fields(cls, data: Any) -> Any:
        """Reject payloads without both a username and a score."""
        if not isinstance(data, dict):
            raise ValueError(REQUIRED_FIELDS_MESSAGE)
        if data.get("username") is None or data.get("score") is None:
            raise ValueError(REQUIRED_FIELDS_MESSAGE)
        return data

    @field_validator("username", mode="before")
    @classmethod
    def validate_username(cls, v: Any) -> str:
        """Accept numeric usernames as text and reject blank ones."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        if not isinstance(v, str):
            raise ValueError(REQUIRED_FIELDS_MESSAGE)
        v = v.strip()
        if not v:
            raise ValueError(REQUIRED_FIELDS_MESSAGE)
        return v

    @field_validator("score", mode="before")
    @classmethod
    def parse_score(cls, v: Any) -> int:
        """Parse the score as an integer, keeping only its leading digits."""
        if isinstance(v, bool):
            raise ValueError(INVALID_SCORE_MESSAGE)
        score: int | None = None
        if isinstance(v, int):
            score = v
        elif isinstance(v, float) and math.isfinite(v):
            score = int(v)
        elif isinstance(v, str):
            match = _LEADING_INT.match(v)
            if match:
                score = int(match.group(1))
        # DynamoDB numbers carry at most 38 significant digits.
        if score is None or abs(score) >= MAX_SCORE_MAGNITUDE:
            raise ValueError(INVALID_SCORE_MESSAGE)
        return score


class LeaderboardOutcome(BaseModel):
    """Where a submission landed on the ranked board."""

    made_top_n: bool = Field(default=False, serialization_alias="madeTopN")
    rank: int | None = Field(default=None, ge=1)
    boundary_score: int | None = Field(
        default=None, serialization_alias="tenthPlaceScore"
    )
    message: str
    error: str | None = None

    def to_response(self) -> dict[str, Any]:
        """Render the outcome with wire field names."""
        body = self.model_dump(by_alias=True, exclude={"error"})
        if self.error is not None:
            body["error"] = self.error
        return body


class SubmissionResult(BaseModel):
    """Typed result of one run of the submission protocol."""

    status: SubmissionStatus
    message: str
    high_score_state: HighScoreState | None = None
    outcome: LeaderboardOutcome | None = None

    @property
    def succeeded(self) -> bool:
        return self.status in (
            SubmissionStatus.COMPLETED,
            SubmissionStatus.CACHE_DEGRADED,
        )

    def to_response(self) -> dict[str, Any]:
        """Render a successful submission as the response body."""
        if not self.succeeded or self.outcome is None:
            return {"message": self.message}
        return {
            "message": self.message,
            "highScoreStatus": self.high_score_state.value,
            "leaderboardOutcome": self.outcome.to_response(),
        }


class RankedEntry(BaseModel):
    """Model for leaderboard entries in responses."""

    username: str
    score: int
    rank: int = Field(..., ge=1, description="Rank position")
