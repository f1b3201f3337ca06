"""Lambda handler for the high score service."""

import json
from typing import Any

from aws_lambda_powertools import Logger
from aws_lambda_powertools.event_handler import (
    APIGatewayRestResolver,
    CORSConfig,
    Response,
    content_types,
)
from aws_lambda_powertools.event_handler.exceptions import (
    BadRequestError,
    InternalServerError,
)
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from .cache import RankedLeaderboardCache
from .exceptions import CacheFault
from .models import SubmissionStatus
from .service import BOARD_ID, LeaderboardQueryService, SubmissionCoordinator

logger = Logger()
app = APIGatewayRestResolver(cors=CORSConfig(allow_origin="*"))
cache = RankedLeaderboardCache(BOARD_ID)
coordinator = SubmissionCoordinator(cache=cache)
query_service = LeaderboardQueryService(cache=cache)


@app.get("/leaderboard/health")
def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return query_service.health_check()


@app.post("/leaderboard/scores/v1")
def submit_score() -> dict[str, Any]:
    """Submit a score and report the personal best and leaderboard outcome."""
    try:
        payload = app.current_event.json_body
    except (ValueError, TypeError) as e:
        logger.warning("Malformed request body", extra={"error": str(e)})
        raise BadRequestError("Request body must be valid JSON.") from e

    logger.info("Score submission received")
    result = coordinator.submit(payload)

    if result.status == SubmissionStatus.INVALID_INPUT:
        raise BadRequestError(result.message)
    if result.status == SubmissionStatus.STORE_FAILED:
        raise InternalServerError(result.message)

    logger.info(
        "Score submitted",
        extra={
            "status": result.status.value,
            "high_score_status": result.high_score_state.value,
        },
    )
    return result.to_response()


@app.get("/leaderboard/v1")
def get_leaderboard() -> Response:
    """Get the global top 10."""
    try:
        entries = query_service.get_top()
    except CacheFault as e:
        logger.error("Leaderboard read failed", extra={"error": str(e)})
        raise InternalServerError(str(e)) from e

    logger.info("Leaderboard retrieved", extra={"entries_count": len(entries)})

    return Response(
        status_code=200,
        content_type=content_types.APPLICATION_JSON,
        body=json.dumps([entry.model_dump(mode="json") for entry in entries]),
    )


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
def lambda_handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Lambda handler entry point."""
    return app.resolve(event, context)
