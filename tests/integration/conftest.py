"""Integration test configuration and fixtures."""

import os
from collections.abc import Generator

import boto3
import pytest
import redis
from testcontainers.localstack import LocalStackContainer
from testcontainers.redis import RedisContainer

from src.highscores.cache import RankedLeaderboardCache
from src.highscores.database import HighScoreTable

INTEGRATION_BOARD = "IntegrationBoard"


@pytest.fixture(scope="session")
def localstack_container() -> Generator[LocalStackContainer, None, None]:
    """Start LocalStack container for integration tests."""
    container = LocalStackContainer(image="localstack/localstack:3.0").with_services(
        "dynamodb"
    )
    with container as localstack:
        # Set AWS environment variables for tests
        os.environ["AWS_ENDPOINT_URL"] = localstack.get_url()
        os.environ["AWS_ACCESS_KEY_ID"] = "test"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "test"  # noqa: S105
        os.environ["AWS_DEFAULT_REGION"] = "us-east-1"

        yield localstack


@pytest.fixture(scope="session")
def redis_container() -> Generator[RedisContainer, None, None]:
    """Start a Redis container standing in for Valkey."""
    with RedisContainer(image="redis:7-alpine") as container:
        yield container


@pytest.fixture(scope="session")
def dynamodb_table(localstack_container: LocalStackContainer) -> Generator[str, None, None]:
    """Create and configure the personal best table."""
    table_name = "player-high-scores-it"
    client = boto3.client(
        "dynamodb",
        endpoint_url=localstack_container.get_url(),
        aws_access_key_id="test",
        aws_secret_access_key="test",  # noqa: S106
        region_name="us-east-1",
    )

    try:
        client.create_table(
            TableName=table_name,
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )
        client.get_waiter("table_exists").wait(TableName=table_name)
    except client.exceptions.ResourceInUseException:
        # Table already exists
        pass

    yield table_name

    client.delete_table(TableName=table_name)


@pytest.fixture
def high_score_table(
    dynamodb_table: str, localstack_container: LocalStackContainer
) -> Generator[HighScoreTable, None, None]:
    """Create HighScoreTable instance connected to the test table."""
    db = HighScoreTable(table_name=dynamodb_table)

    # Override the DynamoDB resource to use LocalStack endpoint
    db.dynamodb = boto3.resource(
        "dynamodb",
        endpoint_url=localstack_container.get_url(),
        aws_access_key_id="test",
        aws_secret_access_key="test",  # noqa: S106
        region_name="us-east-1",
    )
    db.table = db.dynamodb.Table(dynamodb_table)

    yield db

    # Cleanup - clear all items from table
    response = db.table.scan()
    with db.table.batch_writer() as batch:
        for item in response.get("Items", []):
            batch.delete_item(Key={"PK": item["PK"], "SK": item["SK"]})


@pytest.fixture
def redis_client(redis_container: RedisContainer) -> redis.Redis:
    return redis_container.get_client(decode_responses=True)


@pytest.fixture
def ranked_cache(
    redis_client: redis.Redis,
) -> Generator[RankedLeaderboardCache, None, None]:
    """Ranked cache on a fresh integration board."""
    cache = RankedLeaderboardCache(INTEGRATION_BOARD, client=redis_client)

    yield cache

    redis_client.delete(cache.key)
