"""Unit test fixtures: mocked AWS clients and shared resource context."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from route53_ddns.infra.aws import ResourceContext
from route53_ddns.infra.base import ResourceRegistry

ACCOUNT_ID = "123456789012"
REGION = "us-east-1"
ZONE_ID = "Z0123456789ABCDEFGHIJ"
DOMAIN = "example.com"


def client_error(code: str, operation: str = "Operation") -> ClientError:
    """Build a ClientError as botocore raises it."""
    return ClientError({"Error": {"Code": code, "Message": f"{code} message"}}, operation)


def mock_client() -> MagicMock:
    """A MagicMock client whose waiters can be awaited."""
    client = MagicMock()
    client.get_waiter.return_value.wait = AsyncMock()
    return client


@pytest.fixture
def context() -> ResourceContext:
    return ResourceContext(account_id=ACCOUNT_ID, region=REGION)


@pytest.fixture
def registry() -> ResourceRegistry:
    return ResourceRegistry()


@pytest.fixture
def services() -> dict[str, MagicMock]:
    """Mocked clients keyed by service name."""
    return {name: mock_client() for name in ("sts", "route53", "iam", "lambda", "logs")}


@pytest.fixture
def clients(services: dict[str, MagicMock]) -> MagicMock:
    """Stand-in for AwsClients handing out the mocked service clients."""
    fake = MagicMock()
    fake.get = AsyncMock(side_effect=lambda service: services[service])
    return fake
