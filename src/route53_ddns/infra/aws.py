"""AWS session handling shared by every managed resource."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from types import TracebackType
from typing import Any, TypeVar
from urllib.parse import unquote

import aioboto3
from botocore.exceptions import ClientError

from ..exceptions import AccessDeniedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

ACCESS_DENIED_CODES = frozenset({"AccessDenied", "AccessDeniedException"})


@dataclass(frozen=True)
class ResourceContext:
    """Account and region every resource is deployed into."""

    account_id: str
    region: str


class AwsClients:
    """
    Lazily creates and caches aioboto3 clients for one deployment run.

    Supports both AWS and LocalStack environments. When endpoint_url is
    provided, every client talks to that endpoint.

    Use as an async context manager so that every opened client is closed::

        async with AwsClients(region="us-east-1") as clients:
            iam = await clients.get("iam")
    """

    def __init__(
        self,
        region: str | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url
        self._session: aioboto3.Session | None = None
        self._clients: dict[str, Any] = {}

    async def get(self, service: str) -> Any:
        """Get or create the client for an AWS service (e.g. ``"iam"``)."""
        client = self._clients.get(service)
        if client is not None:
            return client

        if self._session is None:
            self._session = aioboto3.Session()

        kwargs: dict[str, Any] = {}
        if self.region:
            kwargs["region_name"] = self.region
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url

        client = await self._session.client(service, **kwargs).__aenter__()
        self._clients[service] = client
        return client

    async def close(self) -> None:
        """Close every client opened so far."""
        clients, self._clients = self._clients, {}
        for service, client in clients.items():
            try:
                await client.__aexit__(None, None, None)
            except Exception as e:
                logger.debug("Error closing %s client: %s", service, e)

    async def __aenter__(self) -> AwsClients:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()


def error_code(error: ClientError) -> str:
    """Extract the AWS error code from a ClientError."""
    return str(error.response.get("Error", {}).get("Code", ""))


async def not_found(call: Awaitable[T], *codes: str) -> T | None:
    """
    Await an AWS call, mapping "not found" error codes to ``None``.

    Any other failure propagates. Access-denied errors are re-raised as
    :class:`AccessDeniedError` so the CLI can point at the credentials.

    Args:
        call: The pending client call, e.g. ``iam.get_role(RoleName=name)``
        codes: Error codes that mean the remote resource does not exist

    Returns:
        The response, or None if the error code was one of ``codes``
    """
    try:
        return await call
    except ClientError as e:
        code = error_code(e)
        if code in codes:
            return None
        if code in ACCESS_DENIED_CODES:
            raise AccessDeniedError(e.operation_name, e) from e
        raise


async def resolve_context(clients: AwsClients, region: str) -> ResourceContext:
    """Look up the caller's account ID and build the shared ResourceContext."""
    sts = await clients.get("sts")
    identity = await not_found(sts.get_caller_identity())
    account_id = (identity or {}).get("Account")
    if not account_id:
        raise AccessDeniedError("GetCallerIdentity")
    return ResourceContext(account_id=account_id, region=region)


def decode_policy_document(document: Any) -> Any:
    """
    Parse a policy document returned by IAM.

    botocore already decodes most IAM policy documents into dicts; anything
    still a string is URL-encoded JSON.
    """
    if isinstance(document, str):
        return json.loads(unquote(document))
    return document
