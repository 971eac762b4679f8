"""Tests for AWS client handling and error mapping."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from route53_ddns.exceptions import AccessDeniedError
from route53_ddns.infra.aws import (
    AwsClients,
    ResourceContext,
    decode_policy_document,
    error_code,
    not_found,
    resolve_context,
)
from tests.unit.conftest import client_error


async def _raise(error: Exception) -> None:
    raise error


async def _value(value: object) -> object:
    return value


class TestNotFound:
    """Tests for the not_found helper."""

    @pytest.mark.asyncio
    async def test_returns_response(self) -> None:
        assert await not_found(_value({"Role": {}}), "NoSuchEntity") == {"Role": {}}

    @pytest.mark.asyncio
    async def test_listed_code_becomes_none(self) -> None:
        assert await not_found(_raise(client_error("NoSuchEntity")), "NoSuchEntity") is None

    @pytest.mark.asyncio
    async def test_other_codes_propagate(self) -> None:
        with pytest.raises(ClientError) as exc_info:
            await not_found(_raise(client_error("Throttling")), "NoSuchEntity")
        assert error_code(exc_info.value) == "Throttling"

    @pytest.mark.asyncio
    async def test_no_codes_means_nothing_is_not_found(self) -> None:
        with pytest.raises(ClientError):
            await not_found(_raise(client_error("NoSuchEntity")))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["AccessDenied", "AccessDeniedException"])
    async def test_access_denied_is_mapped(self, code: str) -> None:
        with pytest.raises(AccessDeniedError) as exc_info:
            await not_found(_raise(client_error(code, "GetRole")), "NoSuchEntity")
        assert exc_info.value.operation == "GetRole"
        assert isinstance(exc_info.value.cause, ClientError)

    @pytest.mark.asyncio
    async def test_non_client_errors_propagate(self) -> None:
        with pytest.raises(ValueError):
            await not_found(_raise(ValueError("boom")), "NoSuchEntity")


class TestDecodePolicyDocument:
    """Tests for decode_policy_document."""

    def test_url_encoded_string(self) -> None:
        encoded = "%7B%22Version%22%3A%20%222012-10-17%22%7D"
        assert decode_policy_document(encoded) == {"Version": "2012-10-17"}

    def test_plain_json_string(self) -> None:
        assert decode_policy_document('{"a": [1]}') == {"a": [1]}

    def test_already_decoded(self) -> None:
        doc = {"Version": "2012-10-17"}
        assert decode_policy_document(doc) is doc


class TestResolveContext:
    """Tests for resolve_context."""

    @pytest.mark.asyncio
    async def test_reads_account_from_sts(self, clients: MagicMock, services) -> None:
        services["sts"].get_caller_identity = AsyncMock(
            return_value={"Account": "210987654321", "Arn": "arn:aws:iam::210987654321:user/me"}
        )

        context = await resolve_context(clients, "eu-west-1")

        assert context == ResourceContext(account_id="210987654321", region="eu-west-1")

    @pytest.mark.asyncio
    async def test_missing_credentials(self, clients: MagicMock, services) -> None:
        services["sts"].get_caller_identity = AsyncMock(
            side_effect=client_error("AccessDenied", "GetCallerIdentity")
        )

        with pytest.raises(AccessDeniedError, match="AWS_PROFILE"):
            await resolve_context(clients, "us-east-1")


class TestAwsClients:
    """Tests for AwsClients."""

    @pytest.mark.asyncio
    async def test_clients_are_cached_and_closed(self) -> None:
        client = MagicMock()
        client.__aexit__ = AsyncMock(return_value=None)
        context_manager = MagicMock()
        context_manager.__aenter__ = AsyncMock(return_value=client)
        session = MagicMock()
        session.client.return_value = context_manager

        with patch("route53_ddns.infra.aws.aioboto3.Session", return_value=session):
            async with AwsClients(region="us-west-2", endpoint_url="http://localhost:4566") as aws:
                first = await aws.get("iam")
                second = await aws.get("iam")

        assert first is client
        assert second is client
        session.client.assert_called_once_with(
            "iam", region_name="us-west-2", endpoint_url="http://localhost:4566"
        )
        client.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_defaults_pass_no_kwargs(self) -> None:
        context_manager = MagicMock()
        context_manager.__aenter__ = AsyncMock(return_value=MagicMock())
        session = MagicMock()
        session.client.return_value = context_manager

        with patch("route53_ddns.infra.aws.aioboto3.Session", return_value=session):
            aws = AwsClients()
            await aws.get("sts")

        session.client.assert_called_once_with("sts")
