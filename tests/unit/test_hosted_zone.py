"""Tests for hosted zone resolution."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from route53_ddns.exceptions import (
    DomainMismatchError,
    HostedZoneNotFoundError,
    MissingAttributeError,
)
from route53_ddns.infra.aws import ResourceContext
from route53_ddns.infra.base import ResourceRegistry
from route53_ddns.infra.hosted_zone import HostedZone
from tests.unit.conftest import DOMAIN, ZONE_ID, client_error


class TestHostedZone:
    """Tests for HostedZone."""

    def test_normalizes_inputs(
        self, context: ResourceContext, registry: ResourceRegistry, clients: MagicMock
    ) -> None:
        zone = HostedZone(
            context, registry, clients, domain_name="example.com.", zone_id=f"/hostedzone/{ZONE_ID}"
        )
        assert zone.domain_name == DOMAIN
        assert zone.zone_id == ZONE_ID
        assert zone.fqdn == "example.com."

    def test_requires_before_resolve(
        self, context: ResourceContext, registry: ResourceRegistry, clients: MagicMock
    ) -> None:
        zone = HostedZone(context, registry, clients, domain_name=DOMAIN)

        assert zone.require_domain_name() == DOMAIN
        with pytest.raises(MissingAttributeError, match="hosted zone ID"):
            zone.require_zone_id()

    @pytest.mark.asyncio
    async def test_resolve_by_domain_name(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: MagicMock,
        services: dict[str, MagicMock],
    ) -> None:
        route53 = services["route53"]
        route53.list_hosted_zones_by_name = AsyncMock(
            return_value={
                "HostedZones": [
                    {"Id": "/hostedzone/ZOTHER", "Name": "example.co."},
                    {"Id": f"/hostedzone/{ZONE_ID}", "Name": "example.com."},
                ]
            }
        )
        zone = HostedZone(context, registry, clients, domain_name=DOMAIN)

        await zone.resolve()

        assert zone.require_zone_id() == ZONE_ID
        route53.list_hosted_zones_by_name.assert_awaited_once_with(DNSName="example.com.")

    @pytest.mark.asyncio
    async def test_resolve_by_domain_name_not_found(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: MagicMock,
        services: dict[str, MagicMock],
    ) -> None:
        services["route53"].list_hosted_zones_by_name = AsyncMock(
            return_value={"HostedZones": [{"Id": "/hostedzone/ZOTHER", "Name": "other.com."}]}
        )
        zone = HostedZone(context, registry, clients, domain_name=DOMAIN)

        with pytest.raises(HostedZoneNotFoundError, match="example.com"):
            await zone.resolve()

    @pytest.mark.asyncio
    async def test_resolve_by_zone_id(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: MagicMock,
        services: dict[str, MagicMock],
    ) -> None:
        services["route53"].get_hosted_zone = AsyncMock(
            return_value={"HostedZone": {"Id": f"/hostedzone/{ZONE_ID}", "Name": "example.com."}}
        )
        zone = HostedZone(context, registry, clients, zone_id=ZONE_ID)

        await zone.resolve()

        assert zone.require_domain_name() == DOMAIN
        assert zone.fqdn == "example.com."

    @pytest.mark.asyncio
    async def test_resolve_by_zone_id_not_found(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: MagicMock,
        services: dict[str, MagicMock],
    ) -> None:
        services["route53"].get_hosted_zone = AsyncMock(
            side_effect=client_error("NoSuchHostedZone", "GetHostedZone")
        )
        zone = HostedZone(context, registry, clients, zone_id=ZONE_ID)

        with pytest.raises(HostedZoneNotFoundError, match=ZONE_ID):
            await zone.resolve()

    @pytest.mark.asyncio
    async def test_configured_domain_must_match_zone(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: MagicMock,
        services: dict[str, MagicMock],
    ) -> None:
        services["route53"].get_hosted_zone = AsyncMock(
            return_value={"HostedZone": {"Name": "other.com."}}
        )
        zone = HostedZone(context, registry, clients, domain_name=DOMAIN, zone_id=ZONE_ID)

        with pytest.raises(DomainMismatchError) as exc_info:
            await zone.resolve()

        assert exc_info.value.actual == "other.com"

    @pytest.mark.asyncio
    async def test_plan_resolves_once_and_never_needs_apply(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: MagicMock,
        services: dict[str, MagicMock],
    ) -> None:
        services["route53"].get_hosted_zone = AsyncMock(
            return_value={"HostedZone": {"Name": "example.com."}}
        )
        zone = HostedZone(context, registry, clients, zone_id=ZONE_ID)

        await zone.resolve()
        await zone.plan()
        await zone.apply()

        services["route53"].get_hosted_zone.assert_awaited_once()
        assert not zone.needs_apply
