"""Route53 hosted zone lookup."""

from __future__ import annotations

import logging

from ..exceptions import DomainMismatchError, HostedZoneNotFoundError, ValidationError
from .aws import AwsClients, ResourceContext, not_found
from .base import AwsResource, ResourceKind, ResourceRegistry

logger = logging.getLogger(__name__)

ZONE_ID_PREFIX = "/hostedzone/"


def _strip_dot(name: str) -> str:
    return name[:-1] if name.endswith(".") else name


class HostedZone(AwsResource):
    """
    The existing Route53 zone the webhook updates records in.

    The zone is never created or modified. Either the domain name or the
    zone ID may be configured; :meth:`resolve` looks up the other one.
    """

    kind = ResourceKind.HOSTED_ZONE
    service = "route53"

    def __init__(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: AwsClients,
        domain_name: str | None = None,
        zone_id: str | None = None,
    ) -> None:
        super().__init__(context, registry, clients)
        self.domain_name = _strip_dot(domain_name) if domain_name else None
        self.zone_id = zone_id.removeprefix(ZONE_ID_PREFIX) if zone_id else None
        self.resolved = False

    @property
    def needs_apply(self) -> bool:
        return False

    @property
    def fqdn(self) -> str:
        return self.require_domain_name() + "."

    def require_domain_name(self) -> str:
        return self.require(self.domain_name, "domain name")

    def require_zone_id(self) -> str:
        return self.require(self.zone_id, "hosted zone ID")

    async def resolve(self) -> None:
        """
        Fill in whichever of domain name and zone ID was not configured.

        Raises:
            HostedZoneNotFoundError: If no zone matches
            DomainMismatchError: If both were configured but disagree
        """
        if self.resolved:
            return

        route53 = await self.client()

        if self.zone_id is not None:
            response = await not_found(
                route53.get_hosted_zone(Id=self.zone_id), "NoSuchHostedZone"
            )
            name = ((response or {}).get("HostedZone") or {}).get("Name")
            if not name:
                raise HostedZoneNotFoundError(self.zone_id)
            actual = _strip_dot(name)
            if self.domain_name is None:
                self.domain_name = actual
            elif self.domain_name != actual:
                raise DomainMismatchError(self.domain_name, actual, self.zone_id)

        elif self.domain_name is not None:
            fqdn = self.fqdn
            response = await not_found(route53.list_hosted_zones_by_name(DNSName=fqdn)) or {}
            zone = next(
                (z for z in response.get("HostedZones", []) if z.get("Name") == fqdn),
                None,
            )
            if zone is None or not zone.get("Id"):
                raise HostedZoneNotFoundError(self.domain_name)
            self.zone_id = zone["Id"].removeprefix(ZONE_ID_PREFIX)

        else:
            raise ValidationError(
                "domain_name", None, "either domain_name or route53_zone_id must be configured"
            )

        self.resolved = True
        logger.info("Hosted zone %s = %s", self.domain_name, self.zone_id)

    async def _plan(self) -> None:
        await self.resolve()

    async def _apply(self) -> None:
        pass
