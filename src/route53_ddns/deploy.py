"""Wire the managed resources together and reconcile them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .config import DeployConfig
from .infra.assume_role_policy import AssumeRolePolicy
from .infra.aws import AwsClients, ResourceContext, resolve_context
from .infra.base import Resource, ResourceRegistry
from .infra.function import Function
from .infra.function_policy import FunctionPolicy
from .infra.hosted_zone import HostedZone
from .infra.lambda_builder import CodePackage, build_package
from .infra.log_group import LogGroup
from .infra.role import Role
from .infra.role_policy import RolePolicy
from .infra.scheduler import apply_all, pending_changes, plan_all

logger = logging.getLogger(__name__)


@dataclass
class DeployResult:
    """Outcome of a deployment run."""

    changes: list[str] = field(default_factory=list)
    applied: list[str] = field(default_factory=list)
    url: str | None = None

    @property
    def up_to_date(self) -> bool:
        return not self.changes


class Deployment:
    """
    One reconciliation run for the dynamic DNS webhook.

    Resources are built fresh for every run and discarded with it::

        async with AwsClients(region=config.region) as clients:
            deployment = Deployment(config, clients)
            result = await deployment.run(apply=True)
    """

    def __init__(
        self,
        config: DeployConfig,
        clients: AwsClients,
        package: CodePackage | None = None,
    ) -> None:
        self.config = config
        self.clients = clients
        self.package = package
        self.registry = ResourceRegistry()
        self.resources: list[Resource] = []
        self.function: Function | None = None

    async def build(self, context: ResourceContext | None = None) -> list[Resource]:
        """
        Construct every resource for this run.

        The hosted zone is resolved first because the policy name and the
        function environment are derived from its domain name and ID.
        """
        config = self.config
        if context is None:
            context = await resolve_context(self.clients, config.region)
        if self.package is None:
            self.package = build_package(config.code_path)

        zone = HostedZone(
            context,
            self.registry,
            self.clients,
            domain_name=config.domain_name,
            zone_id=config.route53_zone_id,
        )
        await zone.resolve()
        domain_name = zone.require_domain_name()
        zone_id = zone.require_zone_id()

        self.function = Function(
            context,
            self.registry,
            self.clients,
            function_name=config.lambda_name,
            env=config.lambda_env(domain_name, zone_id, self.package.sha256),
            package=self.package,
            handler=config.handler,
            runtime=config.runtime,
            timeout=config.timeout,
        )
        self.resources = [
            AssumeRolePolicy(context, self.registry),
            FunctionPolicy(context, self.registry, self.clients, config.lambda_name),
            zone,
            self.function,
            LogGroup(
                context,
                self.registry,
                self.clients,
                config.lambda_name,
                retention_days=config.log_retention_days,
            ),
            Role(context, self.registry, self.clients, config.iam_role_name),
            RolePolicy(
                context,
                self.registry,
                self.clients,
                role_name=config.iam_role_name,
                policy_name=config.policy_name(domain_name),
            ),
        ]
        return self.resources

    async def run(
        self,
        apply: bool = False,
        context: ResourceContext | None = None,
    ) -> DeployResult:
        """
        Plan every resource and, when ``apply`` is set, apply the changes.

        Args:
            apply: Apply the changes instead of only reporting them
            context: Account and region; looked up through STS when omitted

        Returns:
            DeployResult listing changed and applied resources and the
            webhook URL when it is known
        """
        if not self.resources:
            await self.build(context)

        planned = await plan_all(self.resources)
        changed = pending_changes(planned)
        result = DeployResult(changes=[r.name for r in changed])

        if changed and apply:
            applied = await apply_all(planned)
            result.applied = [r.name for r in applied]

        if self.function is not None and self.function.url is not None:
            result.url = self.function.format_url(self.config)
        return result
