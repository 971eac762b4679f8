"""CloudWatch log group the webhook function writes to."""

from __future__ import annotations

import logging

from .aws import AwsClients, ResourceContext, not_found
from .base import AwsResource, ResourceKind, ResourceRegistry

logger = logging.getLogger(__name__)


class LogGroup(AwsResource):
    """The ``/aws/lambda/<function>`` log group, with optional retention."""

    kind = ResourceKind.LOG_GROUP
    service = "logs"

    def __init__(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: AwsClients,
        lambda_name: str,
        retention_days: int | None = None,
    ) -> None:
        super().__init__(context, registry, clients)
        self.lambda_name = lambda_name
        self.log_group_name = f"/aws/lambda/{lambda_name}"
        self.retention_days = retention_days
        self.arn: str | None = None
        self.existing_retention_days: int | None = None

    @property
    def retention_change(self) -> bool:
        return (
            self.retention_days is not None
            and self.existing_retention_days != self.retention_days
        )

    @property
    def needs_apply(self) -> bool:
        return self.arn is None or self.retention_change

    async def _plan(self) -> None:
        logs = await self.client()
        response = await not_found(logs.describe_log_groups(logGroupNamePrefix=self.log_group_name))
        group = next(
            (
                g
                for g in (response or {}).get("logGroups", [])
                if g.get("logGroupName") == self.log_group_name
            ),
            None,
        )
        if group is None:
            logger.info("CloudWatch Log Group does not exist yet: %s", self.log_group_name)
            return

        self.arn = group.get("arn")
        self.existing_retention_days = group.get("retentionInDays")
        logger.info("CloudWatch Log Group exists: %s %s", self.log_group_name, self.arn)

    async def _apply(self) -> None:
        logs = await self.client()

        if self.arn is None:
            logger.info("Creating CloudWatch Log Group: %s", self.log_group_name)
            await logs.create_log_group(
                logGroupName=self.log_group_name,
                logGroupClass="STANDARD",
            )
            self.arn = (
                f"arn:aws:logs:{self.context.region}:{self.context.account_id}"
                f":log-group:{self.log_group_name}:*"
            )
            logger.info("Created CloudWatch Log Group: %s", self.log_group_name)

        if self.retention_change:
            logger.info(
                "Setting retention of %s to %s days", self.log_group_name, self.retention_days
            )
            await logs.put_retention_policy(
                logGroupName=self.log_group_name,
                retentionInDays=self.retention_days,
            )
            self.existing_retention_days = self.retention_days
