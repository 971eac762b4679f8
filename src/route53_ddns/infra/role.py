"""IAM execution role for the webhook function."""

from __future__ import annotations

import logging
from typing import Any

from ..diff import deep_equals
from .assume_role_policy import AssumeRolePolicy
from .aws import AwsClients, ResourceContext, decode_policy_document, not_found
from .base import AwsResource, ResourceKind, ResourceRegistry
from .hosted_zone import HostedZone

logger = logging.getLogger(__name__)


class Role(AwsResource):
    """
    The execution role, created with the desired trust policy.

    Runtime attributes set by plan/apply:
        arn: Role ARN, None until the role exists
        assume_role_policy: The live trust policy document
    """

    kind = ResourceKind.ROLE
    depends_on = frozenset({ResourceKind.HOSTED_ZONE, ResourceKind.ASSUME_ROLE_POLICY})
    service = "iam"

    def __init__(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: AwsClients,
        role_name: str,
    ) -> None:
        super().__init__(context, registry, clients)
        self.role_name = role_name
        self.arn: str | None = None
        self.assume_role_policy: dict[str, Any] | None = None
        self.role_change = True

    @property
    def needs_apply(self) -> bool:
        return self.role_change

    def require_arn(self) -> str:
        return self.require(self.arn, "role ARN")

    async def _plan(self) -> None:
        iam = await self.client()
        response = await not_found(iam.get_role(RoleName=self.role_name), "NoSuchEntity")
        if response is None:
            logger.info("IAM Role does not exist yet: %s", self.role_name)
            return

        role = response["Role"]
        self.arn = role["Arn"]
        document = role.get("AssumeRolePolicyDocument")
        if document is not None:
            self.assume_role_policy = decode_policy_document(document)
            desired = self.sibling(AssumeRolePolicy).document
            self.role_change = not deep_equals(self.assume_role_policy, desired)
        logger.info("IAM Role exists: %s %s", self.role_name, self.arn)

    async def _apply(self) -> None:
        iam = await self.client()
        trust = self.sibling(AssumeRolePolicy)

        if self.arn is None:
            domain_name = self.sibling(HostedZone).require_domain_name()
            logger.info("Creating IAM Role %s", self.role_name)
            response = await iam.create_role(
                RoleName=self.role_name,
                AssumeRolePolicyDocument=trust.document_json,
                Description=f"Route53 dynamic DNS webhook execution role for {domain_name}",
            )
            self.arn = self.require(response.get("Role", {}).get("Arn"), "CreateRole response")
            self.assume_role_policy = trust.document
            # Lambda rejects roles IAM has not finished propagating
            await iam.get_waiter("role_exists").wait(RoleName=self.role_name)
            logger.info("Created IAM Role: %s %s", self.role_name, self.arn)

        if not deep_equals(self.assume_role_policy, trust.document):
            logger.info("Updating the AssumeRolePolicy for Role %s", self.role_name)
            await iam.update_assume_role_policy(
                RoleName=self.role_name,
                PolicyDocument=trust.document_json,
            )
            self.assume_role_policy = trust.document
            logger.info("Updated the AssumeRolePolicy for Role %s", self.role_name)

        self.role_change = False
