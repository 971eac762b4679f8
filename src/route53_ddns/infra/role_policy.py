"""Managed IAM policy letting the execution role update the hosted zone."""

from __future__ import annotations

import json
import logging
from typing import Any

from ..diff import deep_equals
from .aws import AwsClients, ResourceContext, decode_policy_document, not_found
from .base import AwsResource, ResourceKind, ResourceRegistry
from .hosted_zone import HostedZone
from .role import Role

logger = logging.getLogger(__name__)

# IAM keeps at most this many versions of a managed policy
MAX_POLICY_VERSIONS = 5


class RolePolicy(AwsResource):
    """
    A customer-managed policy attached to the execution role.

    Grants record changes on the hosted zone, plus the permissions of
    AWSLambdaBasicExecutionRole for writing logs.
    """

    kind = ResourceKind.ROLE_POLICY
    depends_on = frozenset({ResourceKind.HOSTED_ZONE, ResourceKind.ROLE})
    service = "iam"

    def __init__(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: AwsClients,
        role_name: str,
        policy_name: str,
    ) -> None:
        super().__init__(context, registry, clients)
        self.role_name = role_name
        self.policy_name = policy_name
        self.policy_arn: str | None = None
        self.existing_document: dict[str, Any] | None = None
        self.policy_change = True
        self.attached = False

    @property
    def expected_arn(self) -> str:
        return f"arn:aws:iam::{self.context.account_id}:policy/{self.policy_name}"

    @property
    def document(self) -> dict[str, Any]:
        zone_id = self.sibling(HostedZone).require_zone_id()
        return {
            "Statement": [
                {
                    "Action": [
                        "route53:ChangeResourceRecordSets",
                        "route53:ListResourceRecordSets",
                    ],
                    "Effect": "Allow",
                    "Resource": f"arn:aws:route53:::hostedzone/{zone_id}",
                },
                {
                    # Same as the AWSLambdaBasicExecutionRole managed policy
                    "Action": [
                        "logs:CreateLogGroup",
                        "logs:CreateLogStream",
                        "logs:PutLogEvents",
                    ],
                    "Effect": "Allow",
                    "Resource": "*",
                },
            ],
            "Version": "2012-10-17",
        }

    @property
    def document_json(self) -> str:
        return json.dumps(self.document, indent=2)

    @property
    def needs_apply(self) -> bool:
        return self.policy_arn is None or self.policy_change or not self.attached

    async def _plan(self) -> None:
        iam = await self.client()
        response = await not_found(iam.get_policy(PolicyArn=self.expected_arn), "NoSuchEntity")
        if response is None:
            logger.info("IAM Policy does not exist yet: %s", self.policy_name)
            return

        policy = response["Policy"]
        self.policy_arn = policy["Arn"]
        logger.info("IAM Policy exists: %s %s", self.policy_name, self.policy_arn)

        version = await iam.get_policy_version(
            PolicyArn=self.policy_arn,
            VersionId=policy["DefaultVersionId"],
        )
        document = version.get("PolicyVersion", {}).get("Document")
        if document is not None:
            self.existing_document = decode_policy_document(document)
            self.policy_change = not deep_equals(self.existing_document, self.document)

        if self.sibling(Role).arn is not None:
            attached = await iam.list_attached_role_policies(RoleName=self.role_name)
            self.attached = any(
                p.get("PolicyArn") == self.policy_arn for p in attached.get("AttachedPolicies", [])
            )

    async def _apply(self) -> None:
        iam = await self.client()

        if self.policy_arn is None:
            domain_name = self.sibling(HostedZone).require_domain_name()
            logger.info("Creating Policy: %s", self.policy_name)
            response = await iam.create_policy(
                PolicyName=self.policy_name,
                PolicyDocument=self.document_json,
                Description=f"Route53 dynamic DNS update policy for {domain_name}",
            )
            self.policy_arn = self.require(
                response.get("Policy", {}).get("Arn"), "CreatePolicy response"
            )
            self.existing_document = self.document
            logger.info("Created IAM Policy: %s %s", self.policy_name, self.policy_arn)

        elif not deep_equals(self.existing_document, self.document):
            await self._prune_versions(iam)
            logger.info("Updating Policy %s", self.policy_name)
            response = await iam.create_policy_version(
                PolicyArn=self.policy_arn,
                PolicyDocument=self.document_json,
                SetAsDefault=True,
            )
            self.existing_document = self.document
            logger.info(
                "Updated Policy %s %s",
                self.policy_name,
                response.get("PolicyVersion", {}).get("VersionId"),
            )

        if not self.attached:
            logger.info("Attaching Policy %s to Role %s", self.policy_name, self.role_name)
            await iam.attach_role_policy(RoleName=self.role_name, PolicyArn=self.policy_arn)
            self.attached = True

        self.policy_change = False

    async def _prune_versions(self, iam: Any) -> None:
        """Delete the oldest non-default version when IAM's version limit is reached."""
        response = await iam.list_policy_versions(PolicyArn=self.policy_arn)
        versions = response.get("Versions", [])
        if len(versions) < MAX_POLICY_VERSIONS:
            return
        candidates = sorted(
            (v for v in versions if not v.get("IsDefaultVersion")),
            key=lambda v: v["CreateDate"],
        )
        if candidates:
            oldest = candidates[0]["VersionId"]
            logger.info("Deleting old version %s of Policy %s", oldest, self.policy_name)
            await iam.delete_policy_version(PolicyArn=self.policy_arn, VersionId=oldest)
