"""Resource policy that makes the function URL publicly invocable."""

from __future__ import annotations

import json
import logging
from typing import Any

from ..diff import deep_equals
from .aws import AwsClients, ResourceContext, not_found
from .base import AwsResource, ResourceKind, ResourceRegistry

logger = logging.getLogger(__name__)

STATEMENT_ID = "FunctionURLAllowPublicAccess"


class FunctionPolicy(AwsResource):
    """
    The function's resource-based policy.

    When the live policy differs, every existing statement is removed and
    the single public function URL permission is added back.
    """

    kind = ResourceKind.FUNCTION_POLICY
    depends_on = frozenset({ResourceKind.FUNCTION})
    service = "lambda"

    def __init__(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: AwsClients,
        function_name: str,
    ) -> None:
        super().__init__(context, registry, clients)
        self.function_name = function_name
        self.existing_document: dict[str, Any] | None = None
        # Assume a change is needed until plan has seen the live policy
        self.policy_change = True

    @property
    def document(self) -> dict[str, Any]:
        return {
            "Version": "2012-10-17",
            "Id": "default",
            "Statement": [
                {
                    "Action": "lambda:InvokeFunctionUrl",
                    "Condition": {"StringEquals": {"lambda:FunctionUrlAuthType": "NONE"}},
                    "Effect": "Allow",
                    "Principal": "*",
                    "Resource": (
                        f"arn:aws:lambda:{self.context.region}:{self.context.account_id}"
                        f":function:{self.function_name}"
                    ),
                    "Sid": STATEMENT_ID,
                }
            ],
        }

    @property
    def needs_apply(self) -> bool:
        return self.policy_change

    async def _plan(self) -> None:
        client = await self.client()
        response = await not_found(
            client.get_policy(FunctionName=self.function_name),
            "ResourceNotFoundException",
        )
        if response is None:
            logger.info("Function policy does not exist yet: %s", self.function_name)
            return

        policy = self.require(response.get("Policy"), "existing policy document")
        self.existing_document = json.loads(policy)
        self.policy_change = not deep_equals(self.existing_document, self.document)

    async def _apply(self) -> None:
        client = await self.client()

        statements = (self.existing_document or {}).get("Statement")
        if isinstance(statements, list):
            for statement in statements:
                sid = statement.get("Sid")
                if sid is not None:
                    logger.info("Removing obsolete Function Policy statement: %s", sid)
                    await client.remove_permission(
                        FunctionName=self.function_name,
                        StatementId=sid,
                    )

        logger.info("Creating Function Policy: %s", self.function_name)
        await client.add_permission(
            FunctionName=self.function_name,
            StatementId=STATEMENT_ID,
            Action="lambda:InvokeFunctionUrl",
            Principal="*",
            FunctionUrlAuthType="NONE",
        )
        self.existing_document = self.document
        self.policy_change = False
        logger.info("Created Function Policy: %s", self.function_name)
