"""Trust policy allowing Lambda to assume the execution role."""

from __future__ import annotations

import json
from typing import Any

from .base import Resource, ResourceKind


class AssumeRolePolicy(Resource):
    """
    The desired trust policy document for the execution role.

    Purely local: it has no remote counterpart of its own, the Role resource
    compares it against the role's live trust policy.
    """

    kind = ResourceKind.ASSUME_ROLE_POLICY

    @property
    def document(self) -> dict[str, Any]:
        return {
            "Statement": [
                {
                    "Action": "sts:AssumeRole",
                    "Effect": "Allow",
                    "Principal": {"Service": "lambda.amazonaws.com"},
                }
            ],
            "Version": "2012-10-17",
        }

    @property
    def document_json(self) -> str:
        return json.dumps(self.document, indent=2)

    @property
    def needs_apply(self) -> bool:
        return False

    async def _plan(self) -> None:
        pass

    async def _apply(self) -> None:
        pass
