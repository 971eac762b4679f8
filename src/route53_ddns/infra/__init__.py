"""Managed AWS resources and the reconciliation scheduler."""

from .assume_role_policy import AssumeRolePolicy
from .aws import AwsClients, ResourceContext, not_found, resolve_context
from .base import AwsResource, Resource, ResourceKind, ResourceRegistry
from .function import Function
from .function_policy import FunctionPolicy
from .hosted_zone import HostedZone
from .lambda_builder import CodePackage, build_package
from .log_group import LogGroup
from .role import Role
from .role_policy import RolePolicy
from .scheduler import apply_all, pending_changes, plan_all

__all__ = [
    "AssumeRolePolicy",
    "AwsClients",
    "AwsResource",
    "CodePackage",
    "Function",
    "FunctionPolicy",
    "HostedZone",
    "LogGroup",
    "Resource",
    "ResourceContext",
    "ResourceKind",
    "ResourceRegistry",
    "Role",
    "RolePolicy",
    "apply_all",
    "build_package",
    "not_found",
    "pending_changes",
    "plan_all",
    "resolve_context",
]
