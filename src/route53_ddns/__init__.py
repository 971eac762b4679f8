"""
route53-ddns: Deploy a Route53 dynamic DNS webhook to AWS Lambda.

Creates and keeps in sync the execution role, its Route53 update policy,
the log group, the function with its public URL, and the URL's resource
policy. Every run plans each resource against the live account and
applies only what differs, in dependency order::

    from route53_ddns import AwsClients, DeployConfig, Deployment

    config = DeployConfig.load("config.json")
    async with AwsClients(region=config.region) as clients:
        result = await Deployment(config, clients).run(apply=True)
    print(result.url)
"""

from importlib.metadata import PackageNotFoundError, version

from .config import DeployConfig
from .deploy import DeployResult, Deployment
from .diff import deep_equals
from .exceptions import (
    AccessDeniedError,
    ConfigurationError,
    DDNSDeployError,
    DomainMismatchError,
    DuplicateResourceError,
    HostedZoneNotFoundError,
    InfrastructureError,
    MissingAttributeError,
    ResourceNotPlannedError,
    ResourceNotRegisteredError,
    UnsatisfiableDependencyError,
    ValidationError,
)
from .infra import (
    AwsClients,
    Resource,
    ResourceContext,
    ResourceKind,
    ResourceRegistry,
    apply_all,
    plan_all,
)

try:
    __version__ = version("route53-ddns")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

__all__ = [
    "__version__",
    "AccessDeniedError",
    "AwsClients",
    "ConfigurationError",
    "DDNSDeployError",
    "DeployConfig",
    "DeployResult",
    "Deployment",
    "DomainMismatchError",
    "DuplicateResourceError",
    "HostedZoneNotFoundError",
    "InfrastructureError",
    "MissingAttributeError",
    "Resource",
    "ResourceContext",
    "ResourceKind",
    "ResourceNotPlannedError",
    "ResourceNotRegisteredError",
    "ResourceRegistry",
    "UnsatisfiableDependencyError",
    "ValidationError",
    "apply_all",
    "deep_equals",
    "plan_all",
]
