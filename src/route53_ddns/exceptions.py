"""Exceptions for route53-ddns."""

from collections.abc import Iterable, Mapping

# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------


class DDNSDeployError(Exception):
    """
    Base exception for all route53-ddns errors.

    All exceptions raised by this library inherit from this class,
    allowing callers to catch all library-specific errors with a single
    except clause.
    """

    pass


# ---------------------------------------------------------------------------
# Category Exceptions
# ---------------------------------------------------------------------------


class ConfigurationError(DDNSDeployError):
    """
    Base exception for configuration and wiring defects.

    These are never transient: retrying the same run will fail the same way.
    They indicate an invalid config file or resources wired together
    incorrectly.
    """

    pass


class InfrastructureError(DDNSDeployError):
    """
    Base exception for problems with the live AWS resources.

    This includes hosted zones that cannot be found and calls that AWS
    refused to authorize.
    """

    pass


# ---------------------------------------------------------------------------
# Configuration Exceptions
# ---------------------------------------------------------------------------


class ValidationError(ConfigurationError):
    """Raised when a configuration value is invalid."""

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class UnsatisfiableDependencyError(ConfigurationError):
    """
    Raised when the scheduler cannot find a resource whose dependencies are met.

    Either the dependency graph has a cycle, or a resource depends on a kind
    that is not part of the working set.

    Attributes:
        stuck: Resource name -> dependency kinds still unmet
    """

    def __init__(self, stuck: Mapping[str, Iterable[str]]) -> None:
        self.stuck = {name: sorted(deps) for name, deps in stuck.items()}
        detail = " ".join(f"{name}[{','.join(deps)}]" for name, deps in self.stuck.items())
        super().__init__(f"Cannot satisfy all resource dependencies: {detail}")


class ResourceNotRegisteredError(ConfigurationError):
    """Raised when a resource looks up a sibling kind that was never constructed."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Could not find resource of kind: {kind}")


class DuplicateResourceError(ConfigurationError):
    """Raised when a second resource of the same kind joins a registry."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Resource of kind {kind} is already registered")


class MissingAttributeError(ConfigurationError):
    """
    Raised when a runtime attribute is needed before it has been resolved.

    Runtime attributes (ARNs, zone IDs, ...) are filled in by ``plan`` or
    ``apply``. Reading one too early means resources were planned out of
    order, or an upstream apply did not complete.
    """

    def __init__(self, resource: str, attribute: str) -> None:
        self.resource = resource
        self.attribute = attribute
        super().__init__(f"{resource}: missing {attribute}")


class ResourceNotPlannedError(ConfigurationError):
    """Raised when a resource is applied before its plan has run."""

    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(f"{resource}: apply called before plan")


# ---------------------------------------------------------------------------
# Infrastructure Exceptions
# ---------------------------------------------------------------------------


class HostedZoneNotFoundError(InfrastructureError):
    """Raised when no Route53 hosted zone matches the configured name or ID."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Could not find hosted zone: {identifier}")


class DomainMismatchError(InfrastructureError):
    """Raised when the configured domain name disagrees with the hosted zone."""

    def __init__(self, configured: str, actual: str, zone_id: str) -> None:
        self.configured = configured
        self.actual = actual
        self.zone_id = zone_id
        super().__init__(
            f"Configured domain name {configured!r} does not match "
            f"{actual!r} for hosted zone {zone_id}"
        )


class AccessDeniedError(InfrastructureError):
    """Raised when AWS denies a call, usually because credentials are missing."""

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(
            f"Access was denied for {operation}. "
            "Did you set AWS_PROFILE or log in with 'aws sso login'?"
        )
