"""Resource contract and the per-run registry of resource instances."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from enum import Enum
from typing import Any, ClassVar, TypeVar, cast

from ..exceptions import (
    DuplicateResourceError,
    MissingAttributeError,
    ResourceNotPlannedError,
    ResourceNotRegisteredError,
)
from .aws import AwsClients, ResourceContext

logger = logging.getLogger(__name__)

R = TypeVar("R", bound="Resource")
T = TypeVar("T")


class ResourceKind(str, Enum):
    """Stable identifiers for every kind of managed resource."""

    HOSTED_ZONE = "HostedZone"
    ASSUME_ROLE_POLICY = "AssumeRolePolicy"
    ROLE = "Role"
    ROLE_POLICY = "RolePolicy"
    LOG_GROUP = "LogGroup"
    FUNCTION = "Function"
    FUNCTION_POLICY = "FunctionPolicy"

    def __str__(self) -> str:
        return self.value


class ResourceRegistry:
    """
    The resources constructed for one reconciliation run, keyed by kind.

    Resources join the registry when they are constructed and look each
    other up through it to read attributes resolved during ``plan`` or
    ``apply``. Exactly one instance per kind is allowed.

    Not thread-safe. Registration happens during construction and lookups
    happen while planning and applying, strictly one resource at a time.
    """

    def __init__(self) -> None:
        self._resources: dict[str, Resource] = {}

    def register(self, resource: Resource) -> None:
        kind = str(resource.kind)
        if kind in self._resources:
            raise DuplicateResourceError(kind)
        self._resources[kind] = resource

    def get(self, kind: str) -> Resource:
        """
        Find the instance registered for a kind.

        Raises:
            ResourceNotRegisteredError: If no resource of that kind exists
        """
        try:
            return self._resources[str(kind)]
        except KeyError:
            raise ResourceNotRegisteredError(str(kind)) from None

    def require(self, resource_type: type[R]) -> R:
        """Typed variant of :meth:`get`, keyed by ``resource_type.kind``."""
        return cast(R, self.get(resource_type.kind))

    def __contains__(self, kind: object) -> bool:
        return str(kind) in self._resources

    def __iter__(self) -> Iterator[Resource]:
        return iter(self._resources.values())

    def __len__(self) -> int:
        return len(self._resources)


class Resource(ABC):
    """
    A single managed AWS entity.

    Lifecycle for one run: construct (joins the registry), ``plan`` exactly
    once, then ``apply`` at most once when :attr:`needs_apply` is true.

    Subclasses set :attr:`kind` and :attr:`depends_on`, and implement
    :meth:`_plan`, :meth:`_apply` and :attr:`needs_apply`. ``_plan`` reads
    remote state and fills in runtime attributes without mutating anything
    remotely. ``_apply`` performs the minimal set of remote mutations.
    Until ``plan`` proves otherwise, resources assume a change is needed.
    """

    kind: ClassVar[str]
    depends_on: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, context: ResourceContext, registry: ResourceRegistry) -> None:
        self.context = context
        self.registry = registry
        self.planned = False
        registry.register(self)

    @property
    def name(self) -> str:
        return str(self.kind)

    @property
    @abstractmethod
    def needs_apply(self) -> bool:
        """True if the resource must be created or differs from its desired state."""

    @abstractmethod
    async def _plan(self) -> None: ...

    @abstractmethod
    async def _apply(self) -> None: ...

    async def plan(self) -> None:
        """Read remote state and decide whether a change is required."""
        await self._plan()
        self.planned = True

    async def apply(self) -> None:
        """Converge the remote resource; a no-op when nothing changed."""
        if not self.planned:
            raise ResourceNotPlannedError(self.name)
        if not self.needs_apply:
            logger.debug("%s is up to date, nothing to apply", self.name)
            return
        await self._apply()

    def sibling(self, resource_type: type[R]) -> R:
        """Look up another resource of this run by type."""
        return self.registry.require(resource_type)

    def require(self, value: T | None, attribute: str) -> T:
        """Return a runtime attribute, failing if it was never resolved."""
        if value is None:
            raise MissingAttributeError(self.name, attribute)
        return value

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind} planned={self.planned}>"


class AwsResource(Resource):
    """A resource managed through a single AWS service client."""

    service: ClassVar[str]

    def __init__(
        self,
        context: ResourceContext,
        registry: ResourceRegistry,
        clients: AwsClients,
    ) -> None:
        super().__init__(context, registry)
        self.clients = clients

    async def client(self) -> Any:
        return await self.clients.get(self.service)
