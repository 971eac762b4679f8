"""Dependency-ordered planning and applying of resources."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from ..exceptions import UnsatisfiableDependencyError
from .base import Resource

logger = logging.getLogger(__name__)


async def plan_all(resources: Iterable[Resource]) -> list[Resource]:
    """
    Plan every resource after all of the kinds it depends on.

    Repeatedly scans the pending resources in the order given, drops any
    dependency whose kind has already been planned, and plans the first
    resource left with no unmet dependencies. Among resources that are
    unblocked at the same time the input order wins, but callers should
    only rely on dependencies preceding their dependents.

    This is O(n^2) in the number of resources, which is fine for the
    handful of resources in a deployment.

    Args:
        resources: Resources to plan, in any order

    Returns:
        The same resources in planning order. Applying them in this order
        respects every dependency.

    Raises:
        UnsatisfiableDependencyError: If a full scan finds no resource whose
            dependencies are met (a cycle, or a kind missing from the set)
    """
    pending: dict[Resource, set[str]] = {
        resource: {str(kind) for kind in resource.depends_on} for resource in resources
    }
    done: list[Resource] = []
    done_kinds: set[str] = set()

    while pending:
        ready: Resource | None = None
        for resource, needs in pending.items():
            needs -= done_kinds
            if not needs:
                ready = resource
                break

        if ready is None:
            raise UnsatisfiableDependencyError(
                {resource.name: needs for resource, needs in pending.items()}
            )

        del pending[ready]
        logger.info("Plan: %s", ready.name)
        await ready.plan()
        done.append(ready)
        done_kinds.add(str(ready.kind))

    return done


def pending_changes(planned: Sequence[Resource]) -> list[Resource]:
    """Filter planned resources to those that need applying, keeping order."""
    return [resource for resource in planned if resource.needs_apply]


async def apply_all(planned: Sequence[Resource]) -> list[Resource]:
    """
    Apply the planned resources that need changes, in the given order.

    The first failure propagates and stops the run. Resources applied before
    it keep their new state; the next run's plan picks up from there.

    Returns:
        The resources that were applied
    """
    applied: list[Resource] = []
    for resource in pending_changes(planned):
        logger.info("Apply: %s", resource.name)
        await resource.apply()
        applied.append(resource)
    return applied
