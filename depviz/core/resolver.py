import logging
from typing import FrozenSet, List, Optional

import httpx

from depviz.core.model import DependencyNode
from depviz.core.registry import DEFAULT_TIMEOUT, fetch_declared_dependencies


async def resolve(
    package_name: str,
    current_depth: int,
    max_depth: int,
    registry_url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    skip_cycles: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
) -> List[DependencyNode]:
    """
    Resolves the dependencies of a package down to max_depth.

    The root package is at depth 1, so with max_depth=1 only its direct
    dependencies are listed, each one as a leaf. Lookups run one at a
    time in declared order. A package reached through several parents
    is looked up and listed once per parent.

    With skip_cycles, a dependency already present on the path from the
    root is kept as a leaf instead of being expanded again.

    An empty list means either "no dependencies" or "lookup failed".
    """
    if current_depth > max_depth:
        return []

    ancestors = frozenset([package_name]) if skip_cycles else None

    if client is None:
        async with httpx.AsyncClient(timeout=timeout) as own_client:
            return await _resolve(
                own_client, package_name, current_depth, max_depth, registry_url, ancestors
            )

    return await _resolve(client, package_name, current_depth, max_depth, registry_url, ancestors)


async def _resolve(
    client: httpx.AsyncClient,
    package_name: str,
    depth: int,
    max_depth: int,
    registry_url: str,
    ancestors: Optional[FrozenSet[str]],
) -> List[DependencyNode]:
    if depth > max_depth:
        return []

    dependencies = await fetch_declared_dependencies(client, package_name, registry_url)
    result = []

    for name in dependencies:
        if ancestors is not None and name in ancestors:
            logging.debug(f"Cycle {package_name} -> {name}, not expanding")
            result.append(DependencyNode(name))
            continue

        path = ancestors | {name} if ancestors is not None else None
        children = await _resolve(client, name, depth + 1, max_depth, registry_url, path)
        result.append(DependencyNode(name, children))

    return result
