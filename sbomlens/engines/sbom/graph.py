"""Dependency graph queries: ancestors, descendants and the path view.

Edges come from each entry's ``dependencies`` adjacency (child name ->
resolved child version). Children that are not themselves entries of the
workspace are ignored. Traversals are iterative and keep a visited set, so
cyclic input terminates.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable

from sbomlens.engines.sbom.models import CanonicalSbom, DependencyKey, GraphNode, Workspace
from sbomlens.services import EntityNotFoundError, UnknownWorkspaceError

VIRTUAL_ROOT_ID = "__VIRTUAL_ROOT__"


def get_workspace(sbom: CanonicalSbom, workspace: str) -> Workspace:
    """Raises :class:`UnknownWorkspaceError` if absent."""
    try:
        return sbom.workspaces[workspace]
    except KeyError:
        raise UnknownWorkspaceError(workspace) from None


def _require_entry(workspace: Workspace, name: str, key: DependencyKey) -> None:
    if workspace.get(key) is None:
        raise EntityNotFoundError(f"dependency {key} not found in workspace {name}")


def children_of(workspace: Workspace, key: DependencyKey) -> list[DependencyKey]:
    entry = workspace.get(key)
    if entry is None:
        return []
    children = (DependencyKey(name, version) for name, version in entry.dependencies.items())
    return [child for child in children if workspace.get(child) is not None]


def parent_index(workspace: Workspace) -> dict[DependencyKey, list[DependencyKey]]:
    """Reverse adjacency: child -> parents, in workspace order."""
    parents: dict[DependencyKey, list[DependencyKey]] = {}
    for key, _entry in workspace.iter_entries():
        for child in children_of(workspace, key):
            parents.setdefault(child, []).append(key)
    return parents


def _walk(start: DependencyKey, neighbours: Callable[[DependencyKey], Iterable[DependencyKey]]):
    visited = {start}
    found: set[DependencyKey] = set()
    queue = deque([start])
    while queue:
        node = queue.popleft()
        for nxt in neighbours(node):
            if nxt in visited:
                continue
            visited.add(nxt)
            found.add(nxt)
            queue.append(nxt)
    return found


def descendants(sbom: CanonicalSbom, workspace: str, key: DependencyKey) -> set[DependencyKey]:
    """Every identity reachable from *key* through adjacency edges."""
    ws = get_workspace(sbom, workspace)
    _require_entry(ws, workspace, key)
    return _walk(key, lambda node: children_of(ws, node))


def ancestors(sbom: CanonicalSbom, workspace: str, key: DependencyKey) -> set[DependencyKey]:
    """Every identity from which *key* is reachable."""
    ws = get_workspace(sbom, workspace)
    _require_entry(ws, workspace, key)
    parents = parent_index(ws)
    return _walk(key, lambda node: parents.get(node, ()))


def build_graph(workspace: Workspace) -> list[GraphNode]:
    """All nodes of *workspace*, plus a virtual root adopting parentless nodes.

    The virtual root is always the last node.
    """
    parents = parent_index(workspace)
    root = GraphNode(id=VIRTUAL_ROOT_ID)
    nodes: list[GraphNode] = []

    for key, entry in workspace.iter_entries():
        node = GraphNode(
            id=str(key),
            children_ids=[str(child) for child in children_of(workspace, key)],
            prod=entry.prod,
            dev=entry.dev,
        )
        node_parents = parents.get(key)
        if node_parents:
            node.parent_ids = [str(parent) for parent in node_parents]
        else:
            node.parent_ids = [VIRTUAL_ROOT_ID]
            root.children_ids.append(node.id)
        nodes.append(node)

    nodes.append(root)
    return nodes


def dependency_graph(sbom: CanonicalSbom, workspace: str, key: DependencyKey) -> list[GraphNode]:
    """The target node followed by every node on a path from the root to it.

    A target declared in the workspace manifest is always attached to the
    virtual root, even when other dependencies also require it.
    """
    ws = get_workspace(sbom, workspace)
    _require_entry(ws, workspace, key)

    graph = build_graph(ws)
    by_id = {node.id: node for node in graph}
    target = by_id[str(key)]
    root = by_id[VIRTUAL_ROOT_ID]

    if ws.is_declared(key) and VIRTUAL_ROOT_ID not in target.parent_ids:
        target.parent_ids.append(VIRTUAL_ROOT_ID)
        root.children_ids.append(target.id)

    visited = {target.id}
    queue = deque([target])
    while queue:
        node = queue.popleft()
        for parent_id in node.parent_ids:
            parent = by_id.get(parent_id)
            if parent is None or parent_id in visited:
                continue
            visited.add(parent_id)
            queue.append(parent)

    return [target] + [node for node in graph if node.id in visited and node is not target]
