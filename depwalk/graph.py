from __future__ import annotations

from collections import deque
from typing import Dict, Iterator, List, Optional, Set, Tuple


class PackageSet(set):
    """Unordered set of canonical package identities."""

    def insert(self, pkg: str) -> None:
        self.add(pkg)

    def has(self, pkg: str) -> bool:
        return pkg in self

    def sorted(self) -> List[str]:
        return sorted(self)


class Node(PackageSet):
    """Outgoing edges of one package."""


class Graph:
    """Directed package graph: package -> set of packages it depends on.

    Inserting an edge never creates the target as a key; keys are only made
    through pkg(), which the builder calls when it visits a package.
    """
    def __init__(self):
        self.nodes: Dict[str, Node] = {}

    def has(self, pkg: str) -> bool:
        return pkg in self.nodes

    def pkg(self, pkg: str) -> Node:
        """Return the node for pkg, creating an empty one if needed."""
        node = self.nodes.get(pkg)
        if node is None:
            node = Node()
            self.nodes[pkg] = node
        return node

    def __contains__(self, pkg: object) -> bool:
        return pkg in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes)

    def __getitem__(self, pkg: str) -> Node:
        return self.nodes[pkg]

    def items(self):
        return self.nodes.items()

    def edges(self) -> List[Tuple[str, str]]:
        """All (from, to) pairs, sorted."""
        return sorted((src, dst) for src, node in self.nodes.items() for dst in node)

    def reverse(self) -> "Graph":
        """Graph with every edge flipped; each key of self stays a key."""
        reversed_graph = Graph()
        for src in self.nodes:
            reversed_graph.pkg(src)
        for src, dst in self.edges():
            reversed_graph.pkg(dst).insert(src)
        return reversed_graph

    def reachable_from(self, start: str, max_depth: Optional[int] = None) -> Dict[str, int]:
        """Packages reachable from start, with their BFS depth (start is 0)."""
        if start not in self.nodes:
            return {}

        visited: Dict[str, int] = {}
        queue = deque([(start, 0)])

        while queue:
            current, depth = queue.popleft()

            if current in visited:
                continue
            if max_depth is not None and depth > max_depth:
                continue

            visited[current] = depth

            for dep in sorted(self.nodes.get(current, ())):
                if dep not in visited:
                    queue.append((dep, depth + 1))

        return visited

    def path(self, start: str, end: str) -> List[str]:
        """Shortest path from start to end, or [] when end is unreachable."""
        if start not in self.nodes:
            return []
        if start == end:
            return [start]

        parents: Dict[str, str] = {}
        seen: Set[str] = {start}
        queue = deque([start])

        while queue:
            current = queue.popleft()
            for dep in sorted(self.nodes.get(current, ())):
                if dep in seen:
                    continue
                seen.add(dep)
                parents[dep] = current
                if dep == end:
                    result = [end]
                    while result[-1] != start:
                        result.append(parents[result[-1]])
                    result.reverse()
                    return result
                queue.append(dep)

        return []

    def all_paths(self, start: str, end: str, max_depth: Optional[int] = None) -> List[List[str]]:
        """Every simple path from start to end, shortest first."""
        if start not in self.nodes:
            return []

        paths: List[List[str]] = []
        queue = deque([(start, [start])])

        while queue:
            current, trail = queue.popleft()

            if max_depth is not None and len(trail) > max_depth + 1:
                continue

            if current == end:
                paths.append(trail)
                continue

            for dep in sorted(self.nodes.get(current, ())):
                if dep not in trail:  # simple paths only
                    queue.append((dep, trail + [dep]))

        return paths

    def to_dict(self) -> Dict[str, List[str]]:
        return {pkg: node.sorted() for pkg, node in sorted(self.nodes.items())}
