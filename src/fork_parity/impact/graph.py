"""Approximate file-level dependency graph and bounded impact traversal."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterable

from ..workspace import SourceTree
from .imports import build_path_index, extract_imports, resolve_import


@dataclass
class DependencyGraph:
    """Forward (file -> imports) and reverse (file -> importers) adjacency."""

    forward: dict[str, set[str]] = field(default_factory=dict)
    reverse: dict[str, set[str]] = field(default_factory=dict)

    def add_edge(self, src: str, dst: str) -> None:
        self.forward.setdefault(src, set()).add(dst)
        self.reverse.setdefault(dst, set()).add(src)

    def dependents(self, path: str) -> set[str]:
        return self.reverse.get(path, set())

    def dependencies(self, path: str) -> set[str]:
        return self.forward.get(path, set())


def build_dependency_graph(tree: SourceTree, limit: int = 1000) -> DependencyGraph:
    """Scan up to *limit* source files and resolve their imports.

    Unreadable files are skipped.
    """
    paths = list(tree.source_files(limit))
    all_paths = set(paths)
    path_index = build_path_index(paths)
    graph = DependencyGraph()

    for path in paths:
        content = tree.read_text(path)
        if content is None:
            continue
        for imp in extract_imports(path, content):
            resolved = resolve_import(imp, path, all_paths, path_index)
            if resolved and resolved != path:
                graph.add_edge(path, resolved)

    return graph


@dataclass
class TraversalResult:
    affected: list[str]
    radius: int
    levels: list[list[str]]
    # node -> BFS level at which it was visited (seeds are level 0)
    depth_of: dict[str, int]


def bounded_bfs(
    reverse: dict[str, set[str]], seeds: Iterable[str], max_depth: int = 5
) -> TraversalResult:
    """Breadth-first walk over *reverse* edges from *seeds*.

    The visited set starts with the seeds, so no node is expanded twice and
    cycles terminate. At most *max_depth* levels are expanded; the radius is
    the number of levels that produced new nodes.
    """
    seed_list = list(dict.fromkeys(seeds))
    visited = set(seed_list)
    depth_of = {s: 0 for s in seed_list}
    frontier = deque(seed_list)
    affected: list[str] = []
    levels: list[list[str]] = []
    depth = 0

    while frontier and depth < max_depth:
        next_level: list[str] = []
        while frontier:
            node = frontier.popleft()
            for dependent in sorted(reverse.get(node, ())):
                if dependent in visited:
                    continue
                visited.add(dependent)
                next_level.append(dependent)
        if not next_level:
            break
        depth += 1
        for node in next_level:
            depth_of[node] = depth
        levels.append(next_level)
        affected.extend(next_level)
        frontier.extend(next_level)

    return TraversalResult(affected=affected, radius=depth, levels=levels, depth_of=depth_of)
