"""Tests for the dependency graph and bounded traversal."""

from fork_parity.impact.graph import bounded_bfs, build_dependency_graph


def _chain(n):
    """reverse edges f0 <- f1 <- ... <- f(n-1)"""
    return {f"f{i}": {f"f{i + 1}"} for i in range(n - 1)}


class TestBoundedBfs:
    def test_chain_within_depth(self):
        result = bounded_bfs(_chain(4), ["f0"], max_depth=5)
        assert result.affected == ["f1", "f2", "f3"]
        assert result.radius == 3
        assert result.depth_of["f3"] == 3

    def test_depth_cap(self):
        result = bounded_bfs(_chain(10), ["f0"], max_depth=5)
        assert result.radius == 5
        assert result.affected == ["f1", "f2", "f3", "f4", "f5"]

    def test_cycle_terminates_without_duplicates(self):
        reverse = {"a": {"b"}, "b": {"c"}, "c": {"a"}}
        result = bounded_bfs(reverse, ["a"], max_depth=10)
        assert result.affected == ["b", "c"]
        assert result.radius == 2

    def test_seeds_are_not_reported_as_affected(self):
        reverse = {"a": {"b"}, "b": {"a"}}
        result = bounded_bfs(reverse, ["a", "b"], max_depth=5)
        assert result.affected == []
        assert result.radius == 0

    def test_each_node_visited_once_across_branches(self):
        reverse = {"a": {"b", "c"}, "b": {"d"}, "c": {"d"}}
        result = bounded_bfs(reverse, ["a"], max_depth=5)
        assert sorted(result.affected) == ["b", "c", "d"]
        assert result.levels == [["b", "c"], ["d"]]


class TestBuildGraph:
    def test_js_and_python_edges(self, make_tree):
        tree = make_tree(
            {
                "src/util.js": "export const x = 1;\n",
                "src/app.js": "import { x } from './util';\n",
                "pkg/__init__.py": "",
                "pkg/models.py": "X = 1\n",
                "pkg/service.py": "from .models import X\n",
            }
        )
        graph = build_dependency_graph(tree)
        assert graph.dependencies("src/app.js") == {"src/util.js"}
        assert graph.dependents("src/util.js") == {"src/app.js"}
        assert graph.dependents("pkg/models.py") == {"pkg/service.py"}

    def test_self_import_is_ignored(self, make_tree):
        tree = make_tree({"a.js": "import x from './a';\n"})
        assert build_dependency_graph(tree).forward == {}

    def test_bare_relative_import_links_sibling_module(self, make_tree):
        tree = make_tree(
            {
                "pkg/__init__.py": "",
                "pkg/b.py": "VALUE = 1\n",
                "pkg/a.py": "from . import b\n",
            }
        )
        graph = build_dependency_graph(tree)
        assert graph.dependents("pkg/b.py") == {"pkg/a.py"}
        assert "pkg/__init__.py" in graph.dependencies("pkg/a.py")
