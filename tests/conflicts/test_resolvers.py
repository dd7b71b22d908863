"""Tests for per-block conflict resolvers."""

import pytest

from fork_parity.conflicts import (
    BlockKind,
    ConflictBlock,
    ConflictResolver,
    ConflictType,
    Outcome,
    ResolverKind,
    compare_versions,
    select_resolver,
)
from fork_parity.conflicts.resolvers import extract_signatures, parse_manifest_fragment
from fork_parity.exceptions import ManifestParseError


@pytest.fixture
def resolver():
    return ConflictResolver()


def _block(head, incoming, kind, file="src/app.js"):
    return ConflictBlock(file=file, start_line=1, head=head, incoming=incoming, kind=kind)


class TestSelectResolver:
    def test_block_kinds(self):
        assert select_resolver(_block([], [], BlockKind.IMPORT), ConflictType.CODE) is (
            ResolverKind.MERGE_IMPORTS
        )
        assert select_resolver(_block([], [], BlockKind.DEPENDENCY), ConflictType.DEPENDENCY) is (
            ResolverKind.MERGE_DEPENDENCIES
        )
        assert select_resolver(_block([], [], BlockKind.CODE), ConflictType.CODE) is (
            ResolverKind.ANALYZE_FUNCTION
        )

    def test_unknown_block_in_config_file(self):
        block = _block([], [], BlockKind.UNKNOWN)
        assert select_resolver(block, ConflictType.CONFIG) is ResolverKind.MERGE_CONFIG
        assert select_resolver(block, ConflictType.OTHER) is ResolverKind.MANUAL


class TestMergeImports:
    def test_union_keeps_order_and_drops_duplicates(self, resolver):
        block = _block(
            ["import a from 'a';", "import b from 'b';"],
            ["import a from 'a';", "import c from 'c';"],
            BlockKind.IMPORT,
        )
        result = resolver.resolve(block, 0, ConflictType.CODE)
        assert result.resolver is ResolverKind.MERGE_IMPORTS
        assert result.outcome is Outcome.AUTOMATIC
        assert result.confidence == pytest.approx(0.9)
        assert result.resolution == [
            "import a from 'a';",
            "import b from 'b';",
            "import c from 'c';",
        ]
        assert result.is_automatic(0.7)

    def test_code_lines_beside_imports_need_manual_review(self, resolver):
        block = _block(
            ["import os", "result = compute(1)"],
            ["import sys", "result = compute(2)", ""],
            BlockKind.IMPORT,
        )
        result = resolver.merge_imports(block, 0)
        assert result.resolution == ["import os", "import sys"]
        assert result.requires_manual_review
        assert result.outcome is Outcome.MANUAL
        assert result.confidence == pytest.approx(0.5)
        assert result.details["unmerged_lines"] == ["result = compute(1)", "result = compute(2)"]
        assert not result.is_automatic(0.7)

    def test_blank_lines_do_not_block_automatic_merge(self, resolver):
        block = _block(["from os import path", ""], ["const fs = require('fs');"], BlockKind.IMPORT)
        result = resolver.merge_imports(block, 0)
        assert result.resolution == ["from os import path", "const fs = require('fs');"]
        assert result.outcome is Outcome.AUTOMATIC


class TestMergeDependencies:
    def test_keeps_higher_versions_and_adds_new_packages(self, resolver):
        block = _block(
            ['"lodash": "^4.17.1",', '"react": "^17.0.0"'],
            ['"lodash": "^4.17.21",', '"react": "^18.2.0",', '"axios": "^1.0.0"'],
            BlockKind.DEPENDENCY,
            file="package.json",
        )
        result = resolver.resolve(block, 0, ConflictType.DEPENDENCY)
        assert result.outcome is Outcome.AUTOMATIC
        assert result.confidence == pytest.approx(0.8)
        assert result.resolution == {
            "lodash": "^4.17.21",
            "react": "^18.2.0",
            "axios": "^1.0.0",
        }

    def test_head_wins_when_newer(self, resolver):
        block = _block(['"a": "2.0.0"'], ['"a": "1.9.9"'], BlockKind.DEPENDENCY, "package.json")
        assert resolver.merge_dependencies(block, 0).resolution == {"a": "2.0.0"}

    def test_nested_sections_are_merged(self, resolver):
        block = _block(
            ['"dependencies": {"a": "1.0.0"}'],
            ['"dependencies": {"a": "2.0.0", "b": "1.0.0"}'],
            BlockKind.DEPENDENCY,
            file="package.json",
        )
        result = resolver.merge_dependencies(block, 0)
        assert result.resolution == {"dependencies": {"a": "2.0.0", "b": "1.0.0"}}

    def test_incomparable_versions_need_review(self, resolver):
        block = _block(['"dep": "latest"'], ['"dep": "^1.0.0"'], BlockKind.DEPENDENCY)
        result = resolver.merge_dependencies(block, 0)
        assert result.outcome is Outcome.MANUAL
        assert result.requires_manual_review
        assert result.confidence == pytest.approx(0.5)
        assert result.resolution == {"dep": "latest"}
        assert result.details["unresolved"] == ["dep"]

    def test_unparseable_manifest_falls_back_to_manual(self, resolver):
        block = _block(["<<garbage"], ['"a": "1.0.0"'], BlockKind.DEPENDENCY)
        result = resolver.merge_dependencies(block, 0)
        assert result.outcome is Outcome.MANUAL
        assert result.confidence == pytest.approx(0.3)
        assert "error" in result.details
        assert not result.is_automatic(0.7)


class TestManifestParsing:
    def test_full_object_and_member_list(self):
        assert parse_manifest_fragment('{"a": "1"}', "x") == {"a": "1"}
        assert parse_manifest_fragment('"a": "1",\n"b": "2",', "x") == {"a": "1", "b": "2"}
        assert parse_manifest_fragment("   ", "x") == {}

    def test_invalid_raises(self):
        with pytest.raises(ManifestParseError):
            parse_manifest_fragment("[1, 2]", "x")


class TestVersions:
    def test_compare(self):
        assert compare_versions("^4.17.21", "4.17.1") == 1
        assert compare_versions("1.2", "1.2.0") == 0
        assert compare_versions("v2", "10") == -1
        assert compare_versions("latest", "1.0") is None
        assert compare_versions({"a": 1}, "1.0") is None


class TestAnalyzeFunction:
    def test_shared_function_is_signature_change(self, resolver):
        block = _block(["function add(a, b) {"], ["function add(a, b, c) {"], BlockKind.CODE)
        result = resolver.resolve(block, 3, ConflictType.CODE)
        assert result.outcome is Outcome.SIGNATURE_CHANGE
        assert result.block_index == 3
        assert result.confidence == pytest.approx(0.7)
        assert result.details["functions"] == ["add"]
        assert result.details["head"] == {"add": "a, b"}
        assert result.details["incoming"] == {"add": "a, b, c"}
        assert result.requires_manual_review

    def test_plain_code_conflict_is_manual(self, resolver):
        block = _block(["const x = 1;"], ["const x = 2;"], BlockKind.CODE)
        result = resolver.resolve(block, 0, ConflictType.CODE)
        assert result.outcome is Outcome.MANUAL
        assert result.confidence == pytest.approx(0.4)

    def test_python_signatures(self):
        assert extract_signatures("def run(self, x=1):\n    pass") == {"run": "self, x=1"}


class TestFallbacks:
    def test_config_conflict(self, resolver):
        block = _block(["port: 80"], ["port: 8080"], BlockKind.UNKNOWN, file="config/app.yml")
        result = resolver.resolve(block, 0, ConflictType.CONFIG)
        assert result.resolver is ResolverKind.MERGE_CONFIG
        assert result.description == "Review configuration changes manually"
        assert result.confidence == pytest.approx(0.5)

    def test_manual(self, resolver):
        block = _block(["a"], ["b"], BlockKind.UNKNOWN, file="notes.txt")
        result = resolver.resolve(block, 0, ConflictType.DOCUMENTATION)
        assert result.resolver is ResolverKind.MANUAL
        assert result.confidence == pytest.approx(0.3)
