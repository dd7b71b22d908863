"""Tests for the read-only working-tree handle."""

import pytest

from fork_parity.exceptions import FileAccessError
from fork_parity.workspace import SourceTree


class TestSourceTree:
    def test_read_file(self, make_tree):
        tree = make_tree({"src/a.py": "x = 1\n"})
        assert tree.read_file("src/a.py") == "x = 1\n"
        assert tree.exists("src/a.py")

    def test_missing_file_raises(self, make_tree):
        tree = make_tree({})
        with pytest.raises(FileAccessError):
            tree.read_file("nope.py")
        assert tree.read_text("nope.py") is None

    def test_path_outside_root_is_rejected(self, make_tree):
        tree = make_tree({"a.py": ""})
        with pytest.raises(FileAccessError) as exc:
            tree.read_file("../outside.py")
        assert "outside" in exc.value.reason
        assert not tree.exists("../outside.py")

    def test_oversized_file_is_skipped(self, tmp_path):
        (tmp_path / "big.js").write_text("x" * 100)
        tree = SourceTree(tmp_path, max_file_size=10)
        assert tree.read_text("big.js") is None

    def test_binary_file_is_skipped(self, tmp_path):
        (tmp_path / "blob.py").write_bytes(b"\xff\xfe\x00\x81")
        assert SourceTree(tmp_path).read_text("blob.py") is None

    def test_source_files_sorted_and_filtered(self, make_tree):
        tree = make_tree(
            {
                "b.py": "",
                "a.js": "",
                "notes.md": "",
                "node_modules/dep/index.js": "",
                ".hidden/x.py": "",
                "lib/c.ts": "",
            }
        )
        assert list(tree.source_files()) == ["a.js", "b.py", "lib/c.ts"]

    def test_source_files_limit(self, make_tree):
        tree = make_tree({f"f{i}.py": "" for i in range(10)})
        assert len(list(tree.source_files(limit=3))) == 3
