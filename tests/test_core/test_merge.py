"""Tests for the configuration merge engine."""

import json
import os

import pytest
from unittest.mock import patch

from dockhand.core.merge import (
    PatchOperation,
    apply_operations,
    backup_path_for,
    merge_patch,
    runtime_operations,
)
from dockhand.errors import InvalidDocument


def backups(path):
    return sorted(path.parent.glob(f"{path.name}.bak.*"))


class TestPatchOperation:
    """Key path parsing."""

    def test_dotted_string(self):
        assert PatchOperation.set("runtimes.foo.path", "/bin/foo").key_path == ("runtimes", "foo", "path")

    def test_sequence_keeps_dots(self):
        op = PatchOperation.set(["runtimes", "io.containerd.runc.v2"], {})
        assert op.key_path == ("runtimes", "io.containerd.runc.v2")

    @pytest.mark.parametrize("bad", ["", "a..b", []])
    def test_invalid_paths(self, bad):
        with pytest.raises(ValueError):
            PatchOperation.set(bad, 1)


class TestMergePatch:
    """merge_patch against files on disk."""

    def test_merges_into_existing_document(self, tmp_path):
        path = tmp_path / "daemon.json"
        path.write_text('{"x":1}')

        result = merge_patch(path, [PatchOperation.set("runtimes.foo.path", "/bin/foo")])

        assert json.loads(path.read_text()) == {"x": 1, "runtimes": {"foo": {"path": "/bin/foo"}}}
        assert result.fresh is False
        assert result.backup_path is not None
        assert result.backup_path.read_text() == '{"x":1}'

    def test_unrelated_keys_survive(self, tmp_path):
        path = tmp_path / "daemon.json"
        original = {
            "log-driver": "json-file",
            "log-opts": {"max-size": "10m", "max-file": "3"},
            "runtimes": {"nvidia": {"path": "/usr/bin/nvidia-container-runtime", "runtimeArgs": []}},
            "registry-mirrors": ["https://mirror.example.com"],
            "debug": False,
            "mtu": 1450,
        }
        path.write_text(json.dumps(original))

        merge_patch(path, runtime_operations("sysbox-runc", "/usr/bin/sysbox-runc", set_default=True))

        merged = json.loads(path.read_text())
        for key in ("log-driver", "log-opts", "registry-mirrors", "debug", "mtu"):
            assert merged[key] == original[key]
        assert merged["runtimes"]["nvidia"] == original["runtimes"]["nvidia"]
        assert merged["runtimes"]["sysbox-runc"] == {"path": "/usr/bin/sysbox-runc"}
        assert merged["default-runtime"] == "sysbox-runc"

    def test_absent_file_gets_fresh_document(self, tmp_path):
        path = tmp_path / "docker" / "daemon.json"

        result = merge_patch(path, runtime_operations("sysbox-runc", "/usr/bin/sysbox-runc", set_default=True))

        assert json.loads(path.read_text()) == {
            "runtimes": {"sysbox-runc": {"path": "/usr/bin/sysbox-runc"}},
            "default-runtime": "sysbox-runc",
        }
        assert result.fresh is True
        assert result.backup_path is None
        assert backups(path) == []

    def test_empty_file_gets_fresh_document(self, tmp_path):
        path = tmp_path / "daemon.json"
        path.write_text("")

        result = merge_patch(path, [PatchOperation.set("runtimes.foo.path", "/bin/foo")])

        assert json.loads(path.read_text()) == {"runtimes": {"foo": {"path": "/bin/foo"}}}
        assert result.fresh is True

    def test_unparsable_file_is_backed_up_then_replaced(self, tmp_path):
        path = tmp_path / "daemon.json"
        original = b'{"runtimes": {broken'
        path.write_bytes(original)

        result = merge_patch(path, [PatchOperation.set("default-runtime", "sysbox-runc")])

        assert result.fresh is True
        assert result.backup_path.read_bytes() == original
        assert json.loads(path.read_text()) == {"default-runtime": "sysbox-runc"}

    def test_non_object_document_is_replaced(self, tmp_path):
        path = tmp_path / "daemon.json"
        path.write_text("[1, 2, 3]")

        result = merge_patch(path, [PatchOperation.set("debug", True)])

        assert result.fresh is True
        assert json.loads(path.read_text()) == {"debug": True}
        assert result.backup_path.read_text() == "[1, 2, 3]"

    def test_non_utf8_document_is_backed_up_then_replaced(self, tmp_path):
        path = tmp_path / "daemon.json"
        original = b'{"x": "\xff\xfe"}'
        path.write_bytes(original)

        result = merge_patch(path, [PatchOperation.set("runtimes.sysbox-runc.path", "/usr/bin/sysbox-runc")])

        assert result.fresh is True
        assert result.backup_path.read_bytes() == original
        assert json.loads(path.read_text()) == {"runtimes": {"sysbox-runc": {"path": "/usr/bin/sysbox-runc"}}}

    def test_non_utf8_document_kept_when_backup_fails(self, tmp_path):
        path = tmp_path / "daemon.json"
        path.write_bytes(b'{"x": "\xff"}')

        with patch("dockhand.core.merge.shutil.copy2", side_effect=OSError("read-only")):
            with pytest.raises(InvalidDocument):
                merge_patch(path, [PatchOperation.set("debug", True)])

        assert path.read_bytes() == b'{"x": "\xff"}'

    def test_unparsable_file_kept_when_backup_fails(self, tmp_path):
        path = tmp_path / "daemon.json"
        path.write_text("not json")

        with patch("dockhand.core.merge.shutil.copy2", side_effect=OSError("read-only")):
            with pytest.raises(InvalidDocument):
                merge_patch(path, [PatchOperation.set("debug", True)])

        assert path.read_text() == "not json"

    def test_backup_failure_is_not_fatal_for_valid_document(self, tmp_path):
        path = tmp_path / "daemon.json"
        path.write_text('{"a": 1}')

        with patch("dockhand.core.merge.shutil.copy2", side_effect=OSError("disk full")):
            result = merge_patch(path, [PatchOperation.set("b", 2)])

        assert result.backup_path is None
        assert json.loads(path.read_text()) == {"a": 1, "b": 2}

    def test_interrupted_write_leaves_original(self, tmp_path):
        path = tmp_path / "daemon.json"
        path.write_text('{"a": 1}')

        with patch("dockhand.core.merge.os.replace", side_effect=OSError("interrupted")):
            with pytest.raises(OSError):
                merge_patch(path, [PatchOperation.set("b", 2)])

        assert path.read_text() == '{"a": 1}'
        # no temp files left behind
        assert [p.name for p in tmp_path.iterdir() if p.name.endswith(".tmp")] == []

    def test_file_mode_preserved(self, tmp_path):
        path = tmp_path / "daemon.json"
        path.write_text('{"a": 1}')
        os.chmod(path, 0o600)

        merge_patch(path, [PatchOperation.set("b", 2)])

        assert path.stat().st_mode & 0o777 == 0o600

    def test_rerun_is_stable(self, tmp_path):
        path = tmp_path / "daemon.json"
        path.write_text('{"x": 1}')
        operations = runtime_operations("sysbox-runc", "/usr/bin/sysbox-runc", set_default=False)

        merge_patch(path, operations)
        first = path.read_text()
        merge_patch(path, operations)

        assert path.read_text() == first
        assert "default-runtime" not in json.loads(first)

    def test_requires_operations(self, tmp_path):
        with pytest.raises(ValueError):
            merge_patch(tmp_path / "daemon.json", [])


class TestApplyOperations:
    """In-memory patching."""

    def test_replaces_non_object_intermediate(self):
        document = {"runtimes": "oops", "keep": 1}

        apply_operations(document, [PatchOperation.set("runtimes.foo.path", "/bin/foo")])

        assert document == {"runtimes": {"foo": {"path": "/bin/foo"}}, "keep": 1}

    def test_sibling_entries_untouched(self):
        document = {"runtimes": {"runc": {"path": "runc"}, "foo": {"path": "/old", "runtimeArgs": ["--x"]}}}

        apply_operations(document, [PatchOperation.set("runtimes.foo.path", "/bin/foo")])

        assert document["runtimes"]["runc"] == {"path": "runc"}
        assert document["runtimes"]["foo"] == {"path": "/bin/foo", "runtimeArgs": ["--x"]}


def test_backup_names_do_not_collide(tmp_path):
    path = tmp_path / "daemon.json"
    path.write_text("{}")
    first = backup_path_for(path, now=1700000000)
    first.write_text("{}")

    second = backup_path_for(path, now=1700000000)

    assert first.name == "daemon.json.bak.1700000000"
    assert second.name == "daemon.json.bak.1700000000.1"
