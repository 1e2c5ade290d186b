"""
Tests for artifact placement, conflict detection and atomic writes.
"""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from ts_bindings.pipeline.analyzer import ExportConfig, TypeDefinition
from ts_bindings.pipeline.config import ModuleLayout, OutputConfig, OutputMode
from ts_bindings.pipeline.errors import DuplicateNameConflict
from ts_bindings.pipeline.writer import Artifact, AtomicWriter, ExportWriter, module_segments, read_source_identity


def header(source: str) -> str:
    return f"// This file was generated by ts_bindings from `{source}`. Do not edit this file manually.\n"


def artifact(path: Path, source: str, body: str = "export type X = number;\n") -> Artifact:
    return Artifact(source=source, path=path, content=header(source) + "\n" + body)


@pytest.fixture
def writer(tmp_path):
    return ExportWriter(OutputConfig(base_dir=str(tmp_path)))


class TestDestination:
    def test_nested_layout(self, writer, tmp_path):
        definition = TypeDefinition(name="User", module="crate::api::models")
        assert writer.destination(definition) == tmp_path / "bindings" / "api" / "models" / "User.ts"

    def test_dotted_module(self, writer, tmp_path):
        definition = TypeDefinition(name="User", module="api.models")
        assert writer.destination(definition) == tmp_path / "bindings" / "api" / "models" / "User.ts"

    def test_flat_layout(self, tmp_path):
        writer = ExportWriter(OutputConfig(base_dir=str(tmp_path), layout=ModuleLayout.FLAT))
        definition = TypeDefinition(name="User", module="api::models")
        assert writer.destination(definition) == tmp_path / "bindings" / "User.ts"

    def test_renamed_type(self, writer, tmp_path):
        definition = TypeDefinition(name="User", config=ExportConfig(rename="Account"))
        assert writer.destination(definition) == tmp_path / "bindings" / "Account.ts"

    def test_export_to(self, writer, tmp_path):
        to_dir = TypeDefinition(name="User", module="api", config=ExportConfig(export_to="web/types/"))
        assert writer.destination(to_dir) == tmp_path / "web" / "types" / "User.ts"

        to_file = TypeDefinition(name="User", module="api", config=ExportConfig(export_to="web/user.ts"))
        assert writer.destination(to_file) == tmp_path / "web" / "user.ts"

    def test_export_dir(self, tmp_path):
        writer = ExportWriter(OutputConfig(base_dir=str(tmp_path), export_dir="gen/ts"))
        assert writer.destination(TypeDefinition(name="A")) == tmp_path / "gen" / "ts" / "A.ts"

    def test_module_segments(self):
        assert module_segments("crate::a::b") == ["a", "b"]
        assert module_segments("") == []
        assert module_segments("a.b") == ["a", "b"]


class TestImportSpecifier:
    def test_relative_paths(self, writer, tmp_path):
        root = tmp_path / "bindings"
        assert writer.import_specifier(root / "api" / "User.ts", root / "api" / "Role.ts") == "./Role"
        assert writer.import_specifier(root / "api" / "User.ts", root / "auth" / "Role.ts") == "../auth/Role"
        assert writer.import_specifier(root / "User.ts", root / "a" / "b" / "Role.ts") == "./a/b/Role"

    def test_esm_extension(self, tmp_path):
        writer = ExportWriter(OutputConfig(base_dir=str(tmp_path), import_extension=".js"))
        root = tmp_path / "bindings"
        assert writer.import_specifier(root / "User.ts", root / "Role.ts") == "./Role.js"


def test_read_source_identity():
    assert read_source_identity(header("api::User") + "\nexport type User = {};\n") == "api::User"
    assert read_source_identity("export type User = {};\n") is None
    assert read_source_identity("") is None


class TestWrite:
    def test_writes_new_files(self, writer, tmp_path):
        path = tmp_path / "bindings" / "api" / "User.ts"
        result = writer.write([artifact(path, "api::User")])
        assert result.written == [path]
        assert path.read_text().startswith("// This file was generated by ts_bindings from `api::User`")

    def test_identical_content_is_untouched(self, tmp_path):
        path = tmp_path / "bindings" / "User.ts"
        ExportWriter(OutputConfig(base_dir=str(tmp_path))).write([artifact(path, "api::User")])
        os.utime(path, (1_000_000, 1_000_000))

        result = ExportWriter(OutputConfig(base_dir=str(tmp_path))).write([artifact(path, "api::User")])

        assert result.written == []
        assert result.unchanged == [path]
        assert path.stat().st_mtime == 1_000_000

    def test_stale_own_artifact_is_replaced(self, tmp_path):
        path = tmp_path / "bindings" / "User.ts"
        path.parent.mkdir(parents=True)
        path.write_text(header("api::User") + "\nexport type User = { old: string };\n")

        result = ExportWriter(OutputConfig(base_dir=str(tmp_path))).write([artifact(path, "api::User")])

        assert result.written == [path]
        assert "old" not in path.read_text()

    def test_foreign_artifact_is_a_conflict(self, tmp_path):
        path = tmp_path / "bindings" / "User.ts"
        path.parent.mkdir(parents=True)
        path.write_text(header("auth::User") + "\nexport type User = { name: string };\n")

        with pytest.raises(DuplicateNameConflict) as exc_info:
            ExportWriter(OutputConfig(base_dir=str(tmp_path))).write([artifact(path, "api::User")])

        assert exc_info.value.type_name == "api::User"
        assert exc_info.value.other == "auth::User"
        assert "name: string" in path.read_text()

    def test_hand_written_file_is_a_conflict(self, tmp_path):
        path = tmp_path / "bindings" / "User.ts"
        path.parent.mkdir(parents=True)
        path.write_text("export type User = any;\n")

        with pytest.raises(DuplicateNameConflict):
            ExportWriter(OutputConfig(base_dir=str(tmp_path))).write([artifact(path, "api::User")])

    def test_force_overwrites(self, tmp_path):
        path = tmp_path / "bindings" / "User.ts"
        path.parent.mkdir(parents=True)
        path.write_text("export type User = any;\n")

        writer = ExportWriter(OutputConfig(base_dir=str(tmp_path), mode=OutputMode.FORCE))
        result = writer.write([artifact(path, "api::User")])

        assert result.written == [path]
        assert read_source_identity(path.read_text()) == "api::User"

    def test_duplicates_in_one_batch_are_written_once(self, writer, tmp_path):
        path = tmp_path / "bindings" / "User.ts"
        result = writer.write([artifact(path, "api::User"), artifact(path, "api::User")])
        assert result.written == [path]

    def test_conflict_in_one_batch_writes_nothing(self, writer, tmp_path):
        first = tmp_path / "bindings" / "Role.ts"
        clash = tmp_path / "bindings" / "User.ts"
        batch = [
            artifact(first, "api::Role"),
            artifact(clash, "api::User"),
            artifact(clash, "auth::User", body="export type User = string;\n"),
        ]
        with pytest.raises(DuplicateNameConflict) as exc_info:
            writer.write(batch)
        assert exc_info.value.other == "api::User"
        assert not first.exists()
        assert not clash.exists()

    def test_conflict_across_batches_of_one_run(self, writer, tmp_path):
        path = tmp_path / "bindings" / "User.ts"
        writer.write([artifact(path, "api::User")])
        with pytest.raises(DuplicateNameConflict):
            writer.write([artifact(path, "auth::User", body="export type User = string;\n")])


class TestAtomicWriter:
    def test_no_temporary_files_are_left(self, tmp_path):
        path = tmp_path / "out" / "A.ts"
        AtomicWriter().write(path, "export type A = number;\n")
        assert path.read_text() == "export type A = number;\n"
        assert [p.name for p in path.parent.iterdir()] == ["A.ts"]

    def test_failed_write_keeps_previous_content(self, tmp_path, monkeypatch):
        path = tmp_path / "A.ts"
        path.write_text("previous\n")

        def fail(self, target):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", fail)
        with pytest.raises(OSError):
            AtomicWriter().write(path, "next\n")

        monkeypatch.undo()
        assert path.read_text() == "previous\n"
        assert [p.name for p in tmp_path.iterdir()] == ["A.ts"]

    def test_write_if_changed(self, tmp_path):
        path = tmp_path / "A.ts"
        writer = AtomicWriter()
        assert writer.write_if_changed(path, "a\n")
        assert not writer.write_if_changed(path, "a\n")
        assert writer.write_if_changed(path, "b\n")

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_files_follow_the_umask(self, tmp_path):
        previous = os.umask(0o022)
        try:
            AtomicWriter().write(tmp_path / "A.ts", "export type A = number;\n")
        finally:
            os.umask(previous)
        assert stat.S_IMODE((tmp_path / "A.ts").stat().st_mode) == 0o644
