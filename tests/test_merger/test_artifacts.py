"""Unit tests for the artifact writer (nstack.merger.artifacts).

Tests cover:
- Fresh writes with signatures and implicit directories
- already-present / user-modified / engine-owned overwrite decisions
- Sidecar ledger handling for JSON artifacts
- Path escape and I/O errors
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from nstack.config import EngineConfig
from nstack.errors import WriteError
from nstack.features.models import ResolvedArtifact
from nstack.merger.artifacts import ArtifactWriter, write_artifacts
from nstack.merger.models import SkipReason, WriteStatus
from nstack.merger.signature import sign, verify_embedded

TS = ResolvedArtifact(path="src/db/index.ts", content="export const db = 1;\n")
JSON = ResolvedArtifact(path="components.json", content='{\n  "style": "new-york"\n}\n')


class TestFreshWrites:
    @pytest.mark.unit
    def test_writes_signed_file(self, tmp_path: Path):
        results = write_artifacts(tmp_path, [TS])
        assert [r.status for r in results] == [WriteStatus.WRITTEN]
        text = (tmp_path / "src" / "db" / "index.ts").read_text(encoding="utf-8")
        assert verify_embedded(text) == TS.content

    @pytest.mark.unit
    def test_writes_json_unsigned_with_ledger(self, tmp_path: Path):
        write_artifacts(tmp_path, [JSON])
        assert (tmp_path / "components.json").read_text(encoding="utf-8") == JSON.content
        ledger = json.loads((tmp_path / ".nstack" / "generated.json").read_text(encoding="utf-8"))
        assert "components.json" in ledger["files"]

    @pytest.mark.unit
    def test_declaration_order(self, tmp_path: Path, memory_fs):
        a = ResolvedArtifact(path="b.ts", content="b\n")
        b = ResolvedArtifact(path="a.ts", content="a\n")
        write_artifacts(tmp_path, [a, b], fs=memory_fs)
        assert [p.name for p in memory_fs.writes] == ["b.ts", "a.ts"]

    @pytest.mark.unit
    def test_no_ledger_without_json(self, tmp_path: Path):
        write_artifacts(tmp_path, [TS])
        assert not (tmp_path / ".nstack").exists()


class TestRerun:
    @pytest.mark.unit
    def test_identical_is_already_present(self, tmp_path: Path):
        write_artifacts(tmp_path, [TS, JSON])
        results = write_artifacts(tmp_path, [TS, JSON])
        assert all(r.status is WriteStatus.SKIPPED for r in results)
        assert all(r.reason is SkipReason.ALREADY_PRESENT for r in results)

    @pytest.mark.unit
    def test_owned_file_is_updated(self, tmp_path: Path):
        write_artifacts(tmp_path, [TS])
        newer = ResolvedArtifact(path=TS.path, content="export const db = 2;\n")
        [result] = write_artifacts(tmp_path, [newer])
        assert result.written
        text = (tmp_path / TS.path).read_text(encoding="utf-8")
        assert verify_embedded(text) == newer.content

    @pytest.mark.unit
    def test_user_edit_is_preserved(self, tmp_path: Path):
        write_artifacts(tmp_path, [TS])
        target = tmp_path / TS.path
        edited = target.read_text(encoding="utf-8") + "// my change\n"
        target.write_text(edited, encoding="utf-8")

        [result] = write_artifacts(tmp_path, [TS])
        assert result.status is WriteStatus.SKIPPED
        assert result.reason is SkipReason.USER_MODIFIED
        assert target.read_text(encoding="utf-8") == edited

    @pytest.mark.unit
    def test_preexisting_user_file_is_preserved(self, tmp_path: Path):
        target = tmp_path / "src" / "db" / "index.ts"
        target.parent.mkdir(parents=True)
        target.write_text("// hand written\n", encoding="utf-8")
        [result] = write_artifacts(tmp_path, [TS])
        assert result.reason is SkipReason.USER_MODIFIED
        assert target.read_text(encoding="utf-8") == "// hand written\n"

    @pytest.mark.unit
    def test_unsigned_identical_counts_as_present(self, tmp_path: Path):
        target = tmp_path / TS.path
        target.parent.mkdir(parents=True)
        target.write_text(TS.content, encoding="utf-8")
        [result] = write_artifacts(tmp_path, [TS])
        assert result.reason is SkipReason.ALREADY_PRESENT

    @pytest.mark.unit
    def test_edited_json_is_preserved(self, tmp_path: Path):
        write_artifacts(tmp_path, [JSON])
        (tmp_path / "components.json").write_text('{"style": "default"}\n', encoding="utf-8")
        [result] = write_artifacts(tmp_path, [JSON])
        assert result.reason is SkipReason.USER_MODIFIED

    @pytest.mark.unit
    def test_owned_json_is_updated(self, tmp_path: Path):
        write_artifacts(tmp_path, [JSON])
        newer = ResolvedArtifact(path=JSON.path, content='{\n  "style": "default"\n}\n')
        [result] = write_artifacts(tmp_path, [newer])
        assert result.written
        assert (tmp_path / "components.json").read_text(encoding="utf-8") == newer.content

    @pytest.mark.unit
    def test_json_without_ledger_is_user_owned(self, tmp_path: Path):
        (tmp_path / "components.json").write_text("{}\n", encoding="utf-8")
        [result] = write_artifacts(tmp_path, [JSON])
        assert result.reason is SkipReason.USER_MODIFIED

    @pytest.mark.unit
    def test_custom_state_dir(self, tmp_path: Path):
        config = EngineConfig(state_dir=".meta")
        write_artifacts(tmp_path, [JSON], config=config)
        assert (tmp_path / ".meta" / "generated.json").exists()


class TestWriteErrors:
    @pytest.mark.unit
    def test_path_escape(self, tmp_path: Path):
        root = tmp_path / "project"
        root.mkdir()
        with pytest.raises(WriteError, match="escapes"):
            write_artifacts(root, [ResolvedArtifact(path="../outside.ts", content="x\n")])
        assert not (tmp_path / "outside.ts").exists()

    @pytest.mark.unit
    def test_io_failure_keeps_earlier_writes(self, tmp_path: Path, memory_fs):
        memory_fs.fail_writes.add("second.ts")
        writer = ArtifactWriter(tmp_path, fs=memory_fs)
        artifacts = [
            ResolvedArtifact(path="first.ts", content="1\n"),
            ResolvedArtifact(path="second.ts", content="2\n"),
        ]
        with pytest.raises(WriteError) as exc_info:
            writer.write_all(artifacts)
        assert exc_info.value.path == tmp_path / "second.ts"
        assert memory_fs.read_text(tmp_path / "first.ts") == sign("first.ts", "1\n")

    @pytest.mark.unit
    def test_unreadable_ledger(self, tmp_path: Path):
        ledger = tmp_path / ".nstack" / "generated.json"
        ledger.mkdir(parents=True)
        with pytest.raises(WriteError, match="signature ledger") as exc_info:
            write_artifacts(tmp_path, [ResolvedArtifact(path="components.json", content="{}\n")])
        assert exc_info.value.path == ledger
        assert not (tmp_path / "components.json").exists()
