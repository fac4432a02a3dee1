"""Unit tests for ApprovalRegistry — membership, idempotence, persistence."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from relaygate.core.registry import ApprovalRegistry
from relaygate.errors import PersistenceError
from relaygate.models.access import AccessState


class TestLoad:
    def test_missing_file_starts_empty(self, tmp_dir: Path):
        registry = ApprovalRegistry(tmp_dir / "nope" / "approved.json")
        assert len(registry) == 0
        assert registry.list_approved() == []

    def test_unparsable_file_starts_empty(self, registry_path: Path):
        registry_path.write_text("{not json", encoding="utf-8")
        registry = ApprovalRegistry(registry_path)
        assert len(registry) == 0

    def test_non_utf8_file_starts_empty(self, registry_path: Path):
        registry_path.write_bytes(b'["42", "\xff\xfe"]')
        registry = ApprovalRegistry(registry_path)
        assert len(registry) == 0
        assert not registry.is_approved("42")

    def test_non_array_file_starts_empty(self, registry_path: Path):
        registry_path.write_text(json.dumps({"42": True}), encoding="utf-8")
        registry = ApprovalRegistry(registry_path)
        assert len(registry) == 0

    def test_numeric_entries_are_canonicalised(self, registry_path: Path):
        registry_path.write_text(json.dumps([42, "43"]), encoding="utf-8")
        registry = ApprovalRegistry(registry_path)
        assert registry.is_approved("42")
        assert registry.is_approved(43)

    def test_unparsable_file_is_logged(self, registry_path: Path, caplog):
        caplog.set_level(logging.ERROR, logger="relaygate.core.registry")
        registry_path.write_text("[", encoding="utf-8")
        ApprovalRegistry(registry_path)
        assert "Failed to load registry" in caplog.text


class TestMutation:
    def test_approve_then_remove_scenario(self, registry: ApprovalRegistry):
        assert not registry.is_approved("42")
        assert registry.approve("42") is True
        assert registry.is_approved("42")
        assert registry.remove("42") is True
        assert not registry.is_approved("42")

    def test_approve_is_idempotent(self, registry: ApprovalRegistry):
        registry.approve("42")
        snapshot = registry.list_approved()
        assert registry.approve("42") is False
        assert registry.list_approved() == snapshot

    def test_remove_is_idempotent(self, registry: ApprovalRegistry):
        registry.approve("42")
        registry.remove("42")
        snapshot = registry.list_approved()
        assert registry.remove("42") is False
        assert registry.list_approved() == snapshot

    def test_numeric_and_text_ids_are_the_same_identity(self, registry: ApprovalRegistry):
        registry.approve(42)
        assert registry.is_approved("42")
        assert "42" in registry
        assert registry.approve("42") is False
        assert len(registry) == 1

    def test_is_approved_on_garbage_is_false(self, registry: ApprovalRegistry):
        assert registry.is_approved("") is False


class TestState:
    def test_unknown_identity_is_pending(self, registry: ApprovalRegistry):
        assert registry.state("7") == AccessState.PENDING

    def test_approved_identity(self, registry: ApprovalRegistry):
        registry.approve("7")
        assert registry.state(7) == AccessState.APPROVED

    def test_removed_identity(self, registry: ApprovalRegistry):
        registry.approve("7")
        registry.remove("7")
        assert registry.state("7") == AccessState.REMOVED

    def test_reapproval_clears_removed(self, registry: ApprovalRegistry):
        registry.approve("7")
        registry.remove("7")
        registry.approve("7")
        assert registry.state("7") == AccessState.APPROVED

    def test_removed_reads_pending_after_restart(self, registry: ApprovalRegistry):
        registry.approve("7")
        registry.remove("7")
        assert ApprovalRegistry(registry.path).state("7") == AccessState.PENDING


class TestPersistence:
    def test_every_mutation_is_flushed(self, registry: ApprovalRegistry, registry_path: Path):
        registry.approve("2")
        registry.approve("1")
        assert json.loads(registry_path.read_text(encoding="utf-8")) == ["1", "2"]
        registry.remove("2")
        assert json.loads(registry_path.read_text(encoding="utf-8")) == ["1"]

    def test_round_trip_in_fresh_instance(self, registry: ApprovalRegistry, registry_path: Path):
        for ident in ("42", "-100200", "ops"):
            registry.approve(ident)
        registry.persist()
        reloaded = ApprovalRegistry(registry_path)
        assert reloaded.list_approved() == registry.list_approved()

    def test_persist_creates_parent_dirs(self, tmp_dir: Path):
        path = tmp_dir / "a" / "b" / "approved.json"
        ApprovalRegistry(path).approve("1")
        assert path.exists()

    def test_persist_failure_raises_persistence_error(self, tmp_dir: Path):
        # A directory where the file should be makes write_text fail.
        path = tmp_dir / "approved.json"
        path.mkdir()
        registry = ApprovalRegistry(path)
        with pytest.raises(PersistenceError):
            registry.persist()

    def test_flush_failure_keeps_in_memory_state(self, tmp_dir: Path, caplog):
        caplog.set_level(logging.ERROR, logger="relaygate.core.registry")
        path = tmp_dir / "approved.json"
        path.mkdir()
        registry = ApprovalRegistry(path)
        assert registry.approve("42") is True
        assert registry.is_approved("42")
        assert "Registry flush failed" in caplog.text
