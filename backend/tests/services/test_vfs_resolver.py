import pytest

from modvfs.errors import ModNotFoundError
from modvfs.schemas.vfs import FileStatus
from modvfs.services.vfs import mod_files, provider_history, resolve_path, resolve_vfs


class TestResolvePath:
    def test_highest_priority_wins(self, registry, make_mod):
        registry.register(make_mod("A", ["x"]))
        registry.register(make_mod("B", ["x"]))
        assert resolve_path(registry.snapshot(), "x") == "B"

    def test_disabled_winner_falls_back(self, registry, make_mod):
        registry.register(make_mod("A", ["x"]))
        registry.register(make_mod("B", ["x"]))
        registry.set_enabled("B", False)
        assert resolve_path(registry.snapshot(), "x") == "A"

    def test_all_providers_disabled(self, registry, make_mod):
        registry.register(make_mod("A", ["x"]))
        registry.set_enabled("A", False)
        assert resolve_path(registry.snapshot(), "x") is None

    def test_unknown_path(self, abc_registry):
        assert resolve_path(abc_registry.snapshot(), "nothing/here") is None

    def test_query_is_normalised(self, registry, make_mod):
        registry.register(make_mod("A", ["Textures/Road.dds"]))
        assert resolve_path(registry.snapshot(), "TEXTURES\\road.DDS") == "A"

    def test_reorder_changes_winner(self, abc_registry):
        abc_registry.reorder(["B", "C", "A"])
        snapshot = abc_registry.snapshot()
        assert resolve_path(snapshot, "x") == "A"
        assert resolve_path(snapshot, "y") == "C"


class TestResolveVfs:
    def test_full_map(self, abc_registry):
        vfs = resolve_vfs(abc_registry.snapshot())
        assert vfs.entries == {"a.esp": "A", "c.esp": "C", "x": "B", "y": "C"}

    def test_keys_are_sorted(self, abc_registry):
        vfs = resolve_vfs(abc_registry.snapshot())
        assert list(vfs.entries) == sorted(vfs.entries)

    def test_disabled_only_paths_absent(self, abc_registry):
        abc_registry.set_enabled("A", False)
        vfs = resolve_vfs(abc_registry.snapshot())
        assert "a.esp" not in vfs.entries
        assert vfs.entries["x"] == "B"

    def test_matches_resolve_path(self, abc_registry):
        abc_registry.set_enabled("C", False)
        snapshot = abc_registry.snapshot()
        vfs = resolve_vfs(snapshot)
        for path in ["a.esp", "c.esp", "x", "y"]:
            assert vfs.resolve(path) == resolve_path(snapshot, path)

    def test_winner_owns_path(self, abc_registry):
        snapshot = abc_registry.snapshot()
        for path, mod_id in resolve_vfs(snapshot).entries.items():
            mod = snapshot.get(mod_id)
            assert mod.enabled
            assert path in mod.manifest

    def test_empty_registry(self, registry):
        vfs = resolve_vfs(registry.snapshot())
        assert vfs.entries == {}
        assert vfs.version == 0


class TestProviderHistory:
    def test_ascending_priority(self, registry, make_mod):
        for mod_id in "ABC":
            registry.register(make_mod(mod_id, ["shared"]))
        registry.reorder(["C", "A", "B"])
        history = provider_history(registry.snapshot(), "shared")
        assert [(p.mod_id, p.priority) for p in history] == [("C", 0), ("A", 1), ("B", 2)]

    def test_includes_disabled_providers(self, abc_registry):
        abc_registry.set_enabled("B", False)
        history = provider_history(abc_registry.snapshot(), "x")
        assert [(p.mod_id, p.enabled) for p in history] == [("A", True), ("B", False)]

    def test_unknown_path(self, abc_registry):
        assert provider_history(abc_registry.snapshot(), "nope") == []


class TestModFiles:
    def test_statuses(self, abc_registry):
        result = mod_files(abc_registry.snapshot(), "B")
        by_path = {f.path: f for f in result.files}
        assert by_path["x"].status == FileStatus.WINNING
        assert by_path["y"].status == FileStatus.OVERRIDDEN
        assert by_path["y"].winner_id == "C"
        assert result.winning_count == 1
        assert result.overridden_count == 1

    def test_disabled_mod_files_inactive(self, abc_registry):
        abc_registry.set_enabled("A", False)
        result = mod_files(abc_registry.snapshot(), "A")
        assert {f.status for f in result.files} == {FileStatus.INACTIVE}
        assert {f.path: f.winner_id for f in result.files} == {"a.esp": None, "x": "B"}

    def test_unknown_mod(self, abc_registry):
        with pytest.raises(ModNotFoundError):
            mod_files(abc_registry.snapshot(), "nope")
