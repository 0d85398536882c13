import pytest

from modvfs.errors import DuplicateIdError, ModNotFoundError
from modvfs.schemas.conflicts import ConflictFlag
from modvfs.schemas.discovery import DiscoveredPackage
from modvfs.schemas.hints import RankingHints
from modvfs.services.advisors import StaticOrderAdvisor
from modvfs.services.engine import ModEngine, compute_derived


def _check_invariants(engine: ModEngine) -> None:
    state = engine.derived()
    snapshot = state.snapshot
    assert sorted(m.priority for m in snapshot.mods) == list(range(len(snapshot.mods)))
    assert state.conflicts.version == state.vfs.version == engine.version
    for path, winner in state.vfs.entries.items():
        enabled = [m for m in snapshot.mods if m.enabled and path in m.manifest]
        assert winner == max(enabled, key=lambda m: m.priority).id
    for mod in snapshot.mods:
        conflicts = state.conflicts.conflicts_of(mod.id)
        for other in conflicts.overwritten_by:
            assert mod.id in state.conflicts.conflicts_of(other).overwrites


class TestDerivedState:
    def test_cached_per_version(self, mod_engine):
        first = mod_engine.derived()
        assert mod_engine.derived() is first
        mod_engine.set_enabled("B", False)
        assert mod_engine.derived() is not first
        assert mod_engine.derived().version == first.version + 1

    def test_recompute_is_idempotent(self, mod_engine):
        snapshot = mod_engine.registry.snapshot()
        a = compute_derived(snapshot)
        b = compute_derived(snapshot)
        assert a.conflicts == b.conflicts
        assert a.vfs == b.vfs

    def test_parallel_matches_sequential(self, mod_engine):
        snapshot = mod_engine.registry.snapshot()
        sequential = compute_derived(snapshot)
        parallel = compute_derived(snapshot, parallel=True)
        assert parallel.conflicts == sequential.conflicts
        assert parallel.vfs == sequential.vfs

    def test_invariants_hold_across_mutations(self, registry, make_mod):
        engine = ModEngine(registry, parallel_recompute=True)
        engine.register(make_mod("A", ["x", "y", "a"]))
        engine.register(make_mod("B", ["x", "b"]))
        engine.register(make_mod("C", ["y", "x"]))
        _check_invariants(engine)
        engine.set_enabled("C", False)
        _check_invariants(engine)
        engine.set_priority("A", 2)
        _check_invariants(engine)
        engine.register(make_mod("D", ["b", "y"]))
        _check_invariants(engine)
        engine.remove("B")
        _check_invariants(engine)
        engine.reorder(["D", "C", "A"])
        _check_invariants(engine)


class TestDisplayQueries:
    def test_list_mods_ordered(self, mod_engine):
        result = mod_engine.list_mods_ordered()
        assert [e.mod.id for e in result.mods] == ["A", "B", "C"]
        assert [e.flag for e in result.mods] == [
            ConflictFlag.LOSER,
            ConflictFlag.MIXED,
            ConflictFlag.WINNER,
        ]
        assert result.active_count == result.total_count == 3

    def test_list_filter_keeps_counts(self, mod_engine):
        mod_engine.set_enabled("A", False)
        result = mod_engine.list_mods_ordered("mod c")
        assert [e.mod.id for e in result.mods] == ["C"]
        assert result.active_count == 2
        assert result.total_count == 3

    def test_conflicts_of_unknown(self, mod_engine):
        with pytest.raises(ModNotFoundError):
            mod_engine.conflicts_of("nope")

    def test_resolve_and_snapshot(self, mod_engine):
        assert mod_engine.resolve_path("X") == "B"
        assert mod_engine.vfs_snapshot()["y"] == "C"

    def test_vfs_snapshot_is_a_copy(self, mod_engine):
        mod_engine.vfs_snapshot()["x"] = "tampered"
        assert mod_engine.resolve_path("x") == "B"

    def test_provider_history(self, mod_engine):
        assert [p.mod_id for p in mod_engine.provider_history("y")] == ["B", "C"]


class TestMutations:
    def test_failed_register_keeps_derived_state(self, mod_engine, make_mod):
        state = mod_engine.derived()
        with pytest.raises(DuplicateIdError):
            mod_engine.register(make_mod("A", ["new"]))
        assert mod_engine.derived() is state

    def test_apply_hints(self, mod_engine):
        result = mod_engine.apply_hints(RankingHints(explicit_order=["C"]))
        assert result.order == ["C", "A", "B"]
        assert mod_engine.resolve_path("y") == "B"

    def test_sort_with(self, mod_engine):
        result = mod_engine.sort_with(StaticOrderAdvisor(["B", "A", "C"]))
        assert result.changed
        assert mod_engine.resolve_path("x") == "A"

    def test_merge_discovered(self, mod_engine):
        result = mod_engine.merge_discovered(
            [DiscoveredPackage(identity_key="new", name="New", manifest_paths=["x"])]
        )
        (new_id,) = result.registered
        assert mod_engine.resolve_path("x") == new_id
        assert mod_engine.conflicts_of(new_id).overwrites == ["A", "B"]
