"""
Tests for the session registry.

Tests:
- Creation in the primary tier
- Tiered resolution (durable, volatile, stateless)
- Write-back to the owning tier and promotion of recovered rounds
- Eviction of finished rounds
- Rounds kept in memory while durable writes fail
"""

from datetime import timedelta

from ..engine_core import interaction
from ..engine_core.state import DEFAULT_PLAYER_NAME, SessionStatus, utc_now
from ..session import MemorySessionStore, SqliteSessionStore, StoreError, Tier
from ..session.registry import RECOVERED_STARTED_AT
from .conftest import FlakySqliteStore


class BrokenStore:
    """Durable tier that claims to be up but fails every call."""

    name = "durable"

    def __init__(self, available=True):
        self.available = available
        self.puts = 0

    def is_available(self):
        return self.available

    def get(self, session_id):
        raise StoreError("disk on fire")

    def put(self, session):
        self.puts += 1
        raise StoreError("disk on fire")


class TestCreate:
    def test_volatile_only(self, make_registry):
        registry = make_registry("b")
        session = registry.create("Ada")

        assert session.imposter_id == "b"
        assert session.session_id.endswith("-b")
        assert session.player_name == "Ada"
        assert session.status == SessionStatus.ACTIVE
        assert session.session_id in registry.volatile

    def test_blank_name_defaults(self, make_registry):
        assert make_registry().create("   ").player_name == DEFAULT_PLAYER_NAME

    def test_durable_preferred(self, make_registry, durable_store):
        registry = make_registry(durable=durable_store)
        session = registry.create("Ada")

        assert durable_store.get(session.session_id) is not None
        assert session.session_id not in registry.volatile

    def test_durable_unavailable_falls_back(self, make_registry, tmp_path):
        registry = make_registry(durable=SqliteSessionStore(tmp_path))
        session = registry.create("Ada")

        assert session.session_id in registry.volatile

    def test_durable_write_failure_falls_back(self, make_registry):
        registry = make_registry(durable=BrokenStore())
        session = registry.create("Ada")

        assert session.session_id in registry.volatile


class TestResolve:
    def test_durable_hit(self, make_registry, durable_store):
        registry = make_registry(durable=durable_store)
        session = registry.create("Ada")

        resolution = registry.resolve(session.session_id)

        assert resolution.tier == Tier.DURABLE
        assert resolution.session == session
        assert not resolution.degraded

    def test_volatile_hit(self, make_registry):
        registry = make_registry()
        session = registry.create("Ada")

        resolution = registry.resolve(session.session_id)

        assert resolution.tier == Tier.VOLATILE
        assert resolution.session.player_name == "Ada"
        assert not resolution.degraded

    def test_durable_error_treated_as_miss(self, make_registry):
        volatile = MemorySessionStore()
        registry = make_registry(durable=BrokenStore(), volatile=volatile)
        session = registry.create("Ada")

        resolution = registry.resolve(session.session_id)

        assert resolution.tier == Tier.VOLATILE
        assert resolution.session.player_name == "Ada"

    def test_stateless_recovery(self, make_registry):
        registry = make_registry()

        resolution = registry.resolve("lost123-c")

        assert resolution.tier == Tier.STATELESS
        assert resolution.degraded
        session = resolution.session
        assert session.imposter_id == "c"
        assert session.player_name == DEFAULT_PLAYER_NAME
        assert session.status == SessionStatus.ACTIVE
        assert session.interactions == {}
        assert session.started_at == RECOVERED_STARTED_AT

    def test_stateless_recovery_is_deterministic(self, make_registry):
        registry = make_registry()

        assert registry.resolve("lost123-c").session == registry.resolve("lost123-c").session

    def test_not_found(self, make_registry):
        registry = make_registry()

        assert registry.resolve("abc123-ghost") is None
        assert registry.resolve("no_delimiter") is None

    def test_resolve_is_idempotent(self, make_registry):
        registry = make_registry()
        session = registry.create("Ada")

        first = registry.resolve(session.session_id)
        second = registry.resolve(session.session_id)

        assert first.session == second.session
        assert first.session is not second.session


class TestUpdate:
    def test_volatile_write_back(self, make_registry):
        registry = make_registry()
        session = registry.create("Ada")

        resolution = registry.resolve(session.session_id)
        interaction.append(interaction.get_or_create(resolution.session, "a"), "q", "r", 17)
        registry.update(resolution)

        stored = registry.resolve(session.session_id).session
        assert stored.interactions["a"].stress_level == 17

    def test_durable_write_back(self, make_registry, durable_store):
        registry = make_registry(durable=durable_store)
        session = registry.create("Ada")

        resolution = registry.resolve(session.session_id)
        resolution.session.add_clue("A clue.")
        saved = registry.update(resolution)

        assert saved.tier == Tier.DURABLE
        assert durable_store.get(session.session_id).clues_discovered == ["A clue."]

    def test_durable_round_survives_restart(self, make_registry, db_path):
        registry = make_registry(durable=SqliteSessionStore(db_path))
        session = registry.create("Ada")
        resolution = registry.resolve(session.session_id)
        interaction.append(interaction.get_or_create(resolution.session, "a"), "q", "r", 17)
        registry.update(resolution)

        restarted = make_registry(durable=SqliteSessionStore(db_path))
        found = restarted.resolve(session.session_id)

        assert found.tier == Tier.DURABLE
        assert found.session.player_name == "Ada"
        assert found.session.interactions["a"].stress_level == 17

    def test_recovered_session_promoted(self, make_registry):
        registry = make_registry()

        resolution = registry.resolve("lost123-c")
        interaction.append(interaction.get_or_create(resolution.session, "a"), "q", "r", 17)
        saved = registry.update(resolution)

        assert saved.tier == Tier.VOLATILE
        again = registry.resolve("lost123-c")
        assert again.tier == Tier.VOLATILE
        assert again.degraded
        assert again.session.interactions["a"].stress_level == 17

    def test_durable_failure_keeps_round_in_memory(self, make_registry, durable_store):
        registry = make_registry(durable=durable_store)
        session = registry.create("Ada")
        resolution = registry.resolve(session.session_id)

        registry.durable = BrokenStore()
        resolution.session.add_clue("A clue.")
        saved = registry.update(resolution)

        assert saved.tier == Tier.VOLATILE
        assert registry.volatile.get(session.session_id).clues_discovered == ["A clue."]


class TestCleanup:
    def test_disabled_by_default(self, make_registry):
        registry = make_registry()
        session = registry.create("Ada")
        stored = registry.resolve(session.session_id)
        stored.session.status = SessionStatus.WON
        stored.session.ended_at = utc_now() - timedelta(days=30)
        registry.update(stored)

        assert registry.cleanup() == []

    def test_evicts_old_finished_rounds(self, make_registry):
        registry = make_registry(session_ttl=60)
        session = registry.create("Ada")
        stored = registry.resolve(session.session_id)
        stored.session.status = SessionStatus.WON
        stored.session.ended_at = utc_now() - timedelta(minutes=5)
        registry.update(stored)

        assert registry.cleanup() == [session.session_id]
        # Still recoverable from the identifier
        assert registry.resolve(session.session_id).tier == Tier.STATELESS


class TestPinnedRounds:
    def _failed_update(self, registry, flaky):
        session = registry.create("Ada")
        resolution = registry.resolve(session.session_id)
        flaky.fail_writes = True
        resolution.session.status = SessionStatus.WON
        resolution.session.ended_at = utc_now() - timedelta(minutes=5)
        return registry.update(resolution)

    def test_memory_copy_wins_after_failed_write(self, make_registry, db_path):
        flaky = FlakySqliteStore(db_path)
        registry = make_registry(durable=flaky)

        saved = self._failed_update(registry, flaky)
        session_id = saved.session.session_id

        assert saved.tier == Tier.VOLATILE
        assert registry.is_pinned(session_id)
        # The durable row is stale but still readable
        assert flaky.get(session_id).status == SessionStatus.ACTIVE
        found = registry.resolve(session_id)
        assert found.tier == Tier.VOLATILE
        assert found.session.status == SessionStatus.WON

    def test_returns_to_durable_once_writes_recover(self, make_registry, db_path):
        flaky = FlakySqliteStore(db_path)
        registry = make_registry(durable=flaky)
        session_id = self._failed_update(registry, flaky).session.session_id

        flaky.fail_writes = False
        resolution = registry.resolve(session_id)
        resolution.session.add_clue("A clue.")
        saved = registry.update(resolution)

        assert saved.tier == Tier.DURABLE
        assert not registry.is_pinned(session_id)
        assert session_id not in registry.volatile
        stored = flaky.get(session_id)
        assert stored.status == SessionStatus.WON
        assert stored.clues_discovered == ["A clue."]
        assert registry.resolve(session_id).tier == Tier.DURABLE

    def test_repeated_failures_stay_in_memory(self, make_registry, db_path):
        flaky = FlakySqliteStore(db_path)
        registry = make_registry(durable=flaky)
        session_id = self._failed_update(registry, flaky).session.session_id

        resolution = registry.resolve(session_id)
        resolution.session.add_clue("A clue.")
        saved = registry.update(resolution)

        assert saved.tier == Tier.VOLATILE
        assert registry.resolve(session_id).session.clues_discovered == ["A clue."]

    def test_cleanup_keeps_pinned_round(self, make_registry, db_path):
        flaky = FlakySqliteStore(db_path)
        registry = make_registry(durable=flaky, session_ttl=60)
        session_id = self._failed_update(registry, flaky).session.session_id

        assert registry.cleanup() == []
        assert registry.resolve(session_id).session.status == SessionStatus.WON
