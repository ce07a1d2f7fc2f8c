"""
Tests for InterrogationService.

Tests:
- Round start and summary
- Chat exchanges (stress, history, clues, stand-in replies)
- Accusation and round closure
- Error kinds for every failure path
"""

import asyncio

from ..api.service import InterrogationService
from ..config import Settings
from ..engine_core import interaction
from ..engine_core.errors import ErrorKind
from ..engine_core.state import SessionStatus
from ..session import SqliteSessionStore
from .conftest import FailingGenerator, FixedReplyGenerator, FlakySqliteStore, SlowGenerator


def preset_stress(service, session_id, character_id, level):
    resolution = service.registry.resolve(session_id)
    interaction.get_or_create(resolution.session, character_id).stress_level = level
    service.registry.update(resolution)


class TestStartRound:
    def test_start_round(self, service):
        result = service.start_round("Ada")

        assert result.success
        data = result.data
        assert data.session_id.endswith("-b")
        assert data.player_name == "Ada"
        assert "Ada" in data.message
        assert [c.id for c in data.characters] == ["a", "b", "c"]

    def test_summary_hides_imposter_while_active(self, service):
        session_id = service.start_round("Ada").data.session_id

        summary = service.get_session(session_id).data

        assert summary.status == "active"
        assert summary.imposter_id is None
        assert summary.characters == []

    def test_summary_reveals_imposter_once_decided(self, service):
        session_id = service.start_round("Ada").data.session_id
        asyncio.run(service.accuse(session_id, "a"))

        summary = service.get_session(session_id).data

        assert summary.status == "lost"
        assert summary.imposter_id == "b"
        assert summary.final_guess == "a"
        assert summary.ended_at is not None

    def test_unknown_session(self, service):
        result = service.get_session("abc123-ghost")

        assert not result.success
        assert result.error_kind == ErrorKind.NOT_FOUND


class TestChat:
    def test_trigger_raises_stress_by_seventeen(self, service):
        session_id = service.start_round("Ada").data.session_id

        result = asyncio.run(service.chat(session_id, "a", "What about the ledger?"))

        assert result.success
        data = result.data
        assert data.stress_level == 17
        assert data.stress_change == 17
        assert data.stress_state == "calm"
        assert data.reply == "I was at home all night."
        assert data.message_count == 1
        assert not data.upstream_failed
        assert not result.degraded

    def test_stress_clamps_at_hundred(self, service):
        session_id = service.start_round("Ada").data.session_id
        preset_stress(service, session_id, "a", 90)

        data = asyncio.run(service.chat(session_id, "a", "The ledger.")).data

        assert data.stress_level == 100
        assert data.stress_state == "hostile"

    def test_history_recorded(self, service):
        session_id = service.start_round("Ada").data.session_id
        asyncio.run(service.chat(session_id, "a", "Hello there"))
        asyncio.run(service.chat(session_id, "a", "Nice weather"))

        history = service.read_history(session_id, "a").data

        assert [m.role for m in history.history] == ["player", "character"] * 2
        assert history.history[0].content == "Hello there"
        assert history.stress_level == 4

    def test_prior_history_sent_to_generator(self, make_service):
        generator = FixedReplyGenerator()
        service = make_service(generator=generator)
        session_id = service.start_round("Ada").data.session_id

        asyncio.run(service.chat(session_id, "a", "First"))
        asyncio.run(service.chat(session_id, "a", "Second"))

        _, messages = generator.calls[-1]
        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        assert messages[-1]["content"] == "Second"

    def test_characters_do_not_share_history(self, service):
        session_id = service.start_round("Ada").data.session_id
        asyncio.run(service.chat(session_id, "a", "To a"))

        assert service.read_history(session_id, "c").data.history == []

    def test_history_kept_while_durable_writes_fail(self, make_service, make_registry, db_path):
        flaky = FlakySqliteStore(db_path)
        service = make_service(registry=make_registry("b", durable=flaky))
        session_id = service.start_round("Ada").data.session_id
        flaky.fail_writes = True

        asyncio.run(service.chat(session_id, "a", "Hello there"))
        data = asyncio.run(service.chat(session_id, "a", "Nice weather")).data

        assert data.message_count == 2
        assert len(service.read_history(session_id, "a").data.history) == 4

    def test_imposter_prompt_only_for_imposter(self, make_service):
        generator = FixedReplyGenerator()
        service = make_service(generator=generator, imposter_id="b")
        session_id = service.start_round("Ada").data.session_id

        asyncio.run(service.chat(session_id, "a", "Hi"))
        asyncio.run(service.chat(session_id, "b", "Hi"))

        innocent_prompt, _ = generator.calls[0]
        imposter_prompt, _ = generator.calls[1]
        assert "secretly the imposter" not in innocent_prompt
        assert "secretly the imposter" in imposter_prompt

    def test_imposter_behaviour_uses_lowered_threshold(self, make_service):
        generator = FixedReplyGenerator()
        service = make_service(generator=generator, imposter_id="b")
        session_id = service.start_round("Ada").data.session_id
        preset_stress(service, session_id, "b", 33)

        data = asyncio.run(service.chat(session_id, "b", "Your camera logs.")).data

        prompt, _ = generator.calls[0]
        assert data.stress_level == 50
        assert "CURRENT STRESS LEVEL: 50/100 (threshold: 50)" in prompt
        assert "Bram is hostile." in prompt
        # The player-facing label never gives the imposter away
        assert data.stress_state == "agitated"

    def test_failed_reply_uses_stand_in_and_still_records(self, make_service):
        service = make_service(generator=FailingGenerator())
        session_id = service.start_round("Ada").data.session_id

        result = asyncio.run(service.chat(session_id, "a", "The ledger!"))

        assert result.success
        data = result.data
        assert data.reply == "*Ada seems distracted and doesn't respond*"
        assert data.upstream_failed
        assert data.stress_level == 22
        history = service.read_history(session_id, "a").data.history
        assert len(history) == 2
        assert history[-1].content == data.reply

    def test_slow_reply_times_out(self, make_service):
        service = make_service(generator=SlowGenerator(), reply_timeout=0.05)
        session_id = service.start_round("Ada").data.session_id

        data = asyncio.run(service.chat(session_id, "c", "Anything?")).data

        assert data.upstream_failed
        assert data.reply == "*Cora seems distracted and doesn't respond*"
        assert data.message_count == 1

    def test_no_generator_configured(self, catalog, reveals, make_registry):
        service = InterrogationService(
            catalog=catalog,
            registry=make_registry("b"),
            reveals=reveals,
            default_reveal_id="a",
        )
        session_id = service.start_round("Ada").data.session_id

        data = asyncio.run(service.chat(session_id, "a", "Hi")).data

        assert data.upstream_failed
        assert data.message_count == 1

    def test_trigger_unlocks_clue_once(self, service):
        session_id = service.start_round("Ada").data.session_id

        first = asyncio.run(service.chat(session_id, "a", "The ledger?")).data
        second = asyncio.run(service.chat(session_id, "a", "The ledger again.")).data

        assert first.new_clues == ["Pages are missing from the ledger."]
        assert second.new_clues == []
        assert service.read_clues(session_id).data.clues == [
            "Pages are missing from the ledger."
        ]

    def test_unknown_character_is_invalid_input(self, service):
        session_id = service.start_round("Ada").data.session_id

        result = asyncio.run(service.chat(session_id, "ghost", "Hi"))

        assert not result.success
        assert result.error_kind == ErrorKind.INVALID_INPUT
        assert service.get_session(session_id).data.characters == []

    def test_empty_message_is_invalid_input(self, service):
        session_id = service.start_round("Ada").data.session_id

        result = asyncio.run(service.chat(session_id, "a", "   "))

        assert result.error_kind == ErrorKind.INVALID_INPUT

    def test_oversized_message_is_invalid_input(self, make_service):
        service = make_service(max_message_length=10)
        session_id = service.start_round("Ada").data.session_id

        result = asyncio.run(service.chat(session_id, "a", "x" * 11))

        assert result.error_kind == ErrorKind.INVALID_INPUT

    def test_unknown_session_is_not_found(self, service):
        result = asyncio.run(service.chat("abc123-ghost", "a", "Hi"))

        assert result.error_kind == ErrorKind.NOT_FOUND

    def test_recovered_round_is_degraded(self, service):
        result = asyncio.run(service.chat("lost123-c", "a", "Hi"))

        assert result.success
        assert result.degraded
        summary = service.get_session("lost123-c")
        assert summary.degraded
        assert summary.data.characters[0].character_id == "a"


class TestReadHistory:
    def test_unknown_character(self, service):
        session_id = service.start_round("Ada").data.session_id

        result = service.read_history(session_id, "ghost")

        assert result.error_kind == ErrorKind.INVALID_INPUT

    def test_empty_history(self, service):
        session_id = service.start_round("Ada").data.session_id

        data = service.read_history(session_id, "a").data

        assert data.history == []
        assert data.stress_level == 0
        assert data.stress_state == "calm"


class TestAccuse:
    def test_scenario(self, service, reveals):
        """Start, pressure an innocent, accuse correctly, then try again."""
        start = service.start_round("Ada").data
        assert start.session_id.rsplit("-", 1)[1] in {"a", "b", "c"}

        chat = asyncio.run(service.chat(start.session_id, "a", "What about the ledger?"))
        assert chat.data.stress_change == 17

        won = asyncio.run(service.accuse(start.session_id, "b"))
        assert won.success
        assert won.data.correct
        assert won.data.status == "won"
        assert won.data.message == reveals["b"].message

        again = asyncio.run(service.accuse(start.session_id, "c"))
        assert not again.success
        assert again.error_kind == ErrorKind.CONFLICT
        assert service.get_session(start.session_id).data.status == "won"

    def test_wrong_guess(self, service):
        session_id = service.start_round("Ada").data.session_id

        data = asyncio.run(service.accuse(session_id, "c")).data

        assert not data.correct
        assert data.status == "lost"
        assert data.imposter_id == "b"
        assert data.imposter_name == "Bram"

    def test_unknown_character(self, service):
        session_id = service.start_round("Ada").data.session_id

        result = asyncio.run(service.accuse(session_id, "ghost"))

        assert result.error_kind == ErrorKind.INVALID_INPUT
        assert service.get_session(session_id).data.status == "active"

    def test_unknown_session(self, service):
        result = asyncio.run(service.accuse("abc123-ghost", "a"))

        assert result.error_kind == ErrorKind.NOT_FOUND

    def test_recovered_round_can_be_decided(self, service):
        result = asyncio.run(service.accuse("lost123-c", "c"))

        assert result.success
        assert result.degraded
        assert result.data.correct
        assert service.get_session("lost123-c").data.status == "won"

    def test_decision_persisted_durably(self, make_service, make_registry, durable_store):
        service = make_service(registry=make_registry("b", durable=durable_store))
        session_id = service.start_round("Ada").data.session_id

        asyncio.run(service.accuse(session_id, "b"))

        stored = durable_store.get(session_id)
        assert stored.status == SessionStatus.WON
        assert stored.final_guess == "b"


    def test_decision_holds_while_durable_writes_fail(self, make_service, make_registry, db_path):
        flaky = FlakySqliteStore(db_path)
        service = make_service(registry=make_registry("b", durable=flaky))
        session_id = service.start_round("Ada").data.session_id
        flaky.fail_writes = True

        won = asyncio.run(service.accuse(session_id, "b"))
        again = asyncio.run(service.accuse(session_id, "c"))

        assert won.success
        assert won.data.status == "won"
        assert not again.success
        assert again.error_kind == ErrorKind.CONFLICT
        summary = service.get_session(session_id).data
        assert summary.status == "won"
        assert summary.final_guess == "b"


class TestFromSettings:
    def test_volatile_only_without_db_path(self):
        service = InterrogationService.from_settings(Settings())

        assert service.registry.durable is None
        assert service.generator is None

    def test_durable_and_generator(self, tmp_path):
        settings = Settings(db_path=str(tmp_path / "s.db"), llm_api_key="key", llm_timeout=3)
        service = InterrogationService.from_settings(settings)

        assert isinstance(service.registry.durable, SqliteSessionStore)
        assert service.generator is not None
        assert service.reply_timeout == 3
        asyncio.run(service.generator.aclose())
