"""
Pytest fixtures for Turing tests.
"""

import asyncio
import random

import pytest

from ..api.service import InterrogationService
from ..catalog import Catalog, CharacterConfig, Clue, RevealNarrative
from ..dialogue import LLMClientError
from ..session import MemorySessionStore, SessionRegistry, SqliteSessionStore, StoreError


def make_character(character_id, name, threshold, triggers, clues=()):
    return CharacterConfig(
        id=character_id,
        name=name,
        role=f"{name} role",
        threshold=threshold,
        triggers=tuple(triggers),
        stress_responses={
            "calm": f"{name} is calm.",
            "agitated": f"{name} is agitated.",
            "hostile": f"{name} is hostile.",
        },
        base_prompt=f"You are {name}.",
        location=f"{name}'s office",
        clues=tuple(clues),
    )


class FixedChoice:
    """Stands in for random.Random; always picks the same character."""

    def __init__(self, character_id):
        self.character_id = character_id

    def choice(self, seq):
        assert self.character_id in seq
        return self.character_id


class FixedReplyGenerator:
    """Returns a canned reply and records every prompt it was given."""

    def __init__(self, reply="I was at home all night."):
        self.reply = reply
        self.calls = []

    async def generate(self, system_prompt, messages):
        self.calls.append((system_prompt, messages))
        return self.reply


class FailingGenerator:
    async def generate(self, system_prompt, messages):
        raise LLMClientError("upstream is down")


class SlowGenerator:
    """Blocks until released, so tests can overlap requests."""

    def __init__(self, reply="...eventually."):
        self.reply = reply
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def generate(self, system_prompt, messages):
        self.started.set()
        await self.release.wait()
        return self.reply


@pytest.fixture
def catalog() -> Catalog:
    """Three-character catalog {a, b, c}."""
    return Catalog(
        [
            make_character(
                "a", "Ada", 50, ["ledger", "mirror"],
                clues=[Clue("a_ledger", "ledger", "Pages are missing from the ledger.")],
            ),
            make_character(
                "b", "Bram", 70, ["camera", "badge"],
                clues=[
                    Clue("b_camera", "camera", "The camera was looped for an hour."),
                    Clue("b_badge", "badge", "A badge was cloned last week."),
                ],
            ),
            make_character("c", "Cora", 40, ["lab"]),
        ],
        imposter_prompt="You are secretly the imposter.",
    )


@pytest.fixture
def reveals(catalog) -> dict:
    return {
        character.id: RevealNarrative(
            message=f"{character.name} was the imposter all along.",
            revelation=f"{character.name}'s confession log.",
        )
        for character in catalog
    }


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "sessions.db"


@pytest.fixture
def make_registry(catalog):
    """Factory for registries with a fixed imposter."""

    def _make(imposter_id="b", durable=None, volatile=None, session_ttl=0):
        return SessionRegistry(
            catalog,
            volatile=volatile if volatile is not None else MemorySessionStore(),
            durable=durable,
            rng=FixedChoice(imposter_id),
            session_ttl=session_ttl,
        )

    return _make


@pytest.fixture
def make_service(catalog, reveals, make_registry):
    """Factory for services over the test catalog."""

    def _make(generator=None, imposter_id="b", registry=None, reply_timeout=1.0, **kwargs):
        return InterrogationService(
            catalog=catalog,
            registry=registry or make_registry(imposter_id),
            generator=generator if generator is not None else FixedReplyGenerator(),
            reveals=reveals,
            default_reveal_id="a",
            reply_timeout=reply_timeout,
            **kwargs,
        )

    return _make


@pytest.fixture
def service(make_service) -> InterrogationService:
    """Service whose imposter is always 'b'."""
    return make_service()


@pytest.fixture
def seeded_rng():
    return random.Random(1234)


@pytest.fixture
def durable_store(db_path) -> SqliteSessionStore:
    return SqliteSessionStore(db_path)


class FlakySqliteStore(SqliteSessionStore):
    """SQLite store whose writes fail while fail_writes is set; reads still work."""

    def __init__(self, db_path):
        super().__init__(db_path)
        self.fail_writes = False

    def put(self, session):
        if self.fail_writes:
            raise StoreError("database is locked")
        super().put(session)
