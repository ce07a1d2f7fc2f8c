"""
Session Registry - Tiered create / resolve / update of sessions.

TIERS (consulted in this fixed order):
1. Durable store (SQLite), when configured and reachable
2. Volatile store (in-process memory)
3. Stateless recovery: decode the imposter from the identifier itself

Stateless recovery builds a minimal active session with a placeholder
player name and no history. It is flagged as degraded: callers may keep
chatting and accusing, but must not present the name or history as
authoritative. A degraded session is promoted into the volatile tier on
its first update so later requests in this process see one consistent
copy.

Writes go back to the tier that owns the record. A durable write that
fails falls back to the volatile tier rather than losing the round. The
round is then pinned: resolve reads the volatile copy first, because the
durable row is stale, and the next successful durable write unpins it.
Pinned rounds are never evicted from memory.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
import logging
import random

from ..catalog import Catalog
from ..engine_core.state import Session, DEFAULT_PLAYER_NAME, utc_now
from .identifiers import assign_imposter, decode_session_id, new_session_id
from .stores import MemorySessionStore, SessionStore, StoreError

logger = logging.getLogger(__name__)


# Fixed start time for recovered sessions so recovery is deterministic
RECOVERED_STARTED_AT = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Tier(Enum):
    """Where a resolved session came from."""
    DURABLE = "durable"
    VOLATILE = "volatile"
    STATELESS = "stateless"


@dataclass
class Resolution:
    """
    A resolved session and the tier that owns it.

    The session is the caller's private copy; write it back with
    SessionRegistry.update().
    """
    session: Session
    tier: Tier

    @property
    def degraded(self) -> bool:
        """True if the round was rebuilt from its identifier alone."""
        return self.session.degraded


class SessionRegistry:
    """
    Creates sessions and finds them again across storage tiers.

    Usage:
        registry = SessionRegistry(catalog, durable=SqliteSessionStore(path))

        session = registry.create("Ada")
        resolution = registry.resolve(session.session_id)
        if resolution:
            ...mutate resolution.session...
            registry.update(resolution)
    """

    def __init__(
        self,
        catalog: Catalog,
        volatile: MemorySessionStore | None = None,
        durable: SessionStore | None = None,
        rng: random.Random | None = None,
        session_ttl: float = 0,
    ):
        self.catalog = catalog
        self.volatile = volatile if volatile is not None else MemorySessionStore()
        self.durable = durable
        self.rng = rng
        self.session_ttl = session_ttl
        # Rounds whose durable row missed a write; memory holds the latest copy
        self._pinned: set[str] = set()

    def create(self, player_name: str = DEFAULT_PLAYER_NAME) -> Session:
        """
        Start a new round.

        Always succeeds: the session lands in the durable tier when it is
        reachable and in the volatile tier otherwise.
        """
        imposter_id = assign_imposter(self.catalog, self.rng)
        session = Session(
            session_id=new_session_id(imposter_id),
            imposter_id=imposter_id,
            player_name=(player_name or "").strip() or DEFAULT_PLAYER_NAME,
        )
        logger.debug("Round %s started, imposter is %s", session.session_id, imposter_id)

        if self._durable_ready():
            try:
                self.durable.put(session)
                return session
            except StoreError as exc:
                logger.warning("Durable save failed, falling back to memory: %s", exc)

        self.volatile.put(session)
        return session

    def resolve(self, session_id: str) -> Resolution | None:
        """
        Find a session, trying each tier in order.

        A pinned round is read from memory first. Returns None (not found)
        only when no store holds the identifier and its trailing segment
        is not a catalog key.
        """
        if session_id in self._pinned:
            session = self.volatile.get(session_id)
            if session is not None:
                return Resolution(session=session, tier=Tier.VOLATILE)

        if self.durable is not None:
            try:
                session = self.durable.get(session_id)
            except StoreError as exc:
                logger.warning("Durable lookup failed, trying memory: %s", exc)
                session = None
            if session is not None:
                return Resolution(session=session, tier=Tier.DURABLE)

        session = self.volatile.get(session_id)
        if session is not None:
            return Resolution(session=session, tier=Tier.VOLATILE)

        decoded = decode_session_id(session_id, self.catalog)
        if not decoded.ok:
            logger.debug("Session %s not found: %s", session_id, decoded.reason)
            return None

        logger.info(
            "Session %s not in any store, recovered from identifier (degraded)",
            session_id,
        )
        return Resolution(
            session=Session(
                session_id=session_id,
                imposter_id=decoded.imposter_id,
                player_name=DEFAULT_PLAYER_NAME,
                started_at=RECOVERED_STARTED_AT,
                degraded=True,
            ),
            tier=Tier.STATELESS,
        )

    def update(self, resolution: Resolution) -> Resolution:
        """
        Write a resolved session back to the tier that owns it.

        Returns the resolution as it now stands (a stateless or failed
        durable write moves ownership to the volatile tier; a pinned round
        moves back to the durable tier once a durable write succeeds).
        """
        session = resolution.session
        pinned = session.session_id in self._pinned

        if self.durable is not None and (resolution.tier == Tier.DURABLE or pinned):
            try:
                self.durable.put(session)
            except StoreError as exc:
                logger.warning(
                    "Durable update failed for %s, keeping it in memory: %s",
                    session.session_id, exc,
                )
                self._pinned.add(session.session_id)
            else:
                if pinned:
                    logger.info("Durable store caught up with %s", session.session_id)
                    self._pinned.discard(session.session_id)
                    self.volatile.discard(session.session_id)
                return Resolution(session=session, tier=Tier.DURABLE)

        if resolution.tier == Tier.STATELESS:
            logger.info("Promoting recovered session %s into memory", session.session_id)

        self.volatile.put(session)
        return Resolution(session=session, tier=Tier.VOLATILE)

    def is_pinned(self, session_id: str) -> bool:
        """Whether memory holds a newer copy than the durable store."""
        return session_id in self._pinned

    def cleanup(self, now: datetime | None = None) -> list[str]:
        """Evict finished rounds older than the configured TTL (0 disables)."""
        if self.session_ttl <= 0:
            return []
        return self.volatile.evict_older_than(
            self.session_ttl, now=now or utc_now(), keep=self._pinned
        )

    def _durable_ready(self) -> bool:
        return self.durable is not None and self.durable.is_available()
