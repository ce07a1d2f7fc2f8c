"""
Imposter Assignment - Chooses the round's secret and encodes it.

Session identifiers have the form <opaque>-<imposterId>. The opaque part
is a uuid4 hex string (no '-' in its alphabet), so the imposter is always
the segment after the last '-'. This lets a round be recovered from its
identifier alone when no storage tier holds it.

The encoding is NOT a security boundary: a player who reads their own
session identifier can see the answer.
"""

from __future__ import annotations
from dataclasses import dataclass
import random
import uuid

from ..catalog import Catalog


DELIMITER = "-"


@dataclass(frozen=True)
class DecodedSessionId:
    """Result of decoding a session identifier."""
    ok: bool
    imposter_id: str | None = None
    reason: str | None = None


def assign_imposter(catalog: Catalog, rng: random.Random | None = None) -> str:
    """Pick one character uniformly at random. Rounds are independent."""
    chooser = rng or random
    return chooser.choice(catalog.ids)


def new_session_id(imposter_id: str) -> str:
    """Build an identifier that embeds the imposter."""
    return f"{uuid.uuid4().hex}{DELIMITER}{imposter_id}"


def decode_session_id(session_id: str, catalog: Catalog) -> DecodedSessionId:
    """
    Recover the imposter from a session identifier.

    Fails unless the identifier has a non-empty opaque part and its final
    segment is a catalog key.
    """
    if not session_id or DELIMITER not in session_id:
        return DecodedSessionId(ok=False, reason="identifier has no imposter segment")

    opaque, _, imposter_id = session_id.rpartition(DELIMITER)
    if not opaque:
        return DecodedSessionId(ok=False, reason="identifier has no opaque segment")
    if imposter_id not in catalog:
        return DecodedSessionId(
            ok=False, reason=f"'{imposter_id}' is not a known character"
        )

    return DecodedSessionId(ok=True, imposter_id=imposter_id)
