"""Synthetic candidates and wildcard signatures."""

from __future__ import annotations

import random
import string
import time
from typing import Iterable, Optional

from wordbuster.core.models import BaselineSignature, ProbeOutcome, Success

WILDCARD_PREFIX = "wordbuster-wildcard-test-"
TOKEN_LENGTH = 16

_ALPHABET = string.ascii_lowercase + string.digits


def random_token(length: int = TOKEN_LENGTH, seed: Optional[int] = None) -> str:
    """Return a pseudo-random lowercase alphanumeric token.

    Seeded from the wall clock; unpredictability is irrelevant, the prefix
    and length keep collisions with real content improbable.
    """
    rng = random.Random(time.time_ns() if seed is None else seed)
    return "".join(rng.choice(_ALPHABET) for _ in range(length))


def synthetic_word(length: int = TOKEN_LENGTH) -> str:
    """A word that should not exist on any target."""
    return f"{WILDCARD_PREFIX}{random_token(length)}"


def signature_from(outcomes: Iterable[ProbeOutcome]) -> BaselineSignature:
    """Build a signature from the interesting synthetic outcomes."""
    responses: set[tuple[int, int]] = set()
    addresses: set[str] = set()

    for outcome in outcomes:
        if not isinstance(outcome, Success):
            continue
        if outcome.status_code is not None and outcome.byte_size is not None:
            responses.add((outcome.status_code, outcome.byte_size))
        addresses.update(outcome.resolved_addresses)

    return BaselineSignature(
        responses=frozenset(responses),
        addresses=frozenset(addresses),
    )
