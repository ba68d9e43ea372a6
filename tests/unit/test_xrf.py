"""Tests for xrf key generation."""

import random

from task_trigger.xrf import XRF_ALPHABET, make_xrf_key


def test_key_has_sixteen_lowercase_alphanumerics() -> None:
    """Generates 16 characters from [a-z0-9]."""
    key = make_xrf_key()

    assert len(key) == 16
    assert set(key) <= set(XRF_ALPHABET)


def test_keys_are_fresh_per_call() -> None:
    """Consecutive calls on one source produce different keys."""
    rng = random.Random(7)

    keys = {make_xrf_key(rng) for _ in range(20)}

    assert len(keys) == 20


def test_injected_source_is_deterministic() -> None:
    """Same seed gives the same sequence of keys."""
    first = [make_xrf_key(random.Random(1234)) for _ in range(2)]
    second = [make_xrf_key(random.Random(1234)) for _ in range(2)]

    assert first == second
