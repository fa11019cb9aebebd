from __future__ import annotations

import pytest

from src.challenges.abstract import LEVELS, Challenge
from src.challenges.registry import available_challenges, challenges_by_level, get_challenge
from src.exceptions import UnknownChallengeError

EXPECTED_CHALLENGES = 32
CHALLENGES_PER_LEVEL = 4


def test_every_level_has_four_challenges() -> None:
    keys = available_challenges()
    assert len(keys) == EXPECTED_CHALLENGES
    assert keys[0] == "1.1"
    assert keys[-1] == "8.4"

    grouped = challenges_by_level()
    assert sorted(grouped) == sorted(LEVELS)
    assert all(len(group) == CHALLENGES_PER_LEVEL for group in grouped.values())


def test_keys_sort_numerically() -> None:
    keys = available_challenges()
    assert keys == sorted(keys, key=lambda key: tuple(int(part) for part in key.split(".")))


def test_level_filter() -> None:
    assert available_challenges(3) == ["3.1", "3.2", "3.3", "3.4"]
    assert available_challenges(9) == []


def test_get_challenge_carries_default_params() -> None:
    challenge = get_challenge("6.4")
    assert isinstance(challenge, Challenge)
    assert challenge.level == 6
    assert challenge.level_title == "Advanced Queries"
    assert challenge.params == {"names": ("Ruby", "Rails")}


def test_unknown_challenge_is_a_key_error() -> None:
    with pytest.raises(UnknownChallengeError, match="Unknown challenge '9.9'") as exc:
        get_challenge("9.9")
    assert isinstance(exc.value, KeyError)
    assert exc.value.key == "9.9"
    assert "1.1" in exc.value.available


def test_run_merges_overrides_into_params() -> None:
    seen = {}

    def solve(session, **params):
        seen.update(params)
        return params

    challenge = Challenge("2.1", "Posts by author", solve, {"email": "john@example.com"})
    challenge.run(None, email="jane@example.com", limit=2)

    assert seen == {"email": "jane@example.com", "limit": 2}
