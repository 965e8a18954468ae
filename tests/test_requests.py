from __future__ import annotations

import numpy as np
import pytest

from cardpairs.data.requests import build_parameters, parse_shorthand, validate_requests
from cardpairs.errors import MalformedInput


def test_validate_returns_read_only_int_array() -> None:
    requests = [2, 0, 3]
    result = validate_requests(requests)

    assert result.dtype.kind == "i"
    assert result.tolist() == [2, 0, 3]
    assert requests == [2, 0, 3]
    with pytest.raises(ValueError):
        result[0] = 5


def test_validate_accepts_integral_floats_and_numpy_ints() -> None:
    assert validate_requests([2.0, np.int64(3)]).tolist() == [2, 3]


def test_validate_empty_is_fine() -> None:
    assert validate_requests([]).tolist() == []


@pytest.mark.parametrize("bad", [[1, -1], [1.5], ["a"], [True], [[1, 2]], None, "12", [float("nan")]])
def test_validate_rejects_malformed(bad) -> None:
    with pytest.raises(MalformedInput):
        validate_requests(bad)


def test_malformed_input_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        validate_requests([-3])


def test_parse_shorthand_expands_tokens() -> None:
    assert parse_shorthand(["3"]) == [3]
    assert parse_shorthand(["3x4"]) == [3, 3, 3, 3]
    assert parse_shorthand(["1x3", "2x3", "3x4"]) == [1, 1, 1, 2, 2, 2, 3, 3, 3, 3]


def test_parse_shorthand_splits_whitespace_and_allows_zero_count() -> None:
    assert parse_shorthand(["2x2 5", "4x0"]) == [2, 2, 5]


@pytest.mark.parametrize("token", ["x3", "3x", "ax2", "2xb", "2x-1", "1.5"])
def test_parse_shorthand_rejects_bad_tokens(token: str) -> None:
    with pytest.raises(MalformedInput) as excinfo:
        parse_shorthand([token])
    assert token in str(excinfo.value)


def test_build_parameters_keeps_order_by_default() -> None:
    p = build_parameters([3, 1, 2])

    assert p["N"] == 3
    assert p["I"].tolist() == [0, 1, 2]
    assert p["requests"].tolist() == [3, 1, 2]
    assert p["order"].tolist() == [0, 1, 2]


def test_build_parameters_sorts_stably() -> None:
    p = build_parameters([3, 1, 2, 1], sort_requests=True)

    assert p["requests"].tolist() == [1, 1, 2, 3]
    assert p["order"].tolist() == [1, 3, 2, 0]
    assert not p["requests"].flags.writeable
