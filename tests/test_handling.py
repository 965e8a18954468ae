from __future__ import annotations

import numpy as np
import pytest

from cardpairs.data.requests import build_parameters
from cardpairs.errors import MalformedInput
from cardpairs.solutions.handling import (
    build_activity_index,
    check_constraints,
    compare_solutions,
    decode_pairings,
    evaluate_solution,
    participant_dataframe,
    solution_report,
)


def test_decode_applies_threshold_and_orders_pairs() -> None:
    x = np.array([
        [0.0, 0.9999998, 0.0],
        [0.0, 0.0, 0.95],
        [0.9, 0.89, 0.0],
    ])

    assert decode_pairings(x, 3) == ((0, 1), (1, 2), (2, 0))


def test_decode_never_returns_self_pairs() -> None:
    assert decode_pairings(np.ones((3, 3)), 3) == ((0, 1), (0, 2), (1, 0), (1, 2), (2, 0), (2, 1))


def test_decode_accepts_flat_values() -> None:
    assert decode_pairings([0, 1, 1, 0], 2) == ((0, 1), (1, 0))


def test_decode_custom_threshold() -> None:
    assert decode_pairings([0, 0.6, 0.4, 0], 2, threshold=0.5) == ((0, 1),)


def test_decode_is_idempotent() -> None:
    x = np.random.default_rng(7).random((6, 6))
    first, second = decode_pairings(x, 6), decode_pairings(x, 6)

    assert first == second
    assert isinstance(first, tuple)


@pytest.mark.parametrize("values, N", [([0, 1, 0], 2), (np.zeros((3, 3)), 2), ([None, 1, 1, 0], 2), (["a"] * 4, 2)])
def test_decode_rejects_malformed_values(values, N) -> None:
    with pytest.raises(MalformedInput):
        decode_pairings(values, N)


def test_decode_empty_problem() -> None:
    assert decode_pairings([], 0) == ()


def test_activity_index_preserves_order_and_buckets_each_pair_once() -> None:
    pairings = ((0, 2), (0, 3), (1, 0), (2, 1), (3, 0))
    index = build_activity_index(pairings, 4)

    assert index["sends_by"] == [[2, 3], [0], [1], [0]]
    assert index["receives_by"] == [[1, 3], [2], [0], [0]]
    assert sum(len(bucket) for bucket in index["sends_by"]) == len(pairings)
    assert sum(len(bucket) for bucket in index["receives_by"]) == len(pairings)


def test_activity_index_rejects_out_of_range() -> None:
    with pytest.raises(MalformedInput):
        build_activity_index(((0, 3),), 3)


def test_check_constraints_valid_cycle() -> None:
    assert check_constraints(((0, 1), (1, 2), (2, 0)), [1, 1, 1]) == []


def test_check_constraints_reports_each_rule() -> None:
    failures = check_constraints(((0, 0), (1, 2), (2, 1), (1, 3)), [1, 1, 1, 1])
    text = "\n".join(failures)

    assert "Participant 0 sends a card to themself." in failures
    assert "Participants 1 and 2 send cards to each other." in failures
    assert "Participant 1 sends 2 cards but requested 1." in failures
    assert "sends 0 cards but receives 1" in text


def test_check_constraints_flags_lone_pairing() -> None:
    failures = check_constraints(((0, 1),), [1, 1])

    assert "Participant 0 sends 1 cards but receives 0." in failures
    assert "Participant 1 sends 0 cards but receives 1." in failures


def test_evaluate_solution_from_x_matrix() -> None:
    p = build_parameters([1, 2, 1])
    x = np.zeros((3, 3))
    x[0, 1] = x[1, 2] = x[2, 0] = 1.0
    solution = evaluate_solution({"method": "MILP", "x": x}, p)

    assert solution["pairings"] == ((0, 1), (1, 2), (2, 0))
    assert solution["sent_count"].tolist() == [1, 1, 1]
    assert solution["received_count"].tolist() == [1, 1, 1]
    assert solution["fulfilled"].tolist() == [True, False, True]
    assert solution["num_pairings"] == 3
    assert solution["num_fulfilled"] == 2
    assert solution["failed_constraints"] == []


def test_evaluate_solution_from_pairings_flags_violations(capsys) -> None:
    p = build_parameters([1, 1])
    solution = evaluate_solution({"method": "Added", "pairings": [(0, 1)]}, p, printing=True)

    assert solution["total_failed_constraints"] == 2
    assert "WARNING. Solution breaks 2 constraint(s):" in capsys.readouterr().out


def test_compare_solutions() -> None:
    assert compare_solutions([], []) == 1.0
    assert compare_solutions([(0, 1), (1, 0)], [(1, 0), (0, 1)]) == 1.0
    assert compare_solutions([(0, 1), (1, 0)], [(0, 1), (1, 2), (2, 0)]) == pytest.approx(0.25)
    assert compare_solutions([(0, 1)], [(1, 0)]) == 0.0


def test_solution_report_lines() -> None:
    p = build_parameters([1, 1, 2])
    solution = evaluate_solution({"method": "Added", "pairings": ((0, 1), (1, 2), (2, 0))}, p)

    assert solution_report(solution, p).splitlines() == [
        "Participant 0 requests 1 cards (actual sent: 1, received: 1)",
        "send: 1",
        "receive: 2",
        "Participant 1 requests 1 cards (actual sent: 1, received: 1)",
        "send: 2",
        "receive: 0",
        "Participant 2 requests 2 cards (actual sent: 1, received: 1)",
        "send: 0",
        "receive: 1",
        "Total number of participants: 3",
        "Total number of pairings: 3",
    ]


def test_solution_report_empty() -> None:
    p = build_parameters([0, 5])
    solution = evaluate_solution({"method": "Added", "pairings": ()}, p)

    assert solution_report(solution, p).splitlines() == [
        "Participant 0 requests 0 cards (actual sent: 0, received: 0)",
        "Participant 1 requests 5 cards (actual sent: 0, received: 0)",
        "Total number of participants: 2",
        "Total number of pairings: 0",
    ]


def test_participant_dataframe() -> None:
    p = build_parameters([2, 1, 1], sort_requests=True)
    solution = evaluate_solution({"method": "Added", "pairings": ((0, 1), (1, 2), (2, 0))}, p)
    df = participant_dataframe(solution, p)

    assert list(df["Participant"]) == [0, 1, 2]
    assert list(df["Original Position"]) == [1, 2, 0]
    assert list(df["Requested Cards"]) == [1, 1, 2]
    assert list(df["Cards Sent"]) == [1, 1, 1]
    assert list(df["Request Fulfilled"]) == [True, True, False]
    assert list(df["Sends To"]) == ["1", "2", "0"]
