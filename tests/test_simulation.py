"""
Simulation Driver Tests

Replays request sequences and checks that grants are committed between
requests, denials are not, and an unsafe start skips the replay.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.banker_state import BankerState, InputValidationError
from models.results import DenialReason, ResourceRequest
from simulator import run_simulation, simulate
from utils.logger import SimulatorLogger


AVAILABLE = [3, 3, 2]
MAX = [[7, 5, 3], [3, 2, 2], [9, 0, 2], [2, 2, 2], [4, 3, 3]]
ALLOCATION = [[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]]

TEXTBOOK_REQUESTS = [
    {'process_id': 1, 'request': [1, 0, 2]},
    {'process_id': 4, 'request': [3, 3, 0]},
    {'process_id': 0, 'request': [0, 2, 0]},
]


def test_textbook_replay():
    """
    1. P1 [1,0,2] granted
    2. P4 [3,3,0] denied: only [2,3,0] left after the first grant
    3. P0 [0,2,0] denied: would leave the system unsafe
    """
    result = run_simulation(AVAILABLE, MAX, ALLOCATION, TEXTBOOK_REQUESTS)

    print(f"\n{result.display()}")
    assert result.initial_state.safe
    assert [r.granted for r in result.request_results] == [True, False, False]

    second = result.request_results[1]
    assert second.reason is DenialReason.RESOURCES_NOT_AVAILABLE
    assert second.resource_index == 0

    third = result.request_results[2]
    assert third.reason is DenialReason.UNSAFE_STATE
    assert third.unsafe_processes == [0, 1, 2, 3, 4]

    assert result.final_available == [2, 3, 0]
    assert result.final_allocation[1] == [3, 0, 2]
    assert result.granted_count == 1
    assert result.denied_count == 2


def test_request_against_starting_state_would_be_granted():
    """Without the earlier grant, P0's request alone is safe: order matters."""
    result = run_simulation(AVAILABLE, MAX, ALLOCATION, [TEXTBOOK_REQUESTS[2]])
    assert result.request_results[0].granted


def test_replay_is_order_sensitive():
    available = [2]
    max_demand = [[2], [2]]
    allocation = [[0], [0]]
    p0_first = [ResourceRequest(0, [2]), ResourceRequest(1, [1])]
    p1_first = [ResourceRequest(1, [1]), ResourceRequest(0, [2])]

    a = run_simulation(available, max_demand, allocation, p0_first)
    b = run_simulation(available, max_demand, allocation, p1_first)

    assert [r.granted for r in a.request_results] == [True, False]
    assert [r.granted for r in b.request_results] == [True, False]
    assert a.final_allocation == [[2], [0]]
    assert b.final_allocation == [[0], [1]]


def test_denied_request_does_not_change_running_state():
    requests = [
        {'process_id': 0, 'request': [8, 0, 0]},  # exceeds claim
        {'process_id': 1, 'request': [1, 0, 2]},
    ]
    result = run_simulation(AVAILABLE, MAX, ALLOCATION, requests)

    assert result.request_results[0].reason is DenialReason.EXCEEDS_MAXIMUM_CLAIM
    # Second request sees the untouched starting state
    assert result.request_results[1].granted
    assert result.final_available == [2, 3, 0]


def test_unsafe_initial_state_skips_requests():
    result = run_simulation([0, 0, 0], [[1, 1, 1]], [[0, 0, 0]], [
        {'process_id': 0, 'request': [0, 0, 0]}
    ])
    assert not result.initial_state.safe
    assert result.initial_state.unfinished_processes == [0]
    assert result.request_results == []
    assert "Requests not evaluated" in result.display()


def test_no_requests():
    result = run_simulation(AVAILABLE, MAX, ALLOCATION)
    assert result.initial_state.safe
    assert result.request_results == []
    assert result.final_available == AVAILABLE
    assert result.final_allocation == ALLOCATION


def test_resources_are_conserved_across_replay():
    result = run_simulation(AVAILABLE, MAX, ALLOCATION, [
        {'process_id': 1, 'request': [1, 0, 2]},
        {'process_id': 3, 'request': [0, 1, 0]},
        {'process_id': 4, 'request': [2, 0, 0]},
    ])
    totals = [
        result.final_available[j] + sum(row[j] for row in result.final_allocation)
        for j in range(3)
    ]
    assert totals == [10, 5, 7]


def test_inputs_are_not_mutated():
    available = list(AVAILABLE)
    allocation = [row[:] for row in ALLOCATION]
    run_simulation(available, MAX, allocation, TEXTBOOK_REQUESTS)
    assert available == AVAILABLE
    assert allocation == ALLOCATION


def test_processid_alias_is_accepted():
    result = run_simulation(AVAILABLE, MAX, ALLOCATION, [{'processId': 1, 'request': [1, 0, 2]}])
    assert result.request_results[0].process_id == 1
    assert result.request_results[0].granted


def test_out_of_range_process_raises():
    with pytest.raises(InputValidationError):
        run_simulation(AVAILABLE, MAX, ALLOCATION, [{'process_id': 9, 'request': [0, 0, 0]}])


def test_to_dict_is_plain_data():
    data = run_simulation(AVAILABLE, MAX, ALLOCATION, TEXTBOOK_REQUESTS).to_dict()
    assert data['initial_state'] == {
        'safe': True,
        'safe_sequence': [1, 3, 4, 0, 2],
        'unfinished_processes': []
    }
    assert data['request_results'][2]['reason'] == "resulting state would be unsafe"
    assert data['final_available'] == [2, 3, 0]


def test_logger_records_each_decision(capsys):
    state = BankerState.from_lists(AVAILABLE, MAX, ALLOCATION)
    requests = [ResourceRequest.from_mapping(r) for r in TEXTBOOK_REQUESTS]

    logger = SimulatorLogger(verbose=True)
    simulate(state, requests, logger)
    logger.close()

    out = capsys.readouterr().out
    assert "Initial state: SAFE (sequence: P1 -> P3 -> P4 -> P0 -> P2)" in out
    assert "Request 1: P1 requests [1, 0, 2] - GRANTED" in out
    assert "Request 2: P4 requests [3, 3, 0] - DENIED (resources not available (R0))" in out
    assert "Request 3: P0 requests [0, 2, 0] - DENIED (resulting state would be unsafe" in out
    assert "conservation check" in out


def test_logger_warns_when_requests_are_skipped(capsys):
    state = BankerState.from_lists([0], [[1]], [[0]])
    simulate(state, [ResourceRequest(0, [0])], SimulatorLogger())

    out = capsys.readouterr().out
    assert "[WARNING] Skipping 1 request(s)" in out


@pytest.mark.parametrize("raw", [
    {'process_id': 0},
    {'request': [0, 0, 0]},
    {'process_id': 0, 'request': 5},
    [0, [0, 0, 0]],
])
def test_malformed_request_mapping_raises(raw):
    with pytest.raises(InputValidationError):
        run_simulation(AVAILABLE, MAX, ALLOCATION, [raw])
