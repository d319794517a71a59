"""
Deadlock Avoidance Algorithm (Banker's Algorithm) for the Simulator.

Implements the safety algorithm and the resource-request algorithm as pure
functions over snapshots; caller data is never modified.
"""

import numpy as np
from typing import List, Sequence

from models.banker_state import BankerState
from models.results import DenialReason, RequestResult, SafetyResult


def check_safety(state: BankerState) -> SafetyResult:
    """
    Check if a snapshot is in a safe state using Banker's Algorithm.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_processes
    2. Scan processes in ascending id; whenever Finish[i] == False and
       Need[i] <= Work, finish it at once: Work += Allocation[i],
       Finish[i] = True, append i to the sequence, then keep scanning
       from i + 1 in the same pass
    3. Repeat passes until all processes finish (SAFE) or a whole pass
       finishes nobody (UNSAFE)

    The scan order makes the safe sequence deterministic when several exist.

    Time Complexity: O(P²×R)

    Args:
        state: Snapshot to evaluate

    Returns:
        SafetyResult with the safe sequence, or the unfinished processes

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 7.5: Deadlock Avoidance.
    """
    need = state.need_matrix
    work = state.available.copy()
    finish = np.zeros(state.num_processes, dtype=bool)
    safe_sequence = []

    while len(safe_sequence) < state.num_processes:
        found = False

        for i in range(state.num_processes):
            if finish[i]:
                continue

            if np.all(need[i] <= work):
                # Process can run to completion and return everything it holds
                work += state.allocation[i]
                finish[i] = True
                safe_sequence.append(i)
                found = True

        if not found:
            unfinished = [i for i in range(state.num_processes) if not finish[i]]
            return SafetyResult(safe=False, safe_sequence=[], unfinished_processes=unfinished)

    return SafetyResult(safe=True, safe_sequence=safe_sequence, unfinished_processes=[])


def is_safe_state(
    available: Sequence[int],
    max_demand: Sequence[Sequence[int]],
    allocation: Sequence[Sequence[int]]
) -> SafetyResult:
    """
    Safety check over plain vectors and matrices.

    Args:
        available: [R] Free resource instances
        max_demand: [P][R] Maximum claim per process
        allocation: [P][R] Current allocation per process

    Returns:
        SafetyResult

    Raises:
        InputValidationError: If the inputs are malformed
    """
    return check_safety(BankerState.from_lists(available, max_demand, allocation))


def arbitrate_request(state: BankerState, process_id: int, request: Sequence[int]) -> RequestResult:
    """
    Decide whether a request can be granted immediately.

    Steps (first failure wins):
    1. Validate: request <= need (otherwise the process exceeded its claim)
    2. Check: request <= available
    3. Tentatively allocate on a new snapshot
    4. Run the safety algorithm on the tentative snapshot; grant if safe

    Claim and availability checks always run before the safety check.

    Args:
        state: Current snapshot (left untouched)
        process_id: Requesting process
        request: Amount requested per resource type

    Returns:
        RequestResult describing the decision

    Raises:
        InputValidationError: If the process id or request vector is malformed
    """
    request_arr = state.validate_request(process_id, request)
    request_list = request_arr.tolist()
    need = state.need_matrix[process_id]

    # Step 1: request must stay within the remaining claim
    exceeded = np.flatnonzero(request_arr > need)
    if exceeded.size > 0:
        return RequestResult(
            process_id=process_id,
            request=request_list,
            granted=False,
            reason=DenialReason.EXCEEDS_MAXIMUM_CLAIM,
            resource_index=int(exceeded[0])
        )

    # Step 2: resources must be free right now
    missing = np.flatnonzero(request_arr > state.available)
    if missing.size > 0:
        return RequestResult(
            process_id=process_id,
            request=request_list,
            granted=False,
            reason=DenialReason.RESOURCES_NOT_AVAILABLE,
            resource_index=int(missing[0])
        )

    # Step 3-4: pretend to allocate, then check safety
    tentative = state.with_request(process_id, request_arr)
    safety = check_safety(tentative)

    if safety.safe:
        return RequestResult(
            process_id=process_id,
            request=request_list,
            granted=True,
            safe_sequence=safety.safe_sequence
        )

    return RequestResult(
        process_id=process_id,
        request=request_list,
        granted=False,
        reason=DenialReason.UNSAFE_STATE,
        unsafe_processes=safety.unfinished_processes
    )


def resource_request(
    available: Sequence[int],
    max_demand: Sequence[Sequence[int]],
    allocation: Sequence[Sequence[int]],
    process_id: int,
    request: Sequence[int]
) -> RequestResult:
    """
    Resource-request algorithm over plain vectors and matrices.

    See ``arbitrate_request``. The caller's lists are copied, so a denied or
    granted request never shows up in them; committing a grant is the
    caller's decision.
    """
    state = BankerState.from_lists(available, max_demand, allocation)
    return arbitrate_request(state, process_id, request)


def need_matrix(
    max_demand: Sequence[Sequence[int]],
    allocation: Sequence[Sequence[int]]
) -> List[List[int]]:
    """Need = Max - Allocation, as plain lists."""
    max_arr = np.array(max_demand, dtype=int)
    alloc_arr = np.array(allocation, dtype=int)
    return (max_arr - alloc_arr).tolist()
