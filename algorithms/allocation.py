"""
Contiguous Memory Allocation Algorithms for the Simulator.

Implements First Fit, Next Fit, Best Fit and Worst Fit placement over a set
of fixed-size blocks. Each block holds at most one process per run: once a
block is chosen its remaining capacity is treated as used up.
"""

from typing import Callable, Dict, List, Optional, Sequence

from models.memory import BlockLike, ProcessLike, coerce_blocks, coerce_processes
from models.results import AllocationResult


# selector(capacities, size, start) -> chosen block index or None
Selector = Callable[[List[int], int, int], Optional[int]]


def _select_first(capacities: List[int], size: int, start: int) -> Optional[int]:
    for j, capacity in enumerate(capacities):
        if capacity >= size:
            return j
    return None


def _select_next(capacities: List[int], size: int, start: int) -> Optional[int]:
    num_blocks = len(capacities)
    j = start
    for _ in range(num_blocks):
        if capacities[j] >= size:
            return j
        j = (j + 1) % num_blocks
    return None


def _select_best(capacities: List[int], size: int, start: int) -> Optional[int]:
    best_index = None
    for j, capacity in enumerate(capacities):
        # Strict comparison keeps the lowest index on ties
        if capacity >= size and (best_index is None or capacity < capacities[best_index]):
            best_index = j
    return best_index


def _select_worst(capacities: List[int], size: int, start: int) -> Optional[int]:
    worst_index = None
    for j, capacity in enumerate(capacities):
        if capacity >= size and (worst_index is None or capacity > capacities[worst_index]):
            worst_index = j
    return worst_index


def external_fragmentation(capacities: Sequence[int], unallocated_sizes: Sequence[int]) -> int:
    """
    Free space too small to hold the largest unallocated process.

    Args:
        capacities: Remaining capacity per block at the end of a run
        unallocated_sizes: Sizes of the processes that got no block

    Returns:
        Sum of remaining capacities that are > 0 and smaller than the largest
        unallocated size; 0 when every process was placed
    """
    if not unallocated_sizes:
        return 0
    largest = max(unallocated_sizes)
    return sum(capacity for capacity in capacities if 0 < capacity < largest)


def _run_strategy(
    name: str,
    select: Selector,
    memory_blocks: Sequence[BlockLike],
    processes: Sequence[ProcessLike]
) -> AllocationResult:
    """
    Place processes in input order using ``select`` to pick each block.

    Works on a local list of capacities; the caller's blocks are not touched.
    ``start`` passed to the selector is the index just after the last block
    chosen (0 before the first allocation).
    """
    blocks = coerce_blocks(memory_blocks)
    procs = coerce_processes(processes)

    capacities = [block.size for block in blocks]
    allocation: List[Optional[int]] = [None] * len(procs)
    internal = [0] * len(blocks)
    start = 0

    if capacities:
        for i, process in enumerate(procs):
            j = select(capacities, process.size, start)
            if j is None:
                continue
            allocation[i] = j
            internal[j] = capacities[j] - process.size
            capacities[j] = 0
            start = (j + 1) % len(capacities)

    unallocated = [p for p, block_index in zip(procs, allocation) if block_index is None]
    external = external_fragmentation(capacities, [p.size for p in unallocated])

    return AllocationResult(
        algorithm=name,
        allocation=allocation,
        internal_fragmentation=internal,
        external_fragmentation=external,
        total_fragmentation=sum(internal) + external,
        unallocated_processes=[p.id for p in unallocated]
    )


def first_fit(memory_blocks: Sequence[BlockLike], processes: Sequence[ProcessLike]) -> AllocationResult:
    """
    First Fit: place each process in the first block large enough for it.
    """
    return _run_strategy("First Fit", _select_first, memory_blocks, processes)


def next_fit(memory_blocks: Sequence[BlockLike], processes: Sequence[ProcessLike]) -> AllocationResult:
    """
    Next Fit: like First Fit, but each search resumes right after the block
    used by the previous successful allocation, wrapping around and giving
    up after one full lap.
    """
    return _run_strategy("Next Fit", _select_next, memory_blocks, processes)


def best_fit(memory_blocks: Sequence[BlockLike], processes: Sequence[ProcessLike]) -> AllocationResult:
    """
    Best Fit: place each process in the smallest block large enough for it
    (lowest index wins ties).
    """
    return _run_strategy("Best Fit", _select_best, memory_blocks, processes)


def worst_fit(memory_blocks: Sequence[BlockLike], processes: Sequence[ProcessLike]) -> AllocationResult:
    """
    Worst Fit: place each process in the largest block large enough for it
    (lowest index wins ties).
    """
    return _run_strategy("Worst Fit", _select_worst, memory_blocks, processes)


ALGORITHMS: Dict[str, Callable[[Sequence[BlockLike], Sequence[ProcessLike]], AllocationResult]] = {
    'first_fit': first_fit,
    'next_fit': next_fit,
    'best_fit': best_fit,
    'worst_fit': worst_fit,
}


def run_all_algorithms(
    memory_blocks: Sequence[BlockLike],
    processes: Sequence[ProcessLike]
) -> Dict[str, AllocationResult]:
    """
    Run every strategy on the same inputs.

    Returns:
        Dict keyed by strategy key ('first_fit', 'next_fit', 'best_fit',
        'worst_fit'), in that order
    """
    return {key: algorithm(memory_blocks, processes) for key, algorithm in ALGORITHMS.items()}
