"""
Strategy Comparison Library for the Resource Allocation Simulator.

Called by simulator.py when all allocation strategies run side by side.
This is a library module, not a standalone CLI tool.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence

from models.memory import BlockLike, ProcessLike, coerce_blocks, coerce_processes
from models.results import AllocationResult


@dataclass
class StrategySummary:
    """Fragmentation and placement figures for one strategy."""
    key: str
    algorithm: str
    internal_fragmentation: int  # Sum over blocks
    external_fragmentation: int
    total_fragmentation: int
    allocated_count: int
    unallocated_count: int
    memory_utilization: float  # % of total block capacity occupied by processes

    def display(self) -> str:
        """Format results for display."""
        result = f"\nStrategy: {self.algorithm}\n"
        result += f"  Allocated: {self.allocated_count}, Unallocated: {self.unallocated_count}\n"
        result += (
            f"  Fragmentation: internal={self.internal_fragmentation}, "
            f"external={self.external_fragmentation}, total={self.total_fragmentation}\n"
        )
        result += f"  Memory Utilization: {self.memory_utilization:.2f}%"
        return result


def compare_strategies(
    results: Dict[str, AllocationResult],
    memory_blocks: Sequence[BlockLike],
    processes: Sequence[ProcessLike]
) -> List[StrategySummary]:
    """
    Summarise each strategy's result.

    Args:
        results: Output of run_all_algorithms (or any subset of it)
        memory_blocks: Blocks the strategies ran on
        processes: Processes the strategies ran on

    Returns:
        One StrategySummary per result, in the order of ``results``
    """
    blocks = coerce_blocks(memory_blocks)
    procs = coerce_processes(processes)
    total_capacity = sum(block.size for block in blocks)

    summaries = []
    for key, result in results.items():
        used = sum(
            procs[i].size for i, block_index in enumerate(result.allocation)
            if block_index is not None
        )
        utilization = (used / total_capacity) * 100 if total_capacity > 0 else 0.0

        summaries.append(StrategySummary(
            key=key,
            algorithm=result.algorithm,
            internal_fragmentation=result.total_internal_fragmentation,
            external_fragmentation=result.external_fragmentation,
            total_fragmentation=result.total_fragmentation,
            allocated_count=result.allocated_count,
            unallocated_count=len(result.unallocated_processes),
            memory_utilization=utilization
        ))

    return summaries


def rank_strategies(summaries: List[StrategySummary]) -> List[StrategySummary]:
    """
    Order strategies from best to worst.

    Fewer unallocated processes first, then lower total fragmentation; ties
    keep the input order.
    """
    return sorted(summaries, key=lambda s: (s.unallocated_count, s.total_fragmentation))


def format_comparison_table(summaries: List[StrategySummary]) -> str:
    """
    Build a fixed-width table: strategy x fragmentation figures.
    """
    header = (
        f"{'Strategy':<12} {'Internal':>9} {'External':>9} {'Total':>7} "
        f"{'Placed':>7} {'Unplaced':>9} {'Util %':>7}"
    )
    lines = [header, "-" * len(header)]
    for s in summaries:
        lines.append(
            f"{s.algorithm:<12} {s.internal_fragmentation:>9} {s.external_fragmentation:>9} "
            f"{s.total_fragmentation:>7} {s.allocated_count:>7} {s.unallocated_count:>9} "
            f"{s.memory_utilization:>7.2f}"
        )

    if summaries:
        best = rank_strategies(summaries)[0]
        lines.append("")
        lines.append(f"Best strategy for this input: {best.algorithm}")
    return "\n".join(lines)
