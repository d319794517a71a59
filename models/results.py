"""
Result models for the Resource Allocation Simulator.

Structured outcomes returned by the engine and handed to renderers.
Every result offers ``to_dict()`` for external renderers and
``display()`` for the text renderer used by the command line.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

from models.banker_state import InputValidationError
from models.memory import MemoryBlock, MemoryProcess


class DenialReason(Enum):
    """Why a resource request was not granted."""
    EXCEEDS_MAXIMUM_CLAIM = "exceeds maximum claim"
    RESOURCES_NOT_AVAILABLE = "resources not available"
    UNSAFE_STATE = "resulting state would be unsafe"


def _format_sequence(pids: Sequence[int]) -> str:
    return " -> ".join(f"P{pid}" for pid in pids)


@dataclass
class SafetyResult:
    """
    Outcome of the Banker's safety algorithm.

    Attributes:
        safe: True if every process can finish
        safe_sequence: Finishing order (empty when unsafe)
        unfinished_processes: Processes that could not finish, ascending (empty when safe)
    """
    safe: bool
    safe_sequence: List[int] = field(default_factory=list)
    unfinished_processes: List[int] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'safe': self.safe,
            'safe_sequence': list(self.safe_sequence),
            'unfinished_processes': list(self.unfinished_processes)
        }

    def __str__(self) -> str:
        if self.safe:
            return f"SAFE (sequence: {_format_sequence(self.safe_sequence)})"
        pids = ", ".join(f"P{pid}" for pid in self.unfinished_processes)
        return f"UNSAFE (processes that could lead to deadlock: {pids})"


@dataclass
class ResourceRequest:
    """A single request event: process ``process_id`` asks for ``request``."""
    process_id: int
    request: List[int]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ResourceRequest":
        """
        Build from ``{"process_id"|"processId", "request"}``.

        Raises:
            InputValidationError: If the mapping lacks either field or the
                request vector is not a sequence
        """
        if not isinstance(data, Mapping):
            raise InputValidationError(f"malformed request: expected a mapping, got {data!r}")
        if 'process_id' in data:
            process_id = data['process_id']
        elif 'processId' in data:
            process_id = data['processId']
        else:
            raise InputValidationError("malformed request: missing 'process_id'")
        if 'request' not in data:
            raise InputValidationError("malformed request: missing 'request'")
        try:
            vector = list(data['request'])
        except TypeError:
            raise InputValidationError(
                f"malformed request: 'request' must be a list, got {data['request']!r}"
            )
        return cls(process_id=process_id, request=vector)


@dataclass
class RequestResult:
    """
    Outcome of the resource-request algorithm for one request.

    Attributes:
        process_id: Requesting process
        request: Requested amount per resource type
        granted: Whether the request can be granted immediately
        reason: Denial reason (None when granted)
        resource_index: First offending resource type for claim/availability denials
        safe_sequence: Safe sequence of the resulting state (granted only)
        unsafe_processes: Processes that could not finish (unsafe denials only)
    """
    process_id: int
    request: List[int]
    granted: bool
    reason: Optional[DenialReason] = None
    resource_index: Optional[int] = None
    safe_sequence: Optional[List[int]] = None
    unsafe_processes: Optional[List[int]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'process_id': self.process_id,
            'request': list(self.request),
            'granted': self.granted
        }
        if self.reason is not None:
            data['reason'] = self.reason.value
        if self.resource_index is not None:
            data['resource_index'] = self.resource_index
        if self.safe_sequence is not None:
            data['safe_sequence'] = list(self.safe_sequence)
        if self.unsafe_processes is not None:
            data['unsafe_processes'] = list(self.unsafe_processes)
        return data

    def describe(self) -> str:
        """Reason string used in logs: decision detail without the verdict."""
        if self.granted:
            return f"safe state maintained, sequence: {_format_sequence(self.safe_sequence or [])}"
        if self.reason is DenialReason.UNSAFE_STATE:
            pids = ", ".join(f"P{pid}" for pid in self.unsafe_processes or [])
            return f"{self.reason.value}: {pids}"
        return f"{self.reason.value} (R{self.resource_index})"

    def __str__(self) -> str:
        status = "GRANTED" if self.granted else "DENIED"
        return f"P{self.process_id} requests {list(self.request)} - {status} ({self.describe()})"


@dataclass
class SimulationResult:
    """
    Outcome of a Banker's simulation: initial verdict plus per-request results.

    ``final_available`` and ``final_allocation`` hold the committed state after
    replaying every request (unchanged from the inputs when nothing was granted).
    """
    initial_state: SafetyResult
    request_results: List[RequestResult] = field(default_factory=list)
    final_available: List[int] = field(default_factory=list)
    final_allocation: List[List[int]] = field(default_factory=list)

    @property
    def granted_count(self) -> int:
        return sum(1 for r in self.request_results if r.granted)

    @property
    def denied_count(self) -> int:
        return len(self.request_results) - self.granted_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            'initial_state': self.initial_state.to_dict(),
            'request_results': [r.to_dict() for r in self.request_results],
            'final_available': list(self.final_available),
            'final_allocation': [list(row) for row in self.final_allocation]
        }

    def display(self) -> str:
        """Format the initial verdict and each request outcome for display."""
        output = [f"Initial State: {self.initial_state}"]
        if not self.initial_state.safe:
            output.append("Requests not evaluated: initial state is unsafe")
            return "\n".join(output)

        if self.request_results:
            output.append("\nRequest Results:")
            for index, result in enumerate(self.request_results, start=1):
                output.append(f"  #{index}: {result}")
            output.append(
                f"\n  Granted: {self.granted_count}, Denied: {self.denied_count}"
            )
        output.append(f"\nFinal Available: {list(self.final_available)}")
        return "\n".join(output)


@dataclass
class AllocationResult:
    """
    Outcome of one contiguous allocation strategy.

    Attributes:
        algorithm: Strategy display name ("First Fit", ...)
        allocation: Per process, index of the chosen block or None
        internal_fragmentation: Per block, unused space inside the block (0 if unused)
        external_fragmentation: Free space in blocks too small for the largest
            unallocated process
        total_fragmentation: Sum of internal fragmentation plus external fragmentation
        unallocated_processes: Ids of processes that got no block
    """
    algorithm: str
    allocation: List[Optional[int]]
    internal_fragmentation: List[int]
    external_fragmentation: int
    total_fragmentation: int
    unallocated_processes: List[int]

    @property
    def total_internal_fragmentation(self) -> int:
        return sum(self.internal_fragmentation)

    @property
    def allocated_count(self) -> int:
        return sum(1 for block_index in self.allocation if block_index is not None)

    def block_assignments(self) -> Dict[int, int]:
        """Map block index -> index of the process placed in it."""
        return {
            block_index: process_index
            for process_index, block_index in enumerate(self.allocation)
            if block_index is not None
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'algorithm': self.algorithm,
            'allocation': list(self.allocation),
            'internal_fragmentation': list(self.internal_fragmentation),
            'external_fragmentation': self.external_fragmentation,
            'total_fragmentation': self.total_fragmentation,
            'unallocated_processes': list(self.unallocated_processes)
        }

    def display(self, blocks: Sequence[MemoryBlock], processes: Sequence[MemoryProcess]) -> str:
        """
        Render a memory map for this result.

        Args:
            blocks: The blocks the strategy ran on (initial sizes)
            processes: The processes the strategy ran on

        Returns:
            Formatted string with block usage, process placement and totals
        """
        output = [f"\n{self.algorithm}", "-"*40, "Memory Blocks:"]
        assignments = self.block_assignments()
        for block_index, block in enumerate(blocks):
            if block_index in assignments:
                process = processes[assignments[block_index]]
                output.append(
                    f"  Block {block.id} [{block.size}]: P{process.id} uses {process.size}, "
                    f"{self.internal_fragmentation[block_index]} free"
                )
            else:
                output.append(f"  Block {block.id} [{block.size}]: free")

        output.append("Processes:")
        for process, block_index in zip(processes, self.allocation):
            if block_index is None:
                output.append(f"  P{process.id} ({process.size}): not allocated")
            else:
                output.append(f"  P{process.id} ({process.size}): Block {blocks[block_index].id}")

        output.append(f"Internal Fragmentation: {self.total_internal_fragmentation} units")
        output.append(f"External Fragmentation: {self.external_fragmentation} units")
        output.append(f"Total Fragmentation: {self.total_fragmentation} units")
        return "\n".join(output)
