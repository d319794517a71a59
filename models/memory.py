"""
Memory models for the Resource Allocation Simulator.

Represents fixed-size memory blocks and the processes placed into them by
the contiguous allocation strategies.
"""

import numpy as np
from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence, Union

from models.banker_state import InputValidationError


def _check_size(kind: str, item_id: int, size: int) -> None:
    if isinstance(size, (bool, np.bool_)) or not isinstance(size, (int, np.integer)):
        raise InputValidationError(f"{kind} {item_id}: size must be an integer, got {size!r}")
    if size <= 0:
        raise InputValidationError(f"{kind} {item_id}: size must be positive, got {size}")


@dataclass(frozen=True)
class MemoryBlock:
    """
    A contiguous memory partition.

    Attributes:
        id: Block identifier (as entered by the user)
        size: Capacity in memory units

    Invariant:
        size > 0
    """
    id: int
    size: int

    def __post_init__(self):
        """Validate block size and store it as a plain int."""
        _check_size("Block", self.id, self.size)
        object.__setattr__(self, 'size', int(self.size))


@dataclass(frozen=True)
class MemoryProcess:
    """
    A process requesting a single contiguous region of memory.

    Not related to the Banker's Algorithm processes; only the name is shared.

    Attributes:
        id: Process identifier
        size: Memory demand in memory units
    """
    id: int
    size: int

    def __post_init__(self):
        """Validate process size and store it as a plain int."""
        _check_size("Process", self.id, self.size)
        object.__setattr__(self, 'size', int(self.size))


BlockLike = Union[MemoryBlock, Mapping[str, Any]]
ProcessLike = Union[MemoryProcess, Mapping[str, Any]]


def _coerce(items: Sequence, cls, kind: str) -> List:
    records = []
    for position, item in enumerate(items):
        if isinstance(item, cls):
            records.append(item)
            continue
        if not isinstance(item, Mapping):
            raise InputValidationError(f"{kind} #{position}: expected a mapping with 'id' and 'size'")
        if 'size' not in item:
            raise InputValidationError(f"{kind} #{position}: missing 'size'")
        records.append(cls(id=item.get('id', position), size=item['size']))
    return records


def coerce_blocks(blocks: Sequence[BlockLike]) -> List[MemoryBlock]:
    """Normalise block records (dataclasses or ``{"id", "size"}`` mappings)."""
    return _coerce(blocks, MemoryBlock, "Block")


def coerce_processes(processes: Sequence[ProcessLike]) -> List[MemoryProcess]:
    """Normalise process records (dataclasses or ``{"id", "size"}`` mappings)."""
    return _coerce(processes, MemoryProcess, "Process")
