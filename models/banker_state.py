"""
Banker State model for the Resource Allocation Simulator.

Holds an immutable snapshot of the matrices and vectors required by the
Banker's Algorithm (available, max demand, allocation) and derives the
need matrix on demand.
"""

import numpy as np
from typing import List, Sequence
from dataclasses import dataclass


# Largest value the int64 matrices can hold
INT_LIMIT = int(np.iinfo(np.int64).max)


class InputValidationError(ValueError):
    """Raised when engine inputs are malformed (bad shape, negative or non-integer values)."""
    pass


def _as_int_array(values, name: str, ndim: int) -> np.ndarray:
    """
    Copy a nested sequence into a fresh integer numpy array.

    Args:
        values: Vector or matrix of integers
        name: Field name used in error messages
        ndim: Expected number of dimensions (1 or 2)

    Returns:
        New numpy array (never a view on the caller's data)

    Raises:
        InputValidationError: If the data is ragged, non-integer or negative
    """
    try:
        array = np.array(values, dtype=object)
    except ValueError as e:
        raise InputValidationError(f"{name}: ragged or malformed data ({e})")

    if array.size == 0:
        shape = (0,) if ndim == 1 else (len(values), 0)
        return np.zeros(shape, dtype=np.int64)

    if array.ndim != ndim:
        raise InputValidationError(
            f"{name}: expected {ndim}-dimensional data, got {array.ndim} dimensions"
        )

    for value in array.flat:
        if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
            raise InputValidationError(f"{name}: non-integer value {value!r}")
        if value < 0:
            raise InputValidationError(f"{name}: negative value {value}")
        if value > INT_LIMIT:
            raise InputValidationError(f"{name}: value {value} exceeds {INT_LIMIT}")

    return array.astype(np.int64)


@dataclass(frozen=True, eq=False)
class BankerState:
    """
    Snapshot of a Banker's Algorithm system.

    Attributes:
        available: [R] Free resource instances by type
        max_demand: [P][R] Maximum resource claim declared by each process
        allocation: [P][R] Resources currently held by each process

    Invariant:
        sum(allocation[:, j]) + available[j] is the (implicit) total of resource j.
        Every entry and every total fits in int64; larger inputs are rejected.
        allocation <= max_demand is NOT enforced here; a violating row simply
        produces a negative need.
    """
    available: np.ndarray
    max_demand: np.ndarray
    allocation: np.ndarray

    @classmethod
    def from_lists(
        cls,
        available: Sequence[int],
        max_demand: Sequence[Sequence[int]],
        allocation: Sequence[Sequence[int]]
    ) -> "BankerState":
        """
        Build a validated snapshot from plain Python sequences.

        The returned state owns private copies of every input.

        Raises:
            InputValidationError: If dimensions disagree or values are invalid
        """
        available_arr = _as_int_array(available, "available", 1)
        max_arr = _as_int_array(max_demand, "max", 2)
        alloc_arr = _as_int_array(allocation, "allocation", 2)

        num_resources = available_arr.shape[0]

        if max_arr.shape[0] != alloc_arr.shape[0]:
            raise InputValidationError(
                f"max has {max_arr.shape[0]} processes but allocation has {alloc_arr.shape[0]}"
            )
        if max_arr.shape[0] > 0:
            if max_arr.shape[1] != num_resources:
                raise InputValidationError(
                    f"max rows have {max_arr.shape[1]} resource types, "
                    f"available has {num_resources}"
                )
            if alloc_arr.shape[1] != num_resources:
                raise InputValidationError(
                    f"allocation rows have {alloc_arr.shape[1]} resource types, "
                    f"available has {num_resources}"
                )
        else:
            max_arr = np.zeros((0, num_resources), dtype=np.int64)
            alloc_arr = np.zeros((0, num_resources), dtype=np.int64)

        # Work in the safety scan grows up to these totals
        totals = alloc_arr.astype(object).sum(axis=0) + available_arr.astype(object)
        for j, total in enumerate(totals):
            if total > INT_LIMIT:
                raise InputValidationError(
                    f"resource R{j}: allocated + available = {total} exceeds {INT_LIMIT}"
                )

        return cls(available=available_arr, max_demand=max_arr, allocation=alloc_arr)

    @property
    def num_processes(self) -> int:
        """Number of processes in the system."""
        return self.max_demand.shape[0]

    @property
    def num_resources(self) -> int:
        """Number of resource types in the system."""
        return self.available.shape[0]

    @property
    def need_matrix(self) -> np.ndarray:
        """
        Need matrix [P][R], computed fresh as Max - Allocation.
        """
        return self.max_demand - self.allocation

    @property
    def total_resources(self) -> np.ndarray:
        """Implicit total per resource type: allocated + available."""
        return self.allocation.sum(axis=0) + self.available

    def validate_request(self, process_id: int, request: Sequence[int]) -> np.ndarray:
        """
        Check a request vector against this state's dimensions.

        Returns:
            The request as a fresh integer array

        Raises:
            InputValidationError: If the process id is out of range or the
                request has the wrong length or invalid values
        """
        if isinstance(process_id, bool) or not isinstance(process_id, (int, np.integer)):
            raise InputValidationError(f"process id must be an integer, got {process_id!r}")
        if process_id < 0 or process_id >= self.num_processes:
            raise InputValidationError(
                f"process id {process_id} out of range (0..{self.num_processes - 1})"
            )

        request_arr = _as_int_array(request, "request", 1)
        if request_arr.shape[0] != self.num_resources:
            raise InputValidationError(
                f"request has {request_arr.shape[0]} resource types, "
                f"expected {self.num_resources}"
            )
        return request_arr

    def with_request(self, process_id: int, request: Sequence[int]) -> "BankerState":
        """
        Return a new state with the request moved from available to the process.

        The current state is left untouched.
        """
        request_arr = self.validate_request(process_id, request)
        held = self.allocation[process_id].astype(object) + request_arr.astype(object)
        if any(value > INT_LIMIT for value in held):
            raise InputValidationError(f"P{process_id} allocation would exceed {INT_LIMIT}")

        available = self.available - request_arr
        allocation = self.allocation.copy()
        allocation[process_id] += request_arr

        return BankerState(
            available=available,
            max_demand=self.max_demand.copy(),
            allocation=allocation
        )

    def to_dict(self) -> dict:
        """Plain-list representation of the snapshot."""
        return {
            'available': self.available.tolist(),
            'max': self.max_demand.tolist(),
            'allocation': self.allocation.tolist(),
            'need': self.need_matrix.tolist()
        }

    def display(self) -> str:
        """
        Generate readable string representation of the snapshot.

        Returns:
            Formatted string showing the available vector and the
            Max, Allocation and Need matrices
        """
        output = []
        output.append("\n" + "="*60)
        output.append("BANKER STATE")
        output.append("="*60)

        output.append("\nAvailable Resources:")
        output.append(
            "  [" + ", ".join(f"R{j}:{self.available[j]:2}" for j in range(self.num_resources)) + "]"
        )

        for title, matrix in (
            ("Max Demand Matrix:", self.max_demand),
            ("Allocation Matrix:", self.allocation),
            ("Need Matrix (Max - Allocation):", self.need_matrix),
        ):
            output.extend(_format_matrix(title, matrix, self.num_resources))

        output.append("\n" + "="*60)
        return "\n".join(output)


def _format_matrix(title: str, matrix: np.ndarray, num_resources: int) -> List[str]:
    lines = ["\n" + title]
    lines.append("     " + " ".join([f"R{j:2}" for j in range(num_resources)]))
    for i, row in enumerate(matrix):
        lines.append(f"  P{i}: " + " ".join([f"{value:3}" for value in row]))
    return lines
