"""
Scenario Loader for the Resource Allocation Simulator.

Loads and validates JSON scenario files for both problems:
- "bankers": available vector, max/allocation matrices and optional requests
- "memory": memory blocks and processes for the placement strategies
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from models.banker_state import BankerState, InputValidationError
from models.memory import MemoryBlock, MemoryProcess
from models.results import ResourceRequest


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


@dataclass
class BankersScenario:
    """Validated Banker's Algorithm input."""
    state: BankerState
    requests: List[ResourceRequest] = field(default_factory=list)
    description: str = ""


@dataclass
class MemoryScenario:
    """Validated memory allocation input."""
    memory_blocks: List[MemoryBlock]
    processes: List[MemoryProcess]
    description: str = ""


def _read_json(file_path: str) -> Dict[str, Any]:
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ScenarioLoadError(f"Scenario file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}")
    except (OSError, UnicodeDecodeError) as e:
        raise ScenarioLoadError(f"Cannot read scenario file {file_path}: {e}")

    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a JSON object")
    return data


def scenario_type(data: Dict[str, Any]) -> str:
    """
    Work out which problem a scenario describes.

    Uses the explicit "type" field when present, otherwise the fields found.
    """
    declared = data.get('type')
    if declared is not None:
        if declared not in ('bankers', 'memory'):
            raise ScenarioLoadError(f"Unknown scenario type '{declared}'")
        return declared
    if 'available' in data:
        return 'bankers'
    if 'memory_blocks' in data or 'memoryBlocks' in data:
        return 'memory'
    raise ScenarioLoadError("Cannot determine scenario type (add a 'type' field)")


def load_bankers_scenario(file_path: str) -> BankersScenario:
    """
    Load a Banker's Algorithm scenario from JSON file.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        BankersScenario with a validated state and request list

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    data = _read_json(file_path)
    if scenario_type(data) != 'bankers':
        raise ScenarioLoadError(f"{file_path} is not a bankers scenario")
    return parse_bankers_scenario(data)


def parse_bankers_scenario(data: Dict[str, Any]) -> BankersScenario:
    """
    Validate an already-decoded Banker's scenario.

    Raises:
        ScenarioLoadError: If a field is missing or invalid
    """
    for required in ('available', 'max', 'allocation'):
        if required not in data:
            raise ScenarioLoadError(f"Scenario missing '{required}' field")

    try:
        state = BankerState.from_lists(data['available'], data['max'], data['allocation'])
    except InputValidationError as e:
        raise ScenarioLoadError(f"Invalid matrices: {e}")

    _validate_allocation_within_max(state)

    requests = []
    for index, raw in enumerate(data.get('requests') or []):
        try:
            request = ResourceRequest.from_mapping(raw)
            state.validate_request(request.process_id, request.request)
        except InputValidationError as e:
            raise ScenarioLoadError(f"Request #{index}: {e}")
        requests.append(request)

    return BankersScenario(
        state=state,
        requests=requests,
        description=data.get('description', '')
    )


def _validate_allocation_within_max(state: BankerState) -> None:
    """
    Validate that no process holds more than its declared maximum.

    Raises:
        ScenarioLoadError: On the first offending entry
    """
    for i in range(state.num_processes):
        for j in range(state.num_resources):
            if state.allocation[i][j] > state.max_demand[i][j]:
                raise ScenarioLoadError(
                    f"Allocation for Process {i} and Resource {j} "
                    f"({state.allocation[i][j]}) exceeds maximum claim ({state.max_demand[i][j]})"
                )


def load_memory_scenario(file_path: str) -> MemoryScenario:
    """
    Load a memory allocation scenario from JSON file.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        MemoryScenario with validated blocks and processes

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    data = _read_json(file_path)
    if scenario_type(data) != 'memory':
        raise ScenarioLoadError(f"{file_path} is not a memory scenario")
    return parse_memory_scenario(data)


def parse_memory_scenario(data: Dict[str, Any]) -> MemoryScenario:
    """
    Validate an already-decoded memory scenario.

    Raises:
        ScenarioLoadError: If a field is missing or invalid
    """
    raw_blocks = data.get('memory_blocks', data.get('memoryBlocks'))
    if raw_blocks is None:
        raise ScenarioLoadError("Scenario missing 'memory_blocks' field")
    if 'processes' not in data:
        raise ScenarioLoadError("Scenario missing 'processes' field")

    blocks = [_load_record(MemoryBlock, "Memory block", raw) for raw in raw_blocks]
    processes = [_load_record(MemoryProcess, "Process", raw) for raw in data['processes']]

    if not blocks or not processes:
        raise ScenarioLoadError("Please enter at least one memory block and one process")

    return MemoryScenario(
        memory_blocks=blocks,
        processes=processes,
        description=data.get('description', '')
    )


def _load_record(cls, kind: str, raw: Any):
    if not isinstance(raw, dict):
        raise ScenarioLoadError(f"{kind} entry must be an object, got {raw!r}")
    for required in ('id', 'size'):
        if required not in raw:
            raise ScenarioLoadError(f"{kind} missing required field: {required}")
    if isinstance(raw['id'], bool) or not isinstance(raw['id'], int):
        raise ScenarioLoadError(f"{kind} id must be an integer, got {raw['id']!r}")
    try:
        return cls(id=raw['id'], size=raw['size'])
    except InputValidationError as e:
        raise ScenarioLoadError(str(e))


def get_scenario_description(file_path: str) -> str:
    """
    Get description from scenario file without full loading.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Description string, or empty string if not present or unreadable
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return ''
    if not isinstance(data, dict):
        return ''
    return data.get('description', '')
