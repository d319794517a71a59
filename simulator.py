#!/usr/bin/env python3
"""
Resource Allocation Simulator
Main entry point for the simulation system.

Runs the Banker's Algorithm (safety check plus request replay) and the
contiguous memory allocation strategies on JSON scenarios.
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from models.banker_state import BankerState
from models.memory import BlockLike, ProcessLike
from models.results import AllocationResult, ResourceRequest, SimulationResult
from utils.scenario_loader import (
    ScenarioLoadError,
    load_bankers_scenario,
    load_memory_scenario,
)
from utils.logger import SimulatorLogger
from algorithms.avoidance import arbitrate_request, check_safety
from algorithms.allocation import ALGORITHMS, run_all_algorithms
from analysis.comparison import compare_strategies, format_comparison_table


RequestLike = Union[ResourceRequest, Mapping[str, Any]]


def run_simulation(
    available: Sequence[int],
    max_demand: Sequence[Sequence[int]],
    allocation: Sequence[Sequence[int]],
    requests: Sequence[RequestLike] = (),
    logger: Optional[SimulatorLogger] = None
) -> SimulationResult:
    """
    Run a Banker's Algorithm simulation.

    Ordering:
    1. Check the initial state; if unsafe, stop (no request is evaluated)
    2. Replay requests strictly in order against a running state:
       a granted request produces the next state, a denied one leaves it as is

    Args:
        available: [R] Free resource instances
        max_demand: [P][R] Maximum claim per process
        allocation: [P][R] Current allocation per process
        requests: ResourceRequest objects or {"process_id", "request"} mappings
        logger: Optional logger for per-request decisions

    Returns:
        SimulationResult with the initial verdict and every request outcome

    Raises:
        InputValidationError: If the inputs or a request are malformed
    """
    state = BankerState.from_lists(available, max_demand, allocation)
    return simulate(state, [_as_request(r) for r in requests], logger)


def simulate(
    initial: BankerState,
    requests: Sequence[ResourceRequest],
    logger: Optional[SimulatorLogger] = None
) -> SimulationResult:
    """Fold the request sequence over ``initial`` (see ``run_simulation``)."""
    initial_safety = check_safety(initial)

    if logger:
        logger.log_system_state("Initial state", initial.display())
        logger.log_safety_check("Initial state", initial_safety)

    state = initial
    results = []

    if initial_safety.safe:
        for index, req in enumerate(requests, start=1):
            result = arbitrate_request(state, req.process_id, req.request)
            results.append(result)

            if result.granted:
                state = state.with_request(req.process_id, req.request)

            if logger:
                logger.log_request(index, req.process_id, result.request, result.granted, result.describe())
                if result.granted and logger.verbose:
                    _verify_resource_conservation(initial, state, logger, index)
    elif logger and requests:
        logger.log(f"Skipping {len(requests)} request(s): initial state is unsafe", "warning")

    return SimulationResult(
        initial_state=initial_safety,
        request_results=results,
        final_available=state.available.tolist(),
        final_allocation=state.allocation.tolist()
    )


def _as_request(req: RequestLike) -> ResourceRequest:
    if isinstance(req, ResourceRequest):
        return req
    return ResourceRequest.from_mapping(req)


def _verify_resource_conservation(
    initial: BankerState,
    current: BankerState,
    logger: SimulatorLogger,
    index: int
) -> None:
    """Verify allocated + available per resource is unchanged since the start."""
    expected = initial.total_resources
    actual = current.total_resources

    for r_idx in range(current.num_resources):
        if actual[r_idx] != expected[r_idx]:
            error_msg = (
                f"INVARIANT VIOLATION after request {index}: "
                f"R{r_idx} allocated + available = {actual[r_idx]} != total={expected[r_idx]}"
            )
            logger.log(error_msg, "error")
            raise RuntimeError(error_msg)
        logger.log(f"  R{r_idx} conservation check: total={actual[r_idx]} [OK]", "debug")


def run_memory_allocation(
    memory_blocks: Sequence[BlockLike],
    processes: Sequence[ProcessLike],
    algorithm: str = 'all',
    logger: Optional[SimulatorLogger] = None
) -> Dict[str, AllocationResult]:
    """
    Run one placement strategy, or all of them.

    Args:
        memory_blocks: Blocks to place into
        processes: Processes to place, in order
        algorithm: Strategy key ('first_fit', 'next_fit', 'best_fit', 'worst_fit') or 'all'
        logger: Optional logger for one-line summaries

    Returns:
        Dict of strategy key -> AllocationResult

    Raises:
        ValueError: If the strategy key is unknown
    """
    if algorithm == 'all':
        results = run_all_algorithms(memory_blocks, processes)
    elif algorithm in ALGORITHMS:
        results = {algorithm: ALGORITHMS[algorithm](memory_blocks, processes)}
    else:
        raise ValueError(f"Unknown allocation algorithm: {algorithm}")

    if logger:
        for result in results.values():
            logger.log_allocation_result(result)

    return results


def _run_bankers_command(args, logger: SimulatorLogger) -> int:
    scenario = load_bankers_scenario(args.scenario)

    if not args.json:
        logger.log(f"\n{'='*60}")
        logger.log("BANKER'S ALGORITHM")
        logger.log(f"Scenario: {args.scenario}")
        if scenario.description:
            logger.log(scenario.description)
        logger.log(f"{'='*60}")
        logger.log(scenario.state.display())

    result = simulate(scenario.state, scenario.requests, None if args.json else logger)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        logger.log("")
        logger.log(result.display())
    return 0


def _run_memory_command(args, logger: SimulatorLogger) -> int:
    scenario = load_memory_scenario(args.scenario)
    blocks = scenario.memory_blocks
    processes = scenario.processes

    results = run_memory_allocation(blocks, processes, args.algorithm)

    if args.json:
        print(json.dumps({key: r.to_dict() for key, r in results.items()}, indent=2))
        return 0

    logger.log(f"\n{'='*60}")
    logger.log("MEMORY ALLOCATION")
    logger.log(f"Scenario: {args.scenario}")
    if scenario.description:
        logger.log(scenario.description)
    logger.log(f"{'='*60}")

    for result in results.values():
        logger.log(result.display(blocks, processes))
        if args.verbose:
            logger.log_allocation_result(result)

    if len(results) > 1:
        logger.log("\nFragmentation Comparison:")
        logger.log(format_comparison_table(compare_strategies(results, blocks, processes)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description='Resource Allocation Simulator (Banker\'s Algorithm and memory allocation)'
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--scenario',
        type=str,
        required=True,
        help='Path to scenario JSON file'
    )
    common.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    common.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write the log to this file'
    )
    common.add_argument(
        '--json',
        action='store_true',
        help='Print the structured result as JSON instead of text'
    )

    subparsers.add_parser(
        'bankers',
        parents=[common],
        help='Check safety and replay resource requests'
    )

    memory = subparsers.add_parser(
        'memory',
        parents=[common],
        help='Place processes into memory blocks'
    )
    memory.add_argument(
        '--algorithm',
        choices=sorted(ALGORITHMS) + ['all'],
        default='all',
        help='Placement strategy to run (default: all)'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the simulator."""
    args = build_parser().parse_args(argv)

    with SimulatorLogger(verbose=args.verbose, log_file=args.log_file) as logger:
        try:
            if args.command == 'bankers':
                return _run_bankers_command(args, logger)
            return _run_memory_command(args, logger)
        except ScenarioLoadError as e:
            logger.log(f"Failed to load scenario: {e}", "error")
            return 1


if __name__ == '__main__':
    sys.exit(main())
