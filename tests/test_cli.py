"""
Command Line Tests

Runs simulator.main() on the fixture scenarios, in text and JSON modes.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from simulator import main, run_memory_allocation
from utils.logger import SimulatorLogger


SCENARIOS_DIR = project_root / "tests" / "scenarios"


def test_bankers_text_output(capsys):
    exit_code = main(['bankers', '--scenario', str(SCENARIOS_DIR / "classic_safe.json")])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "BANKER'S ALGORITHM" in out
    assert "Need Matrix (Max - Allocation):" in out
    assert "Initial State: SAFE (sequence: P1 -> P3 -> P4 -> P0 -> P2)" in out
    assert "#1: P1 requests [1, 0, 2] - GRANTED" in out
    assert "Granted: 1, Denied: 2" in out


def test_bankers_json_output(capsys):
    exit_code = main(['bankers', '--scenario', str(SCENARIOS_DIR / "unsafe_initial.json"), '--json'])

    data = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert data['initial_state']['safe'] is False
    assert data['initial_state']['unfinished_processes'] == [0]
    assert data['request_results'] == []


def test_memory_all_algorithms(capsys):
    exit_code = main(['memory', '--scenario', str(SCENARIOS_DIR / "memory_basic.json")])

    out = capsys.readouterr().out
    assert exit_code == 0
    for name in ("First Fit", "Next Fit", "Best Fit", "Worst Fit"):
        assert name in out
    assert "Fragmentation Comparison:" in out
    assert "Best strategy for this input: Best Fit" in out


def test_memory_single_algorithm_json(capsys):
    exit_code = main([
        'memory', '--scenario', str(SCENARIOS_DIR / "memory_basic.json"),
        '--algorithm', 'worst_fit', '--json'
    ])

    data = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert list(data) == ['worst_fit']
    assert data['worst_fit']['allocation'] == [4, 1, 3, None]
    assert data['worst_fit']['unallocated_processes'] == [4]


def test_load_error_returns_one(capsys):
    exit_code = main(['bankers', '--scenario', str(SCENARIOS_DIR / "allocation_exceeds_max.json")])

    out = capsys.readouterr().out
    assert exit_code == 1
    assert "[ERROR] Failed to load scenario" in out


def test_missing_subcommand_exits():
    with pytest.raises(SystemExit):
        main([])


def test_log_file_receives_output(tmp_path, capsys):
    log_path = tmp_path / "run.log"
    main([
        'memory', '--scenario', str(SCENARIOS_DIR / "memory_basic.json"),
        '--algorithm', 'best_fit', '--log-file', str(log_path)
    ])
    capsys.readouterr()

    content = log_path.read_text(encoding='utf-8')
    assert content.startswith("Simulation Log - ")
    assert "Best Fit" in content


def test_run_memory_allocation_rejects_unknown_algorithm():
    with pytest.raises(ValueError):
        run_memory_allocation([{'id': 1, 'size': 10}], [{'id': 1, 'size': 5}], 'buddy')


def test_run_memory_allocation_logs_summaries(capsys):
    results = run_memory_allocation(
        [{'id': 1, 'size': 10}], [{'id': 1, 'size': 5}, {'id': 2, 'size': 50}],
        'first_fit', SimulatorLogger()
    )

    out = capsys.readouterr().out
    assert list(results) == ['first_fit']
    assert "First Fit: total fragmentation=5 (internal=5, external=0), unallocated: P2" in out


def test_unreadable_scenario_returns_one(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_bytes(b'\xff\xfe not utf-8')
    exit_code = main(['memory', '--scenario', str(path)])

    assert exit_code == 1
    assert "[ERROR] Failed to load scenario" in capsys.readouterr().out
