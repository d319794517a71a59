"""
Logger utility for the Resource Allocation Simulator.

Provides request-by-request logging with verbosity levels.
"""

from typing import Optional, Sequence
from datetime import datetime


class SimulatorLogger:
    """
    Logger for simulation decisions.

    Format: "Request X: P1 requests [1, 0, 2] - GRANTED/DENIED (reason)"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger.

        Args:
            verbose: Enable verbose output
            log_file: Optional file path for logging
        """
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Simulation Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        print(formatted)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_request(
        self,
        index: int,
        pid: int,
        request: Sequence[int],
        granted: bool,
        reason: str
    ) -> None:
        """
        Log a resource request decision.

        Args:
            index: 1-based position of the request in the replay
            pid: Process ID
            request: Requested amount per resource type
            granted: Whether request was granted
            reason: Reason for decision
        """
        status = "GRANTED" if granted else "DENIED"
        self.log(f"Request {index}: P{pid} requests {list(request)} - {status} ({reason})")

    def log_safety_check(self, label: str, result) -> None:
        """
        Log a safety verdict.

        Args:
            label: What was checked (e.g. "Initial state")
            result: SafetyResult
        """
        self.log(f"{label}: {result}")

    def log_allocation_result(self, result) -> None:
        """Log a one-line summary of an AllocationResult."""
        unallocated = ", ".join(f"P{pid}" for pid in result.unallocated_processes) or "none"
        self.log(
            f"{result.algorithm}: total fragmentation={result.total_fragmentation} "
            f"(internal={result.total_internal_fragmentation}, "
            f"external={result.external_fragmentation}), unallocated: {unallocated}"
        )

    def log_system_state(self, label: str, state_str: str) -> None:
        """
        Log a state snapshot (verbose only).

        Args:
            label: Where in the run the snapshot was taken
            state_str: Formatted state
        """
        if self.verbose:
            self.log(f"{label}:\n{state_str}", "debug")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __enter__(self) -> "SimulatorLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
