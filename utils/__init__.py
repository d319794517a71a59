"""
Utilities for the Resource Allocation Simulator: logging and scenario loading.
"""
