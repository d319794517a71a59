"""
Algorithms package for the Resource Allocation Simulator.
Contains the Banker's Algorithm (safety and request checks) and the
contiguous memory allocation strategies.
"""
