"""
Models package for the Resource Allocation Simulator.
Contains the Banker state snapshot, memory blocks/processes and result types.
"""
