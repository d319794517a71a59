"""
Analysis package for the Resource Allocation Simulator.
"""
