"""
Landmark detector adapters.
"""
