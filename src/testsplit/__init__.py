"""
TestSplit - duration-balanced test splitting for parallel CI workers.

This package provides tools to:
- Inventory test files and assign them default cost estimates
- Scrape observed durations from a previous CI run's output
- Split the weighted tests into N groups of roughly equal cost
- Copy or prune the test files so each worker runs its own group
"""

__version__ = "0.1.0"
__author__ = "TestSplit Team"
