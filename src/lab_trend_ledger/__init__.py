"""
Lab Trend Ledger - Lab-test measurement tracking and trend analysis.

Tracks recurring lab-test readings (hemoglobin, glucose, ...) per parameter,
classifies them against normal ranges and prepares chart-ready trend data.
"""

__version__ = "0.1.0"
