"""benchreport: statistics and console reports for benchmark samples.

Reduces raw per-scenario measurements into summary statistics and
renders them as aligned, unit-scaled comparison tables.
"""

__version__ = "0.1.0"
