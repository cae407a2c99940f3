"""market-returns: periodic return heatmap data for tracked markets."""

__version__ = "0.1.0"
