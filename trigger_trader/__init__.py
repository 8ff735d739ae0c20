"""
Trigger trader for bitbank

Watches the bitbank ticker stream and places a single market order whenever
the price crosses a trigger between the 24h midpoint and the 24h high/low.
"""

__version__ = "0.1.0"
