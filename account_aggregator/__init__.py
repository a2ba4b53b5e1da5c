"""
Account Aggregator - Source Package

Aggregation and normalization engine behind a multi-region personal
finance dashboard: merges institution catalogs from several regional
backends, converts multi-currency balances into one display currency,
and groups accounts into net worth totals.

DESIGN PRINCIPLES:
1. A failing region degrades the catalog, it never empties it
2. A missing exchange rate degrades a total, it never drops an account
3. The sign of `have` alone decides asset vs liability
4. Records become typed models once, at the boundary
5. Provider sources and diagnostic sinks are swappable
"""

__version__ = "1.0.0"
__author__ = "Account Aggregator Team"
