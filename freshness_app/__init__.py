"""
Market Freshness - Quote Refresh Gating Library

Decides when previously fetched market data is fresh enough to skip a call
to the quote provider, and which sampling interval to request for a
historical price window. Performs no I/O; callers own fetching and storage.
"""

__version__ = "0.1.0"
__author__ = "Market Freshness Team"
