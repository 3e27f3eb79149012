"""
fleetledger - driver settlement and delivery reconciliation engine.
"""

__version__ = "0.1.0"
