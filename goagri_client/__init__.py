"""
GoAgri client engine

Session and commerce state reconciliation for the GoAgri shopping app:
cart, addresses, loyalty rewards and order placement across guest and
authenticated sessions.
"""

__version__ = "0.1.0"
