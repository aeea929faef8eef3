"""
Infrastructure Layer

Configuration, logging, persistence and the HTTP gateway.
"""
