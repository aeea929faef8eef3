"""
Application Layer

Contains the engine's use cases and the session controller that owns
session state. Use cases orchestrate the flow of data between the local
store, the commerce gateway and the in-memory session.
"""
