"""
Domain Layer

Entities, value objects and the ports (repository interfaces) the
application layer talks to.
"""
