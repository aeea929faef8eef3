"""
Application DTOs

Data Transfer Objects exchanged between the session controller, its use
cases and the presentation layer.
"""
