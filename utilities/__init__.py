"""
Shared utilities: structured logging setup and locking primitives.
"""
