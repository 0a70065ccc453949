"""Core content primitives (context stacking for the wildlife guide).

Kept free of FastAPI concerns so it can be reused by API routes, CLI, and tests.
"""
