"""Mode transition processing helpers.

This package centralizes precondition checks so every surface (HTTP routes,
mini-game completion, tests) gets the same denial reasons for the same request.
"""
