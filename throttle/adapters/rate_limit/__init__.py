"""Rate limiting adapters.

This package keeps the fixed-window counting logic behind a small abstraction
so the in-memory registry can later be replaced by a shared store without
changing the HTTP layer.
"""
