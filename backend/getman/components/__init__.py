"""Core Business Components.

This package contains independent business modules:
- workspace: request workspace tree, batch moves, persistence
"""
