"""
Adapters package - External service connections.
"""

from adapters.spoonacular_adapter import SpoonacularClient, extract_domain

__all__ = [
    "SpoonacularClient",
    "extract_domain",
]
