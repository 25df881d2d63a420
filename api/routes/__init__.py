"""API routes package"""

from . import users, recipes, categories, health

__all__ = ["users", "recipes", "categories", "health"]
