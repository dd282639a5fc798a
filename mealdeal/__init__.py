"""MealDeal - restaurant deals marketplace bot."""

__version__ = "0.1.0"
