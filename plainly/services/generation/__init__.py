"""
Generation module - transcript to structured artifacts.
"""

from .generator import OutputGenerator

__all__ = ["OutputGenerator"]
