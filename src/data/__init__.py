"""
Data Generation Module
"""
from .generators import DocumentGenerator

__all__ = [
    "DocumentGenerator",
]
