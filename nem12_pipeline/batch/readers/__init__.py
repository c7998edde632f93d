"""
Batch data source readers.
"""

from .nem12_reader import NEM12FileReader

__all__ = [
    "NEM12FileReader",
]
