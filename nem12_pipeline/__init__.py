"""
NEM12 interval meter data pipeline.

Parses AEMO NEM12 files into timestamped meter readings and classifies
malformed interval values instead of rejecting the whole file.
"""

__version__ = "1.0.0"
