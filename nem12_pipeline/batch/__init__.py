"""
Batch processing: line readers, reading sinks and the file pipeline.
"""

from .pipeline import BatchPipeline

__all__ = [
    "BatchPipeline",
]
