"""
docindex - documentation knowledge-indexing pipeline.

Turns API specifications and prose documentation into metadata-rich chunks,
tracks their embedding state, stores vectors, and serves lexical and
semantic retrieval.
"""

__version__ = "0.1.0"
