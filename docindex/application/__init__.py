"""Application layer: pipeline orchestration and the request boundary."""

from docindex.application.pipeline import IndexingPipeline
from docindex.application.request_handler import RequestHandler, parse_request

__all__ = ["IndexingPipeline", "RequestHandler", "parse_request"]
