"""API route modules."""
from exam_api.routes import blobs, builder, generation, knowledge, tests

__all__ = ["blobs", "builder", "generation", "knowledge", "tests"]
