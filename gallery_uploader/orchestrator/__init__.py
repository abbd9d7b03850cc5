"""Orchestrator package - coordinates gallery upload workflows."""
from .batch_upload import BatchUploadHandler
from .core import UploadOrchestrator
from .gallery import Gallery

__all__ = ["UploadOrchestrator", "BatchUploadHandler", "Gallery"]
