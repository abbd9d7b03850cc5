"""Application use cases for gallery upload workflows."""

from .upload_candidate import UploadCandidateUseCase

__all__ = [
    "UploadCandidateUseCase",
]
