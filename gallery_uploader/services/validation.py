"""
Validation Policy - Single Responsibility: decide whether a candidate may upload.

Pure and synchronous. Refusals are returned as data, never raised.
"""
from typing import Iterable, Tuple

from ..models import Candidate, RejectReason, UploadConfig, Verdict


class ValidationPolicy:
    """Media type prefix and upper size bound checks."""

    def __init__(self, allowed_type_prefixes: Iterable[str], max_bytes: int):
        self._prefixes: Tuple[str, ...] = tuple(p.lower() for p in allowed_type_prefixes)
        self._max_bytes = max_bytes

    @classmethod
    def from_config(cls, config: UploadConfig) -> "ValidationPolicy":
        return cls(config.allowed_type_prefixes, config.max_bytes)

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def validate(self, candidate: Candidate) -> Verdict:
        """
        Check a candidate against the policy.

        Type is checked before size. A zero-byte candidate passes; the size
        rule is an upper bound only.
        """
        media_type = (candidate.media_type or "").lower()
        if not any(media_type.startswith(prefix) for prefix in self._prefixes):
            return Verdict.reject(RejectReason.UNSUPPORTED_TYPE)
        if candidate.size > self._max_bytes:
            return Verdict.reject(RejectReason.TOO_LARGE)
        return Verdict.accept()
