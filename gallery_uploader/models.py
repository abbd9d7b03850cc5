"""
Models for gallery_uploader module.

Immutable dataclasses following Single Responsibility Principle.
"""
import mimetypes
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

MB = 1024 * 1024

EPHEMERAL_SCHEME = "blob:"
GCS_PUBLIC_HOST = "https://storage.googleapis.com/"
SERVING_PREFIX = "/objects/uploads/"


class RejectReason(Enum):
    """Why the validation policy refused a candidate."""
    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"


class WarningReason(Enum):
    """Per-file warning kinds reported in a BatchReport."""
    UNSUPPORTED_TYPE = "unsupported_type"
    TOO_LARGE = "too_large"
    FALLBACK = "fallback"


class Severity(Enum):
    """Notification severity."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Candidate:
    """Raw file data awaiting validation and upload."""
    filename: str
    media_type: str
    data: bytes = field(repr=False)
    size: int = -1

    def __post_init__(self):
        if self.size < 0:
            object.__setattr__(self, "size", len(self.data))

    @classmethod
    def from_path(cls, path: Path, media_type: Optional[str] = None) -> "Candidate":
        """Read a file into a candidate, guessing its media type from the name."""
        file_path = Path(path)
        if media_type is None:
            guessed, _ = mimetypes.guess_type(file_path.name)
            media_type = guessed or "application/octet-stream"
        data = file_path.read_bytes()
        return cls(filename=file_path.name, media_type=media_type, data=data)


@dataclass(frozen=True)
class UploadDestination:
    """One-time write target issued by the upload authority."""
    locator: str


@dataclass(frozen=True)
class PersistentReference:
    """Durable locator, safe to save on a listing."""
    locator: str

    is_durable = True

    def __str__(self) -> str:
        return self.locator

    def serving_path(self) -> str:
        """Rewrite a public bucket URL into the marketplace serving route."""
        if self.locator.startswith(GCS_PUBLIC_HOST):
            upload_id = self.locator.rstrip("/").split("/")[-1]
            return f"{SERVING_PREFIX}{upload_id}"
        return self.locator


@dataclass(frozen=True)
class EphemeralReference:
    """Process-local preview handle. Never persist it."""
    locator: str

    is_durable = False

    def __str__(self) -> str:
        return self.locator


Reference = Union[PersistentReference, EphemeralReference]
ReferenceList = Tuple[Reference, ...]


@dataclass(frozen=True)
class Verdict:
    """Result of running the validation policy on a candidate."""
    accepted: bool
    reason: Optional[RejectReason] = None

    @classmethod
    def accept(cls) -> "Verdict":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: RejectReason) -> "Verdict":
        return cls(accepted=False, reason=reason)


@dataclass(frozen=True)
class Notification:
    """Human readable event delivered to a notification sink."""
    severity: Severity
    title: str
    message: str


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class UploadConfig:
    """Immutable configuration for gallery uploads."""
    allowed_type_prefixes: Tuple[str, ...] = ("image/",)
    max_bytes: int = 5 * MB
    max_images: int = 10
    max_concurrency: int = 3
    authority_endpoint: str = "/api/objects/upload"
    timeout: int = 60

    def __post_init__(self):
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        if self.max_images < 0:
            raise ValueError("max_images must not be negative")

    @classmethod
    def from_env(cls) -> "UploadConfig":
        """Build a config from GALLERY_* environment variables."""
        defaults = cls()
        allowed = os.getenv("GALLERY_ALLOWED_TYPES")
        prefixes = defaults.allowed_type_prefixes
        if allowed:
            prefixes = tuple(p.strip() for p in re.split(r"[,\s]+", allowed) if p.strip())
        return cls(
            allowed_type_prefixes=prefixes,
            max_bytes=_env_int("GALLERY_MAX_BYTES", defaults.max_bytes),
            max_images=_env_int("GALLERY_MAX_IMAGES", defaults.max_images),
            max_concurrency=_env_int("GALLERY_MAX_PARALLEL", defaults.max_concurrency),
            authority_endpoint=os.getenv("GALLERY_AUTHORITY_ENDPOINT") or defaults.authority_endpoint,
            timeout=_env_int("GALLERY_TIMEOUT", defaults.timeout),
        )


class CandidateState(Enum):
    """Lifecycle of one candidate inside a batch."""
    PENDING = "pending"
    REJECTED = "rejected"
    TRANSFERRING = "transferring"
    PERSISTED = "persisted"
    FALLBACK = "fallback"

    @property
    def terminal(self) -> bool:
        return self in (CandidateState.REJECTED, CandidateState.PERSISTED, CandidateState.FALLBACK)


@dataclass(frozen=True)
class CandidateOutcome:
    """Terminal result for one candidate."""
    filename: str
    state: CandidateState
    reference: Optional[Reference] = None
    reject_reason: Optional[RejectReason] = None
    error: Optional[str] = None

    @classmethod
    def persisted(cls, filename: str, reference: PersistentReference):
        return cls(filename=filename, state=CandidateState.PERSISTED, reference=reference)

    @classmethod
    def fallback(cls, filename: str, reference: EphemeralReference, error: str):
        return cls(filename=filename, state=CandidateState.FALLBACK, reference=reference, error=error)

    @classmethod
    def rejected(cls, filename: str, reason: RejectReason):
        return cls(filename=filename, state=CandidateState.REJECTED, reject_reason=reason)


@dataclass(frozen=True)
class FileWarning:
    """A per-file outcome other than a clean success."""
    filename: str
    reason: WarningReason
    detail: Optional[str] = None


@dataclass(frozen=True)
class BatchReport:
    """Explainable account of one submitted batch."""
    accepted_count: int = 0
    warnings: Tuple[FileWarning, ...] = ()
    fallback_count: int = 0
    rejected_count: int = 0
    outcomes: Tuple[CandidateOutcome, ...] = ()
    error: Optional[str] = None
    remaining_slots: Optional[int] = None

    @property
    def success(self) -> bool:
        """Batch ran to completion (individual files may still have warnings)."""
        return self.error is None

    @property
    def added_count(self) -> int:
        return self.accepted_count + self.fallback_count

    @classmethod
    def from_outcomes(cls, outcomes: Tuple[CandidateOutcome, ...]) -> "BatchReport":
        warnings = []
        for outcome in outcomes:
            if outcome.state is CandidateState.REJECTED:
                warnings.append(FileWarning(outcome.filename, WarningReason(outcome.reject_reason.value)))
            elif outcome.state is CandidateState.FALLBACK:
                warnings.append(FileWarning(outcome.filename, WarningReason.FALLBACK, outcome.error))
        return cls(
            accepted_count=sum(1 for o in outcomes if o.state is CandidateState.PERSISTED),
            warnings=tuple(warnings),
            fallback_count=sum(1 for o in outcomes if o.state is CandidateState.FALLBACK),
            rejected_count=sum(1 for o in outcomes if o.state is CandidateState.REJECTED),
            outcomes=outcomes,
        )

    @classmethod
    def too_many_files(cls, remaining_slots: int, message: str) -> "BatchReport":
        return cls(error=message, remaining_slots=remaining_slots)

    @classmethod
    def failed(cls, message: str) -> "BatchReport":
        return cls(error=message)
