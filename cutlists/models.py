from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(slots=True)
class CandidateHeader:
    """One cutlist listed in the header index of a video."""

    identifier: str
    score: float


@dataclass(slots=True)
class Segment:
    """A cut region, in seconds and/or frames."""

    time_start: float = 0.0
    time_duration: float = 0.0
    frame_start: int = 0
    frame_duration: int = 0

    @property
    def has_time(self) -> bool:
        return self.time_start != 0.0 or self.time_duration != 0.0

    @property
    def has_frame(self) -> bool:
        return self.frame_start != 0 or self.frame_duration != 0


@dataclass(slots=True)
class Cutlist:
    """Validated cutlist as parsed from a detail document."""

    identifier: str
    application: str = ""
    aspect_ratio: str = ""
    frames_per_second: float = 0.0
    is_time_based: bool = False
    is_frame_based: bool = False
    segments: list[Segment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class CandidateResult:
    """Outcome of one candidate attempt: a cutlist, or the reason to skip it."""

    identifier: str
    cutlist: Cutlist | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.cutlist is not None and bool(self.cutlist.segments)

    @classmethod
    def skip(cls, identifier: str, reason: str) -> CandidateResult:
        return cls(identifier=identifier, cutlist=None, reason=reason)


@dataclass(slots=True)
class RetrievalOutcome:
    """The single result delivered to the caller per video key."""

    video_key: str
    cutlist: Cutlist | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.cutlist is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "video_key": self.video_key,
            "status": "ok" if self.ok else "error",
            "error": self.error,
            "cutlist": self.cutlist.to_dict() if self.cutlist is not None else None,
        }
