"""Pydantic models for link triples, verdicts and scan results."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

BrokenReason = Literal["broken", "unreadable", "error"]
ScanMode = Literal["all", "current"]


class LinkTriple(BaseModel):
    """One outbound link found in a note."""

    model_config = ConfigDict(frozen=True)

    source: str  # Note key, the absolute file path for file-backed notes
    target: str  # Raw link payload as written
    type: str  # Link scheme tag, e.g. "file" or "roam"


class Verdict(BaseModel):
    """Cached validity of one (type, target) pair."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    reason: BrokenReason | None = None


VALID = Verdict(valid=True)
INVALID = Verdict(valid=False, reason="broken")


class BrokenLinkRecord(BaseModel):
    """A link whose target was judged invalid."""

    model_config = ConfigDict(frozen=True)

    source: str
    target: str  # Normalized target
    type: str
    reason: BrokenReason = "broken"

    def label(self) -> str:
        """The link as shown in reports, ``type:target``."""
        return f"{self.type}:{self.target}"


class ScanResult(BaseModel):
    """Outcome of one scan pass."""

    mode: ScanMode
    records: list[BrokenLinkRecord] = Field(default_factory=list)
    links_checked: int = 0  # Link occurrences seen
    validations: int = 0  # Distinct validator invocations
    cache_hits: int = 0  # Links answered from the per-scan cache

    @property
    def broken_count(self) -> int:
        return len(self.records)
