"""roamlint - broken link checker for org and markdown knowledge bases."""

__version__ = "0.1.0"

from .blank import is_conceptually_blank
from .cache import CacheKey, LinkValidityCache
from .models import BrokenLinkRecord, LinkTriple, ScanResult, Verdict
from .paths import normalize_target
from .scanner import ScanOptions, check_links, scan
from .validators import (
    ALWAYS_INVALID,
    ALWAYS_VALID,
    CallableValidator,
    FileValidator,
    RoamValidator,
    Validator,
    ValidatorRegistry,
    default_registry,
)

__all__ = [
    "__version__",
    "ALWAYS_INVALID",
    "ALWAYS_VALID",
    "BrokenLinkRecord",
    "CacheKey",
    "CallableValidator",
    "FileValidator",
    "LinkTriple",
    "LinkValidityCache",
    "RoamValidator",
    "ScanOptions",
    "ScanResult",
    "Validator",
    "ValidatorRegistry",
    "Verdict",
    "check_links",
    "default_registry",
    "is_conceptually_blank",
    "normalize_target",
    "scan",
]
