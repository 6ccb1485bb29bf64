"""Link-type validators and the registry that dispatches to them.

Each link type tag maps to a validator with a single ``is_valid(target)``
method. Types with no validator are assumed valid, since nothing here can
interpret them.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from .blank import is_conceptually_blank
from .config import DEFAULT_HEADER_PREFIXES, FILE_LINK_TYPE, ROAM_LINK_TYPE, LinkCheckSettings
from .errors import ValidatorLoadError
from .note_index import NoteIndex

log = logging.getLogger(__name__)


@runtime_checkable
class Validator(Protocol):
    def is_valid(self, target: str) -> bool: ...


class CallableValidator:
    """Adapts a plain ``(target) -> bool`` function to the Validator protocol."""

    def __init__(self, func: Callable[[str], bool], name: str | None = None) -> None:
        self.func = func
        self.name = name or getattr(func, "__name__", repr(func))

    def is_valid(self, target: str) -> bool:
        return bool(self.func(target))

    def __repr__(self) -> str:
        return f"CallableValidator({self.name})"


ALWAYS_VALID = CallableValidator(lambda target: True, "always-valid")
ALWAYS_INVALID = CallableValidator(lambda target: False, "always-invalid")


class FileValidator:
    """A file link is valid if the file exists and is not conceptually blank.

    Relative targets resolve against base_dir, or the working directory when
    base_dir is None.
    """

    def __init__(
        self,
        base_dir: Path | None = None,
        header_prefixes: Sequence[str] = DEFAULT_HEADER_PREFIXES,
        skip_metadata: bool = True,
    ) -> None:
        self.base_dir = base_dir
        self.header_prefixes = tuple(header_prefixes)
        self.skip_metadata = skip_metadata

    def resolve(self, target: str) -> Path:
        path = Path(target).expanduser()
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return path

    def is_valid(self, target: str) -> bool:
        path = self.resolve(target)
        if not path.exists():
            return False
        return not is_conceptually_blank(path, self.header_prefixes, self.skip_metadata)

    def __repr__(self) -> str:
        return f"FileValidator(base_dir={self.base_dir})"


class RoamValidator:
    """A title link is valid if the title resolves to a note that has content."""

    def __init__(
        self,
        note_index: NoteIndex,
        header_prefixes: Sequence[str] = DEFAULT_HEADER_PREFIXES,
        skip_metadata: bool = True,
    ) -> None:
        self.note_index = note_index
        self.header_prefixes = tuple(header_prefixes)
        self.skip_metadata = skip_metadata

    def is_valid(self, target: str) -> bool:
        title = self.note_index.resolve_title(target)
        if title is None:
            return False

        # Looking up the link text keeps path links on the note they name
        note_file = self.note_index.file_for_title(target) or self.note_index.file_for_title(title)
        if note_file is None:
            return False

        return not is_conceptually_blank(note_file, self.header_prefixes, self.skip_metadata)

    def __repr__(self) -> str:
        return "RoamValidator()"


class ValidatorRegistry:
    """Mapping from link type tag to validator.

    The mapping is replaced wholesale, never merged; callers that want to keep
    some defaults include them in the replacement.
    """

    def __init__(self, validators: Mapping[str, Validator] | None = None) -> None:
        self._validators: dict[str, Validator] = dict(validators or {})

    def get(self, type: str) -> Validator | None:
        return self._validators.get(type)

    def is_valid(self, target: str, type: str) -> bool:
        validator = self._validators.get(type)
        if validator is None:
            return True
        return validator.is_valid(target)

    def replace(self, validators: Mapping[str, Validator]) -> None:
        self._validators = dict(validators)

    def snapshot(self) -> ValidatorRegistry:
        """Copy of the current mapping, unaffected by later replace() calls."""
        return ValidatorRegistry(self._validators)

    @property
    def types(self) -> list[str]:
        return sorted(self._validators)

    def __contains__(self, type: object) -> bool:
        return type in self._validators

    def __len__(self) -> int:
        return len(self._validators)

    def __repr__(self) -> str:
        return f"ValidatorRegistry({self._validators!r})"


def builtin_validators(
    note_index: NoteIndex,
    base_dir: Path | None = None,
    header_prefixes: Sequence[str] = DEFAULT_HEADER_PREFIXES,
    skip_metadata: bool = True,
) -> dict[str, Validator]:
    """Validators addressable by name from configuration."""
    return {
        "file": FileValidator(base_dir, header_prefixes, skip_metadata),
        "roam": RoamValidator(note_index, header_prefixes, skip_metadata),
        "always-valid": ALWAYS_VALID,
        "always-invalid": ALWAYS_INVALID,
    }


def default_registry(
    note_index: NoteIndex,
    base_dir: Path | None = None,
    header_prefixes: Sequence[str] = DEFAULT_HEADER_PREFIXES,
    skip_metadata: bool = True,
    file_type: str = FILE_LINK_TYPE,
    roam_type: str = ROAM_LINK_TYPE,
) -> ValidatorRegistry:
    """Registry with the file and roam validators under their type tags."""
    builtins = builtin_validators(note_index, base_dir, header_prefixes, skip_metadata)
    return ValidatorRegistry({file_type: builtins["file"], roam_type: builtins["roam"]})


def load_validator(spec: str, builtins: Mapping[str, Validator] | None = None) -> Validator:
    """Resolve a validator from a builtin name or a ``module:attribute`` string.

    The attribute may be a Validator instance, a Validator class (instantiated
    with no arguments) or a plain ``(target) -> bool`` function.

    Raises:
        ValidatorLoadError: If no validator can be resolved from it.
    """
    builtins = builtins or {}
    if spec in builtins:
        return builtins[spec]

    module_name, sep, attr_path = spec.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValidatorLoadError(
            f"Unknown validator {spec!r}",
            {"suggestion": f"Use one of {sorted(builtins)} or 'package.module:function'"},
        )

    try:
        obj: object = importlib.import_module(module_name)
        for part in attr_path.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as e:
        raise ValidatorLoadError(f"Cannot load validator {spec!r}: {e}") from e

    if isinstance(obj, type):
        try:
            obj = obj()
        except TypeError as e:
            raise ValidatorLoadError(f"Cannot instantiate validator {spec!r}: {e}") from e
    if isinstance(obj, Validator):
        return obj
    if callable(obj):
        return CallableValidator(obj, spec)

    raise ValidatorLoadError(f"Validator {spec!r} is neither callable nor has is_valid()")


def build_registry(settings: LinkCheckSettings, note_index: NoteIndex) -> ValidatorRegistry:
    """Registry for one invocation: configured overrides, else the defaults."""
    builtins = builtin_validators(
        note_index,
        base_dir=settings.kb_root,
        header_prefixes=settings.header_prefixes,
        skip_metadata=settings.skip_metadata,
    )

    if not settings.validators:
        return ValidatorRegistry(
            {settings.file_type: builtins["file"], settings.roam_type: builtins["roam"]}
        )

    registry = ValidatorRegistry(
        {link_type: load_validator(spec, builtins) for link_type, spec in settings.validators.items()}
    )
    log.debug("Validator overrides in effect: %s", registry)
    return registry
