# src/agora_auth/domain/value_objects.py

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import InvalidEntityError

_RESERVED_NAME_CHARS = ("/", "\\", "\x00")
_RESERVED_PREFIX_CHARS = ("-",) + _RESERVED_NAME_CHARS


@dataclass(frozen=True, slots=True)
class KeyNamespace:
    """
    Maps logical record names to physical storage names and back.

    Several key families can share one directory or bucket: each physical
    name is `<prefix>-<logical name>`, and callers only ever see the
    logical part.
    """
    prefix: str

    def __post_init__(self) -> None:
        if not self.prefix:
            raise InvalidEntityError("prefix", "prefix cannot be empty")
        # "foo" would otherwise claim every record of "foo-bar".
        if any(char in self.prefix for char in _RESERVED_PREFIX_CHARS):
            raise InvalidEntityError("prefix", "prefix cannot contain '-', a path separator or a null byte")

    @property
    def marker(self) -> str:
        return f"{self.prefix}-"

    def physical(self, name: str) -> str:
        if not name or name == self.marker:
            raise InvalidEntityError("name", "name cannot be empty")
        if any(char in name for char in _RESERVED_NAME_CHARS):
            raise InvalidEntityError("name", "name cannot contain a path separator or a null byte")

        if name.startswith(self.marker):
            return name
        return f"{self.marker}{name}"

    def logical(self, physical_name: str) -> str:
        return physical_name.removeprefix(self.marker)

    def owns(self, physical_name: str) -> bool:
        return physical_name.startswith(self.marker) and physical_name != self.marker

    def __str__(self) -> str:
        return self.prefix
