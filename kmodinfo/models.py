"""
Data models for kernel module metadata.

This module contains the core data structures used to represent
resolved modules and their declared parameters.
"""

from typing import Optional


BUILTIN_PATH = "(builtin)"


class ModuleHandle:
    """Represents a module resolved from a file path or an alias."""

    def __init__(self, name: str, path: Optional[str] = None, builtin: bool = False):
        """
        Initialize a ModuleHandle instance.

        Args:
            name: Normalized module name
            path: Full path to the module file (.ko, .ko.zst, ...)
            builtin: True if the module is compiled into the kernel
        """
        self.name = name
        self.path = path
        self.builtin = builtin

    @property
    def display_path(self) -> str:
        """Path as printed on the filename line."""
        if self.builtin:
            return BUILTIN_PATH
        return self.path or ""

    def __eq__(self, other) -> bool:
        if not isinstance(other, ModuleHandle):
            return NotImplemented
        return (self.name, self.path, self.builtin) == (other.name, other.path, other.builtin)

    def __hash__(self) -> int:
        return hash((self.name, self.path, self.builtin))

    def __str__(self) -> str:
        return f"{self.name} ({self.display_path})"

    def __repr__(self) -> str:
        return (f"ModuleHandle(name='{self.name}', path={self.path!r}, "
                f"builtin={self.builtin})")


class ParamEntry:
    """A declared module parameter merged from its parm and parmtype records."""

    def __init__(self, name: str, value: Optional[str] = None, type: Optional[str] = None):
        self.name = name
        self.value = value
        self.type = type

    def describe(self) -> str:
        """Render the entry the way it appears after the 'parm:' label."""
        if self.value is None:
            return f"{self.name}:{self.type or ''}"
        if self.type is not None:
            return f"{self.name}{self.value} ({self.type})"
        return f"{self.name}{self.value}"

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return (f"ParamEntry(name='{self.name}', value={self.value!r}, "
                f"type={self.type!r})")
