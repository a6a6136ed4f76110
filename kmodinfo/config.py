"""
Run configuration for the module inspector.

Both configuration objects are built once from the parsed command line
and passed explicitly to the formatter, engine and repository.
"""

import os
from typing import Optional


MODE_FULL = "full"
MODE_FILENAME = "filename"
MODE_FIELD = "field"

FILENAME_FIELD = "filename"


class OutputConfig:
    """Selected output mode and record separator."""

    def __init__(self, field: Optional[str] = None, separator: str = "\n"):
        """
        Initialize an OutputConfig instance.

        Args:
            field: Name of the only field to print, or None for all fields
            separator: Record terminator, newline or NUL
        """
        if separator not in ("\n", "\0"):
            raise ValueError(f"Unsupported separator: {separator!r}")
        self.field = field
        self.separator = separator

    @classmethod
    def from_args(cls, args) -> "OutputConfig":
        """Build the configuration from an argparse namespace."""
        return cls(field=args.field, separator=args.separator)

    @property
    def mode(self) -> str:
        """One of MODE_FULL, MODE_FILENAME or MODE_FIELD."""
        if self.field is None:
            return MODE_FULL
        if self.field == FILENAME_FIELD:
            return MODE_FILENAME
        return MODE_FIELD

    @property
    def null_separated(self) -> bool:
        return self.separator == "\0"

    def __repr__(self) -> str:
        return f"OutputConfig(field={self.field!r}, separator={self.separator!r})"


class RepositoryConfig:
    """Location of the on-disk module repository."""

    def __init__(self, kernel_version: Optional[str] = None, basedir: Optional[str] = None):
        """
        Initialize a RepositoryConfig instance.

        Args:
            kernel_version: Kernel release to use instead of `uname -r`
            basedir: Filesystem root prefix for /lib/modules
        """
        self.kernel_version = kernel_version or os.uname().release
        self.basedir = basedir or ""

    @classmethod
    def from_args(cls, args) -> "RepositoryConfig":
        return cls(kernel_version=args.kernel_version, basedir=args.basedir)

    @property
    def dirname(self) -> str:
        """Directory holding modules.dep and friends."""
        return f"{self.basedir}/lib/modules/{self.kernel_version}"

    def __repr__(self) -> str:
        return f"RepositoryConfig(dirname='{self.dirname}')"
