"""
Exceptions for kernel module metadata inspection.

Every error carries an errno-style code so the per-module status can be
reported as a negative number, the way the kmod tools do.
"""

import errno as errno_codes


class KmodInfoError(Exception):
    """Base exception for all module inspection errors."""

    errno = errno_codes.EINVAL

    def __init__(self, message: str, errno: int = None):
        self.message = message
        if errno is not None:
            self.errno = errno
        super().__init__(message)

    @property
    def status(self) -> int:
        """Negative status code for this error."""
        return -self.errno


class ModuleLookupError(KmodInfoError):
    """Raised when a module path or alias cannot be resolved."""

    errno = errno_codes.ENOENT


class ModinfoExtractionError(KmodInfoError):
    """Raised when metadata cannot be read from a module."""

    errno = errno_codes.ENOEXEC

    def __init__(self, module_name: str, reason: str, errno: int = None):
        self.module_name = module_name
        self.reason = reason
        super().__init__(f"Could not get modinfo from '{module_name}': {reason}", errno)


class MalformedRecordError(KmodInfoError):
    """Raised when a parm/parmtype record has no ':' separator."""

    def __init__(self, key: str, value: str):
        self.key = key
        self.value = value
        super().__init__(f'Found invalid "{key}={value}": missing \':\'')
