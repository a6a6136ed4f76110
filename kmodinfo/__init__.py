"""
Kernel Module Info Package

Reports the metadata embedded in kernel loadable modules: author,
license, description, parameters and parameter types.
"""

from .models import ModuleHandle, ParamEntry
from .config import OutputConfig, RepositoryConfig
from .params import ParamTable, split_param_record
from .parsers import ModinfoParser
from .repository import ModuleRepository
from .formatters import OutputFormatter
from .engine import CollationEngine
from .exceptions import (
    KmodInfoError, ModuleLookupError, ModinfoExtractionError, MalformedRecordError
)

__version__ = "2.0.0"
__author__ = "kmod-modinfo developers"

__all__ = [
    "ModuleHandle",
    "ParamEntry",
    "OutputConfig",
    "RepositoryConfig",
    "ParamTable",
    "split_param_record",
    "ModinfoParser",
    "ModuleRepository",
    "OutputFormatter",
    "CollationEngine",
    "KmodInfoError",
    "ModuleLookupError",
    "ModinfoExtractionError",
    "MalformedRecordError"
]
