"""
Module repository lookups.

Resolves command-line arguments to ModuleHandle objects using the index
files under <basedir>/lib/modules/<version>: modules.dep, modules.symbols,
modules.alias, modules.builtin and modules.builtin.modinfo.
"""

import errno
import fnmatch
import os
from typing import Dict, List, Optional, Set, Tuple
from .config import RepositoryConfig
from .exceptions import ModinfoExtractionError, ModuleLookupError
from .models import ModuleHandle
from .parsers import parse_modinfo_strings


MODULE_SUFFIXES = ('.ko.zst', '.ko.xz', '.ko.gz', '.ko')


def normalize_module_name(name: str) -> str:
    """Module names treat '-' and '_' as the same character."""
    return name.replace('-', '_')


def normalize_alias(alias: str) -> str:
    """Normalize '-' to '_' except inside [...] pattern groups."""
    normalized = []
    depth = 0
    for char in alias:
        if char == '[':
            depth += 1
        elif char == ']' and depth:
            depth -= 1
        elif char == '-' and not depth:
            char = '_'
        normalized.append(char)
    return ''.join(normalized)


def module_name_from_path(path: str) -> str:
    """Derive the module name from a file name like 'snd-hda-intel.ko.zst'."""
    name = os.path.basename(path)
    for suffix in MODULE_SUFFIXES:
        if name.endswith(suffix):
            name = name[:-len(suffix)]
            break
    return normalize_module_name(name)


class ModuleRepository:
    """Index of the modules installed for one kernel version."""

    def __init__(self, config: RepositoryConfig):
        self.config = config
        self.dirname = config.dirname
        self._dep: Optional[Dict[str, str]] = None
        self._aliases: Dict[str, List[Tuple[str, str]]] = {}
        self._builtin: Optional[Set[str]] = None

    def _index_path(self, filename: str) -> str:
        return os.path.join(self.dirname, filename)

    def _read_lines(self, filename: str) -> List[str]:
        path = self._index_path(filename)
        if not os.path.exists(path):
            return []
        try:
            with open(path, 'r', encoding='utf-8', errors='ignore') as f:
                return [line.strip() for line in f if line.strip() and not line.startswith('#')]
        except OSError as e:
            raise ModuleLookupError(f"Could not read {path}: {e.strerror or e}",
                                    e.errno or errno.EIO) from e

    def _load_dep(self) -> Dict[str, str]:
        """Map module name to full module path from modules.dep."""
        if self._dep is None:
            dep = {}
            for line in self._read_lines('modules.dep'):
                module_path = line.split(':', 1)[0].strip()
                if not module_path:
                    continue
                if not os.path.isabs(module_path):
                    module_path = os.path.join(self.dirname, module_path)
                dep.setdefault(module_name_from_path(module_path), module_path)
            self._dep = dep
        return self._dep

    def _load_aliases(self, filename: str) -> List[Tuple[str, str]]:
        """Parse 'alias PATTERN MODULE' lines into (pattern, module) tuples."""
        if filename not in self._aliases:
            entries = []
            for line in self._read_lines(filename):
                parts = line.split()
                if len(parts) != 3 or parts[0] != 'alias':
                    continue
                entries.append((normalize_alias(parts[1]), normalize_module_name(parts[2])))
            self._aliases[filename] = entries
        return self._aliases[filename]

    def _load_builtin(self) -> Set[str]:
        if self._builtin is None:
            self._builtin = {module_name_from_path(line) for line in self._read_lines('modules.builtin')}
        return self._builtin

    def _handle_for(self, name: str) -> ModuleHandle:
        dep = self._load_dep()
        if name in dep:
            return ModuleHandle(name, dep[name])
        if name in self._load_builtin():
            return ModuleHandle(name, builtin=True)
        return ModuleHandle(name)

    def _handles_for(self, names: List[str]) -> List[ModuleHandle]:
        handles = []
        for name in names:
            handle = self._handle_for(name)
            if handle not in handles:
                handles.append(handle)
        return handles

    def from_path(self, path: str) -> ModuleHandle:
        """
        Create a handle for a module file.

        Raises:
            ModuleLookupError: If the file does not exist
        """
        if not os.path.isfile(path):
            raise ModuleLookupError(f"Module file {path} not found.")
        return ModuleHandle(module_name_from_path(path), path)

    def lookup(self, alias: str) -> List[ModuleHandle]:
        """
        Resolve a module name, symbol or alias to module handles.

        Sources are tried in order (modules.dep, modules.symbols,
        modules.alias, modules.builtin); the first one with a match wins.

        Raises:
            ModuleLookupError: If nothing matches
        """
        name = normalize_alias(alias)

        dep = self._load_dep()
        if name in dep:
            return [ModuleHandle(name, dep[name])]

        if name.startswith('symbol:'):
            matches = [module for symbol, module in self._load_aliases('modules.symbols')
                       if symbol == name]
            if matches:
                return self._handles_for(matches)

        matches = [module for pattern, module in self._load_aliases('modules.alias')
                   if fnmatch.fnmatchcase(name, pattern)]
        if matches:
            return self._handles_for(matches)

        if name in self._load_builtin():
            return [ModuleHandle(name, builtin=True)]

        raise ModuleLookupError(f"Module alias {alias} not found.")

    def resolve(self, argument: str) -> List[ModuleHandle]:
        """Treat an existing regular file as a path, anything else as an alias."""
        if os.path.isfile(argument):
            return [self.from_path(argument)]
        return self.lookup(argument)

    def get_builtin_info(self, name: str) -> List[Tuple[str, str]]:
        """
        Return the metadata of a builtin module from modules.builtin.modinfo.

        Raises:
            ModinfoExtractionError: If the file is missing or unreadable
        """
        path = self._index_path('modules.builtin.modinfo')
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise ModinfoExtractionError(name, e.strerror or str(e), e.errno or errno.EIO) from e

        prefix = f"{name}."
        pairs = []
        for key, value in parse_modinfo_strings(data):
            if normalize_module_name(key).startswith(prefix):
                pairs.append((key[len(prefix):], value))
        return pairs
