"""
Merging of module parameter records.

A module declares each parameter with a "parm" record (name:description)
and, optionally, a "parmtype" record (name:type). ParamTable folds both
into one ParamEntry per name, keeping the order in which names first
appeared.
"""

from typing import Iterator, List, Optional, Tuple
from .exceptions import MalformedRecordError
from .models import ParamEntry


PARM_KEY = "parm"
PARMTYPE_KEY = "parmtype"
PARAM_KEYS = (PARM_KEY, PARMTYPE_KEY)


def is_param_key(key: str) -> bool:
    """Return True for keys that are merged instead of printed directly."""
    return key in PARAM_KEYS


def split_param_record(key: str, raw_value: str) -> Tuple[str, str]:
    """
    Split a parm/parmtype value at its first colon.

    Args:
        key: Raw key the value came with (used for diagnostics)
        raw_value: Text of the form "name:payload"

    Returns:
        Tuple[str, str]: Parameter name and payload

    Raises:
        MalformedRecordError: If the value contains no colon
    """
    name, colon, payload = raw_value.partition(":")
    if not colon:
        raise MalformedRecordError(key, raw_value)
    return name, payload


class ParamTable:
    """Insertion-ordered association list of ParamEntry keyed by name."""

    def __init__(self):
        self._entries: List[ParamEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def find(self, name: str) -> Optional[ParamEntry]:
        """Linear scan for an exact name match."""
        for entry in self._entries:
            if entry.name == name:
                return entry
        return None

    def upsert(self, name: str, value: Optional[str] = None,
               type: Optional[str] = None) -> ParamEntry:
        """
        Create or update the entry for a parameter.

        Only the fields that are supplied are written; an existing value
        or type is never reset to None.

        Args:
            name: Parameter name
            value: Description/default payload from a parm record
            type: Type tag from a parmtype record

        Returns:
            ParamEntry: The created or updated entry
        """
        entry = self.find(name)
        if entry is None:
            entry = ParamEntry(name)
            self._entries.append(entry)

        if value is not None:
            entry.value = value
        if type is not None:
            entry.type = type

        return entry

    def add_record(self, key: str, raw_value: str) -> ParamEntry:
        """Split a raw parm/parmtype value and merge it into the table."""
        name, payload = split_param_record(key, raw_value)
        if key == PARM_KEY:
            return self.upsert(name, value=payload)
        return self.upsert(name, type=payload)

    def drain(self) -> Iterator[ParamEntry]:
        """Yield entries in first-seen order, releasing each one."""
        while self._entries:
            yield self._entries.pop(0)

    def clear(self):
        """Release every entry without emitting it."""
        self._entries.clear()
