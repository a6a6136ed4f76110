"""
Output formatting for module metadata.

OutputFormatter writes the pieces of a module report: the filename
line, plain fields, the values of a single field and the merged
parameter lines. CollationEngine decides which pieces a mode needs.
"""

import sys
from typing import Iterable, TextIO, Tuple
from .config import OutputConfig
from .exceptions import MalformedRecordError
from .models import ParamEntry
from .params import ParamTable, is_param_key


LABEL_WIDTH = 16

RawPair = Tuple[str, str]


class OutputFormatter:
    """Writes module reports to a text stream."""

    def __init__(self, config: OutputConfig, stream: TextIO = None):
        """
        Initialize an OutputFormatter instance.

        Args:
            config: Output mode and separator
            stream: Destination stream, stdout by default
        """
        self.config = config
        self.stream = stream if stream is not None else sys.stdout

    def _emit(self, text: str):
        self.stream.write(text + self.config.separator)

    def _labeled(self, label: str, text: str):
        self._emit(f"{label:<{LABEL_WIDTH}}{text}")

    def write_filename(self, module_path: str):
        """Bare path, used by the filename-only mode."""
        self._emit(module_path)

    def write_path_line(self, module_path: str):
        self._labeled("filename:", module_path)

    def write_field(self, key: str, value: str):
        """Print one non-parameter field, aligned unless NUL separated."""
        if self.config.null_separated:
            self._emit(f"{key}={value}")
        else:
            self._labeled(f"{key}:", value)

    def write_param(self, entry: ParamEntry):
        self._labeled("parm:", entry.describe())

    def write_matching(self, raw_pairs: Iterable[RawPair]):
        """
        Stream the values of every pair whose key is the selected field.

        No labels and no parameter merging are applied, so a request for
        "parm" prints the raw records as they were found.
        """
        for key, value in raw_pairs:
            if key == self.config.field:
                self._emit(value)

    def route_pairs(self, raw_pairs: Iterable[RawPair], table: ParamTable):
        """
        Print plain fields in arrival order and collect parameter records.

        Malformed parameter records are reported on stderr and skipped.
        """
        for key, value in raw_pairs:
            if not is_param_key(key):
                self.write_field(key, value)
                continue
            try:
                table.add_record(key, value)
            except MalformedRecordError as e:
                print(f"Error: {e}", file=sys.stderr)

    def drain_params(self, table: ParamTable):
        """Print merged parameters in the order their names first appeared."""
        for entry in table.drain():
            self.write_param(entry)
