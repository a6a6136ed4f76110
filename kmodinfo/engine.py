"""
Per-module collation of metadata into a report.

CollationEngine ties the collaborator (ModinfoParser) to the
OutputFormatter: it prints the path, routes the raw pairs (printing
plain fields and merging parameter records), then drains the merged
parameters.
"""

import errno
import sys
from .config import OutputConfig, MODE_FILENAME, MODE_FIELD
from .exceptions import KmodInfoError
from .formatters import OutputFormatter
from .models import ModuleHandle
from .params import ParamTable
from .parsers import ModinfoParser


class CollationEngine:
    """Produces the report of one module at a time."""

    def __init__(self, config: OutputConfig, parser: ModinfoParser,
                 formatter: OutputFormatter = None):
        """
        Initialize a CollationEngine instance.

        Args:
            config: Output mode and separator
            parser: Source of raw metadata pairs
            formatter: Report writer, stdout formatter by default
        """
        self.config = config
        self.parser = parser
        self.formatter = formatter if formatter is not None else OutputFormatter(config)

    def process(self, handle: ModuleHandle) -> int:
        """
        Write the report for one module.

        Returns:
            int: 0 on success, a negative errno-style status on failure
        """
        mode = self.config.mode
        if mode == MODE_FILENAME:
            self.formatter.write_filename(handle.display_path)
            return 0
        if mode != MODE_FIELD:
            self.formatter.write_path_line(handle.display_path)

        try:
            raw_pairs = self.parser.get_info(handle)
        except KmodInfoError as e:
            print(f"Error: {e}", file=sys.stderr)
            return e.status

        if mode == MODE_FIELD:
            self.formatter.write_matching(raw_pairs)
            return 0

        table = ParamTable()
        try:
            self.formatter.route_pairs(raw_pairs, table)
            self.formatter.drain_params(table)
        except MemoryError:
            print("Error: Out of memory!", file=sys.stderr)
            return -errno.ENOMEM
        finally:
            table.clear()

        return 0
