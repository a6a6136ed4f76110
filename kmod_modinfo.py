#!/usr/bin/env python3
"""
Kernel Module Info

Show the metadata of kernel modules given by file path or by name/alias:
filename, author, description, license, parameters and any other field
found in the module's .modinfo section.
"""

import argparse
import errno
import sys
from typing import List, Optional

from kmodinfo import __version__
from kmodinfo.config import OutputConfig, RepositoryConfig
from kmodinfo.engine import CollationEngine
from kmodinfo.exceptions import KmodInfoError
from kmodinfo.parsers import ModinfoParser
from kmodinfo.repository import ModuleRepository


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="kmod-modinfo",
        description="Show information about kernel modules",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  kmod-modinfo e1000e                       # All fields of a module by name
  kmod-modinfo ./drivers/foo.ko             # All fields of a module file
  kmod-modinfo -F license e1000e            # Only the license
  kmod-modinfo -n pci:v00008086d000010D3*   # Path of the module for an alias
  kmod-modinfo -0 e1000e | xargs -0 -n1     # NUL separated key=value records
  kmod-modinfo -k 6.8.0-generic -b /mnt e1000e
        """
    )

    # Field selection, the last one given wins
    parser.add_argument('--author', '-a', dest='field', action='store_const', const='author',
                       help="Print only 'author'")
    parser.add_argument('--description', '-d', dest='field', action='store_const',
                       const='description', help="Print only 'description'")
    parser.add_argument('--license', '-l', dest='field', action='store_const', const='license',
                       help="Print only 'license'")
    parser.add_argument('--parameters', '-p', dest='field', action='store_const', const='parm',
                       help="Print only 'parm'")
    parser.add_argument('--filename', '-n', dest='field', action='store_const', const='filename',
                       help="Print only 'filename'")
    parser.add_argument('--field', '-F', dest='field', type=str, metavar='FIELD',
                       help='Print only provided FIELD')

    parser.add_argument('--null', '-0', dest='separator', action='store_const', const='\0',
                       default='\n', help='Use \\0 instead of \\n')

    # Repository location
    parser.add_argument('--set-version', '-k', dest='kernel_version', type=str, metavar='VERSION',
                       help='Use VERSION instead of `uname -r`')
    parser.add_argument('--basedir', '-b', dest='basedir', type=str, metavar='DIR',
                       help='Use DIR as filesystem root for /lib/modules')

    parser.add_argument('--version', '-V', action='version',
                       version=f'kmod-modinfo version {__version__}',
                       help='Show version')

    parser.add_argument('modules', nargs='+', metavar='MODULE',
                       help='Module file path, name or alias')
    return parser


def process_argument(argument: str, repository: ModuleRepository,
                     engine: CollationEngine) -> int:
    """
    Report every module an argument resolves to.

    Returns:
        int: 0 on success, the last negative status otherwise
    """
    try:
        handles = repository.resolve(argument)
    except KmodInfoError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.status

    err = 0
    for handle in handles:
        try:
            r = engine.process(handle)
        except Exception as e:
            print(f"Unexpected error in {handle.name}: {e}", file=sys.stderr)
            r = -errno.EIO
        if r < 0:
            err = r
    return err


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run the module inspector."""
    parser = build_parser()
    args = parser.parse_args(argv)

    output_config = OutputConfig.from_args(args)
    repository = ModuleRepository(RepositoryConfig.from_args(args))
    engine = CollationEngine(output_config, ModinfoParser(repository))

    try:
        err = 0
        for argument in args.modules:
            r = process_argument(argument, repository, engine)
            if r < 0:
                err = r
        sys.stdout.flush()
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        return 1

    return 0 if err >= 0 else 1


if __name__ == "__main__":
    sys.exit(main())
