"""Main CLI entry point for xmlbind."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .. import __version__
from ..cli.analyze import analyze_file, reformat_file
from ..config import CodecConfig
from ..exceptions import CodecError


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the xmlbind CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        description="xmlbind: XML binding for Pydantic models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  xmlbind --analyze models.py                              Show XML bindings
  xmlbind --reformat doc.xml --model models.py:Server      Normalize a document
  xmlbind --reformat doc.xml --model models.py:Server --pretty
  xmlbind --version                                        Show version

XMLBIND_PRETTY_PRINT=true enables --pretty by default.
        """,
    )

    parser.add_argument(
        "--analyze",
        metavar="FILE",
        type=str,
        help="Show the XML binding of every model in a Python file",
    )

    parser.add_argument(
        "--reformat",
        metavar="XML",
        type=str,
        help="Decode an XML document and encode it again",
    )

    parser.add_argument(
        "--model",
        metavar="FILE:CLASS",
        type=str,
        help="Model class used by --reformat",
    )

    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Indent --reformat output",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"xmlbind {__version__}",
    )

    args = parser.parse_args(argv)

    # Handle --analyze
    if args.analyze:
        file_path = Path(args.analyze)
        if not file_path.exists():
            print(f"Error: File not found: {file_path}", file=sys.stderr)
            return 1

        try:
            analyze_file(file_path)
            return 0
        except Exception as e:
            print(f"Error analyzing file: {e}", file=sys.stderr)
            return 1

    # Handle --reformat
    if args.reformat:
        if not args.model:
            print("Error: --reformat requires --model FILE:CLASS", file=sys.stderr)
            return 2

        xml_path = Path(args.reformat)
        if not xml_path.exists():
            print(f"Error: File not found: {xml_path}", file=sys.stderr)
            return 1

        pretty = args.pretty or CodecConfig.from_env().pretty_print
        try:
            print(reformat_file(xml_path, args.model, pretty))
            return 0
        except CodecError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except Exception as e:
            print(f"Error loading model: {e}", file=sys.stderr)
            return 1

    # If no command specified, show help
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
