"""Main CLI entry point for the streaming-xml command-line tool.

Converts JSON documents to XML, either buffered or streamed chunk by chunk.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional, TextIO

from streaming_xml_serializer import __version__
from streaming_xml_serializer.api import XMLSerializer
from streaming_xml_serializer.formatting import element
from streaming_xml_serializer.shared.config import (
    ConfigError,
    Declaration,
    Indent,
    SerializerConfig,
    Standalone,
)
from streaming_xml_serializer.shared.logging import get_logger


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.serializer_config = SerializerConfig()
        self.verbose = False
        self.quiet = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file."""
        config = cls()
        if config_path.exists():
            try:
                with config_path.open() as f:
                    data = json.load(f)
                config.serializer_config = SerializerConfig.from_dict(data)
            except (OSError, ValueError, ConfigError) as e:
                print(f"Warning: Could not load config file: {e}", file=sys.stderr)

        return config

    def apply_arguments(self, args: argparse.Namespace) -> None:
        """Override configuration values with command-line arguments."""
        overrides = {}
        if args.indent is not None:
            overrides["indent"] = Indent(args.indent)
        if args.declaration or args.encoding or args.standalone:
            base = self.serializer_config.declaration or Declaration()
            overrides["declaration"] = Declaration(
                encoding=args.encoding or base.encoding,
                standalone=Standalone(args.standalone) if args.standalone else base.standalone,
            )
        if args.stream:
            overrides["stream"] = True
        if overrides:
            self.serializer_config = self.serializer_config.override(**overrides)


class DocumentConverter:
    """Core conversion logic for CLI operations."""

    def __init__(self, config: CLIConfig) -> None:
        self.config = config
        self.logger = get_logger(__name__, None, "cli_converter")

    def convert(self, document: Any, output: TextIO) -> None:
        """Write ``document`` as XML to ``output``."""
        serializer_config = self.config.serializer_config
        if not serializer_config.stream:
            output.write(XMLSerializer(serializer_config).serialize(document))
            return

        serializer = XMLSerializer(serializer_config)
        serializer.stream.pipe(output)
        serializer.stream.start()

        children = _streamable_children(document)
        if children is None:
            serializer.serialize(document)
            return

        # Stream each child of the single root through a deferred element
        name, items = children
        handle = element(*[item for item in items if _is_attribute_marker(item)])
        serializer.serialize({name: handle})
        for item in items:
            if not _is_attribute_marker(item):
                handle.push(item)
        handle.close()
        self.logger.debug(
            "Streamed document",
            extra={"root": name, "chunks": serializer.metrics.chunks_emitted},
        )


def _is_attribute_marker(item: Any) -> bool:
    return isinstance(item, dict) and next(iter(item), None) == "_attr"


def _streamable_children(document: Any) -> Optional[tuple]:
    """Return ``(root_name, items)`` when the document is one root holding a list."""
    if isinstance(document, dict) and len(document) == 1:
        name, value = next(iter(document.items()))
        if name not in ("_attr", "_cdata") and isinstance(value, list):
            return name, value
    return None


def load_document(path: Optional[Path]) -> Any:
    """Read a JSON document from ``path`` or standard input."""
    if path is None or str(path) == "-":
        return json.load(sys.stdin)
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="streaming-xml",
        description="Convert JSON documents to XML, buffered or streamed"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        help="JSON input file (default: stdin)"
    )
    parser.add_argument(
        "--indent", "-i",
        choices=[mode.value for mode in Indent],
        help="Indentation mode (default: none)"
    )
    parser.add_argument(
        "--declaration", "-d",
        action="store_true",
        help="Prepend an XML declaration"
    )
    parser.add_argument(
        "--encoding",
        help="Encoding named in the declaration (implies --declaration)"
    )
    parser.add_argument(
        "--standalone",
        choices=[value.value for value in Standalone],
        help="Standalone value in the declaration (implies --declaration)"
    )
    parser.add_argument(
        "--stream", "-s",
        action="store_true",
        help="Write output incrementally as it is produced"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    # Set up logging verbosity
    if args.verbose:
        import logging
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        import logging
        logging.basicConfig(level=logging.ERROR)

    config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
    config.verbose = args.verbose
    config.quiet = args.quiet
    config.apply_arguments(args)

    try:
        document = load_document(args.path)
    except FileNotFoundError:
        print(f"File not found: {args.path}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Invalid JSON input: {e}", file=sys.stderr)
        return 1

    converter = DocumentConverter(config)
    try:
        if args.output:
            with args.output.open("w", encoding="utf-8") as output:
                converter.convert(document, output)
            print(f"XML written to {args.output}", file=sys.stderr)
        else:
            converter.convert(document, sys.stdout)
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
