"""Main CLI entry point for the xml-thinner command-line tool.

Provides commands to print the thinned shape of XML files, individually or
merged across a whole corpus, and to report structural statistics.
"""

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from xml_thinner import __version__
from xml_thinner.api import ThinResult, XMLThinner
from xml_thinner.shared.config import (
    PRESET_NAMES,
    AttributeMergePolicy,
    ChildOrder,
    ConfigError,
    ConfigValidationError,
    EventBackend,
    TextMergePolicy,
    ThinningConfig,
)
from xml_thinner.shared.logging import configure_logging, get_logger
from xml_thinner.tree import render_json, render_skeleton

XML_SUFFIXES = {".xml", ".xhtml", ".svg"}


def _choice_names(enum_type: Any) -> List[str]:
    return [member.name.lower() for member in enum_type]


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.thinning_config = ThinningConfig()
        self.output_format = "skeleton"
        self.show_attributes = False
        self.show_text = False
        self.verbose = False
        self.quiet = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        Recognized keys: ``preset``, ``thinning`` (a ThinningConfig
        dictionary applied on top of the preset), ``output_format``,
        ``show_attributes`` and ``show_text``.
        """
        config = cls()
        if not config_path.exists():
            return config

        try:
            with config_path.open() as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ConfigValidationError("Configuration file must contain a JSON object")
            if "preset" in data:
                config.thinning_config = ThinningConfig.preset(data["preset"])
            if "thinning" in data:
                if not isinstance(data["thinning"], dict):
                    raise ConfigValidationError(
                        "'thinning' must be an object", field_name="thinning"
                    )
                base = config.thinning_config.to_dict()
                for section, values in data["thinning"].items():
                    if isinstance(values, dict) and isinstance(base.get(section), dict):
                        base[section].update(values)
                    else:
                        base[section] = values
                config.thinning_config = ThinningConfig.from_dict(base)

            config.output_format = data.get("output_format", config.output_format)
            config.show_attributes = data.get("show_attributes", config.show_attributes)
            config.show_text = data.get("show_text", config.show_text)
        except (OSError, ValueError, ConfigError) as e:
            print(f"Warning: Could not load config file: {e}", file=sys.stderr)

        return config


class ProgressTracker:
    """Progress tracking for long-running operations."""

    def __init__(self, total: int, description: str = "Processing"):
        self.total = total
        self.completed = 0
        self.description = description
        self.start_time = time.time()
        self.last_update = 0.0

    def update(self, increment: int = 1) -> None:
        """Update progress and display if needed."""
        self.completed += increment
        current_time = time.time()

        if current_time - self.last_update >= 1.0 or self.completed >= self.total:
            self._display_progress()
            self.last_update = current_time

    def _display_progress(self) -> None:
        if self.total == 0:
            return

        percentage = (self.completed / self.total) * 100
        progress_bar = "=" * int(percentage // 2)
        progress_bar += " " * (50 - len(progress_bar))

        print(f"\r{self.description}: [{progress_bar}] "
              f"{percentage:.1f}% ({self.completed}/{self.total})",
              end="", file=sys.stderr)

        if self.completed >= self.total:
            print(file=sys.stderr)


class ThinProcessor:
    """Core thinning logic for CLI operations."""

    def __init__(self, config: CLIConfig):
        self.config = config
        self.thinner = XMLThinner(config.thinning_config)
        self.logger = get_logger(__name__, None, "cli_processor")

    def find_xml_files(self, path: Path, recursive: bool = True) -> Iterator[Path]:
        """Find XML files in path."""
        if path.is_file():
            yield path
        elif path.is_dir():
            candidates = path.rglob("*") if recursive else path.glob("*")
            for candidate in sorted(candidates):
                if candidate.is_file() and candidate.suffix.lower() in XML_SUFFIXES:
                    yield candidate
        else:
            self.logger.warning("Path does not exist", extra={"path": str(path)})

    def collect_files(self, paths: List[Path], recursive: bool = True) -> List[Path]:
        files: List[Path] = []
        for path in paths:
            files.extend(self.find_xml_files(path, recursive))
        return files

    def process_files(self, files: List[Path]) -> List[ThinResult]:
        """Thin each file on its own."""
        results = []
        progress = (
            ProgressTracker(len(files), "Thinning XML files")
            if len(files) > 1 and not self.config.quiet else None
        )
        for file_path in files:
            results.append(self.thinner.thin_file(file_path))
            if progress:
                progress.update()
        return results

    def process_merged(self, files: List[Path]) -> ThinResult:
        """Thin all files into one tree."""
        return self.thinner.thin_many(files)

    def render(self, result: ThinResult, output_format: str) -> str:
        """Render one successful result."""
        order = self.config.thinning_config.tree.child_order
        if result.tree is None:
            return ""
        if output_format == "json":
            return render_json(result.tree, order)
        return render_skeleton(
            result.tree,
            order=order,
            show_attributes=self.config.show_attributes,
            show_text=self.config.show_text,
        )


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml-thinner",
        description="Infer the structural shape of XML documents by merging same-named siblings"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Thin command
    thin_parser = subparsers.add_parser("thin", help="Print the thinned shape of XML files")
    _add_input_arguments(thin_parser)
    thin_parser.add_argument(
        "--merge", "-m",
        action="store_true",
        help="Merge all files into a single thinned tree"
    )
    thin_parser.add_argument(
        "--format", "-f",
        choices=["skeleton", "json"],
        default=None,
        help="Output format (default: skeleton)"
    )
    thin_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    thin_parser.add_argument(
        "--show-attributes",
        action="store_true",
        help="Include merged attributes in skeleton output"
    )
    thin_parser.add_argument(
        "--show-text",
        action="store_true",
        help="Include merged text in skeleton output"
    )

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Report structural statistics")
    _add_input_arguments(stats_parser)
    stats_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format"
    )

    return parser


def _add_input_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files or directories"
    )
    parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Recursively process directories"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )
    parser.add_argument(
        "--preset",
        choices=list(PRESET_NAMES),
        help="Thinning configuration preset"
    )
    parser.add_argument(
        "--backend",
        choices=_choice_names(EventBackend),
        help="XML parser backend"
    )
    parser.add_argument(
        "--attributes",
        choices=_choice_names(AttributeMergePolicy),
        help="Attribute merge policy"
    )
    parser.add_argument(
        "--text",
        choices=_choice_names(TextMergePolicy),
        help="Text merge policy"
    )
    parser.add_argument(
        "--order",
        choices=_choice_names(ChildOrder),
        help="Child ordering in output"
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        help="Abort documents nested deeper than this"
    )
    parser.add_argument(
        "--keep-namespaces",
        action="store_true",
        help="Report namespaced tags as {uri}local instead of the local name"
    )


def load_config(args: argparse.Namespace) -> CLIConfig:
    """Build CLI configuration from a config file and command-line overrides."""
    config = CLIConfig()
    if args.config and args.config.exists():
        config = CLIConfig.from_file(args.config)

    if args.preset:
        config.thinning_config = ThinningConfig.preset(args.preset)

    overrides: Dict[str, Any] = {}
    if args.backend:
        overrides["source__backend"] = EventBackend[args.backend.upper()]
    if args.attributes:
        overrides["tree__attribute_policy"] = AttributeMergePolicy[args.attributes.upper()]
    if args.text:
        overrides["tree__text_policy"] = TextMergePolicy[args.text.upper()]
    if args.order:
        overrides["tree__child_order"] = ChildOrder[args.order.upper()]
    if args.max_depth is not None:
        overrides["tree__max_depth"] = args.max_depth
    if args.keep_namespaces:
        overrides["source__keep_namespaces"] = True
    if overrides:
        config.thinning_config = config.thinning_config.override(**overrides)

    config.verbose = args.verbose
    config.quiet = args.quiet
    return config


def _report_failure(result: ThinResult) -> None:
    print(f"Failed: {result.source}: {result.error}", file=sys.stderr)


def format_stats(results: List[ThinResult], format_type: str) -> str:
    """Format statistics for output."""
    rows = []
    for result in results:
        row: Dict[str, Any] = {
            "file": result.source,
            "success": result.success,
            "node_count": result.node_count,
            "max_depth": result.max_depth,
            "events_processed": result.performance.events_processed,
            "merge_ratio": round(result.performance.merge_ratio, 3),
            "processing_time_ms": round(result.processing_time_ms, 3),
        }
        if result.error is not None:
            row["error"] = str(result.error)
        rows.append(row)

    if format_type == "json":
        return json.dumps(rows, indent=2)

    if not rows:
        return "No results to display."

    successful = sum(1 for row in rows if row["success"])
    lines = [f"Processed {len(rows)} files, {successful} successful", "-" * 60]
    for row in rows:
        status = "✓" if row["success"] else "✗"
        lines.append(f"{status} {row['file']}")
        if row["success"]:
            lines.append(
                f"   Nodes: {row['node_count']}, Depth: {row['max_depth']}, "
                f"Events: {row['events_processed']}, "
                f"Merge ratio: {row['merge_ratio']:.1%}, "
                f"Time: {row['processing_time_ms']:.1f}ms"
            )
        else:
            lines.append(f"   Error: {row['error']}")
    return "\n".join(lines)


def cmd_thin(args: argparse.Namespace) -> int:
    """Handle thin command."""
    config = load_config(args)
    output_format = args.format or config.output_format
    config.show_attributes = args.show_attributes or config.show_attributes
    config.show_text = args.show_text or config.show_text

    processor = ThinProcessor(config)
    files = processor.collect_files(args.paths, args.recursive)
    if not files:
        print("No XML files found", file=sys.stderr)
        return 1

    if args.merge:
        results = [processor.process_merged(files)]
    else:
        results = processor.process_files(files)

    chunks: List[str] = []
    json_items: List[Dict[str, Any]] = []
    for result in results:
        if not result.success:
            _report_failure(result)
            if output_format == "json":
                json_items.append({"file": result.source, "success": False,
                                   "error": str(result.error)})
            continue
        if output_format == "json":
            json_items.append({"file": result.source, "success": True,
                               "tree": result.tree.to_dict(
                                   config.thinning_config.tree.child_order)})
        elif len(results) > 1:
            chunks.append(f"<!-- {result.source} -->\n{processor.render(result, output_format)}")
        else:
            chunks.append(processor.render(result, output_format))

    if output_format == "json":
        payload = json_items[0] if args.merge and json_items else json_items
        try:
            formatted_output = json.dumps(payload, indent=2, ensure_ascii=False)
        except RecursionError:
            print("Error: Tree nesting is too deep for JSON output; "
                  "use the skeleton format instead", file=sys.stderr)
            return 1
    else:
        formatted_output = "".join(chunks).rstrip("\n")

    if args.output:
        try:
            args.output.write_text(formatted_output + "\n", encoding="utf-8")
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
        if not config.quiet:
            print(f"Results written to {args.output}", file=sys.stderr)
    elif formatted_output:
        print(formatted_output)

    return 0 if all(result.success for result in results) else 1


def cmd_stats(args: argparse.Namespace) -> int:
    """Handle stats command."""
    config = load_config(args)
    processor = ThinProcessor(config)
    files = processor.collect_files(args.paths, args.recursive)
    if not files:
        print("No XML files found", file=sys.stderr)
        return 1

    results = processor.process_files(files)
    print(format_stats(results, args.format))
    return 0 if all(result.success for result in results) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        configure_logging("DEBUG")
    elif args.quiet:
        configure_logging("ERROR")

    try:
        if args.command == "thin":
            return cmd_thin(args)
        elif args.command == "stats":
            return cmd_stats(args)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 1
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
