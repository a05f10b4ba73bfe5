"""Extract translatable strings from templates and scripts into a .pot file.

Usage:
    ng-gettext-extract src/
    ng-gettext-extract src/ --output po/template.pot
    ng-gettext-extract index.html app.js --marker-name _ --marker-name tr
    ng-gettext-extract src/ --config extract.json --no-line-numbers
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .catalog import IncompatiblePluralError
from .config import ExtractorOptions, load_options
from .extractor import Extractor

DEFAULT_OUTPUT = Path("template.pot")
DEFAULT_EXCLUDE_DIR_NAMES = {
    ".git",
    "node_modules",
    "bower_components",
    "dist",
    "build",
    "coverage",
    ".venv",
    "venv",
    "__pycache__",
}


def should_exclude(path: Path, root: Path) -> bool:
    rel = path.relative_to(root)
    if any(part.lower() in DEFAULT_EXCLUDE_DIR_NAMES for part in rel.parts):
        return True
    if path.name.lower().endswith(".min.js"):
        return True
    return False


def file_extension(path: Path) -> str:
    return path.suffix.lstrip(".")


def collect_files(inputs: list[Path], extensions: set[str]) -> list[Path]:
    files: list[Path] = []
    seen: set[Path] = set()
    for root in inputs:
        if root.is_file():
            candidates = [root]
        elif root.is_dir():
            candidates = [
                path
                for path in root.rglob("*")
                if path.is_file()
                and file_extension(path) in extensions
                and not should_exclude(path, root)
            ]
        else:
            raise FileNotFoundError(f"Input not found: {root}")
        for path in candidates:
            real = path.resolve()
            if real in seen:
                continue
            seen.add(real)
            files.append(path)
    files.sort()
    return files


def display_path(path: Path, base: Path) -> str:
    try:
        return path.resolve().relative_to(base).as_posix()
    except ValueError:
        return path.as_posix()


def extract_files(
    extractor: Extractor, files: list[Path], base: Path
) -> list[str]:
    errors: list[str] = []
    for path in files:
        name = display_path(path, base)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            errors.append(f"{name}: {exc}")
            continue
        extractor.parse(name, content)
    return errors


def build_options(args: argparse.Namespace) -> ExtractorOptions:
    options = load_options(args.config) if args.config else ExtractorOptions()
    if args.start_delim is not None:
        options.start_delim = args.start_delim
    if args.end_delim is not None:
        options.end_delim = args.end_delim
    if args.marker_name:
        options.marker_name = args.marker_name[0]
        options.marker_names = [*args.marker_name[1:], *options.marker_names]
    if args.line_numbers is not None:
        options.line_numbers = args.line_numbers
    options.validate()
    return options


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract translatable strings from HTML templates and JavaScript into a .pot file."
    )
    parser.add_argument(
        "inputs",
        nargs="*",
        type=Path,
        default=[Path(".")],
        help="Files or directories to scan. Default: current directory.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help=f"Output .pot path. Default: {DEFAULT_OUTPUT}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON options file (start_delim, end_delim, marker_name, marker_names, line_numbers, extensions).",
    )
    parser.add_argument("--start-delim", default=None, help="Interpolation start. Default: {{")
    parser.add_argument("--end-delim", default=None, help="Interpolation end. Default: }}")
    parser.add_argument(
        "--marker-name",
        action="append",
        default=[],
        help="Function name marking translatable strings in scripts. Repeatable; the first is primary.",
    )
    parser.add_argument(
        "--line-numbers",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include line numbers in references.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log skipped inputs.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    options = build_options(args)
    extractor = Extractor(options)
    files = collect_files(args.inputs, set(options.extensions))
    try:
        errors = extract_files(extractor, files, Path.cwd().resolve())
    except IncompatiblePluralError as exc:
        raise SystemExit(f"Error: {exc}") from exc
    content = extractor.to_string()

    output_path = args.output.resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")

    print(f"Scanned files: {len(files)}")
    print(f"Extracted entries: {len(extractor.catalog)}")
    print(f"Output: {output_path}")
    if errors:
        print(f"Warnings: {len(errors)} file(s) could not be read")
        for err in errors[:20]:
            print(f"- {err}")
        if len(errors) > 20:
            print(f"... and {len(errors) - 20} more")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
