"""Main module for the PhotoMetaFixer CLI."""

import sys
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .app import PhotoMetaFixerApp
from .core import get_logger
from .core.exceptions import PhotoMetaFixerError
from .core.factories import LibraryFactory, LoggerFactory, ProcessingPipelineFactory
from .core.image_utils import format_display_date
from .core.logging_config import configure_logging
from .core.models import Album, AssetRef, DateSource, FixerConfig

RED = "\033[31m"
GREEN = "\033[32m"
RESET = "\033[0m"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per user action."""
    parser = argparse.ArgumentParser(
        prog="photo-meta-fixer",
        description="PhotoMetaFixer - rewrite photo capture dates with exiftool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List albums
  photo-meta-fixer --library ~/Pictures/Library albums

  # Show photos of an album with the date that would be applied
  photo-meta-fixer --library ~/Pictures/Library photos --album Holidays

  # Rewrite every photo of an album from its modification date
  photo-meta-fixer --library ~/Pictures/Library apply --album Holidays \\
                   --all --date-source modification --output-dir ./fixed
        """,
    )
    parser.add_argument("--library", type=Path, help="Photo library root directory")
    parser.add_argument(
        "--resources-dir",
        type=Path,
        default=None,
        help="Directory holding the bundled exiftool (default: package resources)",
    )
    parser.add_argument("--temp-dir", type=Path, default=None, help="Directory for temporary exports")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("albums", help="List albums sorted by title")

    photos_parser = subparsers.add_parser("photos", help="List the photos of an album")
    photos_parser.add_argument("--album", required=True, help="Album title or identifier")
    _add_date_source_argument(photos_parser)

    apply_parser = subparsers.add_parser("apply", help="Rewrite capture dates of selected photos")
    apply_parser.add_argument("--album", required=True, help="Album title or identifier")
    selection = apply_parser.add_mutually_exclusive_group(required=True)
    selection.add_argument("--all", action="store_true", help="Select every photo of the album")
    selection.add_argument(
        "--id",
        dest="ids",
        action="append",
        help="Photo identifier or unique identifier prefix (repeatable)",
    )
    _add_date_source_argument(apply_parser)
    apply_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Keep rewritten copies here instead of discarding them",
    )

    thumbnail_parser = subparsers.add_parser("thumbnail", help="Save a photo preview")
    thumbnail_parser.add_argument("--album", required=True, help="Album title or identifier")
    thumbnail_parser.add_argument("--id", required=True, help="Photo identifier or prefix")
    thumbnail_parser.add_argument("--output", type=Path, required=True, help="Image file to write")

    subparsers.add_parser("version", help="Show version information")

    return parser


def _add_date_source_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--date-source",
        type=str,
        default=DateSource.CREATION.value,
        choices=[source.value for source in DateSource],
        help="Timestamp written to the EXIF date fields (default: creation)",
    )


def create_app(args: argparse.Namespace) -> PhotoMetaFixerApp:
    """Wire configuration, library and pipeline from parsed arguments."""
    options: Dict[str, Any] = {
        "library_root": args.library,
        "temp_dir": args.temp_dir,
        "output_dir": getattr(args, "output_dir", None),
        "debug": args.debug,
    }
    if args.resources_dir is not None:
        options["resources_dir"] = args.resources_dir
    config = FixerConfig(**options)
    configure_logging(config)

    logger = LoggerFactory.create_logger("photo-meta-fixer", config.debug)
    library = LibraryFactory.create_library(config)
    orchestrator = ProcessingPipelineFactory.create_pipeline(config, library)
    return PhotoMetaFixerApp(
        library, orchestrator, logger, thumbnail_size=config.thumbnail_size
    )


def print_status(message: str, is_error: bool) -> None:
    """Print a status message, colored when writing to a terminal."""
    if sys.stdout.isatty():
        color = RED if is_error else GREEN
        print(f"{color}{message}{RESET}")
    else:
        print(message)


def resolve_assets(photos: List[AssetRef], requested: List[str]) -> List[AssetRef]:
    """
    Match identifiers or unique identifier prefixes against an album's photos.

    Raises:
        ValueError: If an identifier matches no photo or several photos.
    """
    resolved = []
    for wanted in requested:
        exact = [a for a in photos if a.local_identifier == wanted]
        matches = exact or [a for a in photos if a.local_identifier.startswith(wanted)]
        if not matches:
            raise ValueError(f"No photo matches '{wanted}'")
        if len(matches) > 1:
            raise ValueError(f"Identifier prefix '{wanted}' is ambiguous")
        resolved.append(matches[0])
    return resolved


def _open_album(app: PhotoMetaFixerApp, name: str) -> Album:
    app.load_albums()
    album = app.find_album(name)
    if album is None:
        print(f"Album '{name}' not found.", file=sys.stderr)
        sys.exit(2)
    app.select_album(album)
    return album


def cmd_albums(app: PhotoMetaFixerApp) -> None:
    app.load_albums()
    if app.state.process_message:
        print_status(app.state.process_message, app.status_is_error)
        sys.exit(1)
    if not app.state.albums:
        print("No albums found.")
        return
    for album in app.state.albums:
        print(f"{album.display_title}\t{album.local_identifier}")


def cmd_photos(app: PhotoMetaFixerApp, args: argparse.Namespace) -> None:
    album = _open_album(app, args.album)
    app.set_date_source(DateSource(args.date_source))
    if not app.state.photos:
        print(f"Album '{album.display_title}' is empty.")
        return

    for asset in app.state.photos:
        mark = "[x]" if asset.local_identifier in app.state.selected_ids else "[ ]"
        print(f"{mark} {asset.local_identifier}  {asset.filename or ''}")
        print(f"      Created:  {format_display_date(asset.creation_date)}")
        print(f"      Modified: {format_display_date(asset.modification_date)}")
        print(f"      {app.preview_text(asset)}")


def cmd_apply(app: PhotoMetaFixerApp, args: argparse.Namespace) -> None:
    _open_album(app, args.album)
    app.set_date_source(DateSource(args.date_source))

    if args.all:
        if not app.all_selected:
            app.toggle_select_all()
    else:
        try:
            assets = resolve_assets(app.state.photos, args.ids)
        except ValueError as e:
            print(str(e), file=sys.stderr)
            sys.exit(2)
        for asset in assets:
            if asset.local_identifier not in app.state.selected_ids:
                app.toggle_selection(asset.local_identifier)

    future = app.apply()
    if future is None:
        print("No photo selected.", file=sys.stderr)
        sys.exit(1)

    print(app.state.process_message)
    report = app.wait_for_batch(future, on_update=print_progress)
    print_status(app.state.process_message, app.status_is_error)
    sys.exit(1 if report.failure_count else 0)


def print_progress(message: str) -> None:
    if message.startswith("Processing ["):
        print(message)


def cmd_thumbnail(app: PhotoMetaFixerApp, args: argparse.Namespace) -> None:
    _open_album(app, args.album)
    try:
        asset = resolve_assets(app.state.photos, [args.id])[0]
    except ValueError as e:
        print(str(e), file=sys.stderr)
        sys.exit(2)
    app.thumbnail(asset).save(args.output)
    print(f"Thumbnail written to {args.output}")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the PhotoMetaFixer command-line interface.

    Parses arguments, builds the application controller and dispatches to the
    selected subcommand. Library, configuration and unexpected errors exit
    with status 1; an interrupt exits with 130.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "version":
        print("PhotoMetaFixer CLI")
        print(f"Version {__version__}")
        print("Rewrite photo capture dates with exiftool")
        sys.exit(0)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.library is None:
        parser.error("--library is required for this command")

    logger = get_logger("photo-meta-fixer")

    try:
        with create_app(args) as app:
            if args.command == "albums":
                cmd_albums(app)
            elif args.command == "photos":
                cmd_photos(app, args)
            elif args.command == "apply":
                cmd_apply(app, args)
            elif args.command == "thumbnail":
                cmd_thumbnail(app, args)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        sys.exit(130)
    except PhotoMetaFixerError as e:
        logger.error(f"PhotoMetaFixer failed: {e}", exc_info=True)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
