"""
CLI entry point for the favorite picker.

Parses arguments, validates config, wires components and runs a session.
"""

import argparse
import json
import sys
from argparse import Namespace
from pathlib import Path
from typing import TypedDict

from prettytable import PrettyTable

from .catalog import ItemCatalog
from .choosers import InteractiveChooser, SimulatedChooser
from .exceptions import ConfigurationError, ValidationError
from .interfaces import Chooser
from .loaders import JSONCatalogLoader
from .logging_config import get_logger, setup_logging
from .models import ItemId
from .runner import PickerRunner, RunConfig, RunSummary
from .session import PickerConfig, PickerSession


class CLIArgs(TypedDict):
    """Typed representation of parsed CLI arguments."""
    items: str
    state_file: str | None
    state_key: str
    shortcode_length: int | None
    history_length: int
    chooser: str
    scores: str | None
    noise: float
    pick_count: int
    max_decisions: int | None
    shared: str | None
    reset: bool
    debug: bool
    log_level: str
    log_dir: str | None


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Favorite Picker - find your favorites by elimination"
    )

    # Required arguments
    _ = parser.add_argument(
        "--items",
        required=True,
        help="Path to a JSON file with the item catalog"
    )

    # State and sharing
    _ = parser.add_argument(
        "--state-file",
        default=None,
        help="JSON file to save progress to (default: progress is not saved)"
    )
    _ = parser.add_argument(
        "--state-key",
        default="favorite-picker",
        help="Key for this picker inside the state file (default: favorite-picker)"
    )
    _ = parser.add_argument(
        "--shortcode-length",
        type=int,
        default=None,
        help="Fixed shortcode width of the items; enables share links"
    )
    _ = parser.add_argument(
        "--history-length",
        type=int,
        default=3,
        help="Number of undo steps to keep (default: 3)"
    )
    _ = parser.add_argument(
        "--shared",
        default=None,
        help="Share link query string (e.g. '?favs=aabb') to start from; "
        "ignored when resuming saved progress unless --reset is given"
    )
    _ = parser.add_argument(
        "--reset",
        action="store_true",
        help="Discard saved progress and start over"
    )

    # Chooser
    _ = parser.add_argument(
        "--chooser",
        choices=["interactive", "simulated"],
        default="interactive",
        help="Who makes the picks (default: interactive)"
    )
    _ = parser.add_argument(
        "--scores",
        default=None,
        help="JSON file mapping item id to score, for the simulated chooser"
    )
    _ = parser.add_argument(
        "--noise",
        type=float,
        default=0.0,
        help="Noise level for the simulated chooser (0-1, default: 0)"
    )
    _ = parser.add_argument(
        "--pick-count",
        type=int,
        default=1,
        help="Items the simulated chooser picks per batch (default: 1)"
    )
    _ = parser.add_argument(
        "--max-decisions",
        type=int,
        default=None,
        help="Stop after this many pick/pass decisions"
    )

    # Logging
    _ = parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Set logging level (default: WARNING)"
    )
    _ = parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for log files (default: no log files)"
    )

    return parser.parse_args(argv)


def args_to_typed(ns: Namespace) -> CLIArgs:
    """Convert argparse Namespace to typed CLIArgs."""
    return CLIArgs(
        items=ns.items,
        state_file=ns.state_file,
        state_key=ns.state_key,
        shortcode_length=ns.shortcode_length,
        history_length=ns.history_length,
        chooser=ns.chooser,
        scores=ns.scores,
        noise=ns.noise,
        pick_count=ns.pick_count,
        max_decisions=ns.max_decisions,
        shared=ns.shared,
        reset=ns.reset,
        debug=ns.debug,
        log_level=ns.log_level,
        log_dir=ns.log_dir,
    )


def validate_config(args: CLIArgs) -> None:
    """
    Validate configuration parameters.

    Raises:
        ConfigurationError: On inconsistent arguments
    """
    if not Path(args["items"]).exists():
        raise ConfigurationError(f"Items file does not exist: {args['items']}")
    if args["chooser"] == "simulated" and args["scores"] is None:
        raise ConfigurationError("The simulated chooser needs --scores")
    if args["history_length"] < 0:
        raise ConfigurationError(f"history_length must be >= 0, got {args['history_length']}")
    if args["max_decisions"] is not None and args["max_decisions"] <= 0:
        raise ConfigurationError(f"max_decisions must be positive, got {args['max_decisions']}")


def load_scores(path: Path, catalog: ItemCatalog) -> dict[ItemId, float]:
    """
    Load simulated-chooser scores keyed by catalog id.

    JSON object keys are strings, so they are matched against ``str(id)``.
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValidationError(f"Scores file {path} must contain a JSON object")

    by_key = {str(item_id): item_id for item_id in catalog.ids()}
    return {by_key[key]: float(value) for key, value in raw.items() if key in by_key}


def wire_components(args: CLIArgs) -> tuple[PickerSession, Chooser, RunConfig]:
    """Wire dependency injection components."""
    logger = get_logger("wire_components")

    logger.info("Loading catalog")
    catalog = JSONCatalogLoader(Path(args["items"]), shortcode_length=args["shortcode_length"]).load()

    config = PickerConfig(
        history_length=args["history_length"],
        shortcode_length=args["shortcode_length"],
        local_storage_key=args["state_key"] if args["state_file"] else None,
        storage_path=Path(args["state_file"]) if args["state_file"] else None,
    )
    session = PickerSession(catalog, config=config)

    chooser: Chooser
    if args["chooser"] == "simulated":
        assert args["scores"] is not None, "scores must be set by validate_config"
        scores = load_scores(Path(args["scores"]), catalog)
        chooser = SimulatedChooser(scores, noise=args["noise"], pick_count=args["pick_count"])
        logger.info(f"Simulated chooser created with {len(scores)} scores, noise={args['noise']}")
    else:
        chooser = InteractiveChooser()

    return session, chooser, RunConfig(max_decisions=args["max_decisions"])


def print_favorites(session: PickerSession) -> None:
    """Print the found favorites as a table, plus the share link if available."""
    favorites = session.get_favorites()
    if not favorites:
        print("No favorites found yet.")
        return

    table = PrettyTable()
    table.field_names = ["Rank", "Id", "Name", "Shortcode"]
    table.align["Rank"] = "r"
    table.align["Name"] = "l"
    for rank, item in enumerate(favorites, 1):
        table.add_row([rank, item.id, item.display_name, item.shortcode or ""])
    print(table)

    if session.catalog.shortcode_length is not None:
        print(f"Share link: {session.get_shortcode_link()}")


def print_summary(session: PickerSession, summary: RunSummary) -> None:
    if summary.finished:
        if session.has_items():
            print("\nYou have ordered every available item!")
        else:
            print("\nThere are no items that fit your criteria!")
    else:
        remaining = len(session.engine.items) - len(session.engine.favorites)
        print(f"\nStopped after {summary.decisions} decisions; {remaining} items left to place.")
    print()
    print_favorites(session)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = args_to_typed(parse_args(argv))
    setup_logging(
        level=args["log_level"],
        debug=args["debug"],
        log_dir=Path(args["log_dir"]) if args["log_dir"] else None,
    )
    logger = get_logger("main")

    try:
        validate_config(args)
        session, chooser, run_config = wire_components(args)
    except (ConfigurationError, ValidationError, FileNotFoundError) as e:
        logger.error(f"Invalid configuration: {e}")
        print(f"Error: {e}")
        sys.exit(1)

    if args["reset"]:
        session.reset()

    if args["shared"]:
        shared = session.get_shared_favorites(args["shared"])
        if shared is None:
            print("Error: the shared link could not be read (is --shortcode-length set?)")
            sys.exit(1)
        if session.is_untouched():
            print(f"Starting from a shared list of {len(shared)} favorites")
            session.reset_to_favorites([item.id for item in shared])
        else:
            logger.warning("Ignoring --shared: saved progress exists (use --reset to start from the shared list)")
            print("Keeping saved progress; pass --reset to start from the shared list instead")

    print("Favorite Picker")
    print("=" * 60)
    print(f"Items: {len(session.catalog)} ({len(session.engine.items)} in play)")
    print(f"Favorites so far: {len(session.engine.favorites)}")
    print("=" * 60)

    try:
        summary = PickerRunner(session, chooser, run_config).run()
    except KeyboardInterrupt:
        logger.warning("Picker interrupted by user")
        print("\nPicker interrupted by user")
        sys.exit(1)

    print_summary(session, summary)


if __name__ == "__main__":
    main()
