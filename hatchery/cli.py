"""
Hatchery CLI - Command-line interface for the engine.

Usage:
    hatchery validate [content_dir]           Validate event/footnote/name content
    hatchery simulate --policy reform -n 100  Autoplay seeded runs, print balance stats
    hatchery new --seed 42 --slot demo        Start a run and save it to a slot
    hatchery serve --port 8000                Run the REST API
"""

import argparse
import json
import sys

from .config import configure_logging, load_settings


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Hatchery - Union Federation Simulation Engine",
        prog="hatchery",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate content files")
    validate_parser.add_argument(
        "content_dir", nargs="?", default=None,
        help="Directory with events/footnotes/nameParts JSON (default: bundled content)",
    )

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Autoplay runs for balance stats")
    simulate_parser.add_argument(
        "--policy", choices=["random", "reform", "all"], default="all",
        help="Bot policy to play with",
    )
    simulate_parser.add_argument("--runs", "-n", type=int, default=100, help="Runs per policy")
    simulate_parser.add_argument("--seed", type=int, default=0, help="Seed of the first run")
    simulate_parser.add_argument("--json", action="store_true", help="Print stats as JSON")

    # New command
    new_parser = subparsers.add_parser("new", help="Start a run and optionally save it")
    new_parser.add_argument("--seed", type=int, default=None, help="Run seed")
    new_parser.add_argument("--slot", default=None, help="Save slot to write")
    new_parser.add_argument("--tips", action="store_true", help="Enable tutorial tips")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)

    if args.command == "validate":
        return cmd_validate(args, settings)
    elif args.command == "simulate":
        return cmd_simulate(args, settings)
    elif args.command == "new":
        return cmd_new(args, settings)
    elif args.command == "serve":
        return cmd_serve(args, settings)
    else:
        parser.print_help()
        return 1


def cmd_validate(args, settings):
    """Validate content and report every problem found."""
    from .content import ContentValidationError, read_raw_content, validate_content

    content_dir = args.content_dir or settings.content_dir
    print(f"Validating: {content_dir or 'bundled content'}")

    try:
        raw = read_raw_content(content_dir)
    except ContentValidationError as e:
        for error in e.errors:
            print(f"  ERROR: {error}")
        return 1

    result = validate_content(*raw)

    for warning in result.warnings:
        print(f"  WARNING: {warning}")
    for error in result.errors:
        print(f"  ERROR: {error}")

    if not result.valid:
        print(f"Invalid: {len(result.errors)} error(s)")
        return 1

    bundle = result.bundle
    print(
        f"Valid: {len(bundle.events)} events, {len(bundle.footnotes)} footnotes, "
        f"{len(bundle.name_parts.prefixes)} name prefixes"
    )
    return 0


def cmd_simulate(args, settings):
    """Autoplay seeded runs and print win rate, cycles and delegates."""
    from .content import load_content
    from .session.autoplay import simulate

    if args.runs < 1:
        print("Error: --runs must be at least 1")
        return 1

    content = load_content(settings.content_dir, strict=settings.strict_content)
    policies = ["random", "reform"] if args.policy == "all" else [args.policy]

    all_stats = [simulate(name, content, runs=args.runs, base_seed=args.seed) for name in policies]

    if args.json:
        print(json.dumps([s.to_dict() for s in all_stats], indent=2))
        return 0

    for stats in all_stats:
        print(f"\nRESULTS for {stats.policy} ({stats.runs} runs from seed {args.seed}):")
        print(f"  Win Rate: {stats.win_rate:.1f}% ({stats.wins} wins)")
        print(f"  Endings: {dict(stats.endings)}")
        print(f"  Avg Cycles: {stats.avg_cycles:.1f}")
        print(f"  Avg Delegates: {stats.avg_delegates:.1f}")
    return 0


def cmd_new(args, settings):
    """Start a run; with --slot, save it for later."""
    from .content import load_content
    from .persistence import SaveStore
    from .session import SessionManager

    content = load_content(settings.content_dir, strict=settings.strict_content)
    store = SaveStore(settings.save_dir) if args.slot else None
    manager = SessionManager(content, store=store)

    session = manager.create_run(seed=args.seed, show_tips=args.tips)
    state = session.state

    print(f"Run created: seed {state.seed}, cycle {state.cycle}/{state.max_cycles}")
    resources = state.resources
    print(
        f"  Paperwork {resources.paperwork}  Patronage {resources.patronage}  "
        f"Legitimacy {resources.legitimacy}  Audit {resources.audit_risk}  "
        f"Heat {resources.street_heat}"
    )

    if args.slot:
        try:
            path = manager.save_run(session.run_id, args.slot)
        except ValueError as e:
            print(f"Error: {e}")
            return 1
        print(f"Saved to {path}")
    return 0


def cmd_serve(args, settings):
    """Run the API with uvicorn."""
    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn not installed. Install with: pip install uvicorn")
        return 1

    from .api.app import create_app

    uvicorn.run(create_app(settings=settings), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
