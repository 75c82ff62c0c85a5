"""
Protozoa Formations CLI - inspect pattern families and generate point sets.

Entry point:
    protozoa-formations list       - Pattern families and their tier floors
    protozoa-formations generate   - Print a formation's points as JSON
    protozoa-formations bank       - Load the formation bank and summarize it
"""

import argparse
import json
import sys

from .bank import load_from_files
from .config import get_settings
from .errors import FormationError
from .logging_config import configure_logging
from .models import PatternType, Role, Tier
from .patterns import (
    create_pattern,
    generate_positions,
    generate_sized_positions,
    generate_variant,
    list_patterns,
)


def validate_tier(value: str) -> Tier:
    """Accept ``3``, ``TIER_3`` or ``tier_3``."""
    text = value.strip().upper()
    try:
        if text.isdigit():
            return Tier.from_level(int(text))
        return Tier(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid tier: {value} (expected 1-6)")


def validate_role(value: str) -> Role:
    try:
        return Role(value.strip().upper())
    except ValueError:
        choices = ", ".join(r.value.lower() for r in Role)
        raise argparse.ArgumentTypeError(f"Invalid role: {value} (choose from {choices})")


def validate_pattern(value: str) -> PatternType:
    try:
        return PatternType(value.strip().lower())
    except ValueError:
        choices = ", ".join(p.value for p in PatternType)
        raise argparse.ArgumentTypeError(f"Invalid pattern: {value} (choose from {choices})")


def validate_non_negative_int(value: str) -> int:
    try:
        num = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}")

    if num < 0:
        raise argparse.ArgumentTypeError(f"Value must not be negative, got: {num}")
    return num


def cmd_list(args) -> int:
    for entry in list_patterns():
        variants = f" [variants: {entry['variants']}]" if entry["variants"] else ""
        print(f"  {entry['id']:<12} {entry['min_tier']:<8} {entry['description']}{variants}")
    return 0


def cmd_generate(args) -> int:
    pattern = create_pattern(args.pattern, args.role, args.tier)
    if args.variant:
        positions = generate_variant(pattern, args.seed, args.variant)
        if args.count is not None:
            positions = positions[: args.count]
    elif args.count is not None:
        positions = generate_sized_positions(pattern, args.seed, args.count)
    else:
        positions = generate_positions(pattern, args.seed)

    output = {
        "pattern": pattern.to_dict(),
        "seed": args.seed,
        "count": len(positions),
        "positions": [list(p.as_tuple()) for p in positions],
    }
    print(json.dumps(output, indent=args.indent))
    return 0


def cmd_bank(args) -> int:
    bank = load_from_files(args.data_path, seed=args.seed)
    print(f"{len(bank)} formations")
    for role in Role:
        formations = bank.get_formations_by_role(role)
        print(f"  {role.value:<9} {len(formations)}")
        if args.verbose:
            for formation in formations:
                print(f"    {formation.id:<32} {formation.name:<22} {formation.pattern.type.value}")
    return 0


def main(argv=None):
    """Main entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="protozoa-formations",
        description="Protozoa Formations - deterministic particle formation generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  protozoa-formations list
  protozoa-formations generate --pattern spiral --role attack --tier 3 --seed 42
  protozoa-formations generate --pattern sphere --role core --tier 1 --count 50
  protozoa-formations generate --pattern helix --role control --tier 4 --variant triple
  protozoa-formations bank --data-path ./data --verbose
        """,
    )
    parser.add_argument(
        "--log-level", default=settings.log_level, help="Logging level (default: %(default)s)"
    )
    parser.add_argument(
        "--log-json", action="store_true", default=settings.log_json, help="Emit JSON log lines"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List pattern families").set_defaults(func=cmd_list)

    gen = subparsers.add_parser("generate", help="Generate formation points as JSON")
    gen.add_argument("--pattern", "-p", type=validate_pattern, required=True)
    gen.add_argument("--role", "-r", type=validate_role, required=True)
    gen.add_argument("--tier", "-t", type=validate_tier, required=True)
    gen.add_argument(
        "--seed", "-s", type=int, default=settings.default_seed,
        help="Random seed (default: %(default)s)",
    )
    gen.add_argument(
        "--count", "-n", type=validate_non_negative_int, default=None,
        help="Exact point budget (circle, sphere and grid fill it; others are truncated)",
    )
    gen.add_argument("--variant", "-v", default=None, help="Named variant, e.g. double, fractal")
    gen.add_argument("--indent", type=int, default=None, help="JSON indent")
    gen.set_defaults(func=cmd_generate)

    bank = subparsers.add_parser("bank", help="Load the formation bank and summarize it")
    bank.add_argument(
        "--data-path", "-d", default=settings.data_path,
        help="Data directory containing formations/ (default: %(default)s)",
    )
    bank.add_argument("--seed", "-s", type=int, default=settings.default_seed)
    bank.add_argument("--verbose", action="store_true", help="List every formation")
    bank.set_defaults(func=cmd_bank)

    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_json)

    try:
        return args.func(args)
    except FormationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
