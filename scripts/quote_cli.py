"""
Print a Yannova price estimate from the command line.

Uses the same calculation as the /api/ai-tools/generate-quote endpoint, so it
is handy for checking a price a customer was given.

Usage:
  python scripts/quote_cli.py --project-type isolatiewerken --size 100
  python scripts/quote_cli.py --project-type renovatiewerken --size 200 --complexity complex --urgency asap --json
"""

from __future__ import annotations

import argparse
import json
import os
import sys

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import structlog  # noqa: E402

from config.logging_config import configure_logging  # noqa: E402
from models.quote import Complexity, ProjectType, QuoteResult, Urgency  # noqa: E402
from services.quote_calculator import calculate_quote  # noqa: E402

logger = structlog.get_logger()


def _format_euro(amount: int) -> str:
    # 28800 -> "€ 28.800"
    return "€ " + f"{amount:,}".replace(",", ".")


def format_quote(quote: QuoteResult) -> str:
    """Human readable quote summary."""
    lines = [
        f"Project:      {quote.project_type} ({quote.size} m²)",
        f"Complexiteit: {quote.complexity or '-'}",
        f"Urgentie:     {quote.urgency or '-'}",
    ]
    if quote.location:
        lines.append(f"Locatie:      {quote.location}")
    lines.extend([
        "",
        f"Materialen:   {_format_euro(quote.materials_cost)}",
        f"Arbeid:       {_format_euro(quote.labor_cost)}",
        f"Totaal:       {_format_euro(quote.total_cost)}",
        f"Duur:         {quote.duration} dag(en)",
        "",
        "Materialen uitgesplitst:",
    ])
    for item in quote.breakdown:
        lines.append(f"  - {item.item}: {_format_euro(item.cost)}")
    lines.append("")
    lines.append(f"Geldig tot:   {quote.valid_until.isoformat()}")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Calculate a Yannova price estimate")
    parser.add_argument(
        "--project-type",
        required=True,
        help=f"Project category ({', '.join(t.value for t in ProjectType.known())})",
    )
    parser.add_argument("--size", required=True, type=float, help="Project size in m²")
    parser.add_argument(
        "--complexity",
        default=Complexity.SIMPLE.value,
        help="simple | medium | complex (default: simple)",
    )
    parser.add_argument(
        "--urgency",
        default=Urgency.NORMAL.value,
        help="normal | urgent | asap (default: normal)",
    )
    parser.add_argument("--location", required=False, help="Free text location")
    parser.add_argument("--json", action="store_true", help="Print the API JSON instead of a summary")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.size <= 0:
        print("Size must be greater than 0", file=sys.stderr)
        return 2

    # Whole m² are echoed back as integers, like the API does.
    size = int(args.size) if args.size.is_integer() else args.size

    quote = calculate_quote(
        project_type=args.project_type,
        size=size,
        complexity=args.complexity,
        location=args.location,
        urgency=args.urgency,
    )
    logger.debug("cli_quote_calculated", project_type=args.project_type, total_cost=quote.total_cost)

    if args.json:
        print(json.dumps(quote.to_response_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_quote(quote))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
