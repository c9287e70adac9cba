#!/usr/bin/env python
"""
CLI for running a softener sizing calculation.

Reads raw field values from a JSON file and/or --set FIELD=VALUE pairs,
runs the twelve-step calculation and prints the result as JSON, a
Markdown report, or the plain-text summary.

Example:
    softener-sizer --set hardness_value=300 --set gallons_per_day=10000 \\
        --set days_between_regen=2 --set peak_flow_gpm=50 --format summary
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .core_config import CONFIG
from .exceptions import InvalidSizingInputError, SofteningDesignError
from .mcp_types import ResponseFormat
from .schemas import build_sizing_input, resolve_field_name
from .sizing_calculator import compute_sizing
from .sizing_report import build_report, build_summary_text

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("json", "markdown", "summary")


def load_input_file(input_file: str) -> Dict[str, Any]:
    """
    Load raw field values from a JSON file.

    Raises:
        InvalidSizingInputError: If the file is not a JSON object
    """
    logger.info(f"Loading input from {input_file}...")
    with open(input_file, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidSizingInputError(
                f"Invalid JSON in {input_file}: {e.msg} (line {e.lineno})",
                hint="Input file must contain a JSON object of field values"
            ) from e

    if not isinstance(data, dict):
        raise InvalidSizingInputError(
            f"Input file {input_file} must contain a JSON object, got {type(data).__name__}",
            hint="Input file must contain a JSON object of field values"
        )
    return data


def parse_overrides(pairs: Sequence[str]) -> Dict[str, str]:
    """
    Parse FIELD=VALUE pairs. Values stay raw strings; an empty value means
    the field is cleared.

    Raises:
        InvalidSizingInputError: If a pair has no '='
    """
    overrides = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name.strip():
            raise InvalidSizingInputError(
                f"Invalid --set value: {pair!r}",
                hint="Use --set FIELD=VALUE, e.g. --set hardness_value=300"
            )
        overrides[name.strip()] = value
    return overrides


def run_sizing(raw: Dict[str, Any], output_format: str = "json") -> str:
    """
    Run the sizing calculation and render it in the requested format.

    Args:
        raw: Raw field values
        output_format: 'json', 'markdown' or 'summary'

    Returns:
        Rendered output text
    """
    inputs = build_sizing_input(raw)
    result = compute_sizing(inputs)

    if output_format == "summary":
        return build_summary_text(result)
    if output_format == "markdown":
        return build_report(result, ResponseFormat.MARKDOWN, inputs=inputs)
    return json.dumps(build_report(result, ResponseFormat.JSON, inputs=inputs), indent=2, ensure_ascii=False)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='softener-sizer',
        description='Size an industrial water softener from water quality and operating inputs'
    )
    parser.add_argument(
        '--input',
        help='Path to a JSON file of field values (omitted fields use form defaults)'
    )
    parser.add_argument(
        '--set',
        dest='overrides',
        action='append',
        default=[],
        metavar='FIELD=VALUE',
        help='Set a field value; may be repeated and overrides --input'
    )
    parser.add_argument(
        '--format',
        choices=OUTPUT_FORMATS,
        default='json',
        help='Output format (default: json)'
    )
    parser.add_argument(
        '--output',
        help='Write output to this file instead of stdout'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log each step at DEBUG level'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else CONFIG.get_log_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        # Merge on canonical names so --set wins over either spelling in the file
        raw: Dict[str, Any] = {}
        if args.input:
            raw.update(
                (resolve_field_name(key), value) for key, value in load_input_file(args.input).items()
            )
        raw.update(
            (resolve_field_name(key), value) for key, value in parse_overrides(args.overrides).items()
        )

        output = run_sizing(raw, args.format)
    except SofteningDesignError as e:
        logger.error(f"Sizing failed: {e}")
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 2
    except OSError as e:
        logger.error(f"Could not read input: {e}")
        return 2

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(output + "\n", encoding='utf-8')
        logger.info(f"Results saved to {output_path}")
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
