import argparse
import logging
import os
import sys
from typing import Optional

from opcalc.parser import ParserError, is_assignment, parse
from opcalc.runtime import CalcRuntimeError, Variables, assign, evaluate
from opcalc.tokenizer import TokenizerError
from opcalc.utils import format_number

logger = logging.getLogger(__name__)

EXIT_COMMAND = "exit"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]
LOG_LEVEL_ENV = "OPCALC_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def run_line(line: str, variables: Variables) -> Optional[str]:
    code = line.strip()
    if not code:
        return None
    expression = parse(code)
    if is_assignment(expression):
        assign(expression, variables)
        return None
    return format_number(evaluate(expression, variables))


def default_log_level() -> str:
    level = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    return level if level in LOG_LEVELS else DEFAULT_LOG_LEVEL


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="opcalc", description="Operator precedence calculator")
    parser.add_argument("--prompt", default=">> ", help="prompt printed before each line")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=default_log_level(),
        help=f"logging level, also settable with {LOG_LEVEL_ENV}",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="don't print the prompt")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s - %(name)s - %(message)s")
    if os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper() not in LOG_LEVELS:
        logger.warning("Ignoring unknown %s=%r, using %s", LOG_LEVEL_ENV, os.environ[LOG_LEVEL_ENV], DEFAULT_LOG_LEVEL)

    variables: Variables = dict()
    prompt = "" if args.quiet else args.prompt

    while True:
        try:
            line = input(prompt)
        except EOFError:
            break
        if line.strip() == EXIT_COMMAND:
            break

        try:
            result = run_line(line, variables)
        except (TokenizerError, ParserError, CalcRuntimeError) as e:
            print(f"Error: {e}", file=sys.stderr)
            continue

        if result is not None:
            print(result)

    logger.debug("Session finished with variables %s", variables)
    return 0


if __name__ == "__main__":
    sys.exit(main())
