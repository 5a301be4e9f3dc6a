"""
zkevm command line.

Runs a piece of bytecode in a single frame and prints the outcome as JSON:

    zkevm --code 6003600401 [--calldata ..] [--env run.json] [--trace]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from eth_utils import decode_hex

from zkevm.common.config import DEFAULT_CONFIG, load_run_file
from zkevm.vm.environment import Environment
from zkevm.vm.errors import ConfigError
from zkevm.vm.hooks import TraceHook
from zkevm.vm.interpreter import execute

logger = logging.getLogger("zkevm")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_INPUT = 2


def parse_hex_bytes(value: str) -> bytes:
    """Decode a hex string with or without the 0x prefix."""
    value = value.strip()
    if len(value.removeprefix("0x")) % 2:
        raise ConfigError(f"Odd-length hex string: {value!r}")
    try:
        return decode_hex(value)
    except ValueError:
        raise ConfigError(f"Invalid hex string: {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zkevm",
        description="Execute EVM bytecode in a single frame",
    )
    code = parser.add_mutually_exclusive_group(required=True)
    code.add_argument(
        "--code",
        type=str,
        help="Hex-encoded bytecode",
    )
    code.add_argument(
        "--code-file",
        type=str,
        help="Path to a file holding hex-encoded bytecode",
    )
    parser.add_argument(
        "--calldata",
        type=str,
        default="",
        help="Hex-encoded calldata (default: empty)",
    )
    parser.add_argument(
        "--env",
        type=str,
        default=None,
        help="Path to a JSON file with the environment and limits",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Include the per-step execution trace in the output",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        if args.code_file:
            code_text = Path(args.code_file).read_text()
        else:
            code_text = args.code
        code = parse_hex_bytes(code_text)
        calldata = parse_hex_bytes(args.calldata)

        if args.env:
            env, config = load_run_file(Path(args.env))
            logger.info("Loaded environment from %s", args.env)
        else:
            env, config = Environment(), DEFAULT_CONFIG
    except (ConfigError, OSError) as e:
        logger.error("%s", e)
        sys.exit(EXIT_BAD_INPUT)

    hook = TraceHook() if args.trace else None
    result = execute(code, calldata, env=env, config=config, hook=hook)

    output = result.to_json()
    if hook is not None:
        output["trace"] = [step.to_json() for step in hook.steps]
    print(json.dumps(output, indent=2))

    sys.exit(EXIT_OK if result.success else EXIT_FAILED)


if __name__ == "__main__":
    main()
