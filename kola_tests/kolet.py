#!/usr/bin/env python3
"""Run a native function of a registered test on the local machine."""

import argparse
import logging
import sys

from kola_tests.tests import suites

LOGGER = logging.getLogger(__name__)


def get_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Get command line arguments."""
    parser = argparse.ArgumentParser(description=(__doc__ or "").split("\n", maxsplit=1)[0])
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a native function.")
    run_parser.add_argument("test", help="Name of the registered test, e.g. `cl.basic`.")
    run_parser.add_argument("func", help="Name of the native function, e.g. `MachineID`.")

    subparsers.add_parser("list", help="List native functions of all registered tests.")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(format="%(levelname)s:%(message)s", level=logging.INFO)
    args = get_args(argv)
    registry = suites.get_registry()

    if args.command == "list":
        for test in registry:
            for func_name in test.native_funcs:
                print(f"{test.name} {func_name}")  # noqa: T201
        return 0

    try:
        test = registry.get(args.test)
    except KeyError as exc:
        LOGGER.error(exc.args[0])  # noqa: TRY400
        return 1

    func = test.native_funcs.get(args.func)
    if func is None:
        LOGGER.error("Test '%s' has no native function '%s'.", args.test, args.func)
        return 1

    try:
        func()
    except Exception:
        LOGGER.exception("Native function '%s' of '%s' failed.", args.func, args.test)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
