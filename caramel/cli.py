#!/usr/bin/env python3
"""
Command-line interface for caramel - Java class file decoder.
"""

import argparse
import sys
import zipfile
from concurrent.futures import ThreadPoolExecutor


def _error_message(name: str, error: Exception) -> str:
    message = f"Error decoding {name}: {type(error).__name__}: {error}"
    state = getattr(error, "state", None)
    if state is not None:
        message += f" (while reading {state.description})"
    return message


def _options_from_args(args):
    from .classfile import DecodeOptions

    return DecodeOptions(
        wide_constants_take_two_slots=not args.single_slot_wide,
        check_utf8_names=not args.no_name_check,
    )


def _load_inputs(files: list[str]) -> tuple[list[tuple[str, bytes]], int]:
    """Read every input; returns the buffers and the number of failures."""
    from .loader import iter_class_entries

    inputs = []
    failures = 0
    for source in files:
        try:
            inputs.extend(iter_class_entries(source))
        except (OSError, zipfile.BadZipFile) as e:
            print(f"Error: {e}", file=sys.stderr)
            failures += 1
    return inputs, failures


def _decode_inputs(inputs, options, jobs: int):
    """Decode buffers independently; results keep input order."""
    from .classfile import decode_class
    from .errors import ClassFileError

    def decode_one(item):
        name, data = item
        try:
            return name, decode_class(data, options), None
        except ClassFileError as e:
            return name, None, e

    if jobs > 1 and len(inputs) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            return list(executor.map(decode_one, inputs))
    return [decode_one(item) for item in inputs]


def _run(args, render) -> int:
    """Load, decode and render every input; returns the failure count."""
    from .errors import ClassFileError
    from .report import format_header

    inputs, failures = _load_inputs(args.files)
    results = _decode_inputs(inputs, _options_from_args(args), args.jobs)

    for name, unit, error in results:
        if error is not None:
            print(_error_message(name, error), file=sys.stderr)
            failures += 1
            continue

        if len(results) > 1:
            print(f"== {name}")
        if args.verbose:
            for line in format_header(unit):
                print(line)
        try:
            output = render(name, unit)
        except ClassFileError as e:
            print(_error_message(name, e), file=sys.stderr)
            failures += 1
            continue
        if output:
            print(output)

    if getattr(args, "summary", False) and not args.quiet:
        decoded = len(results) - sum(1 for _, _, error in results if error is not None)
        print(f"Decoded {decoded} class(es), {failures} failure(s)")
    return failures


def dump_command(args) -> int:
    """Print a readable summary of each class."""
    from .descriptor import DescriptorParser
    from .report import format_class

    parser = DescriptorParser()

    def render(name, unit):
        # with -v the header lines were already printed
        return format_class(unit, parser, header=not args.verbose)

    return _run(args, render)


def pool_command(args) -> int:
    """Print the constant pool of each class."""
    from .report import format_constant_pool

    return _run(args, lambda name, unit: format_constant_pool(unit.constant_pool))


def check_command(args) -> int:
    """Decode each class and report whether it is well-formed."""
    return _run(args, lambda name, unit: f"OK {name}")


def main(argv=None):
    """Main entry point for caramel CLI."""
    parser = argparse.ArgumentParser(
        prog="caramel",
        description="Decode Java class files and print their structure",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "files",
        nargs="+",
        help="Class files, or .jar/.zip archives of class files",
    )
    common.add_argument(
        "--single-slot-wide",
        action="store_true",
        help="Let Long/Double constants take one pool slot instead of two",
    )
    common.add_argument(
        "--no-name-check",
        action="store_true",
        help="Don't resolve attribute and member names while decoding",
    )
    common.add_argument(
        "-j", "--jobs",
        type=int,
        default=1,
        help="Number of classes to decode in parallel (default: 1)",
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print version and constant pool count for each class",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    dump_parser = subparsers.add_parser(
        "dump",
        parents=[common],
        help="Print a summary of each class",
    )
    dump_parser.set_defaults(func=dump_command)

    pool_parser = subparsers.add_parser(
        "pool",
        parents=[common],
        help="Print the constant pool of each class",
    )
    pool_parser.set_defaults(func=pool_command)

    check_parser = subparsers.add_parser(
        "check",
        parents=[common],
        help="Only decode, reporting malformed classes",
    )
    check_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress summary output",
    )
    check_parser.set_defaults(func=check_command, summary=True)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    failures = args.func(args)
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
