"""modload command line interface.

Usage:
    modload main.js                       # Load a module file and its imports
    modload -e 'export default 42'        # Load module source given inline
    modload -m util,path --list           # Preload modules, list every record
    modload --locate lib/util             # Print the canonical path only
    modload -p vendor -v main.js          # Extra search directory, tracing on
"""

import argparse
import logging
import os
import sys
import urllib.parse

import modload
from modload import _colorize


def build_parser():
    parser = argparse.ArgumentParser(
        prog="modload",
        description="Resolve and load modules")
    parser.add_argument("-m", "--module", action="append", default=[], metavar="MOD[,MOD]",
        help="Import modules by specifier before the main file")
    parser.add_argument("-I", "--include", action="append", default=[], metavar="FILE",
        help="Load a module file before the main file")
    parser.add_argument("-e", "--eval", metavar="SRC",
        help="Load module source text given on the command line")
    parser.add_argument("-p", "--path", action="append", default=[], metavar="DIR",
        help="Prepend a directory to the module search path")
    parser.add_argument("--on-cycle", choices=modload.CYCLE_POLICIES,
        help="What to do when a circular import is found")
    parser.add_argument("-v", "--verbose", action="count", default=0,
        help="Trace resolution steps (repeat for more detail)")
    parser.add_argument("--list", action="store_true",
        help="List every module record after loading")
    parser.add_argument("--locate", metavar="NAME",
        help="Print the canonical path of a specifier without loading it")
    parser.add_argument("file", nargs="?",
        help="Main module file")
    parser.add_argument("args", nargs=argparse.REMAINDER,
        help="Arguments visible to modules through the 'process' built-in")
    return parser


def setup_logging(verbosity, stream=None):
    """Send modload log records to stderr with colored level names.

    Returns:
        (logging.Handler) The installed handler, for removal
    """
    stream = stream if stream is not None else sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setFormatter(_colorize.ColorFormatter(_colorize.should_use_color(stream)))
    logger = logging.getLogger("modload")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbosity else logging.WARNING)
    return handler


def eval_specifier(source):
    """Data URI specifier that carries module source text."""
    return "data:text/javascript," + urllib.parse.quote(source, safe="")


def process_module(argv):
    """Native initializer for the 'process' built-in."""
    def init(exports, require):
        exports["argv"] = list(argv)
        exports["cwd"] = os.getcwd()
    return init


def main(argv=None):
    """Command line entry point.

    Returns:
        (int) Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = logging.getLogger("modload")
    level = logger.level
    handler = setup_logging(args.verbose)
    try:
        return run(args)
    finally:
        logger.removeHandler(handler)
        logger.setLevel(level)


def run(args):
    overrides = {}
    if args.on_cycle is not None:
        overrides["on_cycle"] = args.on_cycle
    if args.verbose:
        overrides["verbosity"] = args.verbose
    try:
        config = modload.Config.from_environ(**overrides)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    config.search_path = args.path + config.search_path

    loader = modload.Loader(config)
    script = [args.file] if args.file else []
    loader.builtins.register("process", process_module(script + args.args))

    if args.locate is not None:
        location = loader.locate(args.locate)
        if location is None:
            print(f"NotFound: '{args.locate}': module not found", file=sys.stderr)
            return 1
        print(f"{location.path}\t{location.kind}")
        return 0

    requests = []
    for item in args.module:
        requests.extend(name.strip() for name in item.split(",") if name.strip())
    requests.extend(os.path.abspath(path) for path in args.include)
    if args.eval is not None:
        requests.append(eval_specifier(args.eval))
    if args.file:
        requests.append(os.path.abspath(args.file))

    for specifier in requests:
        try:
            loader.import_module(specifier)
        except modload.LoadError as e:
            print(e.describe(), file=sys.stderr)
            return 1

    if args.list:
        for record in loader.modules:
            print(f"{record.name}\t{record.kind}\t{record.state.value}")
    return 0
