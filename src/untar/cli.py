#!/usr/bin/env python3
"""
Command line entry point: extract one or more ustar archives.
Every archive is handled on its own; a broken archive never stops the others.
"""
import argparse
import sys

from untar import logger
from untar.extractor import untar_path
from untar.manager_config import ConfigManager, SECTION


def build_parser():
    parser = argparse.ArgumentParser(
        prog="untar",
        description="Extract uncompressed ustar archives without any archive library",
    )
    parser.add_argument('archives', nargs='+', metavar='ARCHIVE', help="Archive to extract ('-' reads stdin)")
    parser.add_argument('-C', '--directory', type=str, help='Extract into this directory (default: current directory)')
    parser.add_argument('-c', '--config', type=str, default="", help='JSON config file with an UNTAR section')
    parser.add_argument('--log-file', type=str, help='Append errors and warnings to this file')
    parser.add_argument('--safe-paths', action='store_true', default=None,
                        help="Skip entries with absolute names or '..' components")
    parser.add_argument('--save-config', action='store_true',
                        help='Write the effective settings back to the config file')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='count', default=0, help='More output (repeat for trace)')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only report errors')
    return parser


def load_settings(args):
    """Merge the config file with command line overrides."""
    config = ConfigManager(args.config)
    config.subscribe(f"{SECTION}.DEBUG_LEVEL", logger.set_level)

    logger.initialize(config.get_untar("DEBUG_LEVEL"), config.get_untar("LOG_FILE"))

    if args.quiet:
        config.set(SECTION, "DEBUG_LEVEL", logger.ERROR)
    elif args.verbose:
        config.set(SECTION, "DEBUG_LEVEL", min(logger.INFO + args.verbose, logger.TRACE))
    if args.log_file is not None:
        config.set(SECTION, "LOG_FILE", args.log_file)
        logger.initialize(logger.get_level(), args.log_file)
    if args.directory is not None:
        config.set(SECTION, "DIRECTORY", args.directory)
    if args.safe_paths is not None:
        config.set(SECTION, "SAFE_PATHS", args.safe_paths)

    if args.save_config:
        config.save_config()
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)
    config = load_settings(args)

    extract_to_dir = config.get_untar("DIRECTORY") or None
    safe_paths = bool(config.get_untar("SAFE_PATHS"))

    failures = 0
    for archive in args.archives:
        if not untar_path(archive, extract_to_dir, safe_paths):
            failures += 1

    logger.debug(f"Archives: {len(args.archives)}, Failed: {failures}")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
