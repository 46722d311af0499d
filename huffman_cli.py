#!/usr/bin/env python3
"""
Command-line front end for the Huffman compressor.

Run with:
    huffman-compressor encode notes.txt               # writes notes.txt.huff
    huffman-compressor decode notes.txt.huff -o notes.txt
    huffman-compressor -e notes.txt --header-format text -v
"""
import argparse
import logging
import os
import sys

from huffman_config import HEADER_FORMATS, load_config
from huffman_errors import HuffmanError
from huffman_service import HuffmanService

logger = logging.getLogger(__name__)

COMPRESSED_SUFFIX = ".huff"
DECOMPRESSED_SUFFIX = ".out"

EXIT_OK = 0
EXIT_CODEC_ERROR = 1
EXIT_IO_ERROR = 2


def default_output_path(command, input_path):
    if command == "encode":
        return input_path + COMPRESSED_SUFFIX
    if input_path.endswith(COMPRESSED_SUFFIX) and len(input_path) > len(COMPRESSED_SUFFIX):
        return input_path[:-len(COMPRESSED_SUFFIX)]
    return input_path + DECOMPRESSED_SUFFIX


def build_parser():
    parser = argparse.ArgumentParser(
        prog="huffman-compressor",
        description="Encodes/decodes files with Huffman coding",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    for command, alias, help_text in (
        ("encode", "e", "Encode the input file"),
        ("decode", "d", "Decode the input file"),
    ):
        sub = subparsers.add_parser(command, aliases=[alias], help=help_text)
        sub.set_defaults(command=command)
        sub.add_argument("input", help="Path of the file to read")
        sub.add_argument(
            "-o", "--output",
            default=None,
            help="Path to write (default: derived from the input path)",
        )
        sub.add_argument(
            "--header-format",
            choices=HEADER_FORMATS,
            default=None,
            help="Frequency table layout (default: binary, or $HUFFMAN_HEADER_FORMAT)",
        )
        sub.add_argument(
            "-v", "--verbose",
            action="count",
            default=0,
            help="Log progress (-v) or codec details (-vv)",
        )
    return parser


def normalize_argv(argv):
    # The short flags -e/-d mirror the subcommand aliases.
    if argv and argv[0] in ("-e", "-d"):
        return [argv[0][1:]] + list(argv[1:])
    return list(argv)


def configure_logging(verbose, config):
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.getLevelName(config.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run(args, config):
    service = HuffmanService(config)
    output_path = args.output or default_output_path(args.command, args.input)

    with open(args.input, "rb") as source:
        if args.command == "encode":
            result = service.compress(source)
        else:
            result = service.decompress(source)

    with open(output_path, "wb") as sink:
        sink.write(result)

    original_size = os.path.getsize(args.input)
    logger.info("%sd %s (%d bytes) -> %s (%d bytes)", args.command, args.input, original_size, output_path, len(result))
    if args.command == "encode" and original_size:
        ratio = 100 * (1 - len(result) / original_size)
        print(f"{args.input} -> {output_path}: {ratio:.2f}% reduction")
    else:
        print(f"{args.input} -> {output_path}")
    return EXIT_OK


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(normalize_argv(sys.argv[1:] if argv is None else argv))

    try:
        config = load_config(header_format=args.header_format)
    except ValueError as e:
        parser.error(str(e))
    configure_logging(args.verbose, config)

    try:
        return run(args, config)
    except HuffmanError as e:
        logger.debug("codec failure", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_CODEC_ERROR
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_IO_ERROR


if __name__ == "__main__":
    sys.exit(main())
