#!/usr/bin/env python3
"""
Reverse (and complement) array-like SAM tags for reverse strand alignments.
"""

import argparse
import sys

from revtag import VERSION
from revtag.stream import RevTag
from revtag.tags import InvalidTagName


def get_parser():
    parser = argparse.ArgumentParser(
        prog="revtag",
        description="Reverse (and complement) array-like SAM tags for reverse strand alignments.",
    )
    parser.add_argument("-i", "--input", default="-", help="Input SAM/BAM/CRAM file or stream (default: stdin)")
    parser.add_argument("-o", "--output", default="-", help="Output SAM/BAM/CRAM file or stream (default: stdout)")
    parser.add_argument(
        "--rev",
        nargs="+",
        action="extend",
        default=[],
        metavar="TAG",
        help="SAM tags with array values to reverse",
    )
    parser.add_argument(
        "--revcomp",
        nargs="+",
        action="extend",
        default=[],
        metavar="TAG",
        help="SAM tags with array values to reverse complement",
    )
    parser.add_argument(
        "-t", "--threads", type=int, default=1, help="Threads for BAM/CRAM compression and decompression"
    )
    parser.add_argument("--reference", help="Reference FASTA, needed for CRAM")
    parser.add_argument("--summary", help="Write per tag counts of replaced values to this TSV file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def main(argv=None):
    parser = get_parser()
    args = parser.parse_args(argv)
    if args.threads < 1:
        parser.error("--threads must be at least 1")

    command_line = " ".join(["revtag"] + (sys.argv[1:] if argv is None else list(argv)))
    try:
        runner = RevTag(
            input_path=args.input,
            output_path=args.output,
            rev=args.rev,
            revcomp=args.revcomp,
            threads=args.threads,
            reference=args.reference,
            command_line=command_line,
            summary=args.summary,
        )
    except InvalidTagName as e:
        parser.error(str(e))
    return runner.run()


if __name__ == "__main__":
    sys.exit(main())
