#!/usr/bin/env python3
"""
fastrecord — Command Line
=========================
Record builder for NLP tasks.

Usage:
    fast-record classifier --path data/news --sequence-length 64
    fast-record similarity --path data/lcqmc --with-bool --s1 '\\t' --s2 '\\t'
    fast-record tagging --path data/ner --separator ' '
    fast-record classifier --config configs/classifier.yaml --output-path out/

Explicit flags override values from --config.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from fastrecord import __version__
from fastrecord.builders import BUILDERS
from fastrecord.config import load_config
from fastrecord.metrics import MemoryTracker, Timer

logger = logging.getLogger("fastrecord")


def _separator(value: str) -> str:
    """Accept a literal backslash-t for tab, which shells make awkward to type."""
    return value.replace("\\t", "\t")


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config", type=str, default=None,
        help="YAML config file; explicit flags override its values",
    )
    parser.add_argument(
        "--path", "-p", "--input", dest="path", type=str, default=None,
        help="Input directory with train.txt, dev.txt and test.txt",
    )
    parser.add_argument(
        "--output-path", "-o", "--output", dest="output_path", type=str, default=None,
        help="Output directory (default: the input directory)",
    )
    parser.add_argument(
        "--with-vocab", action="store_true", default=None,
        help="Reuse vocab.txt from the input directory instead of building one",
    )
    parser.add_argument(
        "--max-vocab-size", type=int, default=None,
        help="Max vocabulary size (default 10000; reported, not enforced)",
    )
    parser.add_argument(
        "--sequence-length", type=int, default=None,
        help="Max sequence length (default 32)",
    )
    parser.add_argument(
        "--stopwords-file", "--stopwords", dest="stopwords_file", type=str, default=None,
        help="Stopwords file excluded from the vocabulary",
    )
    parser.add_argument(
        "--with-lang-en", action="store_true", default=None,
        help="Word-level tokenization on spaces instead of characters",
    )
    parser.add_argument(
        "--unknown", "--unk-token", dest="unknown", type=str, default=None,
        help="Unknown token (default <UNK>)",
    )
    parser.add_argument(
        "--padding", "--pad-token", dest="padding", type=str, default=None,
        help="Padding token (default <PAD>)",
    )
    parser.add_argument(
        "--num-workers", type=int, default=None,
        help="Worker processes, 0 = one per CPU (default 0)",
    )
    parser.add_argument(
        "--track-memory", action="store_true",
        help="Report peak Python memory of the build",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fast-record",
        description="Record builder for NLP tasks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="task", metavar="TASK")

    classifier = subparsers.add_parser("classifier", help="Text classification dataset")
    _add_common_args(classifier)
    classifier.add_argument(
        "--with-label-id", action="store_true", default=None,
        help="Labels are integer class ids instead of class.txt names",
    )
    classifier.add_argument(
        "--separator", "-s", "--delimiter", dest="separator", type=_separator, default=None,
        help="Separator between text and label (default tab)",
    )

    similarity = subparsers.add_parser("similarity", help="Text-pair similarity dataset")
    _add_common_args(similarity)
    similarity.add_argument(
        "--with-bool", action="store_true", default=None,
        help="Labels are true/false instead of integers",
    )
    similarity.add_argument(
        "--sent-sep", "--s1", dest="sent_sep", type=_separator, default=None,
        help="Separator between text_a and text_b (default tab)",
    )
    similarity.add_argument(
        "--label-sep", "--s2", dest="label_sep", type=_separator, default=None,
        help="Separator between text and label (default tab)",
    )

    tagging = subparsers.add_parser("tagging", help="Sequence tagging dataset")
    _add_common_args(tagging)
    tagging.add_argument(
        "--separator", "-s", "--delimiter", dest="separator", type=_separator, default=None,
        help="Separator between token and tag (default tab)",
    )
    tagging.add_argument(
        "--padding-tag", type=str, default=None,
        help="Tag bound to id 0 (default <PAD>)",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.task is None:
        parser.print_help()
        return 2

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )

    overrides = vars(args).copy()
    task = overrides.pop("task")
    config_path = overrides.pop("config")
    track_memory = overrides.pop("track_memory")

    try:
        config = load_config(task, config_path, **overrides)
        logger.info(f"{task} dataset config: {config}")
        builder = BUILDERS[task](config)

        if track_memory:
            with MemoryTracker(f"{task} build"):
                summary = builder.build()
        else:
            with Timer(f"{task} build"):
                summary = builder.build()
    except (FileNotFoundError, ValueError) as exc:
        logger.error(f"Build failed: {exc}")
        return 1

    for split, counts in summary.splits.items():
        logger.info(
            f"  {split}: {counts.rows:,} records → {counts.file} "
            f"({counts.dropped:,} lines dropped)"
        )
    logger.info(f"Finished record! Output: {config.output_dir}/")
    return 0


if __name__ == "__main__":
    sys.exit(main())
