"""
fastrecord Split Reading
========================
Reads train/dev/test files into samples.

Line-based files (classification, similarity) are parsed one line per
sample by a task-specific parse function, fanned out with `parallel_map`.
A line the parse function cannot split returns None and is dropped; drops
are counted and reported instead of failing the build.

Tagging files are groups of "token<SEP>tag" lines separated by empty
lines, one sample per group. Only a truly empty line ends a group: a line
holding just the separator is an (empty token, empty tag) pair, and a
whitespace-only line without the separator is dropped like any other
unsplittable line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from fastrecord.data.parallel import parallel_map

logger = logging.getLogger(__name__)


@dataclass
class ReadResult:
    """Samples read from one split file plus the number of dropped lines."""
    samples: list[Any] = field(default_factory=list)
    dropped: int = 0


def iter_lines(path: Union[str, Path], crlf: bool = True) -> Iterator[str]:
    r"""
    Yield the lines of a UTF-8 file without their terminators.

    Only "\n" ends a line. A lone "\r" is ordinary text, so a "\r" inside a
    line (a real token in character mode) never splits it. With `crlf`, a
    "\r" directly before the "\n" is stripped too.
    """
    with open(path, "r", encoding="utf-8", newline="\n") as f:
        for line in f:
            if line.endswith("\n"):
                line = line[:-1]
                if crlf and line.endswith("\r"):
                    line = line[:-1]
            yield line


def read_lines(path: Union[str, Path]) -> list[str]:
    """
    Read a split file into lines without their line terminators.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset file not found: {path}")
    return list(iter_lines(path))


def parse_lines(
    path: Union[str, Path],
    parse_fn: Callable[[tuple[int, str]], Optional[Any]],
    num_workers: int = 0,
) -> ReadResult:
    """
    Parse every line of `path` with `parse_fn`.

    Parameters
    ----------
    path : str or Path
        Split file.
    parse_fn : callable
        Receives (line_no, line) with 1-based line numbers and returns a
        sample, or None when the line cannot be split.
    num_workers : int
        Passed to `parallel_map`.

    Returns
    -------
    ReadResult
        Parsed samples in file order and the dropped-line count.
    """
    path = Path(path)
    lines = read_lines(path)
    parsed = parallel_map(
        parse_fn,
        list(enumerate(lines, start=1)),
        num_workers=num_workers,
        desc=f"Reading {path.name}",
        chunksize=1024,
    )
    samples = [sample for sample in parsed if sample is not None]
    return ReadResult(samples=samples, dropped=len(parsed) - len(samples))


def read_groups(path: Union[str, Path], separator: str) -> tuple[list[tuple[int, list[tuple[str, str]]]], int]:
    """
    Read a blank-line-delimited file of "left<SEP>right" lines.

    Returns
    -------
    tuple
        (groups, dropped) where each group is (first_line_no, pairs) and
        `dropped` counts lines without the separator.
    """
    groups: list[tuple[int, list[tuple[str, str]]]] = []
    current: list[tuple[str, str]] = []
    start = 0
    dropped = 0

    for line_no, line in enumerate(read_lines(path), start=1):
        if not line:
            if current:
                groups.append((start, current))
                current = []
            continue

        left, sep, right = line.partition(separator)
        if not sep:
            dropped += 1
            continue
        if not current:
            start = line_no
        current.append((left, right))

    if current:
        groups.append((start, current))

    return groups, dropped
