"""
fastrecord Vocabulary
=====================
Token → id mapping built from the training split.

Id Layout:
    0        padding token
    1 .. N   every distinct training token that is not a stopword, in the
             order it first appears in the training split
    N + 1    unknown token (always the last id)

Enumeration is a single pass over the training samples in file order, so
the same input always gives the same ids.

The vocabulary is built once per build and never mutated afterwards; dev
and test are encoded against the training vocabulary, and any token it
does not contain resolves to the unknown id.

A configured maximum size is accepted but NOT enforced: no frequency
pruning happens. When the built vocabulary exceeds the maximum a warning
is logged so the mismatch is visible.

File Format (vocab.txt):
    One entry per line, "id<TAB>token", in id order.

Usage:
    >>> vocab = Vocabulary.build([["a", "b"], ["b", "c"]], "<PAD>", "<UNK>")
    >>> vocab.encode(["a", "z"])
    [1, 4]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from fastrecord.data.reader import iter_lines

logger = logging.getLogger(__name__)


def load_stopwords(path: Union[str, Path]) -> frozenset[str]:
    """
    Load a stopwords file (one token per line).

    Raises
    ------
    FileNotFoundError
        If the stopwords file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Stopwords file not found: {path}")

    logger.info(f"Reading stopwords file from {path}")
    stopwords = frozenset(iter_lines(path))

    logger.info(f"Loaded {len(stopwords):,} stopwords")
    return stopwords


class Vocabulary:
    """
    Immutable token → id mapping with padding and unknown tokens.

    Attributes
    ----------
    padding : str
        Padding token, always id 0.
    unknown : str
        Unknown token, always the last id.
    """

    def __init__(self, token_to_id: dict[str, int], padding: str, unknown: str):
        if token_to_id.get(padding) != 0:
            raise ValueError(f"Padding token '{padding}' must have id 0")
        if token_to_id.get(unknown) != len(token_to_id) - 1:
            raise ValueError(
                f"Unknown token '{unknown}' must have the last id "
                f"({len(token_to_id) - 1})"
            )
        if sorted(token_to_id.values()) != list(range(len(token_to_id))):
            raise ValueError("Vocabulary ids must be dense and start at 0")

        self.padding = padding
        self.unknown = unknown
        self._token_to_id = dict(token_to_id)
        self._unk_id = token_to_id[unknown]

    # ─── Construction ───────────────────────────────────────────────────

    @classmethod
    def build(
        cls,
        token_streams: Iterable[Iterable[str]],
        padding: str,
        unknown: str,
        stopwords: Iterable[str] = (),
        max_size: Optional[int] = None,
    ) -> Vocabulary:
        """
        Build a vocabulary from the training split's token sequences.

        Parameters
        ----------
        token_streams : iterable of iterables of str
            One token sequence per training sample (or per text field).
        padding, unknown : str
            Special tokens. They are never enumerated as regular tokens,
            even if they occur in the data.
        stopwords : iterable of str
            Tokens excluded from the vocabulary.
        max_size : int or None
            Configured maximum size. Only reported, never applied.

        Returns
        -------
        Vocabulary
        """
        excluded = set(stopwords)
        excluded.update((padding, unknown))

        token_to_id = {padding: 0}
        for tokens in token_streams:
            for token in tokens:
                if token not in token_to_id and token not in excluded:
                    token_to_id[token] = len(token_to_id)
        token_to_id[unknown] = len(token_to_id)

        vocab = cls(token_to_id, padding, unknown)
        logger.info(f"Vocabulary built: {len(vocab):,} entries")

        if max_size is not None and len(vocab) > max_size:
            logger.warning(
                f"Vocabulary size {len(vocab):,} exceeds max_vocab_size "
                f"{max_size:,}; the cap is not enforced, all tokens are kept"
            )
        return vocab

    # ─── Lookup ─────────────────────────────────────────────────────────

    def lookup(self, token: str) -> int:
        """Id of `token`, or the unknown id if it is not in the vocabulary."""
        return self._token_to_id.get(token, self._unk_id)

    def encode(self, tokens: Iterable[str]) -> list[int]:
        get = self._token_to_id.get
        unk = self._unk_id
        return [get(token, unk) for token in tokens]

    @property
    def pad_id(self) -> int:
        return 0

    @property
    def unk_id(self) -> int:
        return self._unk_id

    def __len__(self) -> int:
        return len(self._token_to_id)

    def __contains__(self, token: object) -> bool:
        return token in self._token_to_id

    def __getitem__(self, token: str) -> int:
        return self._token_to_id[token]

    def items(self):
        """(token, id) pairs in id order."""
        return sorted(self._token_to_id.items(), key=lambda item: item[1])

    # ─── Save / Load ────────────────────────────────────────────────────

    def save(self, path: Union[str, Path]) -> None:
        """Write the vocabulary as "id<TAB>token" lines in id order."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            for token, idx in self.items():
                f.write(f"{idx}\t{token}\n")
        logger.info(f"Vocabulary saved to {path}")

    @classmethod
    def load(cls, path: Union[str, Path], padding: str, unknown: str) -> Vocabulary:
        """
        Load a vocabulary written by `save`.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        ValueError
            If a line is malformed or the id layout is broken.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Vocabulary file not found: {path}")

        token_to_id: dict[str, int] = {}
        # Written by `save` with "\n" endings, so a trailing "\r" is part of the token
        for line_no, line in enumerate(iter_lines(path, crlf=False), start=1):
            idx, sep, token = line.partition("\t")
            if not sep or not (idx.isascii() and idx.isdigit()):
                raise ValueError(f"{path} line {line_no}: expected 'id<TAB>token'")
            if token in token_to_id:
                raise ValueError(f"{path} line {line_no}: duplicate token '{token}'")
            token_to_id[token] = int(idx)

        vocab = cls(token_to_id, padding, unknown)
        logger.info(f"Vocabulary loaded from {path} ({len(vocab):,} entries)")
        return vocab

    def __repr__(self) -> str:
        return f"Vocabulary(size={len(self)}, unk_id={self._unk_id})"
