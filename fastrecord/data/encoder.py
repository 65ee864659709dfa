"""
fastrecord Sequence Encoder
===========================
Maps token sequences to fixed-length id sequences.

Lookup:
    Each token is looked up in the training vocabulary; a miss becomes the
    unknown id.

Fixed Length (max_length=4):
    [1, 2]            → [1, 2, 0, 0]     (right-padded with the padding id 0)
    [1, 2, 3, 4, 5]   → depends on the truncation policy

Truncation Policies:
    truncate-to-fit   keep the first max_length ids, drop the tail.
                      Used for classification and similarity.
    fail-on-overflow  raise SequenceOverflowError. Used for tagging, where
                      dropping tokens would also drop their tags.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence

from fastrecord.data.tokenizer import Tokenizer
from fastrecord.data.vocab import Vocabulary

PAD_ID = 0


class TruncationPolicy(str, Enum):
    TRUNCATE_TO_FIT = "truncate-to-fit"
    FAIL_ON_OVERFLOW = "fail-on-overflow"


class SequenceOverflowError(ValueError):
    """A sequence is longer than max_length under fail-on-overflow."""


def fit_to_length(
    ids: list[int],
    max_length: int,
    policy: TruncationPolicy = TruncationPolicy.TRUNCATE_TO_FIT,
    pad_id: int = PAD_ID,
) -> list[int]:
    """
    Truncate or right-pad `ids` to exactly `max_length` entries.

    Parameters
    ----------
    ids : list[int]
        Encoded ids. Not modified.
    max_length : int
        Target length.
    policy : TruncationPolicy
        What to do when `ids` is longer than `max_length`.
    pad_id : int
        Fill value for short sequences.

    Returns
    -------
    list[int]
        A new list of length `max_length`.

    Raises
    ------
    SequenceOverflowError
        If `ids` is too long and the policy is fail-on-overflow.
    """
    length = len(ids)
    if length > max_length:
        if policy is TruncationPolicy.FAIL_ON_OVERFLOW:
            raise SequenceOverflowError(
                f"sequence length {length} exceeds max length {max_length}"
            )
        return ids[:max_length]
    return ids + [pad_id] * (max_length - length)


class SequenceEncoder:
    """
    Vocabulary lookup plus fixed-length fitting for one task.

    Parameters
    ----------
    vocab : Vocabulary
        Training vocabulary (read-only).
    tokenizer : Tokenizer
        The tokenizer the vocabulary was built with.
    max_length : int
        Length of every encoded sequence.
    policy : TruncationPolicy
        Overflow behaviour.
    """

    def __init__(
        self,
        vocab: Vocabulary,
        tokenizer: Tokenizer,
        max_length: int,
        policy: TruncationPolicy = TruncationPolicy.TRUNCATE_TO_FIT,
    ):
        if max_length < 1:
            raise ValueError(f"max_length must be >= 1, got {max_length}")
        self.vocab = vocab
        self.tokenizer = tokenizer
        self.max_length = max_length
        self.policy = policy

    def encode_text(self, text: str) -> list[int]:
        return self.encode_tokens(self.tokenizer.tokenize(text))

    def encode_tokens(self, tokens: Sequence[str]) -> list[int]:
        # Check before lookup so an overflowing sample costs nothing
        if self.policy is TruncationPolicy.FAIL_ON_OVERFLOW and len(tokens) > self.max_length:
            raise SequenceOverflowError(
                f"sequence length {len(tokens)} exceeds max length {self.max_length}"
            )
        return fit_to_length(self.vocab.encode(tokens), self.max_length, self.policy)

    def fit(self, ids: list[int]) -> list[int]:
        """Fit an already-encoded id sequence (e.g. tag ids) with this encoder's policy."""
        return fit_to_length(ids, self.max_length, self.policy)

    def __repr__(self) -> str:
        return (
            f"SequenceEncoder(max_length={self.max_length}, "
            f"policy={self.policy.value}, tokenizer={self.tokenizer.mode})"
        )
