"""
fastrecord Tokenizer
====================
Splits raw text into token strings. Two modes exist:

    word — split on every single space character. Runs of spaces are NOT
           collapsed: "a  b" gives ["a", "", "b"]. Empty tokens are real
           tokens and get their own vocabulary entry.
    char — every Unicode code point becomes its own token.

The same Tokenizer must be used to build the vocabulary and to encode every
split, otherwise train-time and encode-time tokens would not line up.

Usage:
    >>> tok = Tokenizer("char")
    >>> tok.tokenize("ab")
    ['a', 'b']
"""

from __future__ import annotations

# Special token defaults, shared by config and vocabulary
PAD_TOKEN = "<PAD>"
UNK_TOKEN = "<UNK>"

WORD_MODE = "word"
CHAR_MODE = "char"
MODES = (WORD_MODE, CHAR_MODE)


class Tokenizer:
    """
    Word- or character-level tokenizer.

    Parameters
    ----------
    mode : str
        "word" or "char".
    """

    def __init__(self, mode: str = CHAR_MODE):
        if mode not in MODES:
            raise ValueError(
                f"Unknown tokenizer mode: '{mode}'. Choose from: word, char"
            )
        self.mode = mode

    @classmethod
    def from_lang_en(cls, with_lang_en: bool) -> Tokenizer:
        """Word mode for space-delimited languages, char mode otherwise."""
        return cls(WORD_MODE if with_lang_en else CHAR_MODE)

    def tokenize(self, text: str) -> list[str]:
        if self.mode == WORD_MODE:
            return text.split(" ")
        return list(text)

    def __repr__(self) -> str:
        return f"Tokenizer(mode={self.mode})"
