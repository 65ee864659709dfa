"""
fastrecord Label and Tag Resolution
====================================
Turns raw label / tag strings into the integer ids stored in records.

Strategies:

1. CLASS LIST (classification)
   `class.txt` holds one class name per line; the id is the line index.
   A label missing from the list is a fatal error.

2. LABEL ID (classification with `with_label_id`, similarity)
   The label field already is the id and is parsed as an integer.

3. BOOLEAN (similarity with `with_bool`)
   "true" → 1, "false" → 0.

4. TAG MAP (tagging)
   Id 0 is reserved for the padding tag. Distinct training tags get ids
   1, 2, ... in first-appearance order. A tag never seen in training
   resolves to 0 (treated as padding, not as an error).

Labels and tags are stored as unsigned 8-bit columns, so at most 256
distinct ids (0..255) can be represented. Anything larger is rejected here
instead of being wrapped around at write time.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Union

from fastrecord.data.reader import iter_lines

logger = logging.getLogger(__name__)

MAX_LABEL_ID = 255


class LabelError(ValueError):
    """A label or tag cannot be resolved to a valid id."""


def parse_label_id(raw: str) -> int:
    """
    Parse a label field that already holds the integer id.

    Raises
    ------
    LabelError
        If `raw` is not a plain run of ASCII digits or is outside 0..255.
    """
    if not (raw.isascii() and raw.isdigit()):
        raise LabelError(f"label '{raw}' is not a valid integer id")
    label_id = int(raw)
    if not 0 <= label_id <= MAX_LABEL_ID:
        raise LabelError(
            f"label id {label_id} out of range 0..{MAX_LABEL_ID} "
            f"(labels are stored as uint8)"
        )
    return label_id


def parse_similarity_label(raw: str, with_bool: bool) -> int:
    """Parse a similarity label as a boolean ("true"/"false") or an integer id."""
    if with_bool:
        if raw == "true":
            return 1
        if raw == "false":
            return 0
        raise LabelError(f"label '{raw}' is not a boolean (expected true/false)")
    return parse_label_id(raw)


class ClassLabels:
    """
    Ordered class names, id = position in the list.

    Parameters
    ----------
    names : list[str]
        Class names in id order.
    """

    def __init__(self, names: list[str]):
        if len(names) > MAX_LABEL_ID + 1:
            raise LabelError(
                f"{len(names)} classes exceed the uint8 limit of "
                f"{MAX_LABEL_ID + 1}"
            )
        self.names = list(names)
        self._ids = {}
        for idx, name in enumerate(names):
            # A repeated name keeps its last index
            self._ids[name] = idx

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> ClassLabels:
        """
        Read `class.txt`.

        Raises
        ------
        FileNotFoundError
            If the class list does not exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Class list not found: {path}")

        names = list(iter_lines(path))

        labels = cls(names)
        logger.info(f"Loaded {len(labels)} classes from {path}")
        return labels

    def lookup(self, label: str) -> int:
        try:
            return self._ids[label]
        except KeyError:
            raise LabelError(f"label '{label}' is not in the class list") from None

    def __len__(self) -> int:
        return len(self.names)

    def __repr__(self) -> str:
        return f"ClassLabels(n_classes={len(self)})"


class TagMap:
    """
    Tag → id mapping for sequence labeling, padding tag at id 0.

    Attributes
    ----------
    padding_tag : str
        Tag string bound to id 0.
    """

    def __init__(self, tag_to_id: dict[str, int], padding_tag: str):
        if tag_to_id.get(padding_tag) != 0:
            raise ValueError(f"Padding tag '{padding_tag}' must have id 0")
        if len(tag_to_id) > MAX_LABEL_ID + 1:
            raise LabelError(
                f"{len(tag_to_id)} tags (including padding) exceed the uint8 "
                f"limit of {MAX_LABEL_ID + 1}"
            )
        self.padding_tag = padding_tag
        self._tag_to_id = dict(tag_to_id)

    @classmethod
    def build(cls, tag_sequences: Iterable[Iterable[str]], padding_tag: str) -> TagMap:
        """Enumerate distinct training tags in first-appearance order."""
        tag_to_id = {padding_tag: 0}
        for tags in tag_sequences:
            for tag in tags:
                if tag not in tag_to_id:
                    tag_to_id[tag] = len(tag_to_id)

        tag_map = cls(tag_to_id, padding_tag)
        logger.info(f"Tag map built: {len(tag_map)} tags (including padding)")
        return tag_map

    def lookup(self, tag: str) -> int:
        """Id of `tag`; tags unseen in training map to the padding id 0."""
        return self._tag_to_id.get(tag, 0)

    def encode(self, tags: Iterable[str]) -> list[int]:
        get = self._tag_to_id.get
        return [get(tag, 0) for tag in tags]

    def __len__(self) -> int:
        return len(self._tag_to_id)

    def save(self, path: Union[str, Path]) -> None:
        """Write "id<TAB>tag" lines in id order."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            for tag, idx in sorted(self._tag_to_id.items(), key=lambda item: item[1]):
                f.write(f"{idx}\t{tag}\n")
        logger.info(f"Tag map saved to {path}")

    def __repr__(self) -> str:
        return f"TagMap(n_tags={len(self)})"
