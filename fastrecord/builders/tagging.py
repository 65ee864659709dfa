"""
Sequence tagging builder.

Input files hold one sample per blank-line-delimited group of
"token<SEP>tag" lines. Tokens come pre-split, so no tokenizer mode
applies.

Tags get ids from a map built on the training split (padding tag = 0);
tags seen only in dev/test map to 0. Tag ids are padded exactly like
token ids and stay aligned with them position by position.

A sample longer than sequence_length is an error: truncating would drop
tokens together with their tags, so this task uses fail-on-overflow.

Record columns: word_0 .. word_{L-1} (uint32), tag_0 .. tag_{L-1} (uint8).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastrecord.builders.base import DatasetBuilder
from fastrecord.config import TaggingConfig
from fastrecord.data.encoder import TruncationPolicy
from fastrecord.data.labels import TagMap
from fastrecord.data.reader import ReadResult, read_groups
from fastrecord.data.serializer import ColumnGroup, RecordSchema

TAG_FILE = "tags.txt"


@dataclass
class TaggingSample:
    tokens: list[str]
    tags: list[str]
    line_no: int = 0


@dataclass
class TaggingRecord:
    word_ids: list[int]
    tag_ids: list[int]


class TaggingBuilder(DatasetBuilder):
    """Builds token/tag records; overlong samples fail the build."""

    TASK = "tagging"
    POLICY = TruncationPolicy.FAIL_ON_OVERFLOW

    def __init__(self, config: TaggingConfig):
        super().__init__(config)
        self.tags: Optional[TagMap] = None

    def read_dataset(self, path: Path) -> ReadResult:
        groups, dropped = read_groups(path, self.config.separator)
        samples = [
            TaggingSample(
                tokens=[token for token, _ in pairs],
                tags=[tag for _, tag in pairs],
                line_no=line_no,
            )
            for line_no, pairs in groups
        ]
        return ReadResult(samples=samples, dropped=dropped)

    def init_labels(self, train_samples) -> None:
        self.tags = TagMap.build(
            (sample.tags for sample in train_samples), self.config.padding_tag
        )

    def train_tokens(self, samples):
        return (sample.tokens for sample in samples)

    def encode(self, sample: TaggingSample) -> TaggingRecord:
        word_ids = self.encoder.encode_tokens(sample.tokens)
        tag_ids = self.encoder.fit(self.tags.encode(sample.tags))
        return TaggingRecord(word_ids, tag_ids)

    def save_vocab(self) -> None:
        super().save_vocab()
        self.tags.save(self.config.output_dir / TAG_FILE)

    @property
    def schema(self) -> RecordSchema:
        length = self.config.sequence_length
        return RecordSchema([
            ColumnGroup("word", "word_ids", "uint32", length),
            ColumnGroup("tag", "tag_ids", "uint8", length),
        ])
