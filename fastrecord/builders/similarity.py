"""
Text-pair similarity builder.

Input lines are "text_a<SENT_SEP>text_b<LABEL_SEP>label": the first
sentence separator splits off text_a, the last label separator splits off
the label. With identical separators this reads "a<TAB>b<TAB>1" as
("a", "b", "1"). Labels are parsed directly, as true/false with
`with_bool` or as integers otherwise; there is no label map.

Both texts share one vocabulary built from both sides of every training
pair.

Record columns: word_a_0 .. word_a_{L-1}, word_b_0 .. word_b_{L-1}
(uint32), label (uint8).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastrecord.builders.base import DatasetBuilder
from fastrecord.config import SimilarityConfig
from fastrecord.data.encoder import TruncationPolicy
from fastrecord.data.labels import parse_similarity_label
from fastrecord.data.reader import ReadResult, parse_lines
from fastrecord.data.serializer import ColumnGroup, RecordSchema


@dataclass
class SimilaritySample:
    text_a: str
    text_b: str
    label: str
    line_no: int = 0


@dataclass
class SimilarityRecord:
    word_ids_a: list[int]
    word_ids_b: list[int]
    label: int


class SimilarityBuilder(DatasetBuilder):
    """Builds text-pair records; long texts are truncated to fit."""

    TASK = "similarity"
    POLICY = TruncationPolicy.TRUNCATE_TO_FIT

    config: SimilarityConfig

    def parse_line(self, item: tuple[int, str]) -> Optional[SimilaritySample]:
        line_no, line = item
        text_a, sep, rest = line.partition(self.config.sent_sep)
        if not sep:
            return None
        text_b, sep, label = rest.rpartition(self.config.label_sep)
        if not sep:
            return None
        return SimilaritySample(text_a, text_b, label, line_no)

    def read_dataset(self, path: Path) -> ReadResult:
        return parse_lines(path, self.parse_line, self.config.num_workers)

    def train_tokens(self, samples):
        for sample in samples:
            yield self.tokenizer.tokenize(sample.text_a)
            yield self.tokenizer.tokenize(sample.text_b)

    def encode(self, sample: SimilaritySample) -> SimilarityRecord:
        label = parse_similarity_label(sample.label, self.config.with_bool)
        return SimilarityRecord(
            self.encoder.encode_text(sample.text_a),
            self.encoder.encode_text(sample.text_b),
            label,
        )

    @property
    def schema(self) -> RecordSchema:
        length = self.config.sequence_length
        return RecordSchema([
            ColumnGroup("word_a", "word_ids_a", "uint32", length),
            ColumnGroup("word_b", "word_ids_b", "uint32", length),
            ColumnGroup("label", "label", "uint8"),
        ])
