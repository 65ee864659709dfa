"""
Text classification builder.

Input lines are "text<SEP>label", split on the first separator. Labels are
either class names looked up in class.txt (id = line index) or, with
`with_label_id`, the integer class id itself.

Record columns: word_0 .. word_{L-1} (uint32), class (uint8).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastrecord.builders.base import DatasetBuilder
from fastrecord.config import ClassifierConfig
from fastrecord.data.encoder import TruncationPolicy
from fastrecord.data.labels import ClassLabels, parse_label_id
from fastrecord.data.reader import ReadResult, parse_lines
from fastrecord.data.serializer import ColumnGroup, RecordSchema

CLASS_FILE = "class.txt"


@dataclass
class ClassifierSample:
    text: str
    label: str
    line_no: int = 0


@dataclass
class ClassifierRecord:
    word_ids: list[int]
    label_id: int


class ClassifierBuilder(DatasetBuilder):
    """Builds classification records; long texts are truncated to fit."""

    TASK = "classifier"
    POLICY = TruncationPolicy.TRUNCATE_TO_FIT

    def __init__(self, config: ClassifierConfig):
        super().__init__(config)
        self.classes: Optional[ClassLabels] = None

    def required_files(self) -> list[str]:
        files = super().required_files()
        if not self.config.with_label_id:
            files.append(CLASS_FILE)
        return files

    def parse_line(self, item: tuple[int, str]) -> Optional[ClassifierSample]:
        line_no, line = item
        text, sep, label = line.partition(self.config.separator)
        if not sep:
            return None
        return ClassifierSample(text, label, line_no)

    def read_dataset(self, path: Path) -> ReadResult:
        return parse_lines(path, self.parse_line, self.config.num_workers)

    def init_labels(self, train_samples) -> None:
        if not self.config.with_label_id:
            self.classes = ClassLabels.from_file(self.config.input_dir / CLASS_FILE)

    def train_tokens(self, samples):
        return (self.tokenizer.tokenize(sample.text) for sample in samples)

    def encode(self, sample: ClassifierSample) -> ClassifierRecord:
        if self.config.with_label_id:
            label_id = parse_label_id(sample.label)
        else:
            label_id = self.classes.lookup(sample.label)
        return ClassifierRecord(self.encoder.encode_text(sample.text), label_id)

    @property
    def schema(self) -> RecordSchema:
        return RecordSchema([
            ColumnGroup("word", "word_ids", "uint32", self.config.sequence_length),
            ColumnGroup("class", "label_id", "uint8"),
        ])
