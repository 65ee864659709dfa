"""
fastrecord Dataset Builder
==========================
The build pipeline shared by every task type.

Pipeline (per split, in order train → dev → test):

    read        split file → samples          (parallel, order-preserving)
    init        train only: labels/tags, vocabulary, vocab.txt
    encode      samples → fixed-length records (parallel, order-preserving)
    serialize   records → <split>.records.ipc  (single writer, chunked)

The vocabulary and label maps are built from the training split only and
are read-only afterwards; dev and test are encoded against them. Every
input file is checked up front, so a missing file fails the build before
anything is written.

A task subclass supplies:
    read_dataset(path)       → ReadResult
    init_labels(samples)     build label/tag state from training samples
    train_tokens(samples)    token sequences for the vocabulary
    encode(sample)           → record
    schema                   → RecordSchema
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, ClassVar, Iterable, Optional, Sequence

from fastrecord.config import BuildConfig
from fastrecord.data.encoder import SequenceEncoder, TruncationPolicy
from fastrecord.data.parallel import parallel_map
from fastrecord.data.reader import ReadResult
from fastrecord.data.serializer import RecordSchema, RecordWriter, record_file_name
from fastrecord.data.tokenizer import Tokenizer
from fastrecord.data.vocab import Vocabulary, load_stopwords
from fastrecord.metrics import Timer

logger = logging.getLogger(__name__)

SPLITS = ("train", "dev", "test")
VOCAB_FILE = "vocab.txt"
METADATA_FILE = "metadata.json"


@dataclass
class SplitSummary:
    """Counts and wall time for one processed split."""
    samples: int
    dropped: int
    rows: int
    file: str
    seconds: float = 0.0


@dataclass
class BuildSummary:
    """What a build produced; also written to metadata.json."""
    task: str
    vocab_size: int
    sequence_length: int
    max_vocab_size: int
    truncation_policy: str
    columns: list[str]
    splits: dict[str, SplitSummary] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


class DatasetBuilder(ABC):
    """
    Abstract builder running the read → init → encode → serialize pipeline.

    Parameters
    ----------
    config : BuildConfig
        Task configuration; validated on construction.
    """

    TASK: ClassVar[str] = ""
    POLICY: ClassVar[TruncationPolicy] = TruncationPolicy.TRUNCATE_TO_FIT

    def __init__(self, config: BuildConfig):
        config.validate()
        self.config = config
        self.tokenizer = Tokenizer.from_lang_en(config.with_lang_en)
        self.vocab: Optional[Vocabulary] = None
        self.encoder: Optional[SequenceEncoder] = None

    # ─── Task hooks ─────────────────────────────────────────────────────

    @abstractmethod
    def read_dataset(self, path: Path) -> ReadResult:
        """Read one split file into samples."""

    @abstractmethod
    def train_tokens(self, samples: Sequence[Any]) -> Iterable[Iterable[str]]:
        """Token sequences of the training samples, for the vocabulary."""

    @abstractmethod
    def encode(self, sample: Any) -> Any:
        """Encode one sample into a record. Runs inside worker processes."""

    @property
    @abstractmethod
    def schema(self) -> RecordSchema:
        """Column layout of this task's records."""

    def init_labels(self, train_samples: Sequence[Any]) -> None:
        """Build label/tag state from the training samples."""

    def required_files(self) -> list[str]:
        """Input files (relative to the input directory) that must exist."""
        files = [f"{split}.txt" for split in SPLITS]
        if self.config.with_vocab:
            files.append(VOCAB_FILE)
        return files

    # ─── Pipeline steps ─────────────────────────────────────────────────

    def init(self, train_samples: Sequence[Any]) -> None:
        """Build labels and the vocabulary from the training split."""
        self.init_labels(train_samples)
        self.vocab = self._init_vocab(train_samples)
        self.encoder = SequenceEncoder(
            self.vocab,
            self.tokenizer,
            self.config.sequence_length,
            self.POLICY,
        )

    def _init_vocab(self, train_samples: Sequence[Any]) -> Vocabulary:
        config = self.config
        if config.with_vocab:
            return Vocabulary.load(
                config.input_dir / VOCAB_FILE, config.padding, config.unknown
            )

        stopwords: frozenset[str] = frozenset()
        if config.stopwords_file:
            stopwords = load_stopwords(config.stopwords_file)

        return Vocabulary.build(
            self.train_tokens(train_samples),
            padding=config.padding,
            unknown=config.unknown,
            stopwords=stopwords,
            max_size=config.max_vocab_size,
        )

    def build_dataset(self, samples: Sequence[Any], desc: Optional[str] = None) -> list[Any]:
        """
        Encode all samples of a split, in parallel, keeping input order.

        Raises
        ------
        RuntimeError
            If called before `init`.
        ValueError
            If any sample fails to encode; the message names its line.
        """
        if self.encoder is None:
            raise RuntimeError("Builder not initialized. Call init() first.")
        return parallel_map(
            self._encode_sample,
            samples,
            num_workers=self.config.num_workers,
            desc=desc,
        )

    def _encode_sample(self, sample: Any) -> Any:
        try:
            return self.encode(sample)
        except ValueError as exc:
            raise type(exc)(f"line {sample.line_no}: {exc}") from exc

    def save_dataset(self, records: Sequence[Any], record_file: str) -> int:
        """Serialize records into the output directory. Returns rows written."""
        writer = RecordWriter(self.schema)
        return writer.write(records, self.config.output_dir / record_file)

    def save_vocab(self) -> None:
        if self.vocab is None:
            raise RuntimeError("Builder not initialized. Call init() first.")
        self.vocab.save(self.config.output_dir / VOCAB_FILE)

    def save_metadata(self, summary: BuildSummary) -> None:
        path = self.config.output_dir / METADATA_FILE
        with open(path, "w", encoding="utf-8") as f:
            json.dump(summary.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Metadata saved to {path}")

    # ─── Orchestration ──────────────────────────────────────────────────

    def check_inputs(self) -> None:
        """
        Raises
        ------
        FileNotFoundError
            Naming the first required input file that is missing.
        """
        input_dir = self.config.input_dir
        if not input_dir.is_dir():
            raise FileNotFoundError(f"Input directory not found: {input_dir}")
        for name in self.required_files():
            if not (input_dir / name).exists():
                raise FileNotFoundError(f"Required input file not found: {input_dir / name}")
        stopwords_file = self.config.stopwords_file
        if stopwords_file and not self.config.with_vocab and not Path(stopwords_file).exists():
            raise FileNotFoundError(f"Stopwords file not found: {stopwords_file}")

    def build(self) -> BuildSummary:
        """
        Run the full pipeline over train, dev and test.

        Returns
        -------
        BuildSummary
            Per-split counts; the same data is written to metadata.json.
        """
        self.check_inputs()
        output_dir = self.config.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        splits: dict[str, SplitSummary] = {}
        for split in SPLITS:
            path = self.config.input_dir / f"{split}.txt"
            logger.info(f"Processing {split} data...")

            with Timer(f"{split} split") as timer:
                result = self.read_dataset(path)
                if result.dropped:
                    logger.warning(
                        f"{path.name}: dropped {result.dropped:,} lines that could "
                        f"not be split on the configured separator"
                    )
                logger.info(f"{path.name}: {len(result.samples):,} samples")

                if split == "train":
                    self.init(result.samples)
                    self.save_vocab()

                try:
                    records = self.build_dataset(result.samples, desc=f"Encoding {split}")
                except ValueError as exc:
                    raise type(exc)(f"{path}: {exc}") from exc

                record_file = record_file_name(split)
                rows = self.save_dataset(records, record_file)
                timer.rows = rows

            splits[split] = SplitSummary(
                samples=len(result.samples),
                dropped=result.dropped,
                rows=rows,
                file=record_file,
                seconds=round(timer.elapsed, 3),
            )

        summary = BuildSummary(
            task=self.TASK,
            vocab_size=len(self.vocab),
            sequence_length=self.config.sequence_length,
            max_vocab_size=self.config.max_vocab_size,
            truncation_policy=self.POLICY.value,
            columns=self.schema.column_names,
            splits=splits,
        )
        self.save_metadata(summary)
        return summary

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(path={self.config.path}, "
            f"sequence_length={self.config.sequence_length}, "
            f"tokenizer={self.tokenizer.mode})"
        )
