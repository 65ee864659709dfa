"""
fastrecord Configuration System
===============================
Build settings for every task type, as Python dataclasses.

Each task has its own config class sharing the common `BuildConfig`
fields (paths, vocabulary, sequence length, special tokens, workers).
Values can come from keyword arguments, a YAML file, or both; explicit
values win over the file.

Usage:
    # Programmatic:
    >>> config = ClassifierConfig(path="data/news", sequence_length=64)
    >>> config.validate()

    # From YAML (the file may carry a "task" key):
    >>> config = load_config("classifier", "configs/classifier.yaml")

    # With overrides, e.g. from the command line:
    >>> config = load_config("tagging", None, path="data/ner", separator=" ")

    # Save:
    >>> config.to_yaml("outputs/build.yaml")
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, ClassVar, Optional

import yaml

from fastrecord.data.tokenizer import PAD_TOKEN, UNK_TOKEN

logger = logging.getLogger(__name__)


# =============================================================================
# Common Configuration
# =============================================================================

@dataclass
class BuildConfig:
    """
    Settings shared by all task types.

    Parameters
    ----------
    path : str
        Input directory holding train.txt, dev.txt, test.txt (and class.txt
        for classification).

    output_path : str or None
        Directory for vocab.txt, the records files and metadata.json.
        None = write next to the input.

    with_vocab : bool
        Reuse `<path>/vocab.txt` instead of building a vocabulary from the
        training split. Stopwords and max_vocab_size are then ignored.

    max_vocab_size : int
        Maximum vocabulary size. Accepted and reported, NOT enforced: the
        vocabulary always contains every non-stopword training token.

    sequence_length : int
        Length of every encoded id sequence, and the number of per-position
        columns in the records schema.

    stopwords_file : str or None
        File with one token per line to exclude from the vocabulary.

    with_lang_en : bool
        Word-level tokenization (split on spaces) instead of character-level.

    unknown : str
        Unknown token, bound to the last vocabulary id.

    padding : str
        Padding token, bound to id 0.

    num_workers : int
        Worker processes for reading and encoding. 0 = one per CPU,
        1 = no worker processes.
    """
    TASK: ClassVar[str] = ""

    path: str
    output_path: Optional[str] = None
    with_vocab: bool = False
    max_vocab_size: int = 10000
    sequence_length: int = 32
    stopwords_file: Optional[str] = None
    with_lang_en: bool = False
    unknown: str = UNK_TOKEN
    padding: str = PAD_TOKEN
    num_workers: int = 0

    def validate(self) -> None:
        """
        Check that all parameters are valid and consistent.

        Raises
        ------
        ValueError
            If any parameter is invalid.
        """
        if not self.path:
            raise ValueError("path (input directory) is required")
        if self.sequence_length < 1:
            raise ValueError(
                f"sequence_length must be >= 1, got {self.sequence_length}"
            )
        if self.max_vocab_size < 1:
            raise ValueError(
                f"max_vocab_size must be >= 1, got {self.max_vocab_size}"
            )
        if self.num_workers < 0:
            raise ValueError(f"num_workers must be >= 0, got {self.num_workers}")
        if self.padding == self.unknown:
            raise ValueError(
                f"padding and unknown tokens must differ, both are '{self.padding}'"
            )

    @property
    def input_dir(self) -> Path:
        return Path(self.path)

    @property
    def output_dir(self) -> Path:
        return Path(self.output_path) if self.output_path else Path(self.path)

    @classmethod
    def from_yaml(cls, path: str | Path) -> BuildConfig:
        """Load and validate this task's configuration from a YAML file."""
        return load_config(cls.TASK, path)

    def to_yaml(self, path: str | Path) -> None:
        """
        Save configuration (with its task name) to a YAML file.

        Creates parent directories if they don't exist.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {"task": self.TASK, **asdict(self)}

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                data,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

        logger.info(f"Config saved to {path}")

    def to_dict(self) -> dict:
        """Convert to a plain dictionary."""
        return asdict(self)


# =============================================================================
# Task Configurations
# =============================================================================

@dataclass
class ClassifierConfig(BuildConfig):
    """
    Text classification: "text<SEP>label" lines.

    Parameters
    ----------
    with_label_id : bool
        The label field already is the integer class id. Otherwise labels
        are class names resolved against class.txt.

    separator : str
        Separator between text and label (first occurrence is used).
    """
    TASK: ClassVar[str] = "classifier"

    with_label_id: bool = False
    separator: str = "\t"

    def validate(self) -> None:
        super().validate()
        if not self.separator:
            raise ValueError("separator must not be empty")


@dataclass
class SimilarityConfig(BuildConfig):
    """
    Text-pair similarity: "text_a<SENT_SEP>text_b<LABEL_SEP>label" lines.

    Parameters
    ----------
    with_bool : bool
        Labels are "true"/"false" (stored as 1/0). Otherwise integers.

    sent_sep : str
        Separator between the two texts (first occurrence).

    label_sep : str
        Separator before the label (last occurrence).
    """
    TASK: ClassVar[str] = "similarity"

    with_bool: bool = False
    sent_sep: str = "\t"
    label_sep: str = "\t"

    def validate(self) -> None:
        super().validate()
        if not self.sent_sep or not self.label_sep:
            raise ValueError("sent_sep and label_sep must not be empty")


@dataclass
class TaggingConfig(BuildConfig):
    """
    Sequence tagging: blank-line-delimited groups of "token<SEP>tag" lines.

    Tokens come pre-split, so `with_lang_en` has no effect here. Samples
    longer than `sequence_length` are an error, never truncated.

    Parameters
    ----------
    separator : str
        Separator between token and tag (first occurrence).

    padding_tag : str
        Tag bound to id 0. Tags not seen in training also map to 0.
    """
    TASK: ClassVar[str] = "tagging"

    separator: str = "\t"
    padding_tag: str = PAD_TOKEN

    def validate(self) -> None:
        super().validate()
        if not self.separator:
            raise ValueError("separator must not be empty")


CONFIGS: dict[str, type[BuildConfig]] = {
    ClassifierConfig.TASK: ClassifierConfig,
    SimilarityConfig.TASK: SimilarityConfig,
    TaggingConfig.TASK: TaggingConfig,
}


def load_config(
    task: str,
    yaml_path: Optional[str | Path] = None,
    **overrides: Any,
) -> BuildConfig:
    """
    Build a validated config for `task` from a YAML file and/or overrides.

    Parameters
    ----------
    task : str
        "classifier", "similarity" or "tagging".
    yaml_path : str, Path or None
        Optional YAML file. A top-level "task" key, if present, must match.
    **overrides
        Field values; None values are ignored so unset CLI flags do not
        clobber the file.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        On an unknown task or field, a task mismatch, or invalid values.
    """
    if task not in CONFIGS:
        raise ValueError(
            f"Unknown task: '{task}'. Choose from: {', '.join(CONFIGS)}"
        )
    cls = CONFIGS[task]

    raw: dict[str, Any] = {}
    if yaml_path is not None:
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")
        with open(yaml_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
        if loaded is None:
            raise ValueError(f"Config file is empty: {yaml_path}")
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file must hold a mapping: {yaml_path}")
        raw.update(loaded)

    file_task = raw.pop("task", task)
    if file_task != task:
        raise ValueError(
            f"Config file is for task '{file_task}', not '{task}'"
        )

    raw.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown {task} config fields: {', '.join(unknown)}")
    if "path" not in raw:
        raise ValueError("path (input directory) is required")

    config = cls(**raw)
    config.validate()
    return config
