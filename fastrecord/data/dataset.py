"""
fastrecord Record Dataset
=========================
PyTorch Dataset over a written records file, for training code that wants
tensors instead of Arrow tables.

The column layout is recovered from the file itself (see
`RecordSchema.from_arrow`), so the same class serves classification,
similarity and tagging files:

    classification  {"word": (L,), "class": ()}
    similarity      {"word_a": (L,), "word_b": (L,), "label": ()}
    tagging         {"word": (L,), "tag": (L,)}

Usage:
    >>> from fastrecord.data.dataset import RecordDataset
    >>> ds = RecordDataset("data/news/train.records.ipc")
    >>> item = ds[0]
    >>> item["word"].shape
    torch.Size([32])
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
import torch
from torch.utils.data import Dataset

from fastrecord.data.encoder import PAD_ID
from fastrecord.data.serializer import RecordSchema, read_records

logger = logging.getLogger(__name__)


class RecordDataset(Dataset):
    """
    Loads an entire records file into int64 tensors, one per column group.

    Attributes
    ----------
    schema : RecordSchema
        Column groups recovered from the file.
    tensors : dict[str, torch.Tensor]
        Group name → tensor of shape (rows,) or (rows, width).
    """

    def __init__(self, path: Union[str, Path]):
        table = read_records(path)
        self.schema = RecordSchema.from_arrow(table.schema)
        self.num_rows = table.num_rows

        self.tensors: dict[str, torch.Tensor] = {}
        for group in self.schema.groups:
            columns = [
                table.column(name).to_numpy().astype(np.int64)
                for name in group.column_names
            ]
            if group.width is None:
                values = columns[0]
            else:
                values = np.stack(columns, axis=1)
            self.tensors[group.name] = torch.from_numpy(np.ascontiguousarray(values))

        logger.info(f"RecordDataset loaded: {self.num_rows:,} rows from {path}")

    def __len__(self) -> int:
        return self.num_rows

    def __getitem__(self, idx: int) -> dict[str, torch.Tensor]:
        if idx < 0 or idx >= self.num_rows:
            raise IndexError(
                f"Index {idx} out of range for dataset of size {self.num_rows}"
            )
        return {name: tensor[idx] for name, tensor in self.tensors.items()}

    @staticmethod
    def attention_mask(input_ids: torch.Tensor) -> torch.Tensor:
        """1 for real tokens, 0 for padding."""
        return (input_ids != PAD_ID).long()

    def __repr__(self) -> str:
        return f"RecordDataset(rows={self.num_rows:,}, schema={self.schema})"
