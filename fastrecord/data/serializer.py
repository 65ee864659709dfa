"""
fastrecord Columnar Serializer
==============================
Writes encoded records to Apache Arrow IPC files.

Schema Shape (sequence_length=3, classification):
    word_0  word_1  word_2  class
    uint32  uint32  uint32  uint8

    Every id sequence is spread over one column per position, so a reader
    can pick any prefix of the sequence without decoding lists. Scalars
    (class / label) get a single column; tag sequences get one column per
    position like tokens.

Chunking:
    Records are written in chunks of CHUNK_SIZE rows. Each chunk becomes
    one Arrow RecordBatch built from one numpy array per column group.
    The output file is the ordered concatenation of those batches.

Durability:
    Batches go to "<file>.tmp"; only after the IPC writer has been closed
    (footer written) is the file renamed to its final name. A failure at
    any point removes the temporary file, so a records file that exists
    is always complete.

Integer Widths:
    Token ids are uint32, labels and tags uint8. Values outside a
    column's range raise ValueError rather than wrapping around.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import numpy as np
import pyarrow as pa

logger = logging.getLogger(__name__)

CHUNK_SIZE = 100
RECORD_EXT = "ipc"

_POSITIONAL = re.compile(r"^(?P<name>.+)_(?P<index>\d+)$")


def record_file_name(split: str) -> str:
    return f"{split}.records.{RECORD_EXT}"


@dataclass(frozen=True)
class ColumnGroup:
    """
    A set of columns filled from one record attribute.

    Attributes
    ----------
    name : str
        Column name (scalar) or column name prefix (sequence).
    attr : str
        Record attribute holding the value(s).
    dtype : str
        Numpy integer dtype name, e.g. "uint32".
    width : int or None
        None for a single scalar column, otherwise the sequence length.
    """
    name: str
    attr: str
    dtype: str
    width: Optional[int] = None

    @property
    def column_names(self) -> list[str]:
        if self.width is None:
            return [self.name]
        return [f"{self.name}_{k}" for k in range(self.width)]

    @property
    def arrow_type(self) -> pa.DataType:
        return pa.from_numpy_dtype(np.dtype(self.dtype))

    def gather(self, records: Sequence[Any]) -> np.ndarray:
        """
        Collect this group's values from `records` as a 1-D (scalar) or
        2-D (rows × width) array of `dtype`.

        Raises
        ------
        ValueError
            On a sequence of the wrong length or a value outside the
            dtype's range.
        """
        values = np.asarray([getattr(r, self.attr) for r in records], dtype=np.int64)
        expected = (len(records),) if self.width is None else (len(records), self.width)
        if values.shape != expected:
            raise ValueError(
                f"column group '{self.name}' expects shape {expected}, "
                f"got {values.shape}"
            )

        limits = np.iinfo(self.dtype)
        if values.size and (values.min() < limits.min or values.max() > limits.max):
            raise ValueError(
                f"column group '{self.name}' has values outside "
                f"{self.dtype} range [{limits.min}, {limits.max}]"
            )
        return values.astype(self.dtype)


class RecordSchema:
    """
    Ordered column groups describing one record file.

    Parameters
    ----------
    groups : list[ColumnGroup]
        Column groups in output order.
    """

    def __init__(self, groups: list[ColumnGroup]):
        if not groups:
            raise ValueError("RecordSchema needs at least one column group")
        names = [name for group in groups for name in group.column_names]
        if len(set(names)) != len(names):
            raise ValueError("RecordSchema column names must be unique")
        self.groups = list(groups)

    @property
    def column_names(self) -> list[str]:
        return [name for group in self.groups for name in group.column_names]

    def to_arrow(self) -> pa.Schema:
        return pa.schema([
            pa.field(name, group.arrow_type, nullable=False)
            for group in self.groups
            for name in group.column_names
        ])

    @classmethod
    def from_arrow(cls, schema: pa.Schema) -> RecordSchema:
        """
        Recover column groups from a written file's schema.

        Columns named "<prefix>_<k>" with k = 0, 1, ... in order form one
        sequence group; any other column is a scalar group. The group name
        doubles as the attribute name.
        """
        groups: list[ColumnGroup] = []
        pending: Optional[tuple[str, str, int]] = None  # (prefix, dtype, width)

        def flush():
            if pending is not None:
                prefix, dtype, width = pending
                groups.append(ColumnGroup(prefix, prefix, dtype, width))

        for schema_field in schema:
            dtype = np.dtype(schema_field.type.to_pandas_dtype()).name
            match = _POSITIONAL.match(schema_field.name)
            if match:
                prefix, index = match.group("name"), int(match.group("index"))
                if pending is not None and pending[0] == prefix and pending[1] == dtype and index == pending[2]:
                    pending = (prefix, dtype, index + 1)
                    continue
                if index == 0:
                    flush()
                    pending = (prefix, dtype, 1)
                    continue
            flush()
            pending = None
            groups.append(ColumnGroup(schema_field.name, schema_field.name, dtype))
        flush()

        return cls(groups)

    def to_batch(self, records: Sequence[Any], arrow_schema: Optional[pa.Schema] = None) -> pa.RecordBatch:
        """Materialize `records` as one RecordBatch, one array per column."""
        arrays = []
        for group in self.groups:
            values = group.gather(records)
            if group.width is None:
                arrays.append(pa.array(values, type=group.arrow_type))
            else:
                # Transpose so each position is a contiguous row
                for column in np.ascontiguousarray(values.T):
                    arrays.append(pa.array(column, type=group.arrow_type))
        return pa.RecordBatch.from_arrays(arrays, schema=arrow_schema or self.to_arrow())

    def __eq__(self, other: object) -> bool:
        return isinstance(other, RecordSchema) and other.groups == self.groups

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{g.name}[{g.width}]:{g.dtype}" if g.width is not None else f"{g.name}:{g.dtype}"
            for g in self.groups
        )
        return f"RecordSchema({parts})"


class RecordWriter:
    """
    Chunked Arrow IPC writer for one record schema.

    Parameters
    ----------
    schema : RecordSchema
        Layout of the records.
    chunk_size : int
        Rows per RecordBatch.
    """

    def __init__(self, schema: RecordSchema, chunk_size: int = CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.schema = schema
        self.chunk_size = chunk_size

    def write(self, records: Sequence[Any], path: Union[str, Path]) -> int:
        """
        Write all records to `path`.

        Returns
        -------
        int
            Number of rows written.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(path.name + ".tmp")
        arrow_schema = self.schema.to_arrow()

        n_batches = 0
        try:
            with pa.OSFile(str(tmp_path), "wb") as sink:
                with pa.ipc.new_file(sink, arrow_schema) as writer:
                    for start in range(0, len(records), self.chunk_size):
                        chunk = records[start:start + self.chunk_size]
                        writer.write_batch(self.schema.to_batch(chunk, arrow_schema))
                        n_batches += 1
            os.replace(tmp_path, path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.info(
            f"Wrote {len(records):,} records in {n_batches} batches to {path}"
        )
        return len(records)


def read_records(path: Union[str, Path]) -> pa.Table:
    """
    Read a records file back as a pyarrow Table.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Records file not found: {path}")
    with pa.OSFile(str(path), "rb") as source:
        return pa.ipc.open_file(source).read_all()
