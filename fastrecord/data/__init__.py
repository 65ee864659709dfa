"""
fastrecord.data — Encoding Pipeline Pieces
==========================================
Everything a builder needs to turn samples into record files:

    1. **Tokenizer** (`tokenizer.py`): word- or character-level splitting.
    2. **Vocabulary** (`vocab.py`): token → id map from the training split.
    3. **Labels** (`labels.py`): class lists, parsed label ids, tag maps.
    4. **Encoder** (`encoder.py`): id lookup plus padding/truncation.
    5. **Parallel** (`parallel.py`): order-preserving parallel map.
    6. **Reader** (`reader.py`): split files → samples, dropped-line counts.
    7. **Serializer** (`serializer.py`): chunked Arrow IPC record files.
    8. **Dataset** (`dataset.py`): records file → PyTorch Dataset.

Information Flow:
    split file
        → Reader (samples)
        → Vocabulary / Labels (train only)
        → Encoder, mapped by Parallel (records, input order kept)
        → Serializer (<split>.records.ipc)
        → Dataset (tensors for training)
"""

from fastrecord.data.tokenizer import Tokenizer
from fastrecord.data.vocab import Vocabulary
from fastrecord.data.encoder import SequenceEncoder, TruncationPolicy
from fastrecord.data.serializer import RecordSchema, RecordWriter, read_records
