"""
fastrecord
==========
Record builder for NLP datasets.

Turns line-oriented text datasets into fixed-width columnar record files
(Apache Arrow IPC) that model-training code can load directly. Three task
types are supported:

    1. Classification — one text and one class label per line
    2. Similarity     — a text pair and a boolean/integer label per line
    3. Tagging        — blank-line-delimited groups of token/tag lines

Every build runs the same pipeline over the train, dev and test splits:
read → (train only) build vocabulary and labels → encode → serialize.

Quick Start:
    >>> from fastrecord.config import ClassifierConfig
    >>> from fastrecord.builders import ClassifierBuilder
    >>> builder = ClassifierBuilder(ClassifierConfig(path="data/news"))
    >>> summary = builder.build()

Subpackages:
    - fastrecord.data     — Tokenizer, vocabulary, labels, encoder, serializer
    - fastrecord.builders — Per-task dataset builders sharing one pipeline
"""

__version__ = "0.1.0"
