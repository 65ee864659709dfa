"""
fastrecord.builders — Per-Task Dataset Builders
================================================
One builder per task type, all running the same pipeline defined in
`base.py`:

    ClassifierBuilder   text → class
    SimilarityBuilder   (text_a, text_b) → label
    TaggingBuilder      tokens → tags

`BUILDERS` maps task names (as used by the CLI and config files) to
builder classes.
"""

from fastrecord.builders.base import BuildSummary, DatasetBuilder, SplitSummary
from fastrecord.builders.classifier import ClassifierBuilder
from fastrecord.builders.similarity import SimilarityBuilder
from fastrecord.builders.tagging import TaggingBuilder

BUILDERS = {
    ClassifierBuilder.TASK: ClassifierBuilder,
    SimilarityBuilder.TASK: SimilarityBuilder,
    TaggingBuilder.TASK: TaggingBuilder,
}

__all__ = [
    "BUILDERS",
    "BuildSummary",
    "ClassifierBuilder",
    "DatasetBuilder",
    "SimilarityBuilder",
    "SplitSummary",
    "TaggingBuilder",
]
