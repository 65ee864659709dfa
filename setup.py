"""
fastrecord — Setup Script
=========================
Installs fastrecord as a local editable package so that the `fast-record`
command and all internal imports (e.g. `from fastrecord.builders import
ClassifierBuilder`) work from any script or notebook.

Usage:
    cd /path/to/fastrecord
    pip install -e .
"""

from setuptools import setup, find_packages

setup(
    name="fastrecord",
    version="0.1.0",
    description=(
        "fastrecord: build fixed-width Arrow record files from "
        "classification, similarity and tagging text datasets"
    ),
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.24.0",
        "pyarrow>=14.0.0",
        "torch>=2.1.0",
        "tqdm>=4.65.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "fast-record=fastrecord.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Topic :: Text Processing :: Linguistic",
    ],
)
