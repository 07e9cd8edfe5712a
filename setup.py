#!/usr/bin/env python3
"""Setup script for wolfden package."""

from setuptools import setup, find_packages

setup(
    name="wolfden",
    version="0.1.0",
    description="Werewolf game orchestration for mixed human and LLM tables",
    python_requires=">=3.10",
    packages=find_packages(where=".", include=["wolfden*"]),
    package_dir={"": "."},
    install_requires=[
        "aiohttp>=3.8",
        "tenacity>=8.0",
        "pyyaml>=6.0",
        "numpy>=1.21",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
