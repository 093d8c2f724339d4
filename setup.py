#!/usr/bin/env python3
"""
RepoMap Engine - Setup Script for pip installation
"""

from setuptools import setup
from pathlib import Path

# Read README if exists
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

setup(
    name="repomap-engine",
    version="0.1.0",
    author="WebXExpert",
    author_email="contact@webxexpert.com",
    description="Tree-sitter repository map and syntax-aware symbol editing",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",

    py_modules=["repomap_engine"],

    python_requires=">=3.10",

    install_requires=[
        "tree-sitter>=0.21.0,<0.22.0",
        "tree-sitter-languages>=1.10.0",
        "gitignore_parser>=0.1.11",
    ],

    extras_require={
        "test": ["pytest>=7.0"],
    },

    entry_points={
        "console_scripts": [
            "repomap=repomap_engine:main",
        ],
    },

    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Text Processing :: Indexing",
    ],

    keywords="tree-sitter repo-map symbols code-editing",
)
