#!/usr/bin/env python3
"""
Setup script for contactgraph package.

This setup.py provides a traditional installation method for the
contactgraph temporal graph library.
"""

from setuptools import setup, find_packages

# Read the README file
def read_readme():
    """Read README.md for long description."""
    try:
        with open("README.md", "r", encoding="utf-8") as fh:
            return fh.read()
    except FileNotFoundError:
        return "Temporal contact graph analysis and Edge-Markovian graph synthesis"

# Read version from __init__.py
def get_version():
    """Extract version from src/contactgraph/__init__.py."""
    try:
        with open("src/contactgraph/__init__.py", "r") as f:
            for line in f:
                if line.startswith("__version__"):
                    return line.split("=")[1].strip().strip("\"'")
    except FileNotFoundError:
        pass
    return "0.1.0"

setup(
    name="contactgraph",
    version=get_version(),
    description="Temporal contact graph analysis and Edge-Markovian graph synthesis",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Information Analysis",
    ],
    python_requires=">=3.9",
    install_requires=[
        "polars>=0.20.0",
        "numpy>=1.24.0",
        "scipy>=1.10.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "matplotlib>=3.6",
            "ruff>=0.1.0",
            "black>=23.0",
            "mypy>=1.0",
        ],
        "viz": [
            "matplotlib>=3.6",
        ],
    },
    entry_points={
        "console_scripts": [
            "contactgraph=contactgraph.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
