#!/usr/bin/env python3
"""
Setup script for resource-prober package
"""
from setuptools import setup, find_packages
import os

# Read README for long description
readme_path = os.path.join(os.path.dirname(__file__), "README.md")
if os.path.exists(readme_path):
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()
else:
    long_description = "Progressive resource-limit prober for tabular data workloads"

# Read requirements
requirements_path = os.path.join(os.path.dirname(__file__), "requirements.txt")
if os.path.exists(requirements_path):
    with open(requirements_path, "r", encoding="utf-8") as f:
        requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]
else:
    requirements = [
        "pandas>=2.0.0",
        "numpy>=1.24.0",
        "pyarrow>=14.0.0",
        "psutil>=5.9.0",
        "PyYAML>=6.0",
    ]

setup(
    name="resource_prober",
    version="0.1.0",
    author="Resource Prober Contributors",
    author_email="",
    description="Find the dataset size at which a data operation breaks on a given host",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["resource_prober", "resource_prober.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Benchmark",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": ["pytest", "black", "flake8"],
    },
    entry_points={
        "console_scripts": [
            "probe=resource_prober.cli:main",
            "resource-prober=resource_prober.cli:main",
        ],
    },
)
