"""
Setup script for lossynet.

This allows the package to be installed in development mode:
    pip install -e .

Or run directly:
    python -m lossynet.cli --list-profiles
"""

from setuptools import setup, find_packages

setup(
    name="lossynet",
    version="0.1.0",
    description="Bandwidth, latency and packet loss simulation for Python connections",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-mock",
            "black",
            "flake8",
            "mypy",
        ],
    },
    entry_points={
        "console_scripts": [
            "lossynet=lossynet.cli:main",
        ],
    },
)
