"""
Setup script for memoradical.

Memoradical is a no-frills, local-only flashcard trainer for the
terminal. Cards are chosen adaptively from their hit/miss history:

1. Missed cards come up more often (Beta sampling)
2. Rarely seen cards can be favored (neglect bonus)
3. Recently shown cards are held back (history window)

The 'memoradical' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="memoradical",
    version="1.0.0",
    description="No-frills local-only flashcard trainer with adaptive card selection",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Memoradical",
    packages=find_packages(include=["memoradical", "memoradical.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Sampling
        "numpy>=1.24.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "memoradical=memoradical.delivery.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="flashcards learning thompson-sampling cli education",
)
