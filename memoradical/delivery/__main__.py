"""
Entry point for running Memoradical as a module.

Usage:
    python -m memoradical.delivery study
    python -m memoradical.delivery stats
    python -m memoradical.delivery --help
"""
from .cli import main

if __name__ == "__main__":
    main()
