"""
Main entry point for shouldcov when run as a module.

Allows execution via: python -m shouldcov

shouldcov/src/shouldcov/__main__.py
"""

from .cli import main

if __name__ == "__main__":
    main()
