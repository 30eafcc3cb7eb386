"""Entry point for running blogship with ``python -m blogship``."""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
