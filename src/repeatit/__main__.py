"""Module entrypoint for `python -m repeatit`."""

from __future__ import annotations

import sys

from .main import main_entry


def main() -> None:
    """Run the CLI with the process arguments."""
    main_entry(sys.argv[1:])


if __name__ == "__main__":  # pragma: no cover
    main()
