"""Module entrypoint for ``python -m kokona``.

All argument parsing and setup happen in ``kokona.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
