"""Module entrypoint for ``python -m lastchange``.

All argument parsing and dispatch happen in ``lastchange.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
