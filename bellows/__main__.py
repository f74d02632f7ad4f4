"""Module entrypoint for ``python -m bellows``."""

from .cli import main


if __name__ == "__main__":
    main()
