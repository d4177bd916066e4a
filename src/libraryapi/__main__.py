"""Allow running the CLI with ``python -m libraryapi``."""

from libraryapi.cli import main

if __name__ == "__main__":
    main()
