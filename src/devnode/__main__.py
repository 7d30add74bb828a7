"""Allow ``python -m devnode``."""

from devnode.cli import main

if __name__ == "__main__":
    main()
