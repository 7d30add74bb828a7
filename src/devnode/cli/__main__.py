"""Allow ``python -m devnode.cli``."""

from devnode.cli import main

if __name__ == "__main__":
    main()
