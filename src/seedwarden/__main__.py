"""Allow running seedwarden with ``python -m seedwarden``."""

from seedwarden.client.cli import main

if __name__ == "__main__":
    main()
