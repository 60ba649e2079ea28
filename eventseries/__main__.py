"""Allow ``python -m eventseries``."""

from eventseries.cli import main

if __name__ == "__main__":
    main()
