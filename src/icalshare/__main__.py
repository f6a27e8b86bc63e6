"""Entry point for running ical-share as a module.

Usage: python -m icalshare [COMMAND]
"""

from icalshare.cli import main


if __name__ == "__main__":
    main()
