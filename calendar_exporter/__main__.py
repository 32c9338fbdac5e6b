"""Entry point for `python -m calendar_exporter` and the `calendar-exporter` command."""

import asyncio
import sys

from calendar_exporter.cli import main_entry


def main() -> None:
    """Run the command line interface and exit with its status code."""
    try:
        exit_code = asyncio.run(main_entry())
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("Operation cancelled by user")
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
