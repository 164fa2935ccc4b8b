"""Main entry point for the venue locator CLI."""

from venue_locator.cli import cli

if __name__ == "__main__":
    cli()
