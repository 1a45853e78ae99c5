"""Entry point for running gitscribe as a module."""

from gitscribe.cli import app


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
