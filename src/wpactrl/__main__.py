"""Entry point for running wpactrl as a module."""

from .cli import app


def main() -> None:
    """Main entry point for the wpactrl CLI application."""
    app()


if __name__ == "__main__":
    main()
