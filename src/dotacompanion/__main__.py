"""
Dota Companion CLI Entry Point

Allows running the package as a module: python -m dotacompanion
"""

from dotacompanion.cli import app


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
