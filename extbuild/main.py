"""CLI entry point for extbuild."""

from .cli.app import cli


if __name__ == '__main__':
    cli()
