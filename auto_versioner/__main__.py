"""Allow running as `python -m auto_versioner`."""

from auto_versioner.cli import cli

if __name__ == "__main__":
    cli()
