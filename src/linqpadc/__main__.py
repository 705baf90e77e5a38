"""Allow ``python -m linqpadc``."""

from linqpadc.cli import cli

if __name__ == "__main__":
    cli()
