"""Entry point for cdoc.

Delegates to the Click command, which loads configuration, sets up
logging and runs the pipeline.
"""

from cdoc.cli.commands import cdoc


def main() -> None:
    """Run the cdoc command line."""
    cdoc(prog_name="cdoc")


if __name__ == "__main__":
    main()
