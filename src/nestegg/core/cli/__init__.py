"""nestegg CLI entry point for the projection command."""

import click

from nestegg import __version__


@click.group()
@click.version_option(version=__version__, package_name="nestegg")
def main() -> None:
    """nestegg: track and project your net worth."""


# Register subcommands (lazy imports keep startup fast)
from .project_cmd import project

main.add_command(project)
