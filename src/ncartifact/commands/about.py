"""
About module for the ncartifact application.

This module provides information about the project.
"""

import typer
from rich.text import Text

from ncartifact.utils import utils

app = typer.Typer()

text = Text.assemble(
    ("Upload build artifacts to Nextcloud\n", "bold"),
    ("Files are sent over WebDAV, one by one or as a single zip archive,\n", "grey53"),
    ("and can be published with public read-only links.\n", "grey53"),
    justify="center")

@app.command()
def about() -> None:
    """
    Display information about the project.
    """
    utils.info(text)
