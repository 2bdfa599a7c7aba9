"""
Share module for the ncartifact application.

This module provides a command to create a public link for a file already on Nextcloud.
"""

import typer
from rich.text import Text

from ncartifact.core.NextcloudSession import NextcloudSession
from ncartifact.core.config import NextcloudConfig
from ncartifact.core.errors import NextcloudArtifactError
from ncartifact.utils import utils
from ncartifact.utils.share_utils import ShareLinkResolver

app = typer.Typer()

@app.command()
def share(
    remote_path: str = typer.Argument(..., help="Remote path, relative to the user's files (e.g. Software/my-artifact/file.txt)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output")
) -> None:
    """
    Create a public read-only link for a remote file or folder.
    """
    logger = utils.setup_logging(verbose)

    try:
        with NextcloudSession(NextcloudConfig.from_env()) as session:
            url = ShareLinkResolver(session).create_public_share(remote_path)
    except NextcloudArtifactError as e:
        logger.error(f"Sharing {remote_path} failed: {e}")
        utils.error(str(e))
        raise typer.Exit(code=1)

    utils.info(Text.assemble(
        ("Shared ", "bold"),
        (remote_path, "bold green"),
        ("\n", ""),
        (url, "bold cyan")
    ))
