"""
Upload module for the ncartifact application.

This module provides a command to upload local files to Nextcloud as a named artifact.
"""

from typing import List, Optional

import typer
from rich.text import Text

from ncartifact.core import constants
from ncartifact.core.config import NextcloudConfig
from ncartifact.core.errors import NextcloudArtifactError
from ncartifact.utils import utils
from ncartifact.utils.path_utils import expand_files
from ncartifact.utils.upload_utils import upload_artifact

app = typer.Typer()

@app.command()
def upload(
    artifact: str = typer.Argument(..., help="Name of the artifact, used as the remote folder name"),
    root: str = typer.Argument(..., help="Root directory, uploaded paths are relative to it"),
    files: Optional[List[str]] = typer.Argument(None, help="Files or glob patterns to upload (default: every file under the root)"),
    mode: str = typer.Option(constants.MODE_FILES, "--mode", "-m", help="Transfer mode: 'files' (one upload per file) or 'archive' (single zip)"),
    share: bool = typer.Option(False, "--share", "-s", help="Create a public read-only link for every uploaded location"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Parallel uploads in files mode (default: NEXTCLOUD_WORKERS or 1)"),
    keep_archive: bool = typer.Option(False, "--keep-archive", help="Keep the local zip file in archive mode"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output")
) -> None:
    """
    Upload local files to Nextcloud as a named artifact.

    Files keep their path relative to ROOT and are stored under
    <NEXTCLOUD_BASE_DIR>/<ARTIFACT>/ on the server. Connection settings are
    read from the environment or the .env file.
    """
    logger = utils.setup_logging(verbose)

    if mode not in constants.MODES:
        raise typer.BadParameter(f"must be one of {', '.join(constants.MODES)}", param_hint="--mode")

    try:
        config = NextcloudConfig.from_env()
        file_list = expand_files(root, files)

        info_text = Text.assemble(
            ("Uploading artifact: ", "bold"),
            (artifact, "bold green"),
            ("\nFrom: ", "bold"),
            (root, "bold green"),
            ("\nTo: ", "bold"),
            (f"{config.endpoint.rstrip('/')} /{config.base_dir.strip('/')}", "bold green"),
            ("\nMode: ", "bold"),
            (mode, "bold green")
        )
        utils.info(info_text)

        result = upload_artifact(
            artifact_name=artifact,
            root_directory=root,
            files=file_list,
            config=config,
            mode=mode,
            share=share,
            workers=workers,
            keep_archive=keep_archive
        )
    except NextcloudArtifactError as e:
        logger.error(f"Upload of artifact {artifact} failed: {e}")
        utils.error(str(e))
        raise typer.Exit(code=1)

    if not result.specs:
        utils.info(Text(f"No files to upload for artifact {artifact}.", style="bold yellow"))
        return

    success_text = Text.assemble(
        ("Upload completed!", "bold green"),
        ("\nUploaded ", "bold"),
        (str(len(result.specs)), "bold green"),
        (" files to:", "bold")
    )
    for location in result.locations:
        success_text.append(f"\n  {location}")
        if location in result.share_urls:
            success_text.append(f"\n    {result.share_urls[location]}", style="bold cyan")
    if result.archive_path:
        success_text.append(f"\nArchive kept at {result.archive_path}", style="bold")
    utils.info(success_text)
