"""
Archive utilities module for the ncartifact application.

This module stages the files of an artifact into a temporary directory and
compresses them into a single zip file.
"""

import logging
import os
import shutil
import tempfile
import zipfile
from typing import List

from ncartifact.core import constants
from ncartifact.core.errors import ArchiveError, StagingError
from ncartifact.utils.path_utils import UploadSpec

logger = logging.getLogger(__name__)


def stage(specs: List[UploadSpec], artifact_name: str) -> str:
    """
    Copy the files of an artifact into a fresh temporary directory and zip them.

    The working directory is unique for every call, so concurrent uploads do
    not interfere. It is not removed here, even on failure; see cleanup_staging.

    Args:
        specs (List[UploadSpec]): Files to archive
        artifact_name (str): Name of the artifact

    Returns:
        str: Path of the zip file, '<workdir>/<artifact_name>.zip'

    Raises:
        StagingError: If a file cannot be copied
        ArchiveError: If the zip file cannot be written
    """
    workdir = tempfile.mkdtemp(prefix=constants.STAGING_PREFIX)
    logger.debug(f"Staging {len(specs)} files in {workdir}")

    for spec in specs:
        destination = os.path.join(workdir, *spec.upload_path.split("/"))
        try:
            os.makedirs(os.path.dirname(destination), exist_ok=True)
            shutil.copyfile(spec.absolute_path, destination)
        except OSError as e:
            raise StagingError(spec.absolute_path, str(e)) from e

    archive_path = os.path.join(workdir, f"{artifact_name.strip('/')}.zip")
    zip_directory(workdir, os.path.join(workdir, artifact_name), archive_path)

    logger.info(f"Created archive {archive_path} ({os.path.getsize(archive_path)} bytes)")
    return archive_path


def zip_directory(base_dir: str, directory: str, archive_path: str) -> None:
    """
    Compress a directory into a zip file with maximum compression.

    Entry names are relative to base_dir, so the directory name itself is kept
    as the first segment of every entry.

    Args:
        base_dir (str): Directory entry names are relative to
        directory (str): Directory to compress
        archive_path (str): Path of the zip file to write

    Raises:
        ArchiveError: If the zip file cannot be written
    """
    try:
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED,
                             compresslevel=constants.ZIP_COMPRESSION_LEVEL) as archive:
            for root, dirs, files in os.walk(directory):
                dirs.sort()
                for file in sorted(files):
                    file_path = os.path.join(root, file)
                    arcname = os.path.relpath(file_path, base_dir).replace(os.sep, "/")
                    archive.write(file_path, arcname)
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        raise ArchiveError(archive_path, str(e)) from e


def cleanup_staging(archive_path: str) -> None:
    """
    Remove the working directory of an archive created by stage.

    Args:
        archive_path (str): Path returned by stage
    """
    workdir = os.path.dirname(archive_path)
    if not os.path.basename(workdir).startswith(constants.STAGING_PREFIX):
        raise ValueError(f"{archive_path} was not created by stage")
    shutil.rmtree(workdir)
    logger.debug(f"Removed staging directory {workdir}")
