"""
Upload utilities module for the ncartifact application.

This module provides the single entry point used to upload an artifact,
either file by file over WebDAV or as one zip archive.
"""

import contextlib
import logging
import os
import posixpath
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ncartifact.core import constants
from ncartifact.core.NextcloudSession import NextcloudSession
from ncartifact.core.config import NextcloudConfig
from ncartifact.core.errors import UploadError
from ncartifact.utils.archive_utils import cleanup_staging, stage
from ncartifact.utils.path_utils import UploadSpec, build_specs
from ncartifact.utils.progress_tracker import ProgressTracker
from ncartifact.utils.share_utils import ShareLinkResolver

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    """
    Outcome of an artifact upload.

    Attributes:
        artifact_name (str): Name of the artifact
        mode (str): 'files' or 'archive'
        specs (List[UploadSpec]): Files that were uploaded
        locations (List[str]): Remote paths, in the order of the specs (one archive path in archive mode)
        share_urls (Dict[str, str]): Public URL of every shared remote path
        archive_path (str, optional): Local archive, only set when it was kept
    """

    artifact_name: str
    mode: str
    specs: List[UploadSpec]
    locations: List[str] = field(default_factory=list)
    share_urls: Dict[str, str] = field(default_factory=dict)
    archive_path: Optional[str] = None


def _progress(sizes: List[int], show_progress: bool):
    if not show_progress:
        return contextlib.nullcontext()
    return ProgressTracker(sizes)


def upload_artifact(
    artifact_name: str,
    root_directory: str,
    files: Iterable[str],
    config: Optional[NextcloudConfig] = None,
    session: Optional[NextcloudSession] = None,
    mode: str = constants.MODE_FILES,
    share: bool = False,
    workers: Optional[int] = None,
    keep_archive: bool = False,
    show_progress: bool = True
) -> UploadResult:
    """
    Upload files located under a root directory as a named artifact.

    Paths are validated before anything is sent. Every error is raised
    immediately and nothing is retried.

    Args:
        artifact_name (str): Name of the artifact, first segment of every upload path
        root_directory (str): Directory the files are relative to
        files (Iterable[str]): Files to upload
        config (NextcloudConfig, optional): Connection settings, read from the environment by default
        session (NextcloudSession, optional): Session to reuse, created from config by default
        mode (str): 'files' for one WebDAV upload per file, 'archive' for a single zip upload
        share (bool): Create a public link for every uploaded location
        workers (int, optional): Parallel uploads in files mode, defaults to the configured value
        keep_archive (bool): Keep the local zip file in archive mode
        show_progress (bool): Display progress bars

    Returns:
        UploadResult: The uploaded locations and share links

    Raises:
        ValueError: If the mode is unknown
        NextcloudArtifactError: If validation, staging, upload or sharing fails
    """
    if mode not in constants.MODES:
        raise ValueError(f"Unknown upload mode '{mode}', expected one of {', '.join(constants.MODES)}")

    specs = build_specs(root_directory, files, artifact_name)
    result = UploadResult(artifact_name=artifact_name, mode=mode, specs=specs)

    if not specs:
        logger.warning(f"No files to upload for artifact {artifact_name}")
        return result

    owns_session = session is None
    if session is None:
        session = NextcloudSession(config if config is not None else NextcloudConfig.from_env())

    try:
        if mode == constants.MODE_ARCHIVE:
            result.locations = [_upload_archive(session, specs, artifact_name, keep_archive, show_progress, result)]
        else:
            result.locations = _upload_files(session, specs, workers, show_progress)

        logger.info(f"Uploaded artifact {artifact_name} ({len(specs)} files) in {mode} mode")

        if share:
            resolver = ShareLinkResolver(session)
            for location in result.locations:
                result.share_urls[location] = resolver.create_public_share(location)
    finally:
        if owns_session:
            session.close()

    return result


def _upload_archive(session: NextcloudSession, specs: List[UploadSpec], artifact_name: str,
                    keep_archive: bool, show_progress: bool, result: UploadResult) -> str:
    archive_path = stage(specs, artifact_name)
    try:
        size = os.path.getsize(archive_path)
        display_path = os.path.basename(archive_path)
        with _progress([size], show_progress) as tracker:
            if tracker:
                tracker.start_file(display_path, size)
            location = session.put_archive(archive_path, callback=tracker.advance if tracker else None)
            if tracker:
                tracker.complete_file(display_path, size, counted=True)
    finally:
        if keep_archive:
            result.archive_path = archive_path
        else:
            cleanup_staging(archive_path)
    return location


def _file_size(session: NextcloudSession, spec: UploadSpec) -> int:
    try:
        return os.path.getsize(spec.absolute_path)
    except OSError as e:
        url = session.config.dav_url(posixpath.join(session.config.base_dir.strip("/"), spec.upload_path))
        raise UploadError(url, reason=f"could not read {spec.absolute_path}: {e}") from e


def _upload_files(session: NextcloudSession, specs: List[UploadSpec], workers: Optional[int],
                  show_progress: bool) -> List[str]:
    sizes = {spec.absolute_path: _file_size(session, spec) for spec in specs}

    with _progress([sizes[spec.absolute_path] for spec in specs], show_progress) as tracker:
        if not tracker:
            return session.put_files(specs, workers=workers)

        def on_start(spec: UploadSpec) -> None:
            tracker.start_file(spec.upload_path, sizes[spec.absolute_path])

        def on_complete(spec: UploadSpec, success: bool) -> None:
            tracker.complete_file(spec.upload_path, sizes[spec.absolute_path], success)

        return session.put_files(specs, workers=workers, on_start=on_start, on_complete=on_complete)
