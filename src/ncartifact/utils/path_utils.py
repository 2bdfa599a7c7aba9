"""
Path utilities module for the ncartifact application.

This module maps local files to their upload paths inside an artifact.

Example:
    artifact_name: my-artifact
    root_directory: /home/user/files/plz-upload
    files: [
        /home/user/files/plz-upload/file1.txt,
        /home/user/files/plz-upload/dir/file2.txt,
    ]

    specs: [
        UploadSpec(/home/user/files/plz-upload/file1.txt, my-artifact/file1.txt),
        UploadSpec(/home/user/files/plz-upload/dir/file2.txt, my-artifact/dir/file2.txt),
    ]
"""

import glob
import logging
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from ncartifact.core.errors import InvalidRootError, MissingFileError, PathEscapeError

logger = logging.getLogger(__name__)

GLOB_CHARACTERS = "*?["


@dataclass(frozen=True)
class UploadSpec:
    """
    A local file and the path it is uploaded to.

    Attributes:
        absolute_path (str): Normalized absolute path of an existing local file
        upload_path (str): '<artifact>/<path relative to the root>', forward slashes
    """

    absolute_path: str
    upload_path: str


def normalize_path(path: str) -> str:
    """Collapse '.', '..' and duplicate separators, and make the path absolute."""
    return os.path.abspath(os.path.normpath(path))


def is_strictly_under(root: str, path: str) -> bool:
    """
    Check that a path lies strictly inside a root directory.

    Both paths must already be normalized. The comparison is done on path
    components, so /a/bc/file.txt is not considered to be under /a/b.
    """
    root_parts = Path(root).parts
    path_parts = Path(path).parts
    return len(path_parts) > len(root_parts) and path_parts[:len(root_parts)] == root_parts


def to_upload_path(artifact_name: str, root: str, path: str) -> str:
    """Join the artifact name with the path relative to the root, using forward slashes."""
    relative_parts = Path(path).parts[len(Path(root).parts):]
    return posixpath.normpath(posixpath.join(artifact_name, *relative_parts))


def build_specs(root_directory: str, files: Iterable[str], artifact_name: str) -> List[UploadSpec]:
    """
    Build the upload specifications for a list of files.

    Directories are skipped. The order of the files is kept.

    Args:
        root_directory (str): Directory the files are relative to
        files (Iterable[str]): Absolute or relative file paths
        artifact_name (str): Name of the artifact, used as the first segment of every upload path

    Returns:
        List[UploadSpec]: One specification per file

    Raises:
        InvalidRootError: If the root directory does not exist or is not a directory
        MissingFileError: If a file does not exist
        PathEscapeError: If a file is not located under the root directory
    """
    if not os.path.exists(root_directory):
        raise InvalidRootError(root_directory, "does not exist")
    if not os.path.isdir(root_directory):
        raise InvalidRootError(root_directory, "is not a valid directory")

    root = normalize_path(root_directory)
    specs = []

    for file in files:
        if not os.path.exists(file):
            raise MissingFileError(file)
        if os.path.isdir(file):
            # Directories are rejected by the server during upload
            logger.debug(f"Removing {file} from the upload list because it is a directory")
            continue

        path = normalize_path(file)
        if not is_strictly_under(root, path):
            raise PathEscapeError(root, path)

        specs.append(UploadSpec(absolute_path=path, upload_path=to_upload_path(artifact_name, root, path)))

    return specs


def expand_files(root_directory: str, patterns: Optional[Iterable[str]] = None) -> List[str]:
    """
    Expand file arguments into a list of paths.

    Glob patterns ('**' matches recursively) are expanded and sorted, other
    arguments are kept as they are so that missing files are reported by
    build_specs. Duplicates are dropped, first occurrence wins. Without any
    pattern, every file under the root directory is returned.

    Args:
        root_directory (str): Directory listed when no pattern is given
        patterns (Iterable[str], optional): File paths or glob patterns

    Returns:
        List[str]: The paths, in order
    """
    patterns = list(patterns or [])

    if not patterns:
        all_files = []
        for root, dirs, files in os.walk(root_directory):
            dirs.sort()
            for file in sorted(files):
                all_files.append(os.path.join(root, file))
        return all_files

    expanded = []
    seen = set()
    for pattern in patterns:
        if any(character in pattern for character in GLOB_CHARACTERS):
            matches = sorted(glob.glob(pattern, recursive=True))
            if not matches:
                logger.warning(f"No files matched the pattern {pattern}")
        else:
            matches = [pattern]

        for match in matches:
            key = normalize_path(match)
            if key in seen:
                continue
            seen.add(key)
            expanded.append(match)

    return expanded
