"""
Errors module for the ncartifact application.

Every failure raised by the library derives from NextcloudArtifactError so
callers (and the CLI) can catch them in one place.
"""

from typing import Optional

SNIPPET_LENGTH = 200


def snippet(body: Optional[str]) -> str:
    """Shorten a response body for error messages."""
    if not body:
        return ""
    body = body.strip()
    if len(body) > SNIPPET_LENGTH:
        return body[:SNIPPET_LENGTH] + "..."
    return body


class NextcloudArtifactError(Exception):
    """Base class for all ncartifact errors."""


class ConfigError(NextcloudArtifactError):
    """Raised when the Nextcloud configuration is missing or invalid."""
    def __init__(self, variable: str, reason: str):
        self.variable = variable
        self.reason = reason
        super().__init__(variable, reason)

    def __str__(self):
        return f"Invalid configuration for {self.variable}: {self.reason}"


class InvalidRootError(NextcloudArtifactError):
    """Raised when the root directory does not exist or is not a directory."""
    def __init__(self, root: str, reason: str = "does not exist"):
        self.root = root
        self.reason = reason
        super().__init__(root, reason)

    def __str__(self):
        return f"Root directory {self.root} {self.reason}"


class MissingFileError(NextcloudArtifactError):
    """Raised when a file to upload does not exist."""
    def __init__(self, path: str):
        self.path = path
        super().__init__(path)

    def __str__(self):
        return f"File {self.path} does not exist"


class PathEscapeError(NextcloudArtifactError):
    """Raised when a file is not located under the root directory."""
    def __init__(self, root: str, path: str):
        self.root = root
        self.path = path
        super().__init__(root, path)

    def __str__(self):
        return f"The root directory {self.root} is not a parent directory of the file {self.path}"


class StagingError(NextcloudArtifactError):
    """Raised when a file cannot be copied into the staging directory."""
    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(source, reason)

    def __str__(self):
        return f"Could not stage {self.source}: {self.reason}"


class ArchiveError(NextcloudArtifactError):
    """Raised when the staged artifact cannot be compressed."""
    def __init__(self, archive_path: str, reason: str):
        self.archive_path = archive_path
        self.reason = reason
        super().__init__(archive_path, reason)

    def __str__(self):
        return f"Could not create archive {self.archive_path}: {self.reason}"


class UploadError(NextcloudArtifactError):
    """Raised when a WebDAV request fails at the HTTP or network level."""
    def __init__(self, url: str, status_code: Optional[int] = None, body: Optional[str] = None,
                 reason: Optional[str] = None):
        self.url = url
        self.status_code = status_code
        self.body = body
        self.reason = reason
        super().__init__(url, status_code, body, reason)

    def __str__(self):
        message = f"Upload request to {self.url} failed"
        if self.status_code is not None:
            message += f" with HTTP status {self.status_code}"
        if self.reason:
            message += f": {self.reason}"
        body = snippet(self.body)
        if body:
            message += f" (response: {body})"
        return message


class ShareParseError(NextcloudArtifactError):
    """Raised when no public share URL could be obtained for a remote path."""
    def __init__(self, remote_path: str, body: Optional[str] = None, reason: Optional[str] = None):
        self.remote_path = remote_path
        self.body = body
        self.reason = reason
        super().__init__(remote_path, body, reason)

    def __str__(self):
        message = f"Could not obtain a share URL for {self.remote_path}"
        if self.reason:
            message += f": {self.reason}"
        body = snippet(self.body)
        if body:
            message += f" (response: {body})"
        return message
