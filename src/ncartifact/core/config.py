"""
Configuration module for the ncartifact application.

This module provides the immutable Nextcloud configuration, built once per
client session from the environment (usually loaded from a .env file).
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import quote

from ncartifact.core import constants
from ncartifact.core.errors import ConfigError


@dataclass(frozen=True)
class NextcloudConfig:
    """
    Connection settings for a Nextcloud server.

    Attributes:
        endpoint (str): Base URL of the server, e.g. https://cloud.example
        username (str): Nextcloud user name
        password (str): Password or app token
        base_dir (str): Remote directory, relative to the user's files, that receives artifacts
        timeout (float, optional): Request timeout in seconds, None to wait indefinitely
        workers (int): Number of parallel per-file uploads
    """

    endpoint: str
    username: str
    password: str
    base_dir: str = constants.DEFAULT_BASE_DIR
    timeout: Optional[float] = None
    workers: int = constants.DEFAULT_WORKERS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'NextcloudConfig':
        """
        Build a configuration from environment variables.

        Args:
            environ (Mapping[str, str], optional): Variables to read, defaults to os.environ

        Returns:
            NextcloudConfig: The configuration

        Raises:
            ConfigError: If a required variable is missing or a number cannot be parsed
        """
        environ = os.environ if environ is None else environ

        def required(name: str) -> str:
            value = environ.get(name, "").strip()
            if not value:
                raise ConfigError(name, "variable is not set")
            return value

        timeout = None
        raw_timeout = environ.get(constants.ENV_TIMEOUT, "").strip()
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ConfigError(constants.ENV_TIMEOUT, f"'{raw_timeout}' is not a number") from None
            if timeout <= 0:
                raise ConfigError(constants.ENV_TIMEOUT, "must be positive")

        workers = constants.DEFAULT_WORKERS
        raw_workers = environ.get(constants.ENV_WORKERS, "").strip()
        if raw_workers:
            try:
                workers = int(raw_workers)
            except ValueError:
                raise ConfigError(constants.ENV_WORKERS, f"'{raw_workers}' is not an integer") from None
            if workers < 1:
                raise ConfigError(constants.ENV_WORKERS, "must be at least 1")

        return cls(
            endpoint=required(constants.ENV_ENDPOINT),
            username=required(constants.ENV_USERNAME),
            password=required(constants.ENV_PASSWORD),
            base_dir=environ.get(constants.ENV_BASE_DIR, "").strip() or constants.DEFAULT_BASE_DIR,
            timeout=timeout,
            workers=workers,
        )

    @property
    def dav_root(self) -> str:
        """WebDAV URL of the user's files."""
        return f"{self.endpoint.rstrip('/')}/{constants.DAV_FILES_PATH}/{quote(self.username, safe='')}"

    @property
    def shares_url(self) -> str:
        """URL of the OCS share creation API."""
        return f"{self.endpoint.rstrip('/')}/{constants.SHARES_API_PATH}"

    def dav_url(self, remote_path: str) -> str:
        """
        Build the WebDAV URL of a remote path.

        Args:
            remote_path (str): Path relative to the user's files (leading slash optional)

        Returns:
            str: The quoted WebDAV URL
        """
        remote_path = remote_path.strip("/")
        if not remote_path:
            return self.dav_root
        return f"{self.dav_root}/{quote(remote_path, safe='/')}"
