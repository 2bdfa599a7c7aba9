"""
Nextcloud session module for the ncartifact application.

This module provides the client used to transfer files to a Nextcloud server
over WebDAV and to request public shares through the OCS API.
"""

import concurrent.futures
import logging
import os
import posixpath
from typing import Callable, List, Optional

import requests

from ncartifact.core import constants
from ncartifact.core.config import NextcloudConfig
from ncartifact.core.errors import ShareParseError, UploadError
from ncartifact.utils.path_utils import UploadSpec

logger = logging.getLogger(__name__)

PROPFIND_BODY = (
    '<?xml version="1.0" encoding="utf-8"?>'
    '<d:propfind xmlns:d="DAV:"><d:prop><d:resourcetype/></d:prop></d:propfind>'
)

# 201 = created, 405 = already exists
MKCOL_OK_STATUS = (201, 405)

CHUNK_SIZE = 64 * 1024


class _ProgressReader:
    """File wrapper reporting the number of bytes read to a callback."""

    def __init__(self, file, size: int, callback: Callable[[int], None]):
        self._file = file
        self._size = size
        self._callback = callback

    def __len__(self) -> int:
        return self._size

    def read(self, size: int = -1) -> bytes:
        chunk = self._file.read(size if size and size > 0 else CHUNK_SIZE)
        if chunk:
            self._callback(len(chunk))
        return chunk


class NextcloudSession:
    """
    Client for a single Nextcloud account.

    The configuration is immutable and shared by every request. HTTP Basic
    authentication is sent with every request, including the share request.
    """

    def __init__(self, config: NextcloudConfig, http: Optional[requests.Session] = None):
        """
        Create a session.

        Args:
            config (NextcloudConfig): Connection settings
            http (requests.Session, optional): HTTP session to use, a new one is created by default
        """
        self.config = config
        self.http = http if http is not None else requests.Session()
        self.http.auth = (config.username, config.password)
        self.http.headers.update({'User-Agent': constants.USER_AGENT})

    def __enter__(self) -> 'NextcloudSession':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.http.request(method, url, timeout=self.config.timeout, **kwargs)
        except requests.RequestException as e:
            raise UploadError(url, reason=str(e)) from e

    def exists(self, remote_path: str) -> bool:
        """
        Check whether a remote file or directory exists.

        Args:
            remote_path (str): Path relative to the user's files

        Returns:
            bool: True if the path exists

        Raises:
            UploadError: If the server answers with an unexpected status
        """
        url = self.config.dav_url(remote_path)
        response = self._request(
            "PROPFIND", url,
            data=PROPFIND_BODY,
            headers={'Depth': '0', 'Content-Type': 'application/xml; charset=utf-8'}
        )
        if response.status_code == 404:
            return False
        if 200 <= response.status_code < 300:
            return True
        raise UploadError(url, response.status_code, response.text)

    def mkdir(self, remote_path: str) -> None:
        """
        Create a remote directory and its missing parents.

        Existing directories are accepted, so the call can be repeated.

        Args:
            remote_path (str): Path relative to the user's files

        Raises:
            UploadError: If a directory cannot be created
        """
        current = ""
        for part in [p for p in remote_path.split("/") if p]:
            current = f"{current}/{part}" if current else part
            self._mkcol(current)

    def _mkcol(self, remote_path: str) -> None:
        url = self.config.dav_url(remote_path)
        response = self._request("MKCOL", url)
        if response.status_code not in MKCOL_OK_STATUS:
            raise UploadError(url, response.status_code, response.text)
        if response.status_code == 201:
            logger.debug(f"Created remote directory {remote_path}")

    def ensure_directory(self, remote_path: str) -> None:
        """
        Create a remote directory if it does not exist yet.

        The check and the creation are not atomic, a directory created in the
        meantime by someone else is accepted by mkdir.

        Args:
            remote_path (str): Path relative to the user's files
        """
        if self.exists(remote_path):
            logger.debug(f"Remote directory {remote_path} already exists")
            return
        logger.info(f"Creating remote directory {remote_path}")
        self.mkdir(remote_path)

    def _put(self, url: str, data, headers: Optional[dict] = None) -> None:
        response = self._request("PUT", url, data=data, headers=headers)
        if not 200 <= response.status_code < 300:
            raise UploadError(url, response.status_code, response.text)

    def put_file(self, local_path: str, remote_path: str) -> str:
        """
        Upload a single file, read fully into memory.

        Args:
            local_path (str): Path to the local file
            remote_path (str): Destination, relative to the user's files

        Returns:
            str: The remote path

        Raises:
            UploadError: If the file cannot be read or the upload fails
        """
        url = self.config.dav_url(remote_path)
        try:
            with open(local_path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise UploadError(url, reason=f"could not read {local_path}: {e}") from e

        logger.debug(f"Uploading {local_path} to {remote_path} ({len(data)} bytes)")
        self._put(url, data, headers={'Content-Type': 'application/octet-stream'})
        return remote_path

    def put_archive(self, archive_path: str, remote_path: Optional[str] = None,
                    callback: Optional[Callable[[int], None]] = None) -> str:
        """
        Upload an archive with a single streamed PUT request.

        Args:
            archive_path (str): Path to the local zip file
            remote_path (str, optional): Destination, defaults to '<base_dir>/<archive name>'
            callback (callable, optional): Function to call with progress updates
                                           Should accept (bytes_transferred)

        Returns:
            str: The remote path

        Raises:
            UploadError: If the archive cannot be read or the upload fails
        """
        if remote_path is None:
            remote_path = posixpath.join(self.config.base_dir.strip("/"), os.path.basename(archive_path))
        url = self.config.dav_url(remote_path)

        parent = posixpath.dirname(remote_path.strip("/"))
        if parent:
            self.ensure_directory(parent)

        logger.info(f"Uploading archive {archive_path} to {remote_path}")
        try:
            size = os.path.getsize(archive_path)
            with open(archive_path, "rb") as f:
                body = _ProgressReader(f, size, callback) if callback else f
                self._put(url, body, headers={'Content-Type': 'application/zip'})
        except OSError as e:
            raise UploadError(url, reason=f"could not read {archive_path}: {e}") from e
        return remote_path

    def put_files(self, specs: List[UploadSpec], base_remote_dir: Optional[str] = None,
                  workers: Optional[int] = None,
                  on_start: Optional[Callable[[UploadSpec], None]] = None,
                  on_complete: Optional[Callable[[UploadSpec, bool], None]] = None) -> List[str]:
        """
        Upload every file of an artifact to '<base_remote_dir>/<upload_path>'.

        The base directory is checked and created once for the batch, then
        the parent directories of the upload paths are created. The first
        failure aborts the batch.

        Args:
            specs (List[UploadSpec]): Files to upload
            base_remote_dir (str, optional): Remote directory, defaults to config.base_dir
            workers (int, optional): Parallel uploads, defaults to config.workers
            on_start (callable, optional): Called with the spec before each upload
            on_complete (callable, optional): Called with the spec and a success flag after each upload

        Returns:
            List[str]: Remote paths, in the order of the specs

        Raises:
            UploadError: If a directory cannot be created or a file cannot be uploaded
        """
        if not specs:
            return []

        base = (self.config.base_dir if base_remote_dir is None else base_remote_dir).strip("/")
        workers = workers or self.config.workers

        if base:
            self.ensure_directory(base)

        # WebDAV PUT does not create missing parent collections
        collections = []
        for spec in specs:
            parts = spec.upload_path.split("/")[:-1]
            for depth in range(1, len(parts) + 1):
                collection = "/".join(parts[:depth])
                if collection not in collections:
                    collections.append(collection)
        for collection in collections:
            self._mkcol(posixpath.join(base, collection) if base else collection)

        def upload(spec: UploadSpec) -> str:
            if on_start:
                on_start(spec)
            remote_path = posixpath.join(base, spec.upload_path) if base else spec.upload_path
            try:
                location = self.put_file(spec.absolute_path, remote_path)
            except UploadError:
                if on_complete:
                    on_complete(spec, False)
                raise
            if on_complete:
                on_complete(spec, True)
            return location

        if workers <= 1:
            return [upload(spec) for spec in specs]

        locations: List[Optional[str]] = [None] * len(specs)
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_index = {executor.submit(upload, spec): index for index, spec in enumerate(specs)}
            try:
                for future in concurrent.futures.as_completed(future_to_index):
                    locations[future_to_index[future]] = future.result()
            except Exception:
                for future in future_to_index:
                    future.cancel()
                raise
        return locations

    def create_share(self, remote_path: str) -> str:
        """
        Request a read-only public link share for a remote path.

        Args:
            remote_path (str): Path relative to the user's files

        Returns:
            str: The response body, whatever the HTTP status

        Raises:
            ShareParseError: If the request itself fails
        """
        payload = {
            "path": "/" + remote_path.lstrip("/"),
            "shareType": constants.SHARE_TYPE_PUBLIC_LINK,
            "publicUpload": constants.SHARE_PUBLIC_UPLOAD,
            "permissions": constants.SHARE_PERMISSIONS_READ,
        }
        try:
            response = self.http.post(
                self.config.shares_url,
                json=payload,
                headers={'OCS-APIRequest': 'true'},
                timeout=self.config.timeout
            )
        except requests.RequestException as e:
            raise ShareParseError(remote_path, reason=str(e)) from e

        if not response.ok:
            logger.warning(f"Share request for {remote_path} returned HTTP status {response.status_code}")
        return response.text
