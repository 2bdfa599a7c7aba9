"""
Shared fixtures for the ncartifact tests.

FakeDavServer stands in for the requests.Session used by NextcloudSession.
It keeps the remote tree in memory and answers PROPFIND, MKCOL, PUT and the
share creation POST the way a Nextcloud server does.
"""

import logging
import threading
import time
from types import SimpleNamespace
from urllib.parse import unquote

import pytest

from ncartifact.core.config import NextcloudConfig

ENDPOINT = "https://cloud.example"
USERNAME = "alice"
PASSWORD = "secret"
DAV_PREFIX = f"{ENDPOINT}/remote.php/dav/files/{USERNAME}"
SHARES_URL = f"{ENDPOINT}/ocs/v2.php/apps/files_sharing/api/v1/shares"


def make_response(status_code: int, text: str = ""):
    return SimpleNamespace(status_code=status_code, text=text, ok=200 <= status_code < 400)


class FakeDavServer:
    """In-memory WebDAV server with the interface of requests.Session."""

    def __init__(self):
        self.auth = None
        self.headers = {}
        self.closed = False
        self.collections = {""}
        self.files = {}
        self.calls = []
        self.failures = {}
        self.share_responses = {}
        self.put_delay = 0.0
        self.lock = threading.Lock()

    def _path(self, url: str) -> str:
        assert url.startswith(DAV_PREFIX), url
        return unquote(url[len(DAV_PREFIX):]).strip("/")

    @staticmethod
    def _parent(path: str) -> str:
        return path.rsplit("/", 1)[0] if "/" in path else ""

    def request(self, method, url, data=None, headers=None, timeout=None, **kwargs):
        path = self._path(url)
        with self.lock:
            self.calls.append(SimpleNamespace(method=method, path=path, headers=headers or {}, timeout=timeout))
            failure = self.failures.get((method, path))
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            return make_response(failure, "<d:error>failure</d:error>")

        if method == "PROPFIND":
            with self.lock:
                found = path in self.collections or path in self.files
            return make_response(207 if found else 404)

        if method == "MKCOL":
            with self.lock:
                if path in self.collections or path in self.files:
                    return make_response(405)
                if self._parent(path) not in self.collections:
                    return make_response(409)
                self.collections.add(path)
            return make_response(201)

        if method == "PUT":
            if self.put_delay:
                time.sleep(self.put_delay)
            body = data
            if hasattr(data, "read"):
                chunks = []
                while True:
                    chunk = data.read(8192)
                    if not chunk:
                        break
                    chunks.append(chunk)
                body = b"".join(chunks)
            with self.lock:
                if self._parent(path) not in self.collections:
                    return make_response(409)
                self.files[path] = body
            return make_response(201)

        return make_response(405)

    def post(self, url, json=None, headers=None, timeout=None, **kwargs):
        assert url == SHARES_URL, url
        with self.lock:
            self.calls.append(SimpleNamespace(method="POST", path=json["path"], headers=headers or {},
                                              timeout=timeout, json=json))
        response = self.share_responses.get(json["path"])
        if isinstance(response, Exception):
            raise response
        if response is not None:
            return response
        token = json["path"].strip("/").replace("/", "-")
        return make_response(200, (
            '<?xml version="1.0"?>\n<ocs><meta><status>ok</status><statuscode>200</statuscode></meta>'
            f'<data><id>1</id><share_type>3</share_type><url>{ENDPOINT}/s/{token}</url>'
            f'<path>{json["path"]}</path></data></ocs>'
        ))

    def close(self):
        self.closed = True

    def methods(self, method):
        return [call.path for call in self.calls if call.method == method]


@pytest.fixture
def config():
    return NextcloudConfig(endpoint=ENDPOINT, username=USERNAME, password=PASSWORD)


@pytest.fixture
def fake_dav():
    return FakeDavServer()


@pytest.fixture
def artifact_root(tmp_path):
    """
    A root directory with two files:

        root/file1.txt
        root/dir/file2.txt
    """
    root = tmp_path / "root"
    (root / "dir").mkdir(parents=True)
    (root / "file1.txt").write_bytes(b"first file\n")
    (root / "dir" / "file2.txt").write_bytes(b"second file\x00\xff binary\n")
    return root


@pytest.fixture
def restore_logging(tmp_path, monkeypatch):
    """Send CLI log files to tmp_path and restore the root logger afterwards."""
    monkeypatch.setenv("NCARTIFACT_LOG_DIR", str(tmp_path / "log"))
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        if handler not in handlers:
            root_logger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root_logger.handlers:
            root_logger.addHandler(handler)
    root_logger.setLevel(level)
