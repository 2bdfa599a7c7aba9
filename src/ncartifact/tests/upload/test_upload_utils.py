"""
Test upload_artifact, the entry point covering both transfer modes.
"""

import os
import zipfile
from io import BytesIO
from types import SimpleNamespace

import pytest

from ncartifact.core.NextcloudSession import NextcloudSession
from ncartifact.core.errors import PathEscapeError, ShareParseError, UploadError
from ncartifact.utils import upload_utils
from ncartifact.utils.archive_utils import cleanup_staging
from ncartifact.utils.upload_utils import upload_artifact


@pytest.fixture
def session(config, fake_dav):
    return NextcloudSession(config, http=fake_dav)


@pytest.fixture
def files(artifact_root):
    return [str(artifact_root / "file1.txt"), str(artifact_root / "dir" / "file2.txt")]


def test_files_mode_uploads_each_file(session, fake_dav, artifact_root, files):
    result = upload_artifact("demo", str(artifact_root), files, session=session, show_progress=False)

    assert result.mode == "files"
    assert result.locations == ["Software/demo/file1.txt", "Software/demo/dir/file2.txt"]
    assert result.share_urls == {}
    assert fake_dav.files["Software/demo/dir/file2.txt"] == (artifact_root / "dir" / "file2.txt").read_bytes()
    assert fake_dav.methods("POST") == []


def test_files_mode_with_progress_and_workers(session, fake_dav, artifact_root, files):
    result = upload_artifact("demo", str(artifact_root), files, session=session, workers=2)

    assert result.locations == ["Software/demo/file1.txt", "Software/demo/dir/file2.txt"]
    assert len(fake_dav.files) == 2


def test_files_mode_shares_every_location(session, fake_dav, artifact_root, files):
    result = upload_artifact("demo", str(artifact_root), files, session=session, share=True, show_progress=False)

    assert result.share_urls == {
        "Software/demo/file1.txt": "https://cloud.example/s/Software-demo-file1.txt",
        "Software/demo/dir/file2.txt": "https://cloud.example/s/Software-demo-dir-file2.txt",
    }
    assert fake_dav.methods("POST") == ["/Software/demo/file1.txt", "/Software/demo/dir/file2.txt"]


def test_share_failure_keeps_uploaded_files(session, fake_dav, artifact_root, files):
    fake_dav.share_responses["/Software/demo/file1.txt"] = SimpleNamespace(
        status_code=403, ok=False, text="<ocs><meta><status>failure</status></meta></ocs>")

    with pytest.raises(ShareParseError):
        upload_artifact("demo", str(artifact_root), files, session=session, share=True, show_progress=False)

    assert "Software/demo/file1.txt" in fake_dav.files


def test_archive_mode_uploads_single_zip(session, fake_dav, artifact_root, files):
    result = upload_artifact("demo", str(artifact_root), files, session=session, mode="archive",
                             show_progress=False)

    assert result.locations == ["Software/demo.zip"]
    assert result.archive_path is None
    with zipfile.ZipFile(BytesIO(fake_dav.files["Software/demo.zip"])) as archive:
        assert sorted(archive.namelist()) == ["demo/dir/file2.txt", "demo/file1.txt"]
        assert archive.read("demo/file1.txt") == (artifact_root / "file1.txt").read_bytes()


def test_archive_mode_can_keep_archive_and_share(session, fake_dav, artifact_root, files):
    result = upload_artifact("demo", str(artifact_root), files, session=session, mode="archive",
                             share=True, keep_archive=True)
    try:
        assert os.path.isfile(result.archive_path)
        assert result.share_urls == {"Software/demo.zip": "https://cloud.example/s/Software-demo.zip"}
    finally:
        cleanup_staging(result.archive_path)


def test_path_errors_are_raised_before_any_request(session, fake_dav, artifact_root, tmp_path):
    outside = tmp_path / "outside.txt"
    outside.write_text("outside")

    with pytest.raises(PathEscapeError):
        upload_artifact("demo", str(artifact_root), [str(outside)], session=session, show_progress=False)

    assert fake_dav.calls == []


def test_only_directories_uploads_nothing(session, fake_dav, artifact_root):
    result = upload_artifact("demo", str(artifact_root), [str(artifact_root / "dir")], session=session)

    assert result.specs == []
    assert result.locations == []
    assert fake_dav.calls == []


def test_file_removed_after_resolution_raises_upload_error(session, fake_dav, artifact_root, files, monkeypatch):
    resolve = upload_utils.build_specs

    def build_then_remove(*args):
        specs = resolve(*args)
        os.remove(artifact_root / "file1.txt")
        return specs

    monkeypatch.setattr(upload_utils, "build_specs", build_then_remove)

    with pytest.raises(UploadError, match="could not read"):
        upload_artifact("demo", str(artifact_root), files, session=session, show_progress=False)

    assert fake_dav.methods("PUT") == []


def test_unknown_mode(session, artifact_root, files):
    with pytest.raises(ValueError, match="Unknown upload mode"):
        upload_artifact("demo", str(artifact_root), files, session=session, mode="tarball")


def test_given_session_is_not_closed(session, fake_dav, artifact_root, files):
    upload_artifact("demo", str(artifact_root), files, session=session, show_progress=False)

    assert not fake_dav.closed
