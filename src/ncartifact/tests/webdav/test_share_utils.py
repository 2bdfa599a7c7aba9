"""
Test the share_utils module: public link creation and URL extraction.
"""

from types import SimpleNamespace

import pytest

from ncartifact.core.NextcloudSession import NextcloudSession
from ncartifact.core.errors import ShareParseError
from ncartifact.utils.share_utils import RegexShareUrlParser, ShareLinkResolver

SHARE_RESPONSE = """<?xml version="1.0"?>
<ocs>
 <meta>
  <status>ok</status>
  <statuscode>200</statuscode>
  <message>OK</message>
 </meta>
 <data>
  <id>42</id>
  <share_type>3</share_type>
  <token>abc123</token>
  <url>https://cloud.example/s/abc123</url>
  <path>/Software/demo/file1.txt</path>
 </data>
</ocs>
"""

ERROR_RESPONSE = """<?xml version="1.0"?>
<ocs>
 <meta>
  <status>failure</status>
  <statuscode>404</statuscode>
  <message>Wrong path, file/folder does not exist</message>
 </meta>
 <data/>
</ocs>
"""


def test_parser_extracts_url_from_xml_noise():
    parser = RegexShareUrlParser()

    assert parser.parse("Software/demo/file1.txt", SHARE_RESPONSE) == "https://cloud.example/s/abc123"


def test_parser_returns_first_url():
    body = "<url>https://cloud.example/s/first</url><url>https://cloud.example/s/second</url>"

    assert RegexShareUrlParser().parse("x", body) == "https://cloud.example/s/first"


@pytest.mark.parametrize("body", [ERROR_RESPONSE, "", "<url></url>", '{"ocs": {"data": []}}'])
def test_parser_without_url_raises(body):
    with pytest.raises(ShareParseError) as excinfo:
        RegexShareUrlParser().parse("Software/demo/file1.txt", body)

    assert excinfo.value.remote_path == "Software/demo/file1.txt"


def test_resolver_returns_share_url(config, fake_dav):
    fake_dav.share_responses["/Software/demo/file1.txt"] = SimpleNamespace(status_code=200, ok=True, text=SHARE_RESPONSE)
    resolver = ShareLinkResolver(NextcloudSession(config, http=fake_dav))

    assert resolver.create_public_share("Software/demo/file1.txt") == "https://cloud.example/s/abc123"


def test_resolver_http_error_is_a_parse_error(config, fake_dav):
    fake_dav.share_responses["/Software/demo/file1.txt"] = SimpleNamespace(status_code=404, ok=False, text=ERROR_RESPONSE)
    resolver = ShareLinkResolver(NextcloudSession(config, http=fake_dav))

    with pytest.raises(ShareParseError, match="Wrong path"):
        resolver.create_public_share("Software/demo/file1.txt")


def test_resolver_uses_custom_parser(config, fake_dav):
    class StaticParser:
        def parse(self, remote_path, body):
            return f"https://mirror.example/{remote_path}"

    resolver = ShareLinkResolver(NextcloudSession(config, http=fake_dav), parser=StaticParser())

    assert resolver.create_public_share("Software/demo.zip") == "https://mirror.example/Software/demo.zip"
