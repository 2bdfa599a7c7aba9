"""
Share utilities module for the ncartifact application.

This module creates public links for uploaded files. The OCS response is
decoded by a small parser object so the decoding can change without
touching the transfer code.
"""

import logging
import re
from typing import Optional, Protocol

from ncartifact.core.NextcloudSession import NextcloudSession
from ncartifact.core.errors import ShareParseError

logger = logging.getLogger(__name__)


class ShareUrlParser(Protocol):
    """Extracts the public URL from a share creation response body."""

    def parse(self, remote_path: str, body: str) -> str:
        ...


class RegexShareUrlParser:
    """Parser returning the first <url>...</url> value of the response body."""

    pattern = re.compile(r"<url>(.*?)</url>", re.DOTALL)

    def parse(self, remote_path: str, body: str) -> str:
        match = self.pattern.search(body or "")
        if not match or not match.group(1).strip():
            raise ShareParseError(remote_path, body, "no <url> element in the response")
        return match.group(1).strip()


class ShareLinkResolver:
    """Creates read-only public links for remote paths."""

    def __init__(self, session: NextcloudSession, parser: Optional[ShareUrlParser] = None):
        self.session = session
        self.parser = parser if parser is not None else RegexShareUrlParser()

    def create_public_share(self, remote_path: str) -> str:
        """
        Create a public link share and return its URL.

        A failed HTTP request and an unexpected response both raise
        ShareParseError. The uploaded file is left in place.

        Args:
            remote_path (str): Path relative to the user's files

        Returns:
            str: The public URL

        Raises:
            ShareParseError: If no URL could be obtained
        """
        body = self.session.create_share(remote_path)
        url = self.parser.parse(remote_path, body)
        logger.info(f"Shared {remote_path} at {url}")
        return url
