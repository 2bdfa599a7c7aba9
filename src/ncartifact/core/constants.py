"""
Constants module for the ncartifact application.

This module provides constants used throughout the application.
"""

# Nextcloud endpoints, relative to the server base URL
DAV_FILES_PATH = "remote.php/dav/files"
SHARES_API_PATH = "ocs/v2.php/apps/files_sharing/api/v1/shares"

# Public link share request
SHARE_TYPE_PUBLIC_LINK = 3
SHARE_PERMISSIONS_READ = 1
SHARE_PUBLIC_UPLOAD = "false"

# Environment variables
ENV_ENDPOINT = "NEXTCLOUD_ENDPOINT"
ENV_USERNAME = "NEXTCLOUD_USERNAME"
ENV_PASSWORD = "NEXTCLOUD_PASSWORD"
ENV_BASE_DIR = "NEXTCLOUD_BASE_DIR"
ENV_TIMEOUT = "NEXTCLOUD_TIMEOUT"
ENV_WORKERS = "NEXTCLOUD_WORKERS"
ENV_LOG_DIR = "NCARTIFACT_LOG_DIR"

# Defaults
DEFAULT_BASE_DIR = "Software"
DEFAULT_WORKERS = 1
DEFAULT_LOG_DIR = "log"
USER_AGENT = "ncartifact/1.0.0"

# Archive staging
STAGING_PREFIX = "ncartifact-"
ZIP_COMPRESSION_LEVEL = 9

# Transfer modes
MODE_FILES = "files"
MODE_ARCHIVE = "archive"
MODES = (MODE_FILES, MODE_ARCHIVE)
