"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    CONFIG_ERROR = 2


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "ESMREGISTRY_LOG_LEVEL"
    ENV_DEBUG = "DEBUG"
    ENV_DATA_PATH = "DATA_PATH"
    ENV_CACHE_PATH = "CACHE_PATH"
    ENV_HOST = "ESMREGISTRY_HOST"
    ENV_PORT = "ESMREGISTRY_PORT"
    ENV_SCHEME = "ESMREGISTRY_SCHEME"

    DEFAULT_HOST = "127.0.0.1"
    DEFAULT_PORT = 8080
    DEFAULT_SCHEME = "https"

    MODULE_EXTENSION = ".mjs"
    TARBALL_EXTENSION = ".tgz"
    LATEST_TAG = "latest"
    # Specifiers with these prefixes name host built-ins, not packages
    BUILTIN_PREFIXES = ("node:",)

    PACKAGE_DESCRIPTOR = "package/package.json"
    PACKAGE_ENTRY = "package/index.mjs"
    PACKAGE_EXPORTS = "./index.mjs"
    # 1985-10-26, the timestamp npm itself pins inside published tarballs
    ARCHIVE_MTIME = 499162500

    MANIFEST_CACHE_CONTROL = "no-cache, no-store, max-age=0"
    TARBALL_CACHE_CONTROL = "public, max-age=31536000, immutable"
    READ_METHODS = ("GET", "HEAD")
    PREFLIGHT_METHOD = "OPTIONS"
