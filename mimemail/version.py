"""Library and archive format versions."""

__version__ = "1.1.0"

ARCHIVE_MAJOR_VERSION = 1
ARCHIVE_MINOR_VERSION = 1
