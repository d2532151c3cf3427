"""Constants for merge-builder asset compaction."""

# Output layout
DEFAULT_CDN_ROOT = "/cdn/"
DEFAULT_MAP_FILE = "cdn.properties"
DEFAULT_LINKS_FILE = "cdn-links.properties"
DEBUG_DIR = "debug"

# Source formats
MERGE_EXTENSION = ".merge"
JS_EXTENSION = ".js"
CSS_EXTENSION = ".css"

# Text sources are decoded as UTF-8; other bytes round-trip as surrogate escapes
SOURCE_ENCODING = "utf-8"
SOURCE_ERRORS = "surrogateescape"

# Processing limits
BUFFER_SIZE = 4096
MAX_DEPTH = 64
