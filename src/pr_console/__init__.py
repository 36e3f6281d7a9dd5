"""pr-console: pull-request actions and contributor dossiers for GitHub."""

__version__ = "0.1.0"

import os
import pathlib

DEFAULT_DB_PATH = os.path.join(
    os.path.expanduser("~"), ".pr-console", "cache.db"
)

DEFAULT_API_URL = "https://api.github.com"

PACKAGE_DIR = pathlib.Path(__file__).parent
