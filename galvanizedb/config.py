"""
Settings for the client.

Edit the defaults here or override them through the environment:
    GALVANIZEDB_HISTORY    path of the prompt history file
    GALVANIZEDB_LOG_LEVEL  DEBUG, INFO, WARNING (default) or ERROR
"""

import os
from pathlib import Path

# Appended to database names typed without it
DATABASE_SUFFIX = ".db"

HISTORY_FILE = Path(
    os.environ.get("GALVANIZEDB_HISTORY", str(Path.home() / ".galvanizedb_history"))
)

LOG_LEVEL = os.environ.get("GALVANIZEDB_LOG_LEVEL", "WARNING").upper()

PROMPT_TEMPLATE = "GalvanizeDB [{name}]> "
DETACHED_NAME = "none"

SHOW_TABLES_SQL = "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"

# Rendering
NO_RESULTS = "No results found."
UNSUPPORTED_TYPE = "Unsupported type"
