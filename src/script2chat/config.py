"""Central configuration for paths and constants."""

import os
from pathlib import Path

# Data directory, override with SCRIPT2CHAT_DATA_DIR env var
DATA_DIR = Path(
    os.environ.get("SCRIPT2CHAT_DATA_DIR", str(Path.home() / ".script2chat"))
)

# Database path
SQLITE_PATH = DATA_DIR / "script2chat.db"

# Logging level for the CLI (overridden by --verbose)
LOG_LEVEL = os.environ.get("SCRIPT2CHAT_LOG_LEVEL", "WARNING").upper()

# Synthetic speaker that owns conversations and voices stage directions
NARRATOR_NAME = "NARRATOR"

# Credential stored on users created from a script
PLACEHOLDER_PASSWORD = "password"

# Leading tokens that hand the floor back to the narrator
STAGE_DIRECTION_MARKERS = frozenset({"**Exit", "Enter", "**Exeunt", "Re-enter"})

# Known script identifiers and the title prefix each one uses
SCRIPT_TITLES = {
    "romandjul": "R&J",
    "julcaesar": "JulC",
    "midsumDream": "MidsumDream",
    "tempest": "Tempest",
}
