"""Application constants."""

from pathlib import Path

# Application info
APP_NAME = "ImageBinds"
APP_VERSION = "0.1.0"

# Paths (relative to the working directory)
CONFIG_FILE = Path("config.json")
DATA_FILE = Path("data.bin")
LOGS_DIR = Path("logs")

# Scan timing
POLL_INTERVAL = 0.1  # seconds between key polls
SCAN_TIMEOUT = 4.0  # seconds a record/playback scan waits for a letter


# Combo outcomes
class ComboOutcome:
    DROPPED = "dropped"
    ABORTED = "aborted"
    RELEASED = "released"
    RECORD = "record"
    PLAYBACK = "playback"
