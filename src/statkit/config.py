import os
from pathlib import Path


# You can set your custom data directory by running (change path to desired location): export STATKIT_DATA_DIR="~/user/statkit_data"
# If not set, defaults to ~/.statkit/

def get_data_root() -> Path:
    custom = os.getenv("STATKIT_DATA_DIR")
    if custom:
        root = Path(custom).expanduser()
    else:
        root = Path.home() / ".statkit"

    root.mkdir(parents=True, exist_ok=True)
    return root

DATA_ROOT = get_data_root()
LOG_PATH = DATA_ROOT / "history.log"
