"""Global, project-wide configuration constants.

This module intentionally contains **no business logic** – only simple,
shared filesystem anchors and cross-cutting constants that many modules
can import. Runtime settings (e.g. a user-supplied database path) are
loaded by `litebase.config`, which builds on top of these anchors.
"""

from pathlib import Path

# Core roots
PACKAGE_ROOT: Path = Path(__file__).resolve().parent
# PROJECT_ROOT is the repo root (where pyproject.toml and data/ live)
# From src/litebase/global_config.py, go up two levels: src/litebase -> src -> repo root
PROJECT_ROOT: Path = PACKAGE_ROOT.parent.parent

# Core Names
PROJECT_NAME = "litebase"
PACKAGE_NAME = "litebase"

# Data directories
DATA_DIR: Path = PROJECT_ROOT / "data"

# Database
DEFAULT_DB_PATH: Path = DATA_DIR / "database.db"

# Settings
DEFAULT_CONFIG_PATH: Path = PROJECT_ROOT / "config.yaml"
DB_PATH_ENV_VAR = "LITEBASE_DB_PATH"
CONFIG_PATH_ENV_VAR = "LITEBASE_CONFIG"
