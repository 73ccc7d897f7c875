"""
litebase core package.

Provides:
- A single-connection asyncio SQLite access layer (`litebase.database`)
- A minimal Typer-based CLI (`litebase.cli`) for ad-hoc queries and bulk loads

Configuration:
- Shared, project-wide filesystem anchors live in `litebase.global_config`.
- Runtime settings (database path) are loaded by `litebase.config` from
  `config.yaml` and the environment.
"""
