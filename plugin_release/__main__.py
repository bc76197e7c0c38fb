"""Allow ``python -m plugin_release``."""

from .cli import run

raise SystemExit(run())
