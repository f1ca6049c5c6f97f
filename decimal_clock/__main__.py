from __future__ import annotations

import logging
import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    If this module is executed as a script (``python decimal_clock/__main__.py``),
    the package may not be discoverable by Python. This helper inserts the
    parent directory of the package into ``sys.path`` so that imports resolve
    correctly.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root = pkg_dir.parent
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # Works when executed as a module: python -m decimal_clock
    from .app import run  # type: ignore[attr-defined]
    from .settings import SettingsStore  # type: ignore[attr-defined]
except ImportError:
    # Works when executed as a script (absolute path, IDE "Run File", etc.)
    _ensure_repo_root_on_path()
    from decimal_clock.app import run  # type: ignore[attr-defined]
    from decimal_clock.settings import SettingsStore  # type: ignore[attr-defined]


def main() -> int:
    """Entry point for running the clock from the command line."""
    store = SettingsStore(SettingsStore.default_path())
    logging.basicConfig(
        level=getattr(logging, store.effective_log_level(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return run(settings_store=store)


if __name__ == "__main__":
    raise SystemExit(main())
