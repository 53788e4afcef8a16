from __future__ import annotations

import logging
import os
import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    When this module is executed as a script (``python typing_trial/__main__.py``)
    the package is not importable by name; inserting the parent directory of
    the package fixes that.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root_str = str(pkg_dir.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # Works when executed as a module: python -m typing_trial
    from .app import run  # type: ignore[attr-defined]
except ImportError:
    # Works when executed as a script.
    _ensure_repo_root_on_path()
    from typing_trial.app import run  # type: ignore[attr-defined]


def main() -> int:
    """Run one typing trial from the command line.

    The trial is configured through TYPING_TRIAL_* environment variables;
    TYPING_TRIAL_LOG_LEVEL sets the log level (default INFO).
    """
    level = os.environ.get("TYPING_TRIAL_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
