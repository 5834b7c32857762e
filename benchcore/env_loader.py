"""
Environment file loader for .benchenv files.

Reads key=value pairs from env files and populates os.environ
WITHOUT overwriting values that are already set (explicit env wins).
Understands # comments, blank lines, an ``export `` prefix and single or
double quotes around the value.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)

_QUOTES = ('"', "'")


def _parse_line(line: str) -> Optional[Tuple[str, str]]:
    """``KEY=value`` (optionally ``export KEY=value``) or None for anything else."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key.isidentifier():
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        value = value[1:-1]
    return key, value


def _parse_env_file(path: Path) -> Dict[str, str]:
    if not path.is_file():
        return {}
    pairs: Dict[str, str] = {}
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        parsed = _parse_line(line)
        if parsed is None:
            if line.strip() and not line.lstrip().startswith("#"):
                logger.debug("Skipping %s:%d, not a KEY=value line", path, lineno)
            continue
        pairs[parsed[0]] = parsed[1]
    return pairs


def load_env_files(repo_root: Optional[Path] = None, *, name: str = ".benchenv") -> Dict[str, str]:
    """
    Load ``.benchenv`` and ``.benchenv.local`` from ``repo_root`` into os.environ.

    - Existing env vars take precedence (never overwritten).
    - The .local file overrides the base file (for per-machine settings).
    - Returns dict of all loaded key-value pairs (for debugging).

    Call ``benchcore.config.refresh_config()`` afterwards so CONFIG picks
    up the new values.
    """
    if repo_root is None:
        repo_root = Path.cwd()

    loaded: Dict[str, str] = {}
    for env_file in (repo_root / name, repo_root / f"{name}.local"):
        loaded.update(_parse_env_file(env_file))

    for key, value in loaded.items():
        if key not in os.environ:
            os.environ[key] = value

    return loaded
