"""
JMH result loading.

Reads the JSON array JMH writes with ``-rf json`` (one file, or every
``*.json`` under a directory) into RawRecords. Unreadable files and
malformed entries are skipped and reported as ``(file, index, message)``
tuples; ``index`` is None when the whole file failed.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Tuple, Union

from benchcore.exceptions import RecordFormatError
from benchcore.records import RawRecord

logger = logging.getLogger(__name__)

LoadError = Tuple[str, Union[int, None], str]


def _load_json(path: Path, load_errors: List[LoadError]) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, ValueError) as exc:
        logger.warning("Failed to load JSON %s: %s", path, exc)
        load_errors.append((str(path), None, str(exc)))
        return None


def result_files(path: Path) -> List[Path]:
    """The file itself, or the sorted ``*.json`` files below a directory."""
    if path.is_dir():
        return sorted(p for p in path.rglob("*.json") if p.is_file())
    return [path]


def parse_entries(entries: Any, source: str, load_errors: List[LoadError]) -> List[RawRecord]:
    if isinstance(entries, dict):
        # A single result object instead of the usual array.
        entries = [entries]
    if not isinstance(entries, list):
        load_errors.append((source, None, f"expected a JSON array, got {type(entries).__name__}"))
        return []

    records: List[RawRecord] = []
    for index, entry in enumerate(entries):
        try:
            records.append(RawRecord.from_jmh(entry))
        except RecordFormatError as exc:
            logger.warning("Skipping malformed entry %s[%d]: %s", source, index, exc)
            load_errors.append((source, index, str(exc)))
    return records


def load_results(path: Union[str, Path]) -> Tuple[List[RawRecord], List[LoadError]]:
    """
    Load every JMH result under ``path``.

    A missing path is reported as a load error rather than raised, so callers
    get an empty record list and can surface a "no data" state.
    """
    path = Path(path)
    load_errors: List[LoadError] = []
    if not path.exists():
        load_errors.append((str(path), None, "results path does not exist"))
        return [], load_errors

    records: List[RawRecord] = []
    for file_path in result_files(path):
        data = _load_json(file_path, load_errors)
        if data is None:
            continue
        records.extend(parse_entries(data, str(file_path), load_errors))

    logger.info("Loaded %d JMH records from %s (%d load errors)", len(records), path, len(load_errors))
    return records, load_errors
