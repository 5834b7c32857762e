import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from benchcore.classifier import Classifier
from benchcore.config import CONFIG
from benchcore.hierarchy import Hierarchy
from benchcore.jmh import LoadError, load_results
from benchcore.matcher import PairMatcher
from benchcore.pipeline import PipelineResult, run_pipeline

logger = logging.getLogger(__name__)


class ResultsStore:
    """
    One completed load: the pipeline output plus loader bookkeeping.

    Never mutated after construction; a reload builds a new store and
    swaps the module-level reference.
    """

    def __init__(
        self,
        result: PipelineResult,
        load_errors: List[LoadError],
        results_path: str,
        provider_a: str,
        provider_b: str,
    ):
        self.result = result
        self.load_errors = load_errors
        self.results_path = results_path
        self.provider_a = provider_a
        self.provider_b = provider_b
        self.loaded_at = datetime.now(timezone.utc).isoformat()

    @property
    def hierarchy(self) -> Hierarchy:
        return self.result.hierarchy

    @property
    def record_count(self) -> int:
        return self.result.record_count

    @property
    def comparison_count(self) -> int:
        return len(self.result.comparisons)

    @property
    def anomaly_count(self) -> int:
        return len(self.result.anomalies)

    @property
    def has_data(self) -> bool:
        return not self.result.is_empty


def build_store(results_path: Optional[Union[str, Path]] = None) -> ResultsStore:
    """Read the JMH results and run the pipeline once."""
    path = str(results_path or CONFIG["RESULTS_PATH"])
    provider_a, provider_b = CONFIG["PROVIDER_A"], CONFIG["PROVIDER_B"]

    records, load_errors = load_results(path)
    result = run_pipeline(
        records,
        classifier=Classifier(providers=(provider_a, provider_b)),
        matcher=PairMatcher(provider_a, provider_b),
    )

    if result.is_empty:
        logger.warning("No comparisons built from %s", path)
    else:
        logger.info(
            "Loaded %d records into %d comparisons (%d anomalies) from %s",
            result.record_count,
            len(result.comparisons),
            len(result.anomalies),
            path,
        )
    return ResultsStore(result, load_errors, path, provider_a, provider_b)


_STORE: Optional[ResultsStore] = None


def get_store() -> ResultsStore:
    global _STORE
    if _STORE is None:
        _STORE = build_store()
    return _STORE


def reload_store(results_path: Optional[Union[str, Path]] = None) -> ResultsStore:
    """Build a fresh store and swap it in; readers holding the old one keep it."""
    global _STORE
    store = build_store(results_path)
    _STORE = store
    return store


def set_store(store: Optional[ResultsStore]) -> None:
    """Install a prebuilt store (or clear it so the next get_store() rebuilds)."""
    global _STORE
    _STORE = store
