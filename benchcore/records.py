"""
Record types for the provider comparison pipeline.

    RawRecord         one JMH result entry, as produced by the harness
    ClassifiedRecord  RawRecord + category/algorithm/operation/variant/sub-fields
    ComparisonEntity  both providers' results for one benchmark configuration
    Anomaly           non-fatal data problem surfaced to the caller

All types are frozen; a load produces fresh instances and never mutates them.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, NamedTuple, Optional, Tuple
import math

from benchcore.algorithms import normalize_alias
from benchcore.exceptions import RecordFormatError


# Sentinel for "no variant parameter"; display code collapses it.
DEFAULT_VARIANT = "default"


# =============================================================================
# ENUMS
# =============================================================================

class Category(str, Enum):
    """Cryptographic domain of a benchmark."""
    PQC = "PQC"
    KDF = "KDF"
    SYMMETRIC = "Symmetric"


class JmhMode(str, Enum):
    """JMH measurement mode, valued by the short tag JMH writes to JSON."""
    THROUGHPUT = "thrpt"
    AVERAGE_TIME = "avgt"
    SINGLE_SHOT = "ss"
    SAMPLING = "sample"

    @property
    def label(self) -> str:
        return JMH_MODE_LABELS[self]

    @property
    def higher_is_better(self) -> bool:
        return self is JmhMode.THROUGHPUT

    @classmethod
    def parse(cls, value: Any) -> "JmhMode":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            mode = _MODE_ALIASES.get(normalize_alias(value))
            if mode is not None:
                return mode
        raise ValueError(f"unknown JMH mode: {value!r}")


JMH_MODE_LABELS = MappingProxyType({
    JmhMode.THROUGHPUT: "Throughput",
    JmhMode.AVERAGE_TIME: "Average Time",
    JmhMode.SINGLE_SHOT: "Single Shot",
    JmhMode.SAMPLING: "Sampling",
})

_MODE_ALIASES = {
    "thrpt": JmhMode.THROUGHPUT,
    "throughput": JmhMode.THROUGHPUT,
    "avgt": JmhMode.AVERAGE_TIME,
    "averagetime": JmhMode.AVERAGE_TIME,
    "ss": JmhMode.SINGLE_SHOT,
    "singleshot": JmhMode.SINGLE_SHOT,
    "singleshottime": JmhMode.SINGLE_SHOT,
    "sample": JmhMode.SAMPLING,
    "sampling": JmhMode.SAMPLING,
    "sampletime": JmhMode.SAMPLING,
}


class AnomalyKind(str, Enum):
    CLASSIFICATION_FAILURE = "classification_failure"
    DUPLICATE_PROVIDER_ENTRY = "duplicate_provider_entry"
    UNIT_MISMATCH = "unit_mismatch"
    EMPTY_INPUT = "empty_input"


# =============================================================================
# RAW RECORD
# =============================================================================

def _to_float(value: Any) -> Optional[float]:
    """JMH writes NaN/Infinity as strings; bools are not scores."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


@dataclass(frozen=True)
class RawRecord:
    """One measurement run as written by the benchmark harness."""
    identifier: str
    mode: JmhMode
    parameters: Mapping[str, str] = field(default_factory=dict, hash=False)
    score: float = 0.0
    score_error: Optional[float] = None
    score_unit: str = ""

    def __post_init__(self):
        # "thrpt", "Throughput" and JmhMode.THROUGHPUT are all accepted
        object.__setattr__(self, "mode", JmhMode.parse(self.mode))
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @classmethod
    def from_jmh(cls, entry: Dict[str, Any]) -> "RawRecord":
        """
        Build a record from one entry of a JMH ``-rf json`` result array.

        Raises RecordFormatError if the entry lacks the benchmark name,
        mode or primary metric, or if the score is not a finite number.
        """
        if not isinstance(entry, dict):
            raise RecordFormatError(f"expected object, got {type(entry).__name__}")

        identifier = entry.get("benchmark")
        if not isinstance(identifier, str) or not identifier.strip():
            raise RecordFormatError("missing 'benchmark' name")

        try:
            mode = JmhMode.parse(entry.get("mode"))
        except ValueError as exc:
            raise RecordFormatError(f"{identifier}: {exc}") from exc

        metric = entry.get("primaryMetric")
        if not isinstance(metric, dict):
            raise RecordFormatError(f"{identifier}: missing 'primaryMetric'")

        score = _to_float(metric.get("score"))
        if score is None:
            raise RecordFormatError(f"{identifier}: score is not a finite number: {metric.get('score')!r}")

        unit = metric.get("scoreUnit")
        if not isinstance(unit, str):
            raise RecordFormatError(f"{identifier}: missing 'scoreUnit'")

        params = entry.get("params") or {}
        if not isinstance(params, dict):
            raise RecordFormatError(f"{identifier}: 'params' must be an object")

        return cls(
            identifier=identifier.strip(),
            mode=mode,
            parameters={str(k): str(v) for k, v in params.items()},
            score=score,
            score_error=_to_float(metric.get("scoreError")),
            score_unit=unit,
        )


# =============================================================================
# CLASSIFIED RECORD
# =============================================================================

class JoinKey(NamedTuple):
    """Everything that identifies a benchmark configuration except the provider."""
    category: Category
    algorithm: str
    operation: str
    variant: str
    cipher_mode: Optional[str]
    padding: Optional[str]
    hash_algorithm: Optional[str]
    iteration_count: Optional[str]
    extras: Tuple[Tuple[str, str], ...]
    mode: JmhMode


@dataclass(frozen=True)
class ClassifiedRecord:
    """
    A RawRecord with its identifier decoded.

    cipher_mode/padding only exist for Symmetric records and
    hash_algorithm/iteration_count only for KDF records; elsewhere they are
    None. extras holds the parameters no rule consumed, sorted by name.
    """
    raw: RawRecord
    provider: str
    category: Category
    algorithm: str
    operation: str
    variant: str = DEFAULT_VARIANT
    cipher_mode: Optional[str] = None
    padding: Optional[str] = None
    hash_algorithm: Optional[str] = None
    iteration_count: Optional[str] = None
    extras: Tuple[Tuple[str, str], ...] = ()

    @property
    def identifier(self) -> str:
        return self.raw.identifier

    @property
    def mode(self) -> JmhMode:
        return self.raw.mode

    @property
    def score(self) -> float:
        return self.raw.score

    @property
    def score_error(self) -> Optional[float]:
        return self.raw.score_error

    @property
    def score_unit(self) -> str:
        return self.raw.score_unit

    def join_key(self) -> JoinKey:
        return JoinKey(
            category=self.category,
            algorithm=self.algorithm,
            operation=self.operation,
            variant=self.variant,
            cipher_mode=self.cipher_mode,
            padding=self.padding,
            hash_algorithm=self.hash_algorithm,
            iteration_count=self.iteration_count,
            extras=self.extras,
            mode=self.mode,
        )


# =============================================================================
# COMPARISON ENTITY
# =============================================================================

@dataclass(frozen=True)
class ProviderMeasurement:
    """One provider's side of a comparison."""
    provider: str
    score: float
    score_error: Optional[float]
    score_unit: str
    record: ClassifiedRecord = field(compare=False, repr=False)

    @classmethod
    def from_record(cls, record: ClassifiedRecord) -> "ProviderMeasurement":
        return cls(
            provider=record.provider,
            score=record.score,
            score_error=record.score_error,
            score_unit=record.score_unit,
            record=record,
        )


@dataclass(frozen=True)
class ComparisonEntity:
    """
    Both providers' results for one benchmark configuration.

    ``a`` / ``b`` follow the configured PROVIDER_A / PROVIDER_B order; either
    may be None when that provider produced no matching record, never both.
    """
    key: JoinKey
    score_unit: str
    a: Optional[ProviderMeasurement] = None
    b: Optional[ProviderMeasurement] = None

    def __post_init__(self):
        if self.a is None and self.b is None:
            raise ValueError("ComparisonEntity needs at least one provider side")

    # Classification passthroughs
    @property
    def category(self) -> Category:
        return self.key.category

    @property
    def algorithm(self) -> str:
        return self.key.algorithm

    @property
    def operation(self) -> str:
        return self.key.operation

    @property
    def variant(self) -> str:
        return self.key.variant

    @property
    def cipher_mode(self) -> Optional[str]:
        return self.key.cipher_mode

    @property
    def padding(self) -> Optional[str]:
        return self.key.padding

    @property
    def hash_algorithm(self) -> Optional[str]:
        return self.key.hash_algorithm

    @property
    def iteration_count(self) -> Optional[str]:
        return self.key.iteration_count

    @property
    def extras(self) -> Tuple[Tuple[str, str], ...]:
        return self.key.extras

    @property
    def mode(self) -> JmhMode:
        return self.key.mode

    # Scores
    @property
    def a_score(self) -> Optional[float]:
        return self.a.score if self.a else None

    @property
    def a_error(self) -> Optional[float]:
        return self.a.score_error if self.a else None

    @property
    def b_score(self) -> Optional[float]:
        return self.b.score if self.b else None

    @property
    def b_error(self) -> Optional[float]:
        return self.b.score_error if self.b else None

    @property
    def is_paired(self) -> bool:
        return self.a is not None and self.b is not None

    @property
    def side_count(self) -> int:
        return (self.a is not None) + (self.b is not None)

    @property
    def id(self) -> str:
        parts = [
            self.category.value,
            self.algorithm,
            self.operation,
            self.variant,
            self.cipher_mode,
            self.padding,
            self.hash_algorithm,
            self.iteration_count,
        ]
        parts.extend(f"{k}={v}" for k, v in self.extras)
        parts.append(self.mode.value)
        return "|".join(p for p in parts if p is not None)

    def ratio(self) -> Optional[float]:
        """B score / A score, or None when unavailable (a side missing or A is zero)."""
        if self.a is None or self.b is None or self.a.score == 0:
            return None
        return self.b.score / self.a.score


# =============================================================================
# ANOMALIES
# =============================================================================

@dataclass(frozen=True)
class Anomaly:
    """A non-fatal problem found while building one load."""
    kind: AnomalyKind
    message: str
    identifier: Optional[str] = None
    detail: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "identifier": self.identifier,
            "detail": dict(self.detail),
        }
