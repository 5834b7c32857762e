"""
Pairing of classified records across the two providers.

Records sharing a JoinKey (every classification field plus the JMH mode,
but not the provider or the scores) become one ComparisonEntity. Each key
holds at most one record per provider.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from benchcore.algorithms import normalize_alias
from benchcore.config import CONFIG
from benchcore.exceptions import DuplicateProviderEntry, UnitMismatch
from benchcore.logging_utils import get_logger
from benchcore.records import (
    Anomaly,
    AnomalyKind,
    ClassifiedRecord,
    ComparisonEntity,
    JoinKey,
    ProviderMeasurement,
)

logger = get_logger(__name__)


@dataclass
class MatchResult:
    comparisons: List[ComparisonEntity] = field(default_factory=list)
    anomalies: List[Anomaly] = field(default_factory=list)
    # Records that lost a slot to a later duplicate.
    displaced: List[ClassifiedRecord] = field(default_factory=list)


class _Slot:
    __slots__ = ("a", "b", "first")

    def __init__(self):
        self.a: Optional[ClassifiedRecord] = None
        self.b: Optional[ClassifiedRecord] = None
        # Unit of the first record ever placed in this slot.
        self.first: Optional[str] = None


class PairMatcher:
    """
    Groups ClassifiedRecords into ComparisonEntities.

    Duplicates (same key, same provider) are last-write-wins and unit
    disagreements keep the first-seen unit; both are reported as anomalies.
    With ``strict_duplicates`` / ``strict_units`` set they raise instead.
    """

    def __init__(
        self,
        provider_a: Optional[str] = None,
        provider_b: Optional[str] = None,
        *,
        strict_duplicates: Optional[bool] = None,
        strict_units: Optional[bool] = None,
    ):
        self.provider_a = provider_a or CONFIG["PROVIDER_A"]
        self.provider_b = provider_b or CONFIG["PROVIDER_B"]
        self.strict_duplicates = CONFIG["STRICT_DUPLICATES"] if strict_duplicates is None else strict_duplicates
        self.strict_units = CONFIG["STRICT_UNITS"] if strict_units is None else strict_units
        self._sides = {
            normalize_alias(self.provider_a): "a",
            normalize_alias(self.provider_b): "b",
        }

    def _side(self, record: ClassifiedRecord) -> str:
        side = self._sides.get(normalize_alias(record.provider))
        if side is None:
            raise ValueError(
                f"{record.identifier}: provider {record.provider!r} is neither "
                f"{self.provider_a!r} nor {self.provider_b!r}"
            )
        return side

    def match(self, records: Iterable[ClassifiedRecord]) -> MatchResult:
        result = MatchResult()
        slots: Dict[JoinKey, _Slot] = {}

        for record in records:
            key = record.join_key()
            side = self._side(record)
            slot = slots.get(key)
            if slot is None:
                slot = slots[key] = _Slot()
                slot.first = record.score_unit

            previous = getattr(slot, side)
            if previous is not None:
                if self.strict_duplicates:
                    raise DuplicateProviderEntry(
                        f"{record.identifier}: second {record.provider} result for the same configuration"
                    )
                result.displaced.append(previous)
                result.anomalies.append(Anomaly(
                    kind=AnomalyKind.DUPLICATE_PROVIDER_ENTRY,
                    message=f"duplicate {record.provider} result, keeping the last one",
                    identifier=record.identifier,
                    detail={
                        "provider": record.provider,
                        "mode": record.mode.value,
                        "kept_score": record.score,
                        "dropped_score": previous.score,
                    },
                ))
                logger.warning(
                    "Duplicate provider entry",
                    extra={"identifier": record.identifier, "provider": record.provider},
                )
            setattr(slot, side, record)

        for key, slot in slots.items():
            result.comparisons.append(self._merge(key, slot, result.anomalies))

        return result

    def _merge(self, key: JoinKey, slot: _Slot, anomalies: List[Anomaly]) -> ComparisonEntity:
        present: Sequence[ClassifiedRecord] = [r for r in (slot.a, slot.b) if r is not None]
        # A duplicate may have replaced the first-seen record; the unit is
        # still taken from the first record among the sides that remain.
        unit = slot.first if any(r.score_unit == slot.first for r in present) else present[0].score_unit

        if slot.a is not None and slot.b is not None and slot.a.score_unit != slot.b.score_unit:
            if self.strict_units:
                raise UnitMismatch(
                    f"{slot.a.identifier}: {slot.a.provider} reports {slot.a.score_unit!r}, "
                    f"{slot.b.provider} reports {slot.b.score_unit!r}"
                )
            anomalies.append(Anomaly(
                kind=AnomalyKind.UNIT_MISMATCH,
                message=f"providers disagree on unit, keeping {unit!r}",
                identifier=slot.a.identifier,
                detail={
                    slot.a.provider: slot.a.score_unit,
                    slot.b.provider: slot.b.score_unit,
                    "mode": key.mode.value,
                },
            ))
            logger.warning(
                "Unit mismatch",
                extra={"identifier": slot.a.identifier, "kept_unit": unit},
            )

        return ComparisonEntity(
            key=key,
            score_unit=unit,
            a=ProviderMeasurement.from_record(slot.a) if slot.a is not None else None,
            b=ProviderMeasurement.from_record(slot.b) if slot.b is not None else None,
        )


def match_records(records: Iterable[ClassifiedRecord]) -> MatchResult:
    """Pair records with the providers and strictness from CONFIG."""
    return PairMatcher().match(records)
