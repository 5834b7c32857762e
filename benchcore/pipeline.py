"""
One load: classify -> match -> build hierarchy.

No error kind aborts the load. Unrecognized identifiers, duplicates and unit
disagreements come back as anomalies next to a usable (possibly empty)
hierarchy; the caller decides whether to warn or block.
"""

from collections import Counter as _TallyCounter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from benchcore.classifier import Classifier
from benchcore.exceptions import ClassificationError
from benchcore.hierarchy import Hierarchy, build_hierarchy
from benchcore.logging_utils import METRICS, get_logger
from benchcore.matcher import PairMatcher
from benchcore.records import (
    Anomaly,
    AnomalyKind,
    ClassifiedRecord,
    ComparisonEntity,
    RawRecord,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    hierarchy: Hierarchy
    comparisons: Tuple[ComparisonEntity, ...]
    anomalies: Tuple[Anomaly, ...]
    record_count: int
    classified_count: int
    excluded_count: int
    displaced: Tuple[ClassifiedRecord, ...] = field(default=(), repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.comparisons

    def anomaly_counts(self) -> Dict[str, int]:
        tally = _TallyCounter(a.kind.value for a in self.anomalies)
        return {kind.value: tally.get(kind.value, 0) for kind in AnomalyKind}

    def anomalies_of(self, kind: AnomalyKind) -> List[Anomaly]:
        return [a for a in self.anomalies if a.kind is kind]


def run_pipeline(
    records: Iterable[RawRecord],
    classifier: Optional[Classifier] = None,
    matcher: Optional[PairMatcher] = None,
) -> PipelineResult:
    """Build comparisons and the tree for one batch of raw records."""
    classifier = classifier or Classifier()
    matcher = matcher or PairMatcher(classifier.providers[0], classifier.providers[1])

    records = list(records)
    anomalies: List[Anomaly] = []
    classified: List[ClassifiedRecord] = []

    if not records:
        anomalies.append(Anomaly(kind=AnomalyKind.EMPTY_INPUT, message="no benchmark records supplied"))
        logger.warning("Empty input, nothing to compare")

    for record in records:
        try:
            classified.append(classifier.classify(record))
        except ClassificationError as exc:
            anomalies.append(Anomaly(
                kind=AnomalyKind.CLASSIFICATION_FAILURE,
                message=exc.reason,
                identifier=exc.identifier,
                detail={"mode": record.mode.value, "parameters": dict(record.parameters)},
            ))
            logger.warning("Unrecognized benchmark", extra={"identifier": exc.identifier, "reason": exc.reason})

    matched = matcher.match(classified)
    anomalies.extend(matched.anomalies)
    hierarchy = build_hierarchy(matched.comparisons)

    result = PipelineResult(
        hierarchy=hierarchy,
        comparisons=tuple(matched.comparisons),
        anomalies=tuple(anomalies),
        record_count=len(records),
        classified_count=len(classified),
        excluded_count=len(records) - len(classified),
        displaced=tuple(matched.displaced),
    )

    METRICS.record_run(len(result.comparisons), result.anomaly_counts())

    logger.info(
        "Pipeline complete",
        extra={
            "records": result.record_count,
            "classified": result.classified_count,
            "excluded": result.excluded_count,
            "comparisons": len(result.comparisons),
            "anomalies": len(result.anomalies),
        },
    )
    return result
