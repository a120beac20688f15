from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, NamedTuple, Optional

from orchestrator.base import OutcomeAggregator


class DetectorSummary(NamedTuple):
    trials: int
    successes: int
    accuracy: float
    outcomes: List[float]


@dataclass
class DetectionRecord:
    """
    Running Bernoulli counters for one detector.

    accuracy = successes / trials, derived on read (0.0 before any trial).
    """

    detector: str
    trials: int = 0
    successes: int = 0
    outcomes: List[float] = field(default_factory=list)

    def add(self, detected: bool) -> None:
        self.trials += 1
        if detected:
            self.successes += 1
        self.outcomes.append(1.0 if detected else 0.0)

    @property
    def accuracy(self) -> float:
        if self.trials == 0:
            return 0.0
        return self.successes / self.trials

    def summary(self) -> DetectorSummary:
        return DetectorSummary(self.trials, self.successes, self.accuracy, list(self.outcomes))


@dataclass
class DetectionResults(OutcomeAggregator):
    """
    Bernoulli aggregator: empirical detection rate per detector.

    Records are created on first use and kept in registration order.
    """

    _records: Dict[str, DetectionRecord] = field(default_factory=dict)

    def register(self, detector: str) -> DetectionRecord:
        if detector not in self._records:
            self._records[detector] = DetectionRecord(detector)
        return self._records[detector]

    def record(self, detector: str, outcome: bool) -> None:
        self.register(detector).add(bool(outcome))

    def __contains__(self, detector: object) -> bool:
        return detector in self._records

    def __iter__(self) -> Iterator[DetectionRecord]:
        return iter(self._records.values())

    def detectors(self) -> List[str]:
        return list(self._records)

    def get(self, detector: str) -> DetectionRecord:
        return self._records[detector]

    def trials(self, detector: str) -> int:
        rec = self._records.get(detector)
        return rec.trials if rec else 0

    def successes(self, detector: str) -> int:
        rec = self._records.get(detector)
        return rec.successes if rec else 0

    def accuracy(self, detector: str) -> float:
        rec = self._records.get(detector)
        return rec.accuracy if rec else 0.0

    def summary(self) -> Dict[str, DetectorSummary]:
        return {name: rec.summary() for name, rec in self._records.items()}

    def best(self) -> Optional[DetectionRecord]:
        """
        Detector with the highest accuracy. Ties keep the earliest
        registered detector; None if nothing has a positive accuracy.
        """
        best: Optional[DetectionRecord] = None
        for rec in self._records.values():
            if rec.accuracy > (best.accuracy if best else 0.0):
                best = rec
        return best

    def improvement_over(self, baseline: str) -> Dict[str, float]:
        """
        Percentage-point accuracy difference of every other detector
        relative to `baseline`.
        """
        base = self.accuracy(baseline)
        return {
            name: (rec.accuracy - base) * 100.0
            for name, rec in self._records.items()
            if name != baseline
        }
