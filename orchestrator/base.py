from __future__ import annotations


class OutcomeAggregator:
    def record(self, detector: str, outcome: bool) -> None:
        """
        Consume one binary trial outcome for `detector`.
        """
        raise NotImplementedError

    def accuracy(self, detector: str) -> float:
        """
        Return the empirical success rate for `detector`.
        """
        raise NotImplementedError
