# orchestrator/certificates/base.py

from __future__ import annotations
from abc import ABC, abstractmethod


class AccuracyCertificate(ABC):
    """
    Confidence bounds on a detector's true detection probability.

    Detection trials are Bernoulli: each scored outage is either detected
    or missed. A certificate turns (successes, trials) into one-sided
    bounds at confidence 1 - alpha.
    """

    def __init__(self, alpha: float):
        if not 0.0 < alpha < 1.0:
            raise ValueError("alpha must lie strictly between 0 and 1")
        self.alpha = alpha

    @abstractmethod
    def lower_confidence_bound(self, successes: int, trials: int) -> float:
        """
        Return a lower confidence bound on p = P(detect).

        Must satisfy:
            P(LCB <= p) >= 1 - alpha
        """
        raise NotImplementedError

    @abstractmethod
    def upper_confidence_bound(self, successes: int, trials: int) -> float:
        """
        Return an upper confidence bound on p = P(detect).

        Must satisfy:
            P(p <= UCB) >= 1 - alpha
        """
        raise NotImplementedError

    def outperforms(self, a: tuple[int, int], b: tuple[int, int]) -> bool:
        """
        True when detector `a` = (successes, trials) is credibly better than
        `b`, i.e. a's lower bound clears b's upper bound.
        """
        return self.lower_confidence_bound(*a) > self.upper_confidence_bound(*b)
