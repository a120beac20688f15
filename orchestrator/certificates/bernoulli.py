from __future__ import annotations
import math

from scipy.stats import beta

from .base import AccuracyCertificate


class ClopperPearsonCertificate(AccuracyCertificate):
    """
    Exact one-sided Clopper–Pearson bounds.

    Given S detections out of n scored outages:

        p_lower = Beta.ppf(alpha,     S,     n - S + 1)
        p_upper = Beta.ppf(1 - alpha, S + 1, n - S)

    Example:
        S = 18, n = 20, alpha = 0.05
        p_lower ≈ 0.717

    Interpretation:
        With 95% confidence, the detector's true accuracy is at least 0.717.
    """

    def lower_confidence_bound(self, successes: int, trials: int) -> float:
        if trials == 0 or successes == 0:
            return 0.0

        if successes == trials:
            return self.alpha ** (1.0 / trials)

        return float(beta.ppf(self.alpha, successes, trials - successes + 1))

    def upper_confidence_bound(self, successes: int, trials: int) -> float:
        if trials == 0 or successes == trials:
            return 1.0

        if successes == 0:
            return 1.0 - self.alpha ** (1.0 / trials)

        return float(beta.ppf(1.0 - self.alpha, successes + 1, trials - successes))


class HoeffdingCertificate(AccuracyCertificate):
    """
    Hoeffding bounds. Distribution-free and more conservative than
    Clopper–Pearson for small n.

        eps = sqrt( ln(1/alpha) / (2 n) )
        p_lower = p̂ − eps,   p_upper = p̂ + eps

    Example:
        S = 18, n = 20, alpha = 0.05
        p_lower ≈ 0.626
    """

    def _eps(self, trials: int) -> float:
        return math.sqrt(math.log(1.0 / self.alpha) / (2.0 * trials))

    def lower_confidence_bound(self, successes: int, trials: int) -> float:
        if trials == 0:
            return 0.0
        return max(0.0, successes / trials - self._eps(trials))

    def upper_confidence_bound(self, successes: int, trials: int) -> float:
        if trials == 0:
            return 1.0
        return min(1.0, successes / trials + self._eps(trials))


CERTIFICATES = {
    "clopper_pearson": ClopperPearsonCertificate,
    "hoeffding": HoeffdingCertificate,
}


def make_certificate(kind: str, alpha: float) -> AccuracyCertificate:
    try:
        cls = CERTIFICATES[kind]
    except KeyError:
        raise ValueError(f"Unknown certification type: {kind}") from None
    return cls(alpha)
