"""Running summary statistics with mergeable higher moments."""

from __future__ import annotations

import enum
import math
import sys


class EnumType(enum.Enum):
    """How a :class:`Stats` object tracks individual values."""

    NO_ENUM = 0
    ENUMERATE = 1
    COUNT = 2
    GLOBAL = 3


def _ratio(num: float, den: float) -> float:
    if den == 0:
        return math.nan if num == 0 else math.copysign(math.inf, num)
    return num / den


class Stats:
    """Single-pass statistics for one dimension.

    Moments follow the incremental formulas for mean, variance, skewness and
    kurtosis; two summaries can be combined with :meth:`merge`.
    """

    def __init__(self, name: str, enum_type: EnumType = EnumType.NO_ENUM,
                 advanced: bool = True):
        self.name = name
        self.enum_type = enum_type
        self.advanced = advanced
        self.values: dict[float, int] = {}
        self.data: list[float] = []
        self.reset()

    def reset(self) -> None:
        """Reset the moments and extremes; enumerated values and retained data are kept."""
        self._max = -sys.float_info.max
        self._min = sys.float_info.max
        self._count = 0
        self._median = 0.0
        self._mad = 0.0
        self._m1 = self._m2 = self._m3 = self._m4 = 0.0

    def insert(self, value: float) -> None:
        """Add one value to the summary."""
        self._count += 1
        self._min = min(self._min, value)
        self._max = max(self._max, value)

        if self.enum_type is not EnumType.NO_ENUM:
            self.values[value] = self.values.get(value, 0) + 1
        if self.enum_type is EnumType.GLOBAL:
            self.data.append(value)

        n = self._count
        delta = value - self._m1
        delta_n = delta / n
        term1 = delta * delta_n * (n - 1)

        self._m1 += delta_n
        if self.advanced:
            delta_n2 = delta_n ** 2
            self._m4 += (term1 * delta_n2 * (n * n - 3 * n + 3)
                         + 6 * delta_n2 * self._m2 - 4 * delta_n * self._m3)
            self._m3 += term1 * delta_n * (n - 2) - 3 * delta_n * self._m2
        self._m2 += term1

    def merge(self, other: Stats) -> None:
        """Fold ``other`` into this summary.

        Raises ValueError unless name, enumeration type and the advanced
        setting match.
        """
        if (self.name, self.enum_type, self.advanced) != (
                other.name, other.enum_type, other.advanced):
            raise ValueError(f"cannot merge statistics for '{other.name}' into '{self.name}'")

        n1 = float(self._count)
        n2 = float(other._count)
        n = n1 + n2
        if n == 0:
            return
        nsq = n * n
        ncube = n * n * n
        n1n2 = n1 * n2
        n1sq = n1 * n1
        n2sq = n2 * n2
        delta = other._m1 - self._m1

        m1 = self._m1 + n2 * delta / n
        m2 = self._m2 + other._m2 + n1n2 * delta ** 2 / n
        m3 = (self._m3 + other._m3 + n1n2 * (n1 - n2) * delta ** 3 / nsq
              + 3 * (n1 * other._m2 - n2 * self._m2) * delta / n)
        m4 = (self._m4 + other._m4
              + n1n2 * (n1sq - n1n2 + n2sq) * delta ** 4 / ncube
              + 6 * (n1sq * other._m2 + n2sq * self._m2) * delta ** 2 / nsq
              + 4 * (n1 * other._m3 - n2 * self._m3) * delta / n)

        self._m1, self._m2, self._m3, self._m4 = m1, m2, m3, m4
        self._min = min(self._min, other._min)
        self._max = max(self._max, other._max)
        self._count += other._count
        self.data[:0] = other.data
        for value, count in other.values.items():
            self.values[value] = self.values.get(value, 0) + count

    def compute_global_stats(self) -> None:
        """Compute median and median absolute deviation from retained data.

        The retained data is replaced by its absolute deviations from the median.
        """
        if not self.data:
            raise ValueError(f"no retained data for '{self.name}'")

        def upper_median(values: list[float]) -> float:
            return sorted(values)[len(values) // 2]

        self._median = upper_median(self.data)
        self.data = [abs(v - self._median) for v in self.data]
        self._mad = upper_median(self.data)

    @property
    def count(self) -> int:
        return self._count

    @property
    def minimum(self) -> float:
        return self._min

    @property
    def maximum(self) -> float:
        return self._max

    @property
    def average(self) -> float:
        return self._m1

    @property
    def population_variance(self) -> float:
        return _ratio(self._m2, self._count)

    @property
    def sample_variance(self) -> float:
        return _ratio(self._m2, self._count - 1.0)

    @property
    def variance(self) -> float:
        return self.sample_variance

    @property
    def population_stddev(self) -> float:
        return math.sqrt(self.population_variance)

    @property
    def sample_stddev(self) -> float:
        return math.sqrt(self.sample_variance)

    @property
    def stddev(self) -> float:
        return self.sample_stddev

    @property
    def population_skewness(self) -> float:
        if not self._m2 or not self.advanced:
            return 0.0
        return math.sqrt(self._count) * self._m3 / self._m2 ** 1.5

    @property
    def sample_skewness(self) -> float:
        if self._m2 == 0 or self._count <= 2 or not self.advanced:
            return 0.0
        c = float(self._count)
        return self.population_skewness * math.sqrt(c) * math.sqrt(c - 1) / (c - 2)

    @property
    def skewness(self) -> float:
        return self.sample_skewness

    @property
    def population_kurtosis(self) -> float:
        if self._m2 == 0 or not self.advanced:
            return 0.0
        return self._count * self._m4 / (self._m2 * self._m2)

    @property
    def population_excess_kurtosis(self) -> float:
        if self._m2 == 0 or not self.advanced:
            return 0.0
        return self.population_kurtosis - 3

    @property
    def sample_kurtosis(self) -> float:
        if self._m2 == 0 or self._count <= 3 or not self.advanced:
            return 0.0
        c = float(self._count)
        return self.population_kurtosis * (c + 1) * (c - 1) / ((c - 2) * (c - 3))

    @property
    def sample_excess_kurtosis(self) -> float:
        if self._m2 == 0 or self._count <= 3 or not self.advanced:
            return 0.0
        c = float(self._count)
        return self.sample_kurtosis - 3 * (c - 1) * (c - 1) / ((c - 2) * (c - 3))

    @property
    def kurtosis(self) -> float:
        return self.sample_excess_kurtosis

    @property
    def median(self) -> float:
        return self._median

    @property
    def mad(self) -> float:
        return self._mad