import math
import statistics
import sys

import pytest

from untwine.stats import EnumType, Stats

VALUES = [3.0, 1.5, 7.25, -2.0, 4.0, 4.0, 10.5, 0.25]


def filled(values, enum_type=EnumType.NO_ENUM, advanced=True, name="Z"):
    s = Stats(name, enum_type, advanced)
    for v in values:
        s.insert(v)
    return s


def test_basic_moments_match_statistics_module():
    s = filled(VALUES)
    assert s.count == len(VALUES)
    assert s.minimum == min(VALUES)
    assert s.maximum == max(VALUES)
    assert s.average == pytest.approx(statistics.mean(VALUES))
    assert s.variance == pytest.approx(statistics.variance(VALUES))
    assert s.population_variance == pytest.approx(statistics.pvariance(VALUES))
    assert s.stddev == pytest.approx(statistics.stdev(VALUES))
    assert s.population_stddev == pytest.approx(statistics.pstdev(VALUES))


def test_reset_state():
    s = Stats("X", EnumType.NO_ENUM)
    assert s.count == 0
    assert s.minimum == sys.float_info.max
    assert s.maximum == -sys.float_info.max


def test_symmetric_data_has_zero_skewness():
    s = filled([-3.0, -1.0, 0.0, 1.0, 3.0])
    assert s.skewness == pytest.approx(0.0, abs=1e-12)
    assert s.population_skewness == pytest.approx(0.0, abs=1e-12)


def test_not_advanced_disables_higher_moments():
    s = filled(VALUES, advanced=False)
    assert s.skewness == 0.0
    assert s.kurtosis == 0.0
    assert s.population_kurtosis == 0.0
    assert s.variance == pytest.approx(statistics.variance(VALUES))


def test_merge_matches_single_pass():
    whole = filled(VALUES)
    a = filled(VALUES[:3])
    b = filled(VALUES[3:])
    a.merge(b)
    assert a.count == whole.count
    assert a.average == pytest.approx(whole.average)
    assert a.variance == pytest.approx(whole.variance)
    assert a.skewness == pytest.approx(whole.skewness)
    assert a.kurtosis == pytest.approx(whole.kurtosis)
    assert a.minimum == whole.minimum
    assert a.maximum == whole.maximum


def test_merge_into_empty():
    empty = Stats("Z", EnumType.NO_ENUM)
    other = filled(VALUES)
    empty.merge(other)
    assert empty.count == len(VALUES)
    assert empty.average == pytest.approx(statistics.mean(VALUES))


def test_merge_two_empty_leaves_empty():
    a = Stats("Z", EnumType.NO_ENUM)
    a.merge(Stats("Z", EnumType.NO_ENUM))
    assert a.count == 0
    assert a.minimum == sys.float_info.max


@pytest.mark.parametrize("other", [
    Stats("Y", EnumType.NO_ENUM),
    Stats("Z", EnumType.ENUMERATE),
    Stats("Z", EnumType.NO_ENUM, advanced=False),
])
def test_merge_mismatch_raises(other):
    s = filled([1.0, 2.0])
    with pytest.raises(ValueError):
        s.merge(other)
    assert s.count == 2


def test_enumerate_counts_values():
    s = filled([1.0, 2.0, 1.0], EnumType.ENUMERATE)
    assert s.values == {1.0: 2, 2.0: 1}
    assert s.data == []


def test_merge_adds_enumerated_counts():
    a = filled([1.0, 2.0], EnumType.ENUMERATE)
    b = filled([2.0, 3.0], EnumType.ENUMERATE)
    a.merge(b)
    assert a.values == {1.0: 1, 2.0: 2, 3.0: 1}


def test_global_median_and_mad():
    s = filled(VALUES, EnumType.GLOBAL)
    assert s.data == VALUES
    s.compute_global_stats()
    med = statistics.median_high(VALUES)
    assert s.median == med
    assert s.mad == statistics.median_high([abs(v - med) for v in VALUES])


def test_global_stats_without_data_raises():
    s = Stats("Z", EnumType.GLOBAL)
    with pytest.raises(ValueError):
        s.compute_global_stats()


def test_single_value_sample_variance_is_nan():
    s = filled([5.0])
    assert math.isnan(s.variance)
    assert s.population_variance == 0.0