import numpy as np
import pytest
from scipy.stats import norm

from radiocalib.Density import Density
from radiocalib.utils.fnc_errors import (DomainError)
from radiocalib.utils.fnc_radiocarbon import (caldist)
from radiocalib.utils.fnc_stat import (to_years_probs, calc_mean, calc_mean_std, hpd, point_estimates, overlap)


def test_to_years_probs(normal_density):
	years, probs, bcad = to_years_probs(normal_density)
	assert years.shape == probs.shape
	assert not bcad
	years, probs, bcad = to_years_probs(np.array([[3, 0.2], [1, 0.5], [2, 0.3]]))
	assert np.array_equal(years, [1, 2, 3])
	assert np.array_equal(probs, [0.5, 0.3, 0.2])
	with pytest.raises(DomainError):
		to_years_probs(np.array([1, 2, 3]))


def test_calc_mean_std(normal_density):
	mean, std = calc_mean_std(normal_density.x, normal_density.p)
	assert mean == pytest.approx(1000, abs=0.01)
	assert std == pytest.approx(50, abs=0.1)
	assert calc_mean(np.arange(3), np.zeros(3)) is None
	assert calc_mean_std(np.arange(3), np.zeros(3)) == (None, None)


def test_hpd_single_range(normal_density):
	ranges = hpd(normal_density)
	assert ranges.shape == (1, 3)
	# cal BP ranges go from the older to the younger end
	assert ranges[0, 0] == pytest.approx(1098, abs=1.5)
	assert ranges[0, 1] == pytest.approx(902, abs=1.5)
	assert ranges[0, 2] == pytest.approx(95, abs=0.6)


def test_hpd_two_ranges(bimodal_density):
	ranges = hpd(bimodal_density)
	assert ranges.shape == (2, 3)
	assert ranges[0, 0] == pytest.approx(598, abs=1.5)
	assert ranges[1, 1] == pytest.approx(1402, abs=1.5)
	assert ranges[:, 2].sum() == pytest.approx(95, abs=0.6)


def test_hpd_bcad():
	x = np.arange(-1000, 1001, 1, dtype=np.float64)
	ranges = hpd(Density(x, norm.pdf(x, 0, 50), bcad=True))
	assert ranges[0, 0] == pytest.approx(-98, abs=1.5)
	assert ranges[0, 1] == pytest.approx(98, abs=1.5)


def test_hpd_options(normal_density):
	ranges, raw = hpd(normal_density, prob=0.68, every=1, return_raw=True)
	assert ranges[0, 2] == pytest.approx(68, abs=1)
	assert raw.shape[1] == 3
	assert set(np.unique(raw[:, 2])) <= {0.0, 1.0}
	assert raw[raw[:, 2] == 1, 1].sum() == pytest.approx(ranges[0, 2] / 100, abs=1e-3)
	with pytest.raises(DomainError):
		hpd(normal_density, prob=1.5)


def test_hpd_narrow_distribution():
	x = np.array([1000.0, 1001.0, 1002.0])
	ranges = hpd(Density(x, np.array([0.25, 0.5, 0.25])))
	assert ranges.shape[0] == 1
	assert ranges[0, 0] >= ranges[0, 1]


def test_point_estimates(normal_density):
	estimates = point_estimates(normal_density)
	assert set(estimates.keys()) == {"weighted mean", "median", "mode", "midpoint"}
	for value in estimates.values():
		assert value == pytest.approx(1000, abs=1)
	estimates = point_estimates(normal_density, wmean=False, midpoint=False)
	assert list(estimates.keys()) == ["median", "mode"]


def test_point_estimates_skewed():
	x = np.arange(0, 101, 1, dtype=np.float64)
	p = np.exp(-x / 20)
	estimates = point_estimates(Density(x, p))
	assert estimates["mode"] == 0
	assert estimates["mode"] < estimates["median"] < estimates["weighted mean"]


def test_overlap(normal_density):
	overlapping, overlap_p = overlap(normal_density, normal_density)
	assert overlapping
	assert overlap_p == pytest.approx(1)
	x = np.arange(0, 2001, 1, dtype=np.float64)
	far = Density(x, norm.pdf(x, 1800, 20))
	overlapping, overlap_p = overlap(normal_density, far)
	assert not overlapping
	assert overlap_p < 1e-3
	with pytest.raises(DomainError):
		overlap(normal_density, Density(x, norm.pdf(x, 1000, 50), bcad=True))


def test_hpd_coverage_bounds(normal_density, bimodal_density, wiggly_curve):
	# the accepted ages cover at most prob, and miss it by less than the mass of one grid step
	wiggly = caldist(1500, 20, wiggly_curve)
	for calib in [normal_density, bimodal_density, wiggly]:
		for prob in [0.5, 0.68, 0.95]:
			ranges, raw = hpd(calib, prob, every=1, prob_round=6, return_raw=True)
			coverage = raw[raw[:, 2] == 1, 1].sum()
			assert coverage <= prob + 1e-9
			assert coverage >= prob - raw[:, 1].max() - 1e-9
			assert ranges[:, 2].sum() == pytest.approx(100 * coverage, abs=1e-3)
