from typing import Dict

import numpy as np

from radiocalib.Density import Density
from radiocalib.utils.fnc_data import (regular_grid)
from radiocalib.utils.fnc_errors import (DomainError, DegenerateDistributionError)


def to_years_probs(calib: Density or np.ndarray) -> (np.ndarray, np.ndarray, bool):
	"""
	Extract calendar ages and probabilities from a Density or a 2D array `np.array([[calendar age, probability], ...])`.

	Returns:
	(years, probs, bcad): Calendar ages sorted in increasing order, their probabilities, and whether the ages are in BC/AD.
	"""
	if isinstance(calib, Density):
		return calib.x, calib.p, calib.bcad
	calib = np.asarray(calib, dtype=np.float64)
	if (calib.ndim != 2) or (calib.shape[1] < 2) or (not calib.shape[0]):
		raise DomainError("Distribution must have 2 columns: calendar age, probability")
	order = np.argsort(calib[:, 0], kind="stable")
	return calib[order, 0], calib[order, 1], False


def calc_mean(years: np.ndarray, distribution: np.ndarray) -> float or None:
	"""
	Calculate the mean of the given distribution.

	Parameters:
	years (np.ndarray): Array of years.
	distribution (np.ndarray): Array of probabilities for each year.

	Returns:
	float: The mean of the distribution, or None if the distribution sum is zero.
	"""
	if not distribution.sum():
		return None
	return float(np.average(years, weights=distribution))


def calc_mean_std(years: np.ndarray, distribution: np.ndarray) -> (float, float) or (None, None):
	"""
	Calculate the mean and standard deviation of the given distribution.

	Returns:
	(mean, std): The mean and standard deviation of the distribution, or (None, None) if the mean is None.
	"""
	mean = calc_mean(years, distribution)
	if mean is None:
		return None, None
	std = np.sqrt(np.average((years - mean) ** 2, weights=distribution))
	return mean, float(std)


def _regrid(years: np.ndarray, probs: np.ndarray, every: float, bins: int) -> (np.ndarray, np.ndarray):
	# re-interpolate to the desired precision; very narrow distributions get a fixed number of bins instead
	if years.shape[0] < 2 or years[0] == years[-1]:
		return years[:1], np.ones(1)
	grid = regular_grid(years[0], years[-1], every)
	if grid.shape[0] < bins:
		grid = np.linspace(years[0], years[-1], 100)
	probs = np.interp(grid, years, probs)
	s = probs.sum()
	if s <= 0:
		raise DegenerateDistributionError("Distribution has no probability mass")
	return grid, probs / s


def _age_decimals(years: np.ndarray, age_round: int) -> int:
	if years.shape[0] < 2:
		return age_round
	mindiff = np.abs(np.diff(years)).min()
	if 0 < mindiff < 0.01:
		# very fine grids need more decimals
		return int(-np.floor(np.log10(mindiff)))
	return age_round


def hpd(calib: Density or np.ndarray, prob: float = 0.95, every: float = 0.1, bins: int = 20, age_round: int = 0,
		prob_round: int = 1, bcad: bool = None, ka: bool = False, return_raw: bool = False) -> np.ndarray:
	"""
	Calculate the highest posterior density (hpd) ranges of a distribution.

	The distribution is re-interpolated to steps of `every` years and normalised. Calendar ages are ranked by
	probability and accumulated until `prob` is reached; contiguous runs of the accepted ages form the ranges.

	Parameters:
	calib (Density or np.ndarray): The distribution, e.g. as returned by caldist.
	prob (float): Probability covered by the ranges. Default is 0.95.
	every (float): Yearly precision. Default is 0.1, as a compromise between speed and accuracy.
	bins (int): Minimum number of bins; distributions with fewer bins are re-interpolated to 100 bins. Default is 20.
	age_round (int): Decimals of the reported ages. Default is 0.
	prob_round (int): Decimals of the reported percentages. Default is 1.
	bcad (bool): Calendar ages are in BC/AD. Defaults to the labels of a Density, or False for arrays.
	ka (bool): Calendar ages are in ka (thousands of years); adjusts precision and rounding.
	return_raw (bool): Also return the re-interpolated distribution with the in/out flags.

	Returns:
	np.ndarray: Ranges in format `np.array([[from, to, percentage], ...])`, ordered by calendar age.
		`from` is the older end of each range. If return_raw is True, returns (ranges, raw) where raw is
		`np.array([[calendar age, probability, in range (0/1)], ...])`.
	"""
	if not 0 < prob <= 1:
		raise DomainError("Probability of the hpd ranges must be between 0 and 1")
	years, probs, is_bcad = to_years_probs(calib)
	if bcad is None:
		bcad = is_bcad
	if ka:
		every = every / 1e3
		age_round = age_round + 3

	years, probs = _regrid(years, probs, every, bins)

	# rank the calendar ages according to their probabilities
	order = np.argsort(-probs, kind="stable")
	cum = np.cumsum(probs[order])
	inside = np.zeros(years.shape[0], dtype=bool)
	inside[order[cum <= prob + 1e-12]] = True
	inside[order[0]] = True

	# find the outer ages of the ranges
	flags = np.concatenate(([False], inside, [False])).astype(int)
	starts = np.where(np.diff(flags) == 1)[0]
	ends = np.where(np.diff(flags) == -1)[0] - 1

	age_round = _age_decimals(years, age_round)
	ranges = []
	for i0, i1 in zip(starts, ends):
		perc = 100 * probs[i0:i1 + 1].sum()
		lower, upper = years[i0], years[i1]
		if bcad:
			ranges.append([lower, upper, perc])
		else:
			ranges.append([upper, lower, perc])
	ranges = np.array(ranges, dtype=np.float64).reshape(-1, 3)
	ranges[:, :2] = np.round(ranges[:, :2], age_round)
	ranges[:, 2] = np.round(ranges[:, 2], prob_round)

	if return_raw:
		return ranges, np.vstack((years, probs, inside.astype(float))).T
	return ranges


def point_estimates(calib: Density or np.ndarray, wmean: bool = True, median: bool = True, mode: bool = True,
					midpoint: bool = True, prob: float = 0.95, rounded: int = 1, every: float = 1) -> Dict[str, float]:
	"""
	Calculate point estimates of a distribution.

	Note that point estimates are often poor representations of entire calibrated distributions.

	Parameters:
	calib (Density or np.ndarray): The distribution, e.g. as returned by caldist.
	wmean (bool): Report the weighted mean.
	median (bool): Report the median.
	mode (bool): Report the mode, the calendar age with the maximum probability (the first one if tied).
	midpoint (bool): Report the midpoint of the hpd ranges.
	prob (float): Probability of the hpd ranges used for the midpoint. Default is 0.95.
	rounded (int): Decimals of the reported values. Default is 1.
	every (float): Yearly precision of the hpd ranges. Default is 1.

	Returns:
	dict: {"weighted mean": float, "median": float, "mode": float, "midpoint": float}, with only the requested estimates.
	"""
	years, probs, bcad = to_years_probs(calib)
	s = probs.sum()
	if s <= 0:
		raise DegenerateDistributionError("Distribution has no probability mass")
	probs = probs / s

	estimates = {}
	if wmean:
		estimates["weighted mean"] = calc_mean(years, probs)
	if median:
		estimates["median"] = float(np.interp(0.5, np.cumsum(probs), years))
	if mode:
		estimates["mode"] = float(years[np.argmax(probs)])
	if midpoint:
		ranges = hpd(np.vstack((years, probs)).T, prob, every=every, prob_round=rounded, bcad=bcad)
		lower, upper = ranges[:, :2].min(), ranges[:, :2].max()
		estimates["midpoint"] = float(lower + (upper - lower) / 2)
	return dict([(key, round(val, rounded)) for key, val in estimates.items()])


def overlap(calib1: Density or np.ndarray, calib2: Density or np.ndarray, prob: float = 0.95,
			every: float = 1) -> (bool, float):
	"""
	Check if two distributions overlap.

	Both distributions are normalised on a common grid of calendar ages; the overlapping probability is
	the sum of their pointwise minimum. The distributions overlap if any of their hpd ranges intersect.

	Parameters:
	calib1, calib2 (Density or np.ndarray): The distributions, on the same calendar scale.
	prob (float): Probability of the hpd ranges. Default is 0.95.
	every (float): Step of the common grid. Default is 1.

	Returns:
	(overlapping, overlap_p): True if the hpd ranges intersect; the overlapping probability (0 - 1).
	"""
	years1, probs1, bcad1 = to_years_probs(calib1)
	years2, probs2, bcad2 = to_years_probs(calib2)
	if bcad1 != bcad2:
		raise DomainError("Distributions must be on the same calendar scale")

	grid = regular_grid(min(years1[0], years2[0]), max(years1[-1], years2[-1]), every)
	dists = []
	for years, probs in [(years1, probs1), (years2, probs2)]:
		dist = np.interp(grid, years, probs, left=0, right=0)
		s = dist.sum()
		if s <= 0:
			raise DegenerateDistributionError("Distribution has no probability mass on the common grid")
		dists.append(dist / s)
	overlap_p = float(np.minimum(*dists).sum())

	ranges1 = hpd(np.vstack((years1, probs1)).T, prob)
	ranges2 = hpd(np.vstack((years2, probs2)).T, prob)
	overlapping = False
	for from1, to1, _ in ranges1:
		for from2, to2, _ in ranges2:
			if (min(from1, to1) <= max(from2, to2)) and (min(from2, to2) <= max(from1, to1)):
				overlapping = True
	return overlapping, overlap_p
