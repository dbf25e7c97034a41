import logging
from enum import Enum

import numpy as np
from scipy.interpolate import interp1d

from radiocalib.utils.fnc_data import (to_array, regular_grid)
from radiocalib.utils.fnc_errors import (DomainError, CurveRangeError)

logger = logging.getLogger(__name__)


def check_curve(curve: np.ndarray) -> np.ndarray:
	"""
	Check that a calibration curve has the expected format.

	Parameters:
	curve (np.ndarray): A 2D array containing the calibration curve data. Each row represents a calendar year BP, C-14 year, and uncertainty.

	Returns:
	np.ndarray: The curve as a float array.

	Raises:
	DomainError: If the curve does not have 3 columns, has fewer than 2 rows, or the calendar ages are not strictly increasing.
	"""
	curve = np.asarray(curve, dtype=np.float64)
	if (curve.ndim != 2) or (curve.shape[1] != 3):
		raise DomainError("Calibration curve must have 3 columns: calendar year BP, C-14 year, uncertainty")
	if curve.shape[0] < 2:
		raise DomainError("Calibration curve must have at least 2 rows")
	if not (np.diff(curve[:, 0]) > 0).all():
		raise DomainError("Calendar ages of the calibration curve must be unique and increasing")
	return curve


def inside_curve(cal_bp: np.ndarray, curve: np.ndarray) -> np.ndarray:
	# mask of calendar ages covered by the curve
	return (cal_bp >= curve[0, 0]) & (cal_bp <= curve[-1, 0])


def interpolate_curve(cal_bp, curve: np.ndarray, rule: int = 1) -> (np.ndarray, np.ndarray):
	"""
	Find the C-14 age and uncertainty of the calibration curve at given calendar ages.

	Values between the curve rows are interpolated linearly.

	Parameters:
	cal_bp (float or array): Calendar age(s) in years BP.
	curve (np.ndarray): Calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])`.
	rule (int): Extrapolation rule for ages outside the curve. 1 = raise CurveRangeError; 2 = use the value of the nearest end of the curve.

	Returns:
	(mu, sigma): Arrays of C-14 ages and their uncertainties.
	"""
	if rule not in [1, 2]:
		raise DomainError("Invalid extrapolation rule: %s (must be 1 or 2)" % (rule))
	cal_bp = to_array(cal_bp, "calendar age")
	if (rule == 1) and not inside_curve(cal_bp, curve).all():
		raise CurveRangeError("Calendar age outside of the calibration curve range (%s - %s cal BP)" % (curve[0, 0], curve[-1, 0]))
	mu = np.interp(cal_bp, curve[:, 0], curve[:, 1])
	sigma = np.interp(cal_bp, curve[:, 0], curve[:, 2])
	return mu, sigma


def find_calendar_ages(c14_age: float, curve: np.ndarray) -> np.ndarray:
	"""
	Find all calendar ages at which the calibration curve crosses a C-14 age.

	Every pair of consecutive curve rows is treated as a linear segment; because of wiggles in the curve,
	a C-14 age can be crossed any number of times.

	Parameters:
	c14_age (float): C-14 age (years BP).
	curve (np.ndarray): Calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])`.

	Returns:
	np.ndarray: Sorted calendar ages (years BP) of all crossings. Empty if the curve never reaches the C-14 age.
	"""
	c14_age = float(c14_age)
	x0, x1 = curve[:-1, 0], curve[1:, 0]
	y0, y1 = curve[:-1, 1], curve[1:, 1]
	lower = np.minimum(y0, y1)
	upper = np.maximum(y0, y1)
	found = (lower <= c14_age) & (c14_age <= upper)
	sloped = found & (y0 != y1)
	flat = found & (y0 == y1)
	ages = x0[sloped] + (c14_age - y0[sloped]) * (x1[sloped] - x0[sloped]) / (y1[sloped] - y0[sloped])
	# a flat segment at exactly the searched age crosses it over its whole length
	ages = np.concatenate((ages, x0[flat], x1[flat]))
	return np.unique(ages)


def resample_curve(curve: np.ndarray, step: float) -> np.ndarray:
	"""
	Resample a calibration curve to a constant calendar age spacing.

	Calibration curves have different densities in different periods (e.g. IntCal20: every year between 0 and 5 kcal BP,
	then every 5 yr up to 15 kcal BP, every 10 yr up to 25 kcal BP, and every 20 yr up to 55 kcal BP).
	Resampling to a constant step keeps probabilities comparable across these periods.

	Parameters:
	curve (np.ndarray): Calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])`.
	step (float): Calendar age step in years.

	Returns:
	np.ndarray: The resampled curve.
	"""
	cal_bp = regular_grid(curve[0, 0], curve[-1, 0], step)
	return np.vstack((
		cal_bp,
		interp1d(curve[:, 0], curve[:, 1], kind="linear")(cal_bp),
		interp1d(curve[:, 0], curve[:, 2], kind="linear")(cal_bp),
	)).T


def smooth_curve(curve: np.ndarray, smooth: float = 30) -> np.ndarray:
	"""
	Smooth a calibration curve over a moving window of calendar years.

	Used for material that accumulated over a period of time, e.g. a cm of peat over 30 years.
	Each row is replaced by the unweighted mean C-14 age and mean uncertainty of all rows within
	`smooth / 2` years of its calendar age.

	Parameters:
	curve (np.ndarray): Calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])`.
	smooth (float): Width of the window in calendar years. Default is 30.

	Returns:
	np.ndarray: The smoothed curve.
	"""
	if smooth < 0:
		raise DomainError("Smoothing window width cannot be negative")
	years = curve[:, 0]
	idx_from = np.searchsorted(years, years - smooth / 2, side="left")
	idx_to = np.searchsorted(years, years + smooth / 2, side="right")
	cum_mu = np.concatenate(([0], np.cumsum(curve[:, 1])))
	cum_sigma = np.concatenate(([0], np.cumsum(curve[:, 2])))
	n = idx_to - idx_from
	smoothed = curve.copy()
	smoothed[:, 1] = (cum_mu[idx_to] - cum_mu[idx_from]) / n
	smoothed[:, 2] = (cum_sigma[idx_to] - cum_sigma[idx_from]) / n
	return smoothed


def glue_curves(curve: np.ndarray, postbomb: np.ndarray) -> np.ndarray:
	"""
	Attach a postbomb curve to the young end of a calibration curve.

	Only postbomb rows younger than the start of the calibration curve are used.

	Parameters:
	curve (np.ndarray): Calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])`.
	postbomb (np.ndarray): Postbomb curve in the same format (calendar ages mostly negative, i.e. after AD 1950).

	Returns:
	np.ndarray: The combined curve, sorted by calendar age.
	"""
	curve = check_curve(curve)
	postbomb = np.asarray(postbomb, dtype=np.float64)
	postbomb = postbomb[np.argsort(postbomb[:, 0])]
	postbomb = postbomb[postbomb[:, 0] < curve[0, 0]]
	if not postbomb.shape[0]:
		logger.debug("Postbomb curve does not extend beyond %s cal BP; nothing to glue", curve[0, 0])
		return curve.copy()
	return np.vstack((postbomb, curve))


class CurveId(Enum):
	"""
	Identifiers of the standard calibration curves.

	The postbomb curves (NH1, NH2, NH3, SH1-2, SH3) cover the nuclear-testing era and already include
	the young (negative cal BP) part needed for postbomb ages.
	"""
	INTCAL20 = "IntCal20"
	MARINE20 = "Marine20"
	SHCAL20 = "SHCal20"
	NH1 = "nh1"
	NH2 = "nh2"
	NH3 = "nh3"
	SH1_2 = "sh1-2"
	SH3 = "sh3"

	@property
	def is_postbomb(self) -> bool:
		return self in POSTBOMB_CURVES

	@classmethod
	def from_name(cls, name: str) -> 'CurveId':
		"""
		Find a curve identifier by its name (case-insensitive), e.g. "IntCal20" or "nh1".
		"""
		if isinstance(name, cls):
			return name
		for curve_id in cls:
			if curve_id.value.lower() == str(name).strip().lower():
				return curve_id
		raise DomainError("Unknown calibration curve: %s" % (name))


POSTBOMB_CURVES = (CurveId.NH1, CurveId.NH2, CurveId.NH3, CurveId.SH1_2, CurveId.SH3)
