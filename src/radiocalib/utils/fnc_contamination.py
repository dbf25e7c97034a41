import logging
from typing import Callable

import numpy as np

from radiocalib.utils.fnc_data import (to_array, to_errors)
from radiocalib.utils.fnc_errors import (DomainError)
from radiocalib.utils.fnc_realms import (C14toF14C, F14CtoC14, LIBBY_MEANLIFE, CAMBRIDGE_MEANLIFE)

logger = logging.getLogger(__name__)

# coefficient of variation above which the first-order error propagation is not trusted
MC_CV_THRESHOLD = 0.1


def _check_fraction(fraction: np.ndarray) -> None:
	if np.isnan(fraction).any() or (fraction < 0).any() or (fraction > 1).any():
		raise DomainError("Contamination fraction must be between 0 and 1")


def _check_activity(f14c: np.ndarray) -> None:
	if np.isnan(f14c).any() or (f14c < 0).any():
		raise DomainError("F14C of the contamination cannot be negative")


def needs_monte_carlo(fraction, fraction_er, F_contam, F_contam_er) -> bool:
	"""
	Decide whether the uncertainties are too large for first-order error propagation.

	Monte Carlo is needed if the coefficient of variation (error / |mean|) of the contamination fraction or of the
	F14C of the contamination exceeds 0.1 (a zero mean with a non-zero error counts as exceeding), or if the
	fraction +- 2 errors leaves the interval [0, 1].
	"""
	fraction, fraction_er, F_contam, F_contam_er = [np.asarray(v, dtype=np.float64) for v in (fraction, fraction_er, F_contam, F_contam_er)]
	for mean, er in [(fraction, fraction_er), (F_contam, F_contam_er)]:
		er = np.broadcast_to(er, np.broadcast(mean, er).shape)
		mean = np.broadcast_to(mean, er.shape)
		zero = (mean == 0)
		if (er[zero] > 0).any():
			return True
		if (er[~zero] / np.abs(mean[~zero]) > MC_CV_THRESHOLD).any():
			return True
	if ((fraction - 2 * fraction_er) < 0).any() or ((fraction + 2 * fraction_er) > 1).any():
		return True
	return False


def _monte_carlo(mix_fnc: Callable, y: np.ndarray, er: np.ndarray, fraction: np.ndarray, fraction_er: np.ndarray,
				 F_contam: np.ndarray, F_contam_er: np.ndarray, its: int, seed: int or None) -> (np.ndarray, np.ndarray):
	# propagate the uncertainties of all inputs by drawing from independent normal distributions
	if int(its) < 2:
		raise DomainError("Number of Monte Carlo iterations must be at least 2")
	rng = np.random.default_rng(seed)
	shape = (int(its), y.shape[0])
	ages = rng.normal(y, er, size=shape)
	fr = np.clip(rng.normal(fraction, fraction_er, size=shape), 0, 1)
	fc = np.clip(rng.normal(F_contam, F_contam_er, size=shape), 0, None)
	with np.errstate(divide="ignore", invalid="ignore"):
		f_out = mix_fnc(np.exp(-ages / LIBBY_MEANLIFE), fr, fc)
	valid = np.isfinite(f_out) & (f_out > 0)
	out = np.full(shape, np.nan)
	out[valid] = -LIBBY_MEANLIFE * np.log(f_out[valid])

	n_valid = valid.sum(axis=0)
	n_invalid = int(shape[0] * shape[1] - n_valid.sum())
	if n_invalid:
		logger.warning("Monte Carlo: discarded %d of %d draws resulting in F14C <= 0", n_invalid, shape[0] * shape[1])
	means = np.full(shape[1], np.nan)
	sds = np.full(shape[1], np.nan)
	usable = n_valid > 1
	if not usable.all():
		logger.warning("Monte Carlo: too few draws with F14C > 0 for %d of %d ages; results set to NaN",
					   int((~usable).sum()), shape[1])
	means[usable] = np.nanmean(out[:, usable], axis=0)
	sds[usable] = np.nanstd(out[:, usable], axis=0, ddof=1)
	return means, sds


def _prepare(y, er, fraction, fraction_er, F_contam, F_contam_er):
	y = to_array(y, "age")
	er = to_errors(er, "uncertainty")
	fraction = to_array(fraction, "fraction")
	fraction_er = to_errors(fraction_er, "fraction error")
	F_contam = to_array(F_contam, "F14C of contamination")
	F_contam_er = to_errors(F_contam_er, "F14C error of contamination")
	_check_fraction(fraction)
	_check_activity(F_contam)
	has_er = er is not None
	if not has_er:
		er = np.zeros(1)
	try:
		arrays = np.broadcast_arrays(y, er, fraction, fraction_er, F_contam, F_contam_er)
	except ValueError:
		raise DomainError("Input values must be scalars or of equal lengths")
	return [a.astype(np.float64) for a in arrays] + [has_er]


def _use_mc(MC: bool or None, fraction, fraction_er, F_contam, F_contam_er) -> bool:
	if MC is None:
		return needs_monte_carlo(fraction, fraction_er, F_contam, F_contam_er)
	return bool(MC)


def contaminate(y, er=None, fraction=0, fraction_er=0, F_contam=1, F_contam_er=0, MC: bool = None, its: int = 10000,
				seed: int = None):
	"""
	Calculate the observed C-14 age of a sample after contamination.

	The observed F14C is a linear mixture of the true and the contaminating carbon:
	F_obs = (1 - fraction) * F_true + fraction * F_contam.

	Parameters:
	y (float or array): True C-14 age(s).
	er (float or array, optional): Lab error(s) of the true age(s).
	fraction (float or array): Contamination fraction (0 - 1).
	fraction_er (float or array): Uncertainty of the fraction.
	F_contam (float or array): F14C of the contamination (1 = modern carbon, 0 = dead carbon).
	F_contam_er (float or array): Uncertainty of the F14C of the contamination.
	MC (bool, optional): Use Monte Carlo error propagation. None (default) selects it automatically, see needs_monte_carlo.
	its (int): Number of Monte Carlo iterations. Default is 10000.
	seed (int, optional): Seed of the random number generator, for reproducible Monte Carlo results.

	Returns:
	np.ndarray or (np.ndarray, np.ndarray): Observed C-14 ages, or (ages, errors) if er was provided.
	"""
	y, er, fraction, fraction_er, F_contam, F_contam_er, has_er = _prepare(y, er, fraction, fraction_er, F_contam, F_contam_er)

	def _mix(f_true, fr, fc):
		return (1 - fr) * f_true + fr * fc

	if has_er and _use_mc(MC, fraction, fraction_er, F_contam, F_contam_er):
		return _monte_carlo(_mix, y, er, fraction, fraction_er, F_contam, F_contam_er, its, seed)

	f_true, f_true_er = C14toF14C(y, er)
	f_obs = _mix(f_true, fraction, F_contam)
	f_obs_er = np.sqrt(((1 - fraction) * f_true_er) ** 2 + (fraction * F_contam_er) ** 2 + ((F_contam - f_true) * fraction_er) ** 2)
	age, age_er = F14CtoC14(f_obs, f_obs_er)
	if has_er:
		return age, age_er
	return age


def clean(y, er=None, fraction=0, F_contam=1, fraction_er=0, F_contam_er=0, MC: bool = None, its: int = 10000,
		  seed: int = None):
	"""
	Calculate the true C-14 age of a sample by removing a known contamination.

	Inverse of contaminate: F_true = (F_obs - fraction * F_contam) / (1 - fraction).

	Parameters:
	y (float or array): Observed C-14 age(s).
	er (float or array, optional): Lab error(s) of the observed age(s).
	fraction (float or array): Contamination fraction to remove (0 - 1, exclusive of 1).
	F_contam (float or array): F14C of the contamination. Default is 1 (modern carbon).
	fraction_er, F_contam_er (float or array): Uncertainties of the fraction and of the F14C of the contamination.
	MC, its, seed: Monte Carlo options, see contaminate.

	Returns:
	np.ndarray or (np.ndarray, np.ndarray): True C-14 ages, or (ages, errors) if er was provided.

	Raises:
	DomainError: If the fraction is 1 or if removing the contamination leaves no 14C.
	"""
	y, er, fraction, fraction_er, F_contam, F_contam_er, has_er = _prepare(y, er, fraction, fraction_er, F_contam, F_contam_er)
	if (fraction == 1).any():
		raise DomainError("Cannot remove a contamination fraction of 1")

	def _unmix(f_obs, fr, fc):
		return (f_obs - fr * fc) / (1 - fr)

	if has_er and _use_mc(MC, fraction, fraction_er, F_contam, F_contam_er):
		return _monte_carlo(_unmix, y, er, fraction, fraction_er, F_contam, F_contam_er, its, seed)

	f_obs, f_obs_er = C14toF14C(y, er)
	f_true = _unmix(f_obs, fraction, F_contam)
	if (f_true <= 0).any():
		raise DomainError("Removing this contamination leaves no 14C in the sample")
	f_true_er = np.sqrt(
		(f_obs_er / (1 - fraction)) ** 2 +
		(fraction * F_contam_er / (1 - fraction)) ** 2 +
		(fraction_er * (f_obs - F_contam) / (1 - fraction) ** 2) ** 2
	)
	age, age_er = F14CtoC14(f_true, f_true_er)
	if has_er:
		return age, age_er
	return age


def muck(y_obs, y_target, F_contam=1, fraction=None, repair_age=0, er_obs=None, er_target=None):
	"""
	Calculate the contamination needed to explain the difference between an observed and a target C-14 age.

	Solves F_obs = (1 - fraction) * F_target + fraction * F_contam for the fraction or, if the fraction is given,
	for the F14C of the contamination.
	If the contamination was introduced during a repair event (e.g. a consolidant applied to the sample),
	its F14C decays over the `repair_age` calendar years passed since then.

	Parameters:
	y_obs (float or array): Observed C-14 age(s).
	y_target (float or array): Target (true) C-14 age(s) to be explained.
	F_contam (float or array): F14C of the contamination at the time of the repair event. Default is 1. Ignored if fraction is given.
	fraction (float or array, optional): Contamination fraction. If given, the F14C of the contamination is calculated instead.
	repair_age (float): Calendar years since the repair event. Default is 0.
	er_obs, er_target (float or array, optional): Lab errors; if both are given, the result error is propagated.

	Returns:
	np.ndarray or (np.ndarray, np.ndarray): The required fraction(s) or F14C(s) of the contamination at the
		repair event, with errors if er_obs and er_target were provided.

	Raises:
	DomainError: If the ages cannot be explained by a contamination (fraction outside [0, 1] or negative F14C).
	"""
	has_er = (er_obs is not None) and (er_target is not None)
	if has_er:
		f_obs, f_obs_er = C14toF14C(y_obs, er_obs)
		f_target, f_target_er = C14toF14C(y_target, er_target)
	else:
		f_obs, f_target = C14toF14C(y_obs), C14toF14C(y_target)
		f_obs_er, f_target_er = np.zeros(1), np.zeros(1)
	decay = np.exp(-float(repair_age) / CAMBRIDGE_MEANLIFE)

	if fraction is None:
		F_contam = to_array(F_contam, "F14C of contamination")
		_check_activity(F_contam)
		f_contam = F_contam * decay
		denom = f_contam - f_target
		if (denom == 0).any():
			raise DomainError("Contamination with the same F14C as the sample cannot change its age")
		result = (f_obs - f_target) / denom
		if (result < 0).any() or (result > 1).any():
			raise DomainError("The observed age cannot be explained by contamination with F14C = %s" % (F_contam))
		result_er = np.sqrt((f_obs_er / denom) ** 2 + (f_target_er * (f_obs - f_contam) / denom ** 2) ** 2)
	else:
		fraction = to_array(fraction, "fraction")
		_check_fraction(fraction)
		if (fraction == 0).any():
			raise DomainError("Contamination fraction must be greater than 0")
		f_contam = (f_obs - (1 - fraction) * f_target) / fraction
		if (f_contam < 0).any():
			raise DomainError("The observed age cannot be explained by a contamination fraction of %s" % (fraction))
		result = f_contam / decay
		result_er = np.sqrt((f_obs_er / fraction) ** 2 + (f_target_er * (1 - fraction) / fraction) ** 2) / decay

	if has_er:
		return result, result_er
	return result
