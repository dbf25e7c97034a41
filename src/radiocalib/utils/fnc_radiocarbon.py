import logging

import numpy as np
from scipy.stats import norm

from radiocalib.Density import Density
from radiocalib.utils.fnc_curve import (CurveId, check_curve, inside_curve, interpolate_curve, resample_curve, glue_curves)
from radiocalib.utils.fnc_data import (to_array, to_errors, pair_arrays, regular_grid)
from radiocalib.utils.fnc_errors import (DomainError, PostbombRequiredError, DegenerateDistributionError)
from radiocalib.utils.fnc_realms import (C14toF14C, C14topMC, F14CtoC14, pMCtoC14, calBPtoBCAD, BCADtocalBP)

logger = logging.getLogger(__name__)


def _to_scalar(value, name: str) -> float:
	values = to_array(value, name)
	if values.shape[0] != 1:
		raise DomainError("Only one date can be calibrated at a time (%s has %d values)" % (name, values.shape[0]))
	return float(values[0])


def likelihood(age, uncertainty, mu, sigma, normal: bool = True, t_a: float = 3, t_b: float = 4) -> np.ndarray:
	"""
	Calculate the likelihood of a measurement given calibration curve values.

	Parameters:
	age (float or array): Measured C-14 age (or its F14C / pMC equivalent).
	uncertainty (float or array): One-sigma uncertainty of the measurement.
	mu (np.ndarray): Curve values in the same realm as the measurement.
	sigma (np.ndarray): Curve uncertainties.
	normal (bool): If True (default), use the normal model. If False, use the Student-t model of Christen and Perez (2009), which has heavier tails and so downweights outlying dates.
	t_a (float): Parameter a of the t model. Default is 3.
	t_b (float): Parameter b of the t model. Default is 4. Requires t_b > t_a - 1.

	Returns:
	np.ndarray: Unnormalised likelihoods.
	"""
	sigma_sum = uncertainty ** 2 + sigma ** 2
	if normal:
		return norm.pdf(age, loc=mu, scale=np.sqrt(sigma_sum))
	if t_b <= t_a - 1:
		raise DomainError("Parameters of the t model must satisfy t_b > t_a - 1")
	return (t_b + (age - mu) ** 2 / (2 * sigma_sum)) ** (-(t_a + 0.5))


def near_postbomb(age: float, uncertainty: float, is_F: bool = False, is_pMC: bool = False) -> bool:
	"""
	Check if a date reaches into the postbomb era, i.e. its C-14 age is less than three times its uncertainty.
	"""
	if is_F or is_pMC:
		if age <= 0:
			# below detection, i.e. very old
			return False
		if is_F:
			age, uncertainty = F14CtoC14(age, uncertainty)
		else:
			age, uncertainty = pMCtoC14(age, uncertainty)
		age, uncertainty = age[0], uncertainty[0]
	return age < 3 * uncertainty


def caldist(y: float, er: float, curve: np.ndarray = None, postbomb: np.ndarray = None, cc: CurveId or str = None,
			deltaR: float = 0, deltaSTD: float = 0, is_F: bool = False, is_pMC: bool = False, as_F: bool = False,
			yrsteps: float = None, cc_resample: float = None, cc0_res: int = 5000, threshold: float = 1e-3,
			normal: bool = True, t_a: float = 3, t_b: float = 4, normalise: bool = True, renormalise: bool = True,
			bcad: bool = False, zero: bool = True, bombalert: bool = True, postbomb_step: float = 0.05) -> Density:
	"""
	Calculate the calibrated distribution of a radiocarbon date.

	Parameters:
	y (float): Uncalibrated radiocarbon age (or F14C / pMC value, see is_F and is_pMC).
	er (float): Lab error (one sigma).
	curve (np.ndarray): Calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])`.
		If None, no calibration is done and the date is treated as normally distributed calendar age.
	postbomb (np.ndarray): Postbomb curve to glue to the young end of the curve. Required for dates reaching into the postbomb era.
	cc (CurveId or str): Identifier of the curve; a postbomb curve identifier means the curve already covers the postbomb era.
	deltaR (float): Age offset (e.g. for marine samples).
	deltaSTD (float): Uncertainty of the age offset.
	is_F (bool): The date is in the F14C realm.
	is_pMC (bool): The date is in the pMC realm.
	as_F (bool): Calibrate a C-14 age in the F14C realm.
	yrsteps (float): Calendar age step of the distribution. Defaults to the steps of the curve.
	cc_resample (float): Resample the curve to constant steps of this size before calibration.
	cc0_res (int): Number of points of the distribution when no curve is used. Default is 5000.
	threshold (float): Remove tails with probabilities below threshold * maximum probability. Default is 1e-3.
	normal (bool): Use the normal model (default) or the Student-t model.
	t_a (float): Parameter a of the t model. Default is 3.
	t_b (float): Parameter b of the t model. Default is 4.
	normalise (bool): Normalise the distribution to sum to 1. Default is True.
	renormalise (bool): Normalise again after removing the tails. Default is True.
	bcad (bool): Return calendar ages in BC/AD instead of cal BP. Default is False.
	zero (bool): Year zero exists in BC/AD (see calBPtoBCAD). Default is True.
	bombalert (bool): Raise PostbombRequiredError for postbomb dates without a postbomb curve. Default is True.
	postbomb_step (float): Calendar age step used with a postbomb curve. Default is 0.05.

	Returns:
	Density: The calibrated distribution, ordered by increasing calendar age (cal BP or BC/AD).

	Raises:
	DomainError: For invalid inputs (negative errors, both is_F and is_pMC, ...).
	PostbombRequiredError: If the date reaches into the postbomb era and no postbomb curve is available.
	DegenerateDistributionError: If the date has no probability anywhere on the curve.
	"""
	if is_F and is_pMC:
		raise DomainError("Cannot have both is_F=True and is_pMC=True")
	if as_F and (is_F or is_pMC):
		raise DomainError("as_F can only be used for dates in the C-14 realm")
	y = _to_scalar(y, "age")
	er = _to_scalar(to_errors(er, "uncertainty"), "uncertainty")
	deltaSTD = _to_scalar(to_errors(deltaSTD, "deltaSTD"), "deltaSTD")

	y = y - deltaR
	er = np.sqrt(er ** 2 + deltaSTD ** 2)

	glued = False
	if curve is None:
		if er <= 0:
			raise DomainError("Uncertainty must be positive when no calibration curve is used")
		xseq = np.linspace(y - 4 * er, y + 4 * er, int(cc0_res))
		this_cc = np.vstack((xseq, xseq, np.zeros(xseq.shape[0]))).T
	else:
		this_cc = check_curve(curve).copy()
		if cc_resample:
			this_cc = resample_curve(this_cc, cc_resample)
		if (postbomb is not None) or near_postbomb(y, er, is_F, is_pMC):
			if postbomb is not None:
				this_cc = glue_curves(this_cc, postbomb)
				this_cc = resample_curve(this_cc, postbomb_step)
				glued = True
				logger.debug("Postbomb curve glued; curve resampled to %s yr steps", postbomb_step)
			elif (cc is not None) and CurveId.from_name(cc).is_postbomb:
				pass
			elif bombalert:
				raise PostbombRequiredError(y, er)
			else:
				logger.debug("Date %s +- %s is close to the postbomb era; calibrating without a postbomb curve", y, er)

		if is_F:
			this_cc[:, 1], this_cc[:, 2] = C14toF14C(this_cc[:, 1], this_cc[:, 2])
		elif is_pMC:
			this_cc[:, 1], this_cc[:, 2] = C14topMC(this_cc[:, 1], this_cc[:, 2])
		elif as_F:
			this_cc[:, 1], this_cc[:, 2] = C14toF14C(this_cc[:, 1], this_cc[:, 2])
			y, er = [v[0] for v in C14toF14C(y, er)]

	years = this_cc[:, 0]
	probs = likelihood(y, er, this_cc[:, 1], this_cc[:, 2], normal, t_a, t_b)

	if (not yrsteps) and glued:
		yrsteps = postbomb_step
	if yrsteps:
		grid = regular_grid(years[0], years[-1], yrsteps)
		probs = np.interp(grid, years, probs)
		years = grid

	s = probs.sum()
	if (not np.isfinite(s)) or (s <= 0):
		raise DegenerateDistributionError("Date %s +- %s has no probability on the calibration curve" % (y, er))
	if normalise:
		probs = probs / s

	# remove calendar ages with very small probabilities from both ends of the distribution
	above = np.where(probs >= threshold * probs.max())[0]
	if above.shape[0] > 2:
		years = years[above.min():above.max() + 1]
		probs = probs[above.min():above.max() + 1]
	if normalise and renormalise:
		probs = probs / probs.sum()

	if bcad:
		return Density(calBPtoBCAD(years, zero)[::-1], probs[::-1], bcad=True)
	return Density(years, probs)


def l_calib(x, y, er, curve: np.ndarray = None, deltaR: float = 0, deltaSTD: float = 0, normal: bool = True,
			as_F: bool = False, is_F: bool = False, t_a: float = 3, t_b: float = 4) -> np.ndarray:
	"""
	Find the calibrated probability of calendar age(s) for radiocarbon date(s).

	Handles either multiple calendar ages for a single date, or a single calendar age for multiple dates.
	Calendar ages outside the calibration curve have probability 0.

	Parameters:
	x (float or array): Calendar age(s) BP.
	y (float or array): Radiocarbon age(s) (F14C if is_F).
	er (float or array): Lab error(s).
	curve (np.ndarray): Calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])`.
		If None, the date is treated as a normally distributed calendar age.

	Returns:
	np.ndarray: Unnormalised probabilities.
	"""
	if as_F and is_F:
		raise DomainError("Cannot have both is_F=True and as_F=True")
	x = to_array(x, "calendar age")
	y, er = pair_arrays(to_array(y, "age"), to_errors(er, "uncertainty"))
	if (x.shape[0] > 1) and (y.shape[0] > 1):
		raise DomainError("Cannot deal with multiple entries for both calendar ages and dates")
	y = y - deltaR
	er = np.sqrt(er ** 2 + deltaSTD ** 2)

	if curve is None:
		prob = likelihood(x, er, y, 0, normal, t_a, t_b)
	else:
		curve = check_curve(curve)
		mu, sigma = interpolate_curve(x, curve, rule=2)
		if is_F or as_F:
			mu, sigma = C14toF14C(mu, sigma)
		if as_F:
			y, er = C14toF14C(y, er)
		prob = likelihood(y, er, mu, sigma, normal, t_a, t_b)
		prob = np.where(inside_curve(x, curve), prob, 0)
	prob = np.asarray(prob, dtype=np.float64)
	prob[np.isnan(prob)] = 0
	return prob


def r_calib(n: int, y: float, er: float, curve: np.ndarray = None, seed: int = None, **kwargs) -> np.ndarray:
	"""
	Draw random calendar ages from the calibrated distribution of a date.

	The cumulative calibrated distribution is sampled at n uniform random values between 0 and 1.

	Parameters:
	n (int): Number of calendar ages to draw (> 0).
	y (float): Radiocarbon age.
	er (float): Lab error.
	curve (np.ndarray): Calibration curve.
	seed (int, optional): Seed of the random number generator, for reproducible draws.
	kwargs: Further arguments of caldist (threshold defaults to 0).

	Returns:
	np.ndarray: n calendar ages.
	"""
	if (n is None) or (int(n) < 1):
		raise DomainError("n needs to be a value > 0")
	kwargs.setdefault('threshold', 0)
	calib = caldist(y, er, curve, **kwargs)
	cum = np.cumsum(calib.p) / calib.total
	rng = np.random.default_rng(seed)
	return np.interp(rng.uniform(size=int(n)), cum, calib.x)


def younger(x, y: float, er: float, curve: np.ndarray = None, bcad: bool = False, zero: bool = True, threshold: float = 0,
			**kwargs) -> np.ndarray:
	"""
	Find the probability that a date is of calendar age x or younger.

	Calculated as the proportion of the calibrated distribution up to and including x.

	Parameters:
	x (float or array): Calendar age(s) of interest, in cal BP (or BC/AD if bcad=True).
	y (float): Radiocarbon age.
	er (float): Lab error.
	curve (np.ndarray): Calibration curve.
	bcad (bool): x is in BC/AD.
	zero (bool): Year zero exists in BC/AD.
	threshold (float): Threshold for removing the tails of the distribution. Default is 0.
	kwargs: Further arguments of caldist.

	Returns:
	np.ndarray: Probabilities.
	"""
	x = to_array(x, "calendar age")
	if bcad:
		x = BCADtocalBP(x, zero)
	calib = caldist(y, er, curve, threshold=threshold, **kwargs)
	cum = np.cumsum(calib.p) / calib.total
	return np.interp(x, calib.x, cum)


def older(x, y: float, er: float, curve: np.ndarray = None, **kwargs) -> np.ndarray:
	"""
	Find the probability that a date is older than calendar age x (1 - younger).
	"""
	return 1 - younger(x, y, er, curve, **kwargs)


def p_range(x1: float, x2: float, y: float, er: float, curve: np.ndarray = None, **kwargs) -> float:
	"""
	Find the probability that a date lies within the calendar age range between x1 and x2.
	"""
	probs = younger([x1, x2], y, er, curve, **kwargs)
	return float(probs.max() - probs.min())
