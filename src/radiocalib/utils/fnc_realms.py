import numpy as np

from radiocalib.utils.fnc_curve import (check_curve, interpolate_curve, find_calendar_ages)
from radiocalib.utils.fnc_data import (to_array, to_errors, pair_arrays)
from radiocalib.utils.fnc_errors import (DomainError)

# Libby mean-life (from the Libby half-life of 5568 yr), used for C-14 ages
LIBBY_MEANLIFE = 8033
# Cambridge mean-life (from the half-life of 5730 yr), used for the decay of 14C in calendar time
CAMBRIDGE_MEANLIFE = 8267


def _result(values: np.ndarray, errors: np.ndarray or None):
	if errors is None:
		return values
	return values, errors


# Calendar realms

def calBPtoBCAD(cal_bp, zero: bool = True) -> np.ndarray:
	"""
	Convert calendar years BP to BC/AD (negative values = BC).

	Parameters:
	cal_bp (float or array): Calendar age(s) in years BP (before AD 1950).
	zero (bool): If True (default), year 0 exists (astronomical numbering). If False, 1 BC is followed by AD 1 and all ages <= 0 BC/AD are shifted by one year.

	Returns:
	np.ndarray: BC/AD years.
	"""
	bcad = 1950 - to_array(cal_bp, "calendar age")
	if not zero:
		neg = bcad <= 0
		bcad[neg] -= 1
	return bcad


def BCADtocalBP(bcad, zero: bool = True) -> np.ndarray:
	"""
	Convert BC/AD years (negative values = BC) to calendar years BP.

	Parameters:
	bcad (float or array): BC/AD year(s).
	zero (bool): If True (default), year 0 exists. If False, BC years are shifted by one year towards the present, so that 1 BC is directly followed by AD 1.

	Returns:
	np.ndarray: Calendar ages in years BP.
	"""
	bcad = to_array(bcad, "BC/AD year")
	cal_bp = 1950 - bcad
	if not zero:
		neg = bcad < 0
		cal_bp[neg] -= 1
	return cal_bp


def calBPtob2k(cal_bp) -> np.ndarray:
	# b2k: years before AD 2000
	return to_array(cal_bp, "calendar age") + 50


def b2ktocalBP(b2k) -> np.ndarray:
	return to_array(b2k, "b2k age") - 50


def BCADtob2k(bcad, zero: bool = True) -> np.ndarray:
	return calBPtob2k(BCADtocalBP(bcad, zero))


def b2ktoBCAD(b2k, zero: bool = True) -> np.ndarray:
	return calBPtoBCAD(b2ktocalBP(b2k), zero)


# Radiocarbon realms

def C14toF14C(age, er=None):
	"""
	Convert C-14 ages to F14C (fraction modern carbon).

	F14C = exp(-age / 8033); the error is propagated to first order: er_F = F14C * er / 8033.

	Parameters:
	age (float or array): C-14 age(s) in years BP.
	er (float or array, optional): One-sigma uncertainties of the ages.

	Returns:
	np.ndarray or (np.ndarray, np.ndarray): F14C values, or (F14C values, errors) if er was provided.
	"""
	age, er = pair_arrays(to_array(age, "C-14 age"), to_errors(er))
	f14c = np.exp(-age / LIBBY_MEANLIFE)
	if er is None:
		return f14c
	return f14c, f14c * er / LIBBY_MEANLIFE


def F14CtoC14(f14c, er=None):
	"""
	Convert F14C values to C-14 ages.

	age = -8033 * ln(F14C); the error is propagated to first order: er_age = 8033 * er / F14C.

	Parameters:
	f14c (float or array): F14C value(s); must be positive.
	er (float or array, optional): One-sigma uncertainties.

	Returns:
	np.ndarray or (np.ndarray, np.ndarray): C-14 ages, or (ages, errors) if er was provided.

	Raises:
	DomainError: If any F14C value is zero or negative.
	"""
	f14c, er = pair_arrays(to_array(f14c, "F14C"), to_errors(er))
	if np.isnan(f14c).any() or (f14c <= 0).any():
		raise DomainError("F14C must be positive to be converted to a C-14 age")
	age = -LIBBY_MEANLIFE * np.log(f14c)
	if er is None:
		return age
	return age, LIBBY_MEANLIFE * er / f14c


def F14CtopMC(f14c, er=None):
	f14c, er = pair_arrays(to_array(f14c, "F14C"), to_errors(er))
	return _result(100 * f14c, None if er is None else 100 * er)


def pMCtoF14C(pmc, er=None):
	pmc, er = pair_arrays(to_array(pmc, "pMC"), to_errors(er))
	return _result(pmc / 100, None if er is None else er / 100)


def C14topMC(age, er=None):
	"""
	Convert C-14 ages to percent modern carbon (pMC = 100 * F14C).
	"""
	if er is None:
		return F14CtopMC(C14toF14C(age))
	return F14CtopMC(*C14toF14C(age, er))


def pMCtoC14(pmc, er=None):
	"""
	Convert percent modern carbon to C-14 ages.
	"""
	if er is None:
		return F14CtoC14(pMCtoF14C(pmc))
	return F14CtoC14(*pMCtoF14C(pmc, er))


def _reference_F14C(t: np.ndarray, curve: np.ndarray or None) -> (np.ndarray, np.ndarray):
	# F14C expected at calendar age t: from the calibration curve if provided,
	# otherwise from radioactive decay alone
	if curve is None:
		return np.exp(-t / CAMBRIDGE_MEANLIFE), np.zeros(t.shape[0])
	mu, sigma = interpolate_curve(t, check_curve(curve), rule=1)
	return C14toF14C(mu, sigma)


def F14CtoD14C(f14c, er=None, t=0, curve: np.ndarray = None):
	"""
	Convert F14C values to D14C (per-mille deviation from the expected atmospheric 14C at calendar age t).

	D14C = 1000 * (F14C / F14C_ref(t) - 1). Without a curve, F14C_ref(t) = exp(-t / 8267), i.e. the 14C left after
	t years of radioactive decay. With a curve, F14C_ref(t) and its uncertainty are taken from the curve at t and the
	errors are combined in quadrature.

	Parameters:
	f14c (float or array): F14C value(s).
	er (float or array, optional): One-sigma uncertainties.
	t (float or array): Calendar age(s) in years BP.
	curve (np.ndarray, optional): Calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])`.

	Returns:
	np.ndarray or (np.ndarray, np.ndarray): D14C values, or (values, errors) if er was provided.
	"""
	f14c, er = pair_arrays(to_array(f14c, "F14C"), to_errors(er))
	t, f14c = pair_arrays(to_array(t, "calendar age"), f14c)
	if er is not None:
		er = pair_arrays(f14c, er)[1]
	f_ref, f_ref_er = _reference_F14C(t, curve)
	d14c = 1000 * (f14c / f_ref - 1)
	if er is None:
		return d14c
	d14c_er = 1000 * np.sqrt((er / f_ref) ** 2 + (f14c * f_ref_er / f_ref ** 2) ** 2)
	return d14c, d14c_er


def D14CtoF14C(d14c, er=None, t=0, curve: np.ndarray = None):
	"""
	Convert D14C values at calendar age t to F14C; inverse of F14CtoD14C.
	"""
	d14c, er = pair_arrays(to_array(d14c, "D14C"), to_errors(er))
	t, d14c = pair_arrays(to_array(t, "calendar age"), d14c)
	if er is not None:
		er = pair_arrays(d14c, er)[1]
	f_ref, f_ref_er = _reference_F14C(t, curve)
	ratio = d14c / 1000 + 1
	f14c = ratio * f_ref
	if er is None:
		return f14c
	f14c_er = np.sqrt((er * f_ref / 1000) ** 2 + (ratio * f_ref_er) ** 2)
	return f14c, f14c_er


def C14toD14C(age, er=None, t=0, curve: np.ndarray = None):
	if er is None:
		return F14CtoD14C(C14toF14C(age), t=t, curve=curve)
	return F14CtoD14C(*C14toF14C(age, er), t=t, curve=curve)


def D14CtoC14(d14c, er=None, t=0, curve: np.ndarray = None):
	if er is None:
		return F14CtoC14(D14CtoF14C(d14c, t=t, curve=curve))
	return F14CtoC14(*D14CtoF14C(d14c, er, t=t, curve=curve))


# Calendar to radiocarbon realms (through the calibration curve)

def calBPtoC14(cal_bp, curve: np.ndarray, rule: int = 1) -> (np.ndarray, np.ndarray):
	"""
	Find the C-14 age and uncertainty of the calibration curve at calendar age(s) BP.

	Parameters:
	cal_bp (float or array): Calendar age(s) in years BP.
	curve (np.ndarray): Calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])`.
	rule (int): Extrapolation rule; 1 = raise CurveRangeError outside the curve, 2 = use the nearest curve value.

	Returns:
	(mu, sigma): C-14 ages and uncertainties.
	"""
	return interpolate_curve(cal_bp, check_curve(curve), rule)


def calBPtoF14C(cal_bp, curve: np.ndarray, rule: int = 1) -> (np.ndarray, np.ndarray):
	return C14toF14C(*calBPtoC14(cal_bp, curve, rule))


def calBPtopMC(cal_bp, curve: np.ndarray, rule: int = 1) -> (np.ndarray, np.ndarray):
	return C14topMC(*calBPtoC14(cal_bp, curve, rule))


def calBPtoD14C(cal_bp, curve: np.ndarray, rule: int = 1) -> (np.ndarray, np.ndarray):
	"""
	Find the D14C of the calibration curve at calendar age(s) BP, relative to radioactive decay since that age.
	"""
	f14c, er = calBPtoF14C(cal_bp, curve, rule)
	return F14CtoD14C(f14c, er, t=cal_bp)


def BCADtoC14(bcad, curve: np.ndarray, rule: int = 1, zero: bool = True):
	return calBPtoC14(BCADtocalBP(bcad, zero), curve, rule)


def BCADtoF14C(bcad, curve: np.ndarray, rule: int = 1, zero: bool = True):
	return calBPtoF14C(BCADtocalBP(bcad, zero), curve, rule)


def BCADtopMC(bcad, curve: np.ndarray, rule: int = 1, zero: bool = True):
	return calBPtopMC(BCADtocalBP(bcad, zero), curve, rule)


def BCADtoD14C(bcad, curve: np.ndarray, rule: int = 1, zero: bool = True):
	return calBPtoD14C(BCADtocalBP(bcad, zero), curve, rule)


def b2ktoC14(b2k, curve: np.ndarray, rule: int = 1):
	return calBPtoC14(b2ktocalBP(b2k), curve, rule)


def b2ktoF14C(b2k, curve: np.ndarray, rule: int = 1):
	return calBPtoF14C(b2ktocalBP(b2k), curve, rule)


def b2ktopMC(b2k, curve: np.ndarray, rule: int = 1):
	return calBPtopMC(b2ktocalBP(b2k), curve, rule)


def b2ktoD14C(b2k, curve: np.ndarray, rule: int = 1):
	return calBPtoD14C(b2ktocalBP(b2k), curve, rule)


def C14tocalBP(age: float, curve: np.ndarray) -> np.ndarray:
	"""
	Find all calendar ages BP at which the calibration curve has the given C-14 age.

	Parameters:
	age (float): C-14 age in years BP.
	curve (np.ndarray): Calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])`.

	Returns:
	np.ndarray: Sorted calendar ages; empty if the curve never reaches the age.
	"""
	return find_calendar_ages(age, check_curve(curve))
