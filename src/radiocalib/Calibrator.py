from typing import Dict, Any

import numpy as np

from radiocalib.Density import Density
from radiocalib.utils.fnc_curve import (CurveId, check_curve, smooth_curve)
from radiocalib.utils.fnc_errors import (DomainError)
from radiocalib.utils.fnc_load import (get_curve, get_postbomb_curve)
from radiocalib.utils.fnc_radiocarbon import (caldist, l_calib, r_calib, younger, older, p_range)
from radiocalib.utils.fnc_realms import (calBPtoC14, C14tocalBP)
from radiocalib.utils.fnc_stat import (hpd, point_estimates)

FLAGS = ['is_F', 'is_pMC', 'as_F', 'normal', 'normalise', 'renormalise', 'bcad', 'zero', 'bombalert']
NUMBERS = ['deltaR', 'deltaSTD', 'cc0_res', 'threshold', 't_a', 't_b', 'postbomb_step', 'prob', 'every', 'age_round', 'prob_round']
OPTIONAL_NUMBERS = ['yrsteps', 'cc_resample']
CALDIST_OPTIONS = ['deltaR', 'deltaSTD', 'is_F', 'is_pMC', 'as_F', 'yrsteps', 'cc_resample', 'cc0_res', 'threshold',
				   'normal', 't_a', 't_b', 'normalise', 'renormalise', 'bcad', 'zero', 'bombalert', 'postbomb_step']
LCALIB_OPTIONS = ['deltaR', 'deltaSTD', 'normal', 'as_F', 'is_F', 't_a', 't_b']
HPD_OPTIONS = ['prob', 'every', 'age_round', 'prob_round']


class Calibrator(object):
	"""
	A calibration curve together with the settings used to calibrate dates against it.

	Any calibration option can be overridden for a single call by passing it as a keyword argument to the method.

	:param curve: Calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])`. None = no calibration (dates are treated as normally distributed calendar ages).
	:type curve: np.ndarray

	:param postbomb: Postbomb curve in the same format, glued to the curve for dates reaching into the postbomb era.
	:type postbomb: np.ndarray

	:param cc: Identifier of the curve (see CurveId).
	:type cc: CurveId or str

	:param deltaR: Age offset, e.g. for marine samples (default is 0).
	:type deltaR: float

	:param deltaSTD: Uncertainty of the age offset (default is 0).
	:type deltaSTD: float

	:param normal: Use the normal model (default is True); False = Student-t model with parameters t_a, t_b (defaults 3 and 4).
	:type normal: bool

	:param threshold: Tails with probabilities below threshold * maximum probability are removed (default is 1e-3).
	:type threshold: float

	:param bcad: Report calendar ages in BC/AD instead of cal BP (default is False).
	:type bcad: bool

	:param bombalert: Raise PostbombRequiredError for postbomb dates without a postbomb curve (default is True).
	:type bombalert: bool

	:param prob: Probability of the hpd ranges (default is 0.95).
	:type prob: float

	:param every: Yearly precision of the hpd ranges (default is 0.1).
	:type every: float

	Further options (is_F, is_pMC, as_F, yrsteps, cc_resample, cc0_res, normalise, renormalise, zero, postbomb_step,
	age_round, prob_round) are described in `radiocalib.utils.fnc_radiocarbon.caldist` and `radiocalib.utils.fnc_stat.hpd`.
	"""

	def __init__(self, **kwargs):

		self._data = self._defaults()

		# Check arguments
		for key in kwargs:
			if key not in self._data:
				raise DomainError("Invalid argument: %s" % key)
		self._data.update(self._checked(kwargs))

	def _defaults(self) -> Dict[str, Any]:
		return dict(
			curve=None,
			postbomb=None,
			cc=None,
			deltaR=0,
			deltaSTD=0,
			is_F=False,
			is_pMC=False,
			as_F=False,
			yrsteps=None,
			cc_resample=None,
			cc0_res=5000,
			threshold=1e-3,
			normal=True,
			t_a=3,
			t_b=4,
			normalise=True,
			renormalise=True,
			bcad=False,
			zero=True,
			bombalert=True,
			postbomb_step=0.05,
			prob=0.95,
			every=0.1,
			age_round=0,
			prob_round=1,
		)

	def _checked(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
		kwargs = dict(kwargs)
		for key, value in kwargs.items():
			if key in FLAGS:
				if not isinstance(value, (bool, np.bool_)):
					raise DomainError("Invalid argument type for %s: %s (bool expected)" % (key, type(value).__name__))
				kwargs[key] = bool(value)
			elif (key in NUMBERS) or ((key in OPTIONAL_NUMBERS) and (value is not None)):
				if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
					raise DomainError("Invalid argument type for %s: %s (number expected)" % (key, type(value).__name__))
		if kwargs.get('curve') is not None:
			kwargs['curve'] = check_curve(kwargs['curve'])
		if kwargs.get('postbomb') is not None:
			kwargs['postbomb'] = check_curve(kwargs['postbomb'])
		if kwargs.get('cc') is not None:
			kwargs['cc'] = CurveId.from_name(kwargs['cc'])
		if kwargs.get('is_F') and kwargs.get('is_pMC'):
			raise DomainError("Cannot have both is_F=True and is_pMC=True")
		return kwargs

	def _options(self, names: list, overrides: Dict[str, Any], extra: list = ()) -> Dict[str, Any]:
		# names are taken from the settings, extra keys are passed through only when given
		for key in overrides:
			if (key not in names) and (key not in extra):
				raise DomainError("Invalid argument: %s" % key)
		options = dict([(name, self._data[name]) for name in names])
		options.update(self._checked(overrides))
		return options

	@classmethod
	def from_curve_id(cls, cc: CurveId or str = CurveId.INTCAL20, cc_dir: str = "curves", postbomb: CurveId or str = None,
					  resample: float = None, download: bool = False, **kwargs) -> 'Calibrator':
		"""
		Create a Calibrator with a curve loaded from a curve directory (see `radiocalib.utils.fnc_load.get_curve`).

		If a postbomb curve is specified, it is loaded as the postbomb curve of the calibrator and glued to the
		curve during calibration.
		"""
		curve = get_curve(cc, cc_dir, resample=resample, download=download)
		if postbomb is not None:
			postbomb = get_postbomb_curve(postbomb, cc_dir)
		return cls(curve=curve, postbomb=postbomb, cc=cc, **kwargs)

	# Properties

	@property
	def curve(self) -> np.ndarray or None:
		"""
		The calibration curve in format `np.array([[calendar year BP, C-14 year, uncertainty], ...])` or None if no curve is used.
		"""
		if self._data['curve'] is None:
			return None
		return self._data['curve'].copy()

	@property
	def postbomb(self) -> np.ndarray or None:
		if self._data['postbomb'] is None:
			return None
		return self._data['postbomb'].copy()

	@property
	def cc(self) -> CurveId or None:
		return self._data['cc']

	@property
	def options(self) -> Dict[str, Any]:
		"""
		The calibration options (all settings except the curves).
		"""
		return dict([(key, val) for key, val in self._data.items() if key not in ['curve', 'postbomb', 'cc']])

	# Methods

	def update(self, **kwargs) -> None:
		"""
		Change the settings of the calibrator.
		"""
		for key in kwargs:
			if key not in self._data:
				raise DomainError("Invalid argument: %s" % key)
		self._data.update(self._checked(kwargs))

	def smoothed(self, smooth: float = 30) -> 'Calibrator':
		"""
		Returns a copy of the calibrator with its curve smoothed over a window of `smooth` calendar years.
		"""
		if self._data['curve'] is None:
			raise DomainError("No calibration curve to smooth")
		data = dict(self._data)
		data['curve'] = smooth_curve(self._data['curve'], smooth)
		return Calibrator(**data)

	def caldist(self, y: float, er: float, **kwargs) -> Density:
		"""
		Calculate the calibrated distribution of a date (see `radiocalib.utils.fnc_radiocarbon.caldist`).
		"""
		options = self._options(CALDIST_OPTIONS, kwargs)
		return caldist(y, er, self._data['curve'], postbomb=self._data['postbomb'], cc=self._data['cc'], **options)

	def l_calib(self, x, y, er, **kwargs) -> np.ndarray:
		"""
		Calibrated probability of calendar age(s) BP for a date (see `radiocalib.utils.fnc_radiocarbon.l_calib`).
		"""
		options = self._options(LCALIB_OPTIONS, kwargs)
		return l_calib(x, y, er, self._data['curve'], **options)

	def r_calib(self, n: int, y: float, er: float, seed: int = None, **kwargs) -> np.ndarray:
		kwargs.setdefault('threshold', 0)
		options = self._options(CALDIST_OPTIONS, kwargs)
		return r_calib(n, y, er, self._data['curve'], seed=seed, postbomb=self._data['postbomb'], cc=self._data['cc'], **options)

	def younger(self, x, y: float, er: float, **kwargs) -> np.ndarray:
		"""
		Probability that a date is of calendar age x or younger (x in BC/AD if the calibrator uses bcad).
		"""
		kwargs.setdefault('threshold', 0)
		options = self._options(CALDIST_OPTIONS, kwargs)
		return younger(x, y, er, self._data['curve'], postbomb=self._data['postbomb'], cc=self._data['cc'], **options)

	def older(self, x, y: float, er: float, **kwargs) -> np.ndarray:
		kwargs.setdefault('threshold', 0)
		options = self._options(CALDIST_OPTIONS, kwargs)
		return older(x, y, er, self._data['curve'], postbomb=self._data['postbomb'], cc=self._data['cc'], **options)

	def p_range(self, x1: float, x2: float, y: float, er: float, **kwargs) -> float:
		kwargs.setdefault('threshold', 0)
		options = self._options(CALDIST_OPTIONS, kwargs)
		return p_range(x1, x2, y, er, self._data['curve'], postbomb=self._data['postbomb'], cc=self._data['cc'], **options)

	def hpd(self, calib: Density or np.ndarray, **kwargs) -> np.ndarray:
		"""
		Highest posterior density ranges of a distribution (see `radiocalib.utils.fnc_stat.hpd`).
		"""
		options = self._options(HPD_OPTIONS, kwargs, extra=['bins', 'bcad', 'ka', 'return_raw'])
		return hpd(calib, **options)

	def point_estimates(self, calib: Density or np.ndarray, **kwargs) -> Dict[str, float]:
		kwargs.setdefault('prob', self._data['prob'])
		return point_estimates(calib, **kwargs)

	def calBPtoC14(self, cal_bp, rule: int = 1) -> (np.ndarray, np.ndarray):
		if self._data['curve'] is None:
			raise DomainError("No calibration curve available")
		return calBPtoC14(cal_bp, self._data['curve'], rule)

	def C14tocalBP(self, age: float) -> np.ndarray:
		if self._data['curve'] is None:
			raise DomainError("No calibration curve available")
		return C14tocalBP(age, self._data['curve'])

	def __repr__(self) -> str:
		curve = "none" if self._data['curve'] is None else "%d rows" % (self._data['curve'].shape[0])
		cc = None if self.cc is None else self.cc.value
		return f"<Calibrator cc={cc}, curve={curve}, postbomb={self._data['postbomb'] is not None}, normal={self._data['normal']}, bcad={self._data['bcad']}>"
