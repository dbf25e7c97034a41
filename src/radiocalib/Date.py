import copy

import numpy as np

from radiocalib.Calibrator import Calibrator
from radiocalib.Density import Density
from radiocalib.utils.fnc_data import (dict_np_to_list, dict_list_to_np)
from radiocalib.utils.fnc_errors import (DomainError)
from radiocalib.utils.fnc_stat import (calc_mean_std, hpd, point_estimates)

REALMS = ['C14', 'F14C', 'pMC']


class Date(object):
	"""
	A class representing a single radiocarbon measurement.

	The constructor accepts a single dictionary argument or multiple arguments to initialize the object with the provided data.

	Parameters:
	:param name: Sample ID (required)
	:type name: str

	:param age: Measured value: C-14 age (years BP), F14C or pMC, depending on realm (required)
	:type age: float

	:param uncertainty: Lab error (one sigma) in the units of age (required)
	:type uncertainty: float

	:param realm: 'C14' for radiocarbon age (default), 'F14C' for fraction modern, 'pMC' for percent modern carbon
	:type realm: str, optional

	:param delta_r: Reservoir age offset (default is 0)
	:type delta_r: float, optional

	:param delta_std: Uncertainty of the reservoir age offset (default is 0)
	:type delta_std: float, optional
	"""

	def __init__(self, *args, **kwargs):

		def _from_arguments(name: str, age: float, uncertainty: float,
							realm: str = 'C14',
							delta_r: float = 0,
							delta_std: float = 0,
							) -> None:

			if realm not in REALMS:
				raise DomainError("Invalid realm specified: %s (must be one of %s)" % (realm, ", ".join(REALMS)))
			if uncertainty < 0:
				raise DomainError("Uncertainty cannot be negative")

			self._data = dict(
				name=name,
				age=float(age),
				uncertainty=float(uncertainty),
				realm=realm,
				delta_r=float(delta_r),
				delta_std=float(delta_std),

				density=None,
				ranges=None,
				prob=None,
			)

		self._data = {}
		if len(args) == 1 and isinstance(args[0], dict):
			self.from_dict(args[0])
		else:
			_from_arguments(*args, **kwargs)

	# Assigned properties

	@property
	def name(self) -> str or None:
		return self._data['name']

	@property
	def age(self) -> float or None:
		"""
		Measured value in the units given by `realm`.
		"""
		return self._data['age']

	@property
	def uncertainty(self) -> float or None:
		return self._data['uncertainty']

	@property
	def realm(self) -> str or None:
		"""
		Realm of the measured value: 'C14', 'F14C' or 'pMC'.
		"""
		return self._data['realm']

	@property
	def delta_r(self) -> float:
		return self._data['delta_r']

	@property
	def delta_std(self) -> float:
		return self._data['delta_std']

	# Calculated properties

	@property
	def density(self) -> Density or None:
		"""
		Gets the calibrated distribution of the date.

		:return: The calibrated distribution or None if the date has not been calibrated.
		:rtype: Density or None
		"""
		if self._data['density'] is None:
			return None
		return self._data['density'].copy()

	@property
	def ranges(self) -> np.ndarray or None:
		"""
		Gets the hpd ranges of the calibrated distribution in format `np.array([[from, to, percentage], ...])`.

		The probability covered by the ranges is given by `prob`.
		"""
		if self._data['ranges'] is None:
			return None
		return self._data['ranges'].copy()

	@property
	def prob(self) -> float or None:
		return self._data['prob']

	@property
	def is_calibrated(self) -> bool:
		return self._data['density'] is not None

	@property
	def mean(self) -> float or None:
		"""
		Weighted mean of the calibrated distribution, or None if the date has not been calibrated.
		"""
		if not self.is_calibrated:
			return None
		density = self._data['density']
		return calc_mean_std(density.x, density.p)[0]

	@property
	def std(self) -> float or None:
		if not self.is_calibrated:
			return None
		density = self._data['density']
		return calc_mean_std(density.x, density.p)[1]

	@property
	def median(self) -> float or None:
		if not self.is_calibrated:
			return None
		return point_estimates(self._data['density'], wmean=False, mode=False, midpoint=False)["median"]

	@property
	def mode(self) -> float or None:
		if not self.is_calibrated:
			return None
		return point_estimates(self._data['density'], wmean=False, median=False, midpoint=False)["mode"]

	# Methods

	def calibrate(self, calibrator: Calibrator, **kwargs) -> None:
		"""
		Calibrates the date using the provided calibrator and calculates its hpd ranges.

		:param calibrator: Calibration curve and settings to be used.
		:type calibrator: Calibrator
		:param kwargs: Calibration options overriding the settings of the calibrator for this date.
		:raises DomainError: If no calibrator is provided.
		"""
		if calibrator is None:
			raise DomainError("Calibrator not provided")
		options = dict(
			is_F=(self.realm == 'F14C'),
			is_pMC=(self.realm == 'pMC'),
		)
		# the reservoir offset of the date takes precedence over the one of the calibrator
		if self.delta_r or self.delta_std:
			options.update(deltaR=self.delta_r, deltaSTD=self.delta_std)
		options.update(kwargs)
		density = calibrator.caldist(self.age, self.uncertainty, **options)
		self._data['density'] = density
		self._data['prob'] = calibrator.options['prob']
		self._data['ranges'] = calibrator.hpd(density)

	def set_density(self, density: Density, prob: float = 0.95) -> None:
		"""
		Sets the calibrated distribution of the date, e.g. calculated elsewhere, and updates its hpd ranges.
		"""
		if not isinstance(density, Density):
			raise DomainError("Density expected")
		self._data['density'] = density.copy()
		self._data['prob'] = prob
		self._data['ranges'] = hpd(density, prob)

	def to_dict(self) -> dict:
		"""
		Converts the date data to a dictionary.

		Numpy arrays are converted to lists for JSON serialization.
		"""
		data = copy.deepcopy(self._data)
		if data['density'] is not None:
			data['density'] = data['density'].to_dict()
		return dict_np_to_list(data)

	def from_dict(self, data: dict) -> None:
		self._data = dict(
			name=None,
			age=None,
			uncertainty=None,
			realm='C14',
			delta_r=0.0,
			delta_std=0.0,

			density=None,
			ranges=None,
			prob=None,
		)
		self._data.update(copy.deepcopy(data))
		if self._data['density'] is not None:
			self._data['density'] = Density(self._data['density'])
		self._data = dict_list_to_np(self._data, ['ranges'])
		if self._data['ranges'] is not None:
			self._data['ranges'] = self._data['ranges'].reshape(-1, 3)

	def copy(self) -> 'Date':
		return Date(self.to_dict())

	def __repr__(self) -> str:
		repr_str = f"<Date '{self.name}': age={self.age}, uncertainty={self.uncertainty}, realm={self.realm}, delta_r={self.delta_r}, delta_std={self.delta_std}"
		if self.is_calibrated:
			repr_str += f", ranges={self.ranges.tolist()}, mean={self.mean}"
		repr_str += ">"
		return repr_str
