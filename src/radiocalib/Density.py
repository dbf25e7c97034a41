import copy

import numpy as np

from radiocalib.utils.fnc_data import (dict_np_to_list, dict_list_to_np)
from radiocalib.utils.fnc_errors import (DomainError)


class Density(object):
	"""
	A probability distribution over calendar ages, sampled at discrete points.

	The constructor accepts a single dictionary argument (as produced by `to_dict`) or the arguments below.

	Parameters:
	:param x: Calendar ages (cal BP or BC/AD), strictly increasing
	:type x: np.ndarray

	:param p: Probabilities of the calendar ages (>= 0)
	:type p: np.ndarray

	:param bcad: True if the calendar ages are in BC/AD, False for cal BP (default)
	:type bcad: bool, optional
	"""

	def __init__(self, *args, **kwargs):

		self._data = {}
		if len(args) == 1 and isinstance(args[0], dict):
			self.from_dict(args[0])
		else:
			self._set_data(*args, **kwargs)

	def _set_data(self, x: np.ndarray, p: np.ndarray, bcad: bool = False) -> None:

		x = np.asarray(x, dtype=np.float64)
		p = np.asarray(p, dtype=np.float64)
		if (x.ndim != 1) or (x.shape != p.shape):
			raise DomainError("Density requires two 1D arrays of equal length")
		if not x.shape[0]:
			raise DomainError("Density cannot be empty")
		if (np.diff(x) <= 0).any():
			raise DomainError("Calendar ages of a density must be strictly increasing")
		if np.isnan(p).any() or (p < 0).any():
			raise DomainError("Probabilities cannot be negative")
		self._data = dict(
			x=x,
			p=p,
			bcad=bool(bcad),
		)

	@property
	def x(self) -> np.ndarray:
		"""
		Calendar ages of the distribution (cal BP or BC/AD, see `labels`).
		"""
		return self._data['x'].copy()

	@property
	def p(self) -> np.ndarray:
		"""
		Probabilities corresponding to the calendar ages.
		"""
		return self._data['p'].copy()

	@property
	def bcad(self) -> bool:
		return self._data['bcad']

	@property
	def labels(self) -> (str, str):
		"""
		Names of the two columns: ("cal BP", "prob") or ("BC/AD", "prob").
		"""
		if self.bcad:
			return ("BC/AD", "prob")
		return ("cal BP", "prob")

	@property
	def values(self) -> np.ndarray:
		"""
		The distribution as a 2D array in format `np.array([[calendar age, probability], ...])`.
		"""
		return np.vstack((self._data['x'], self._data['p'])).T

	@property
	def total(self) -> float:
		return float(self._data['p'].sum())

	def normalised(self) -> 'Density':
		"""
		Returns a copy of the density with probabilities summing to 1.
		"""
		s = self.total
		if s <= 0:
			return self.copy()
		return Density(self._data['x'], self._data['p'] / s, self.bcad)

	def to_dict(self) -> dict:
		data = copy.deepcopy(self._data)
		return dict_np_to_list(data)

	def from_dict(self, data: dict) -> None:
		data = dict_list_to_np(dict(data), ['x', 'p'])
		self._set_data(data['x'], data['p'], data.get('bcad', False))

	def copy(self) -> 'Density':
		return Density(self.to_dict())

	def __len__(self) -> int:
		return self._data['x'].shape[0]

	def __repr__(self) -> str:
		x = self._data['x']
		return f"<Density {self.labels[0]}: {x[0]} - {x[-1]}, n={len(self)}, sum={self.total:.4f}>"
