from typing import Union

import numpy as np

from radiocalib.utils.fnc_errors import (DomainError)


def to_array(values: Union[float, list, np.ndarray], name: str = "value") -> np.ndarray:
	"""
	Convert a scalar or a sequence of numbers to a 1D float array.

	A scalar becomes an array of length 1, so all calculations can treat their inputs as vectors.

	Parameters:
	values (float, list or np.ndarray): Input value(s).
	name (str): Name of the argument, used in error messages.

	Returns:
	np.ndarray: 1D array of floats.
	"""
	try:
		values = np.atleast_1d(np.asarray(values, dtype=np.float64))
	except (TypeError, ValueError):
		raise DomainError("Invalid %s: numeric values expected" % (name))
	if values.ndim != 1:
		raise DomainError("Invalid %s: scalar or 1D sequence expected" % (name))
	return values


def to_errors(errors: Union[float, list, np.ndarray, None], name: str = "error") -> np.ndarray or None:
	"""
	Convert one-sigma uncertainties to a 1D float array and check that none is negative.

	Returns:
	np.ndarray or None: The uncertainties, or None if no uncertainties were provided.
	"""
	if errors is None:
		return None
	errors = to_array(errors, name)
	if np.isnan(errors).any() or (errors < 0).any():
		raise DomainError("Invalid %s: uncertainties cannot be negative" % (name))
	return errors


def pair_arrays(values: np.ndarray, errors: np.ndarray or None) -> (np.ndarray, np.ndarray or None):
	"""
	Broadcast paired values and errors to the same length.

	A length-1 argument is repeated to match the other one; any other length mismatch is an error.
	"""
	if errors is None:
		return values, None
	if values.shape[0] == errors.shape[0]:
		return values, errors
	if errors.shape[0] == 1:
		return values, np.repeat(errors, values.shape[0])
	if values.shape[0] == 1:
		return np.repeat(values, errors.shape[0]), errors
	raise DomainError("Values and errors must have equal lengths (%d != %d)" % (values.shape[0], errors.shape[0]))


def dict_np_to_list(data: Union[dict, list]) -> Union[dict, list]:
	"""
	Convert all numpy arrays in a dictionary or list to lists.

	This function is useful when preparing data for serialization, as numpy arrays cannot be serialized directly.
	The function works recursively, so it will convert values in any nested dictionaries or lists as well.

	Parameters:
	data: The input data. It can be a dictionary or a list.

	Returns:
	The input data with all numpy arrays converted to lists.
	"""
	if isinstance(data, dict):
		for key in list(data.keys()):
			data[key] = dict_np_to_list(data[key])
	elif isinstance(data, list):
		for i, val in enumerate(data):
			data[i] = dict_np_to_list(val)
	elif isinstance(data, np.ndarray):
		return data.tolist()
	elif isinstance(data, np.generic):
		return data.item()
	return data


def dict_list_to_np(data: dict, keys: list) -> dict:
	"""
	Convert the values stored under the given keys back to float arrays.

	Counterpart of dict_np_to_list, used when loading serialized data. Missing or None values are left untouched.
	"""
	for key in keys:
		if data.get(key) is not None:
			data[key] = np.array(data[key], dtype=np.float64)
	return data


def regular_grid(start: float, stop: float, step: float) -> np.ndarray:
	"""
	Generate values from start to stop (inclusive, if reached) in steps of constant size.

	Parameters:
	start (float): First value.
	stop (float): Upper limit.
	step (float): Step size (> 0).

	Returns:
	np.ndarray: Array of values [start, start + step, ...] not exceeding stop.
	"""
	if step <= 0:
		raise DomainError("Step size must be positive")
	n = int(np.floor((stop - start) / step + 1e-9))
	return start + step * np.arange(max(n, 0) + 1, dtype=np.float64)
