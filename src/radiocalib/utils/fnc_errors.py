class RadioCalibError(Exception):
	"""
	Base class for all errors raised by RadioCalib.
	"""
	pass


class DomainError(RadioCalibError, ValueError):
	"""
	Invalid numeric input or an invalid combination of parameters.

	Raised e.g. for negative error terms, F14C <= 0 passed to a logarithm or a contamination fraction outside [0, 1].
	"""
	pass


class CurveRangeError(RadioCalibError, ValueError):
	"""
	A calendar age or C-14 value lies outside the support of the calibration curve (extrapolation rule 1).
	"""
	pass


class PostbombRequiredError(RadioCalibError):
	"""
	The age distribution reaches into the postbomb era but no postbomb curve was provided.

	Can be avoided by supplying a postbomb curve or by calibrating with bombalert=False.
	"""

	def __init__(self, age: float = None, uncertainty: float = None):
		self.age = age
		self.uncertainty = uncertainty
		msg = "This appears to be a postbomb age or close to being so. Please provide a postbomb curve"
		if age is not None:
			msg += " (age %s +- %s)" % (age, uncertainty)
		super().__init__(msg)


class DegenerateDistributionError(RadioCalibError):
	"""
	A probability distribution has no probability mass left.
	"""
	pass
