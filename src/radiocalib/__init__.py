version_info = (0, 9, 0)

__version__ = '.'.join(map(str, version_info))
__title__ = 'RadioCalib'
__date__ = "18.10.2026"

from radiocalib.Calibrator import Calibrator
from radiocalib.Date import Date
from radiocalib.Density import Density
from radiocalib.utils.fnc_curve import CurveId
from radiocalib.utils.fnc_errors import (RadioCalibError, DomainError, CurveRangeError, PostbombRequiredError,
										 DegenerateDistributionError)
