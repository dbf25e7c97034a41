import logging
import os

import numpy as np
import requests
from tqdm import tqdm

from radiocalib.utils.fnc_curve import (CurveId, check_curve, glue_curves, resample_curve)
from radiocalib.utils.fnc_errors import (DomainError)

logger = logging.getLogger(__name__)

CURVE_FILES = {
	CurveId.INTCAL20: "intcal20.14c",
	CurveId.MARINE20: "marine20.14c",
	CurveId.SHCAL20: "shcal20.14c",
	CurveId.NH1: "postbomb_NH1.14C",
	CurveId.NH2: "postbomb_NH2.14C",
	CurveId.NH3: "postbomb_NH3.14C",
	CurveId.SH1_2: "postbomb_SH1-2.14C",
	CurveId.SH3: "postbomb_SH3.14C",
}

CURVE_URL = "https://intcal.org/curves/"


def load_curve(fcurve: str) -> np.ndarray:
	"""
	Load a calibration curve from a file.

	Values on each line are separated by commas or whitespace; empty lines and lines starting with "#" are skipped.
	Only the first three columns (calendar year BP, C-14 year, uncertainty) are used.

	Parameters:
	fcurve (str): Path to the curve file, e.g. 'curves/intcal20.14c'.

	Returns:
	np.ndarray: A 2D array containing the calibration curve data, sorted by calendar age. Each row represents a calendar year BP, C-14 year, and uncertainty.
	"""
	if not os.path.isfile(fcurve):
		raise ValueError("Calibration curve %s not found" % (fcurve))

	with open(fcurve, "r", encoding="latin1") as f:
		data = f.read()
	data = data.split("\n")
	cal_curve = []
	for line in data:
		line = line.strip()
		if not line:
			continue
		if line.startswith("#"):
			continue
		values = line.replace(",", " ").split()
		if len(values) < 3:
			raise ValueError("Incorrect curve format in line: %s" % (line))
		try:
			cal_curve.append([np.float64(value) for value in values[:3]])
		except ValueError:
			raise ValueError("Incorrect curve format in line: %s" % (line))
	cal_curve = np.array(cal_curve, dtype=np.float64).reshape(-1, 3)
	cal_curve = cal_curve[np.argsort(cal_curve[:, 0])]

	return check_curve(cal_curve)


def download_curve(cc: CurveId or str, cc_dir: str = "curves", url: str = None) -> str or None:
	"""
	Download a calibration curve file.

	Parameters:
	cc (CurveId or str): The curve to download.
	cc_dir (str): Directory to store the curve in. Created if it does not exist. Default is "curves".
	url (str, optional): The URL to download from. Defaults to the IntCal website for the IntCal20 family of curves.
		Postbomb curves have no default URL.

	Returns:
	str or None: Path to the downloaded file, or None if the download failed.
	"""
	cc = CurveId.from_name(cc)
	if url is None:
		if cc.is_postbomb:
			raise DomainError("No download location known for postbomb curve %s; please provide a url" % (cc.value))
		url = CURVE_URL + CURVE_FILES[cc]

	logger.info("Downloading %s from %s", cc.value, url)

	try:
		response = requests.get(url, stream=True, timeout=60)
		response.raise_for_status()
	except requests.exceptions.RequestException as e:
		logger.error("Unable to download %s: %s", url, e)
		return None

	os.makedirs(cc_dir, exist_ok=True)
	fcurve = os.path.join(cc_dir, CURVE_FILES[cc])
	total_size_in_bytes = int(response.headers.get('content-length', 0))
	progress_bar = tqdm(total=total_size_in_bytes, unit='iB', unit_scale=True)

	complete = False
	try:
		with open(fcurve, 'wb') as f:
			for chunk in response.iter_content(chunk_size=8192):
				progress_bar.update(len(chunk))
				f.write(chunk)
		complete = True
	except requests.exceptions.RequestException as e:
		logger.error("Download of %s interrupted: %s", url, e)
		return None
	finally:
		progress_bar.close()
		# never leave a partially written curve file behind
		if (not complete) and os.path.isfile(fcurve):
			os.remove(fcurve)

	return fcurve


def get_curve(cc: CurveId or str = CurveId.INTCAL20, cc_dir: str = "curves", postbomb: CurveId or str = None,
			  resample: float = None, download: bool = False) -> np.ndarray:
	"""
	Load a calibration curve by its identifier.

	Parameters:
	cc (CurveId or str): The curve to load. Default is IntCal20.
	cc_dir (str): Directory with the curve files. Default is "curves".
	postbomb (CurveId or str, optional): Postbomb curve to glue to the young end of the curve.
	resample (float, optional): Resample the curve to constant calendar age steps of this size.
	download (bool): Download missing curve files. Default is False.

	Returns:
	np.ndarray: A 2D array containing the calibration curve data. Each row represents a calendar year BP, C-14 year, and uncertainty.
	"""
	cc = CurveId.from_name(cc)
	fcurve = os.path.join(cc_dir, CURVE_FILES[cc])
	if download and not os.path.isfile(fcurve):
		download_curve(cc, cc_dir)
	curve = load_curve(fcurve)
	if postbomb is not None:
		curve = glue_curves(curve, get_postbomb_curve(postbomb, cc_dir))
	if resample:
		curve = resample_curve(curve, resample)
	return curve


def get_postbomb_curve(postbomb: CurveId or str, cc_dir: str = "curves") -> np.ndarray:
	"""
	Load a postbomb curve by its identifier, without gluing it to a calibration curve.
	"""
	postbomb = CurveId.from_name(postbomb)
	if not postbomb.is_postbomb:
		raise DomainError("%s is not a postbomb curve" % (postbomb.value))
	return load_curve(os.path.join(cc_dir, CURVE_FILES[postbomb]))
