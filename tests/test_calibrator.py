import numpy as np
import pytest

from radiocalib import Calibrator, CurveId, Density, DomainError, CurveRangeError
from radiocalib.utils.fnc_load import (CURVE_FILES)
from radiocalib.utils.fnc_radiocarbon import (caldist)
from radiocalib.utils.fnc_stat import (calc_mean)


def test_calibrator_arguments(straight_curve):
	with pytest.raises(DomainError):
		Calibrator(curve=straight_curve, curve_name="intcal20")
	with pytest.raises(DomainError):
		Calibrator(curve=straight_curve, bcad="yes")
	with pytest.raises(DomainError):
		Calibrator(curve=straight_curve, threshold="0.1")
	with pytest.raises(DomainError):
		Calibrator(curve=np.zeros((5, 2)))
	with pytest.raises(DomainError):
		Calibrator(cc="unknown")
	calibrator = Calibrator(curve=straight_curve, cc="intcal20", yrsteps=None)
	assert calibrator.cc is CurveId.INTCAL20
	assert calibrator.options["threshold"] == 1e-3
	assert "curve" not in calibrator.options


def test_calibrator_caldist(straight_curve):
	calibrator = Calibrator(curve=straight_curve)
	calib = calibrator.caldist(2450, 30)
	assert np.array_equal(calib.p, caldist(2450, 30, straight_curve).p)
	calib = calibrator.caldist(2450, 30, bcad=True)
	assert calib.bcad
	assert calc_mean(calib.x, calib.p) == pytest.approx(-500, abs=1)
	with pytest.raises(DomainError):
		calibrator.caldist(2450, 30, prob=0.68)
	with pytest.raises(DomainError):
		calibrator.l_calib(2450, 2450, 30, bcad=True)
	with pytest.raises(DomainError):
		calibrator.caldist(2450, 30, bcda=True)


def test_calibrator_settings(straight_curve):
	calibrator = Calibrator(curve=straight_curve, deltaR=100, bcad=True)
	calib = calibrator.caldist(2550, 30)
	assert calc_mean(calib.x, calib.p) == pytest.approx(-500, abs=1)
	calibrator.update(bcad=False)
	calib = calibrator.caldist(2550, 30)
	assert calc_mean(calib.x, calib.p) == pytest.approx(2450, abs=1)
	with pytest.raises(DomainError):
		calibrator.update(unknown=1)


def test_calibrator_queries(straight_curve):
	calibrator = Calibrator(curve=straight_curve)
	assert calibrator.younger(2450, 2450, 30)[0] == pytest.approx(0.5, abs=0.05)
	assert calibrator.older(3000, 2450, 30)[0] == pytest.approx(0, abs=1e-6)
	assert calibrator.p_range(2300, 2600, 2450, 30) == pytest.approx(1, abs=1e-3)
	assert calibrator.r_calib(10, 2450, 30, seed=5).shape == (10,)
	probs = calibrator.l_calib([2450, 20000], 2450, 30)
	assert probs[0] > 0
	assert probs[1] == 0
	mu, sigma = calibrator.calBPtoC14(1000)
	assert mu[0] == 1000
	with pytest.raises(CurveRangeError):
		calibrator.calBPtoC14(-10)
	assert np.allclose(calibrator.C14tocalBP(1000), [1000])


def test_calibrator_summaries(straight_curve):
	calibrator = Calibrator(curve=straight_curve, prob=0.68)
	calib = calibrator.caldist(2450, 30)
	ranges = calibrator.hpd(calib)
	assert ranges[0, 2] == pytest.approx(68, abs=1)
	assert calibrator.hpd(calib, prob=0.95)[0, 2] == pytest.approx(95, abs=1)
	ranges, raw = calibrator.hpd(calib, ka=False, return_raw=True)
	assert raw.shape[1] == 3
	with pytest.raises(DomainError):
		calibrator.hpd(calib, threshold=0)
	estimates = calibrator.point_estimates(calib)
	assert estimates["median"] == pytest.approx(2450, abs=3)


def test_calibrator_smoothed(wiggly_curve):
	calibrator = Calibrator(curve=wiggly_curve, normal=False)
	smoothed = calibrator.smoothed(100)
	assert smoothed.options["normal"] is False
	assert np.abs(smoothed.curve[200:-200, 1] - wiggly_curve[200:-200, 0]).max() < 2
	assert np.array_equal(calibrator.curve, wiggly_curve)
	with pytest.raises(DomainError):
		Calibrator().smoothed()


def test_calibrator_without_curve():
	calibrator = Calibrator()
	calib = calibrator.caldist(1000, 50)
	assert isinstance(calib, Density)
	assert calibrator.curve is None
	with pytest.raises(DomainError):
		calibrator.calBPtoC14(1000)


def test_calibrator_postbomb(wiggly_curve, postbomb_curve):
	calibrator = Calibrator(curve=wiggly_curve, postbomb=postbomb_curve)
	calib = calibrator.caldist(50, 20)
	assert np.allclose(np.diff(calib.x), 0.05)
	assert "postbomb=True" in repr(calibrator)


def test_calibrator_from_curve_id(tmp_path, straight_curve, postbomb_curve):
	np.savetxt(tmp_path / CURVE_FILES[CurveId.INTCAL20], straight_curve, delimiter=",")
	np.savetxt(tmp_path / CURVE_FILES[CurveId.NH1], postbomb_curve)
	calibrator = Calibrator.from_curve_id("IntCal20", str(tmp_path), threshold=1e-4)
	assert calibrator.cc is CurveId.INTCAL20
	assert calibrator.options["threshold"] == 1e-4
	assert np.array_equal(calibrator.curve, straight_curve)
	calibrator = Calibrator.from_curve_id("IntCal20", str(tmp_path), postbomb="nh1")
	assert calibrator.cc is CurveId.INTCAL20
	assert np.array_equal(calibrator.curve, straight_curve)
	assert calibrator.postbomb[0, 0] == -60
	calib = calibrator.caldist(50, 20)
	assert isinstance(calib, Density)
	# dates calibrated with a postbomb curve are regridded to 0.05 yr steps
	assert np.allclose(np.diff(calib.x), 0.05)
