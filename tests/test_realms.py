import numpy as np
import pytest

from radiocalib.utils.fnc_errors import (DomainError, CurveRangeError)
from radiocalib.utils.fnc_realms import (
	calBPtoBCAD, BCADtocalBP, calBPtob2k, b2ktocalBP, BCADtob2k, b2ktoBCAD,
	C14toF14C, F14CtoC14, F14CtopMC, pMCtoF14C, C14topMC, pMCtoC14,
	F14CtoD14C, D14CtoF14C, C14toD14C, D14CtoC14,
	calBPtoC14, calBPtoF14C, calBPtopMC, calBPtoD14C, BCADtoC14, b2ktoC14, C14tocalBP,
)


def test_calendar_realms():
	assert calBPtoBCAD(2000)[0] == -50
	assert np.array_equal(calBPtoBCAD(np.arange(-10, 11)), np.arange(1960, 1939, -1))
	assert BCADtocalBP(-50)[0] == 2000
	assert calBPtob2k(-50)[0] == 0
	assert b2ktocalBP(5000)[0] == 4950
	assert b2ktoBCAD(5000)[0] == -3000
	assert BCADtob2k(2000)[0] == 0


def test_calendar_realms_without_year_zero():
	assert np.array_equal(calBPtoBCAD([2000, 1950, 1949], zero=False), [-51, -1, 1])
	assert np.array_equal(BCADtocalBP([-51, -1, 1], zero=False), [2000, 1950, 1949])


def test_radiocarbon_realms():
	assert C14toF14C(8000)[0] == pytest.approx(0.3693938, abs=1e-6)
	assert F14CtoC14(0.5)[0] == pytest.approx(5568.051, abs=1e-3)
	assert C14topMC(0)[0] == pytest.approx(100)
	assert pMCtoC14(50)[0] == pytest.approx(5568.051, abs=1e-3)
	assert F14CtopMC(0.25)[0] == pytest.approx(25)
	assert pMCtoF14C(25)[0] == pytest.approx(0.25)


def test_radiocarbon_errors():
	f14c, er = C14toF14C(2450, 30)
	assert er[0] == pytest.approx(f14c[0] * 30 / 8033)
	age, age_er = F14CtoC14(0.5, 0.005)
	assert age_er[0] == pytest.approx(8033 * 0.005 / 0.5)


def test_vectors_with_scalar_error():
	ages, errors = C14toF14C([1000, 2000, 3000], 20)
	assert ages.shape == errors.shape == (3,)


def test_d14c():
	d14c, er = F14CtoD14C(0.5, 0.005, t=5500)
	assert d14c[0] == pytest.approx(-27.467151, abs=1e-3)
	assert er[0] == pytest.approx(9.725328, abs=1e-3)
	assert D14CtoC14(20, 0.05, t=5500)[0][0] == pytest.approx(5185.246, abs=0.01)
	assert D14CtoF14C(F14CtoD14C(0.7, t=1000), t=1000)[0] == pytest.approx(0.7)
	assert C14toD14C(0)[0] == pytest.approx(0)


def test_d14c_with_curve(straight_curve):
	f14c = C14toF14C(2450)
	assert F14CtoD14C(f14c, t=2450, curve=straight_curve)[0] == pytest.approx(0)


def test_invalid_radiocarbon_values():
	with pytest.raises(DomainError):
		F14CtoC14(0)
	with pytest.raises(DomainError):
		F14CtoC14(-0.1)
	with pytest.raises(DomainError):
		C14toF14C(1000, -5)
	with pytest.raises(ValueError):
		pMCtoC14(-1)


def test_curve_routed_conversions(straight_curve):
	mu, sigma = calBPtoC14([1000, 2452.5], straight_curve)
	assert np.allclose(mu, [1000, 2452.5])
	assert np.allclose(sigma, 0)
	assert BCADtoC14(-50, straight_curve)[0][0] == pytest.approx(2000)
	assert b2ktoC14(5000, straight_curve)[0][0] == pytest.approx(4950)
	f14c, _ = calBPtoF14C(8000, straight_curve)
	assert f14c[0] == pytest.approx(0.3693938, abs=1e-6)
	pmc, _ = calBPtopMC(0, straight_curve)
	assert pmc[0] == pytest.approx(100)


def test_curve_d14c_follows_decay_difference(straight_curve):
	d14c, _ = calBPtoD14C(5000, straight_curve)
	expected = 1000 * (np.exp(-5000 / 8033) / np.exp(-5000 / 8267) - 1)
	assert d14c[0] == pytest.approx(expected)
	assert d14c[0] < 0


def test_curve_range(straight_curve):
	with pytest.raises(CurveRangeError):
		calBPtoC14(20000, straight_curve)
	mu, _ = calBPtoC14(20000, straight_curve, rule=2)
	assert mu[0] == 10000


def test_inverse_calibration(straight_curve, wiggly_curve):
	assert np.allclose(C14tocalBP(2450, straight_curve), [2450])
	assert C14tocalBP(130, wiggly_curve).shape[0] >= 3
	assert C14tocalBP(1e6, straight_curve).shape[0] == 0


def test_calendar_round_trip():
	cal_bp = np.concatenate((np.linspace(-100, 5000, 511), [1949.5, 1950, 1950.25, 1950.75, 1951]))
	for zero in [True, False]:
		assert np.allclose(BCADtocalBP(calBPtoBCAD(cal_bp, zero), zero), cal_bp)


def test_f14c_round_trip():
	f14c = np.concatenate((np.logspace(-4, 0.5, 200), [1.0]))
	assert np.allclose(C14toF14C(F14CtoC14(f14c)), f14c, rtol=1e-12, atol=0)
