import numpy as np
import pytest


@pytest.fixture
def straight_curve():
	# C-14 age equals calendar age, no curve uncertainty, rows every 5 years
	cal_bp = np.arange(0, 10001, 5, dtype=np.float64)
	return np.vstack((cal_bp, cal_bp, np.zeros(cal_bp.shape[0]))).T


@pytest.fixture
def wiggly_curve():
	# rises on average but folds back every 100 years, so one C-14 age is crossed several times
	cal_bp = np.arange(0, 3001, 1, dtype=np.float64)
	c14 = cal_bp + 80 * np.sin(2 * np.pi * cal_bp / 100)
	return np.vstack((cal_bp, c14, np.full(cal_bp.shape[0], 5.0))).T


@pytest.fixture
def postbomb_curve():
	cal_bp = np.arange(-60, 0, 1, dtype=np.float64)
	return np.vstack((cal_bp, 8 * cal_bp, np.full(cal_bp.shape[0], 5.0))).T


@pytest.fixture
def normal_density():
	from scipy.stats import norm
	from radiocalib.Density import Density

	x = np.arange(0, 2001, 1, dtype=np.float64)
	return Density(x, norm.pdf(x, 1000, 50))


@pytest.fixture
def bimodal_density():
	from scipy.stats import norm
	from radiocalib.Density import Density

	x = np.arange(0, 2001, 1, dtype=np.float64)
	p = norm.pdf(x, 500, 50) + norm.pdf(x, 1500, 50)
	return Density(x, p / p.sum())
