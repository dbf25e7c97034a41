import json

import numpy as np
import pytest

from radiocalib.Density import Density
from radiocalib.utils.fnc_errors import (DomainError)


def test_density_properties():
	density = Density([1, 2, 3], [1, 2, 1])
	assert len(density) == 3
	assert density.total == 4
	assert density.labels == ("cal BP", "prob")
	assert density.values.shape == (3, 2)
	assert density.normalised().total == pytest.approx(1)
	# properties return copies
	density.x[0] = 100
	assert density.x[0] == 1


def test_density_invalid():
	with pytest.raises(DomainError):
		Density([1, 2, 3], [1, 2])
	with pytest.raises(DomainError):
		Density([], [])
	with pytest.raises(DomainError):
		Density([1, 3, 2], [1, 1, 1])
	with pytest.raises(DomainError):
		Density([1, 2, 3], [1, -1, 1])
	with pytest.raises(DomainError):
		Density([1, 2, 3], [1, np.nan, 1])


def test_density_serialization():
	density = Density(np.array([-100.0, 0.0, 100.0]), np.array([0.25, 0.5, 0.25]), bcad=True)
	data = json.loads(json.dumps(density.to_dict()))
	restored = Density(data)
	assert restored.bcad
	assert restored.labels == ("BC/AD", "prob")
	assert np.array_equal(restored.x, density.x)
	assert np.array_equal(density.copy().p, density.p)
	assert "BC/AD" in repr(density)
