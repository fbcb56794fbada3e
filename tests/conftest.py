"""Shared fixtures for the stockcut test suite."""

import os
import sys

import numpy as np
import pytest

# Allow running the suite from a source checkout without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from stockcut.core.config import OptimizerConfig
from stockcut.core.models import PieceCatalog


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def small_config():
    """Fast search settings for end-to-end tests."""
    return OptimizerConfig(population_size=20, epochs=40)


@pytest.fixture
def mixed_catalog():
    """Twelve pieces of assorted lengths (working units)."""
    return PieceCatalog([40, 40, 170, 145, 45, 20, 30, 40, 50, 60, 10, 90])


@pytest.fixture
def mixed_stock():
    return [170, 96, 120, 90, 80]
