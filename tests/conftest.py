"""Shared fixtures for the isotope mixture tests."""
import numpy as np
import pytest

from chamber import TestChamber
from isotope import IsotopeConfig, IsotopeInstance
from mixture import MixtureController

HYDROGEN_1 = IsotopeConfig(1, 0)
HYDROGEN_2 = IsotopeConfig(1, 1)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def chamber(rng):
    return TestChamber(rng=rng)


@pytest.fixture
def controller():
    return MixtureController({"seed": 7})


def make_isotope(config=HYDROGEN_1, position=(0.0, 0.0), radius=10.0):
    return IsotopeInstance(config, position, radius)


def drag_to(controller, isotope, position):
    """Simulates the user dragging an atom and releasing it at `position`."""
    controller.begin_drag(isotope)
    isotope.set_position_and_destination(position)
    controller.end_drag(isotope)
