# isotope.py
"""
Isotope configurations and the movable isotope instances built from them.

This module defines IsotopeConfig, the immutable proton/neutron pair that
identifies an isotope, and IsotopeInstance, a single atom that can be
moved around and placed in the test chamber or a bucket.
"""
import itertools
import weakref
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np

from atomic_data import DEFAULT_TABLE, IsotopeTable
from constants import DEFAULT_PROTON_COUNT, LARGE_ISOTOPE_RADIUS

# --- Data Contracts ---
#
# class IsotopeConfig:
#   - Frozen value object. Two configs are equal when both counts match.
#   - get_atomic_mass(table=DEFAULT_TABLE) -> float
#
# class IsotopeInstance:
#   - __init__(self, config: IsotopeConfig, position, radius: float):
#     - Inputs:
#       - config: Immutable for the lifetime of the instance.
#       - position: Any 2-sequence; stored as a float64 array of shape (2,).
#       - radius: float
#     - Invariants:
#       - instance_id is unique and strictly increasing across instances.
#       - container is either None or the single object currently holding
#         the instance. The reference is weak; the instance never keeps its
#         container alive.

@dataclass(frozen=True)
class IsotopeConfig:
    proton_count: int
    neutron_count: int

    @property
    def mass_number(self) -> int:
        return self.proton_count + self.neutron_count

    def get_atomic_mass(self, table: IsotopeTable = DEFAULT_TABLE) -> float:
        return table.get_atomic_mass(self.proton_count, self.neutron_count)

    def __str__(self) -> str:
        return f"protons: {self.proton_count}, neutrons: {self.neutron_count}"


# The element shown when the controller starts or is reset. Frozen, so it
# is safe to share.
DEFAULT_PROTOTYPE_ISOTOPE = IsotopeConfig(DEFAULT_PROTON_COUNT, 0)

_instance_ids = itertools.count()


class IsotopeInstance:
    """
    A single atom of a given isotope with a position in model space.
    """
    def __init__(self, config: IsotopeConfig, position: Sequence[float], radius: float = LARGE_ISOTOPE_RADIUS):
        self.config = config
        self.radius = float(radius)
        self.instance_id = next(_instance_ids)
        self.position = np.array(position, dtype=np.float64)
        self.destination = self.position.copy()
        self.user_controlled = False
        self._container_ref: Optional[weakref.ref] = None

    @property
    def container(self) -> Optional[Any]:
        if self._container_ref is None:
            return None
        return self._container_ref()

    @container.setter
    def container(self, value: Optional[Any]) -> None:
        self._container_ref = None if value is None else weakref.ref(value)

    def set_position_and_destination(self, position: Sequence[float]) -> None:
        self.position = np.array(position, dtype=np.float64)
        self.destination = self.position.copy()

    def __repr__(self) -> str:
        return (
            f"IsotopeInstance(id={self.instance_id}, {self.config}, "
            f"position=({self.position[0]:.1f}, {self.position[1]:.1f}))"
        )


def make_isotope_instance(
    proton_count: int,
    neutron_count: int,
    position: Sequence[float],
    radius: float = LARGE_ISOTOPE_RADIUS
) -> IsotopeInstance:
    """Default particle factory used by the mixture controller."""
    return IsotopeInstance(IsotopeConfig(proton_count, neutron_count), position, radius)
