# bucket.py
"""
Buckets that hold isotopes outside the test chamber.

A MonoIsotopeBucket holds any number of atoms of a single isotope, up to
the number of slots that fit above its opening. The atoms are stacked in
rows, each row one slot narrower than the row below it.
"""
import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from atomic_data import DEFAULT_TABLE, IsotopeTable
from constants import BUCKET_WIDTH, BUCKET_HEIGHT, LARGE_ISOTOPE_RADIUS
from isotope import IsotopeConfig, IsotopeInstance

# --- Data Contracts ---
#
# class MonoIsotopeBucket:
#   - __init__(self, config, position, size=(BUCKET_WIDTH, BUCKET_HEIGHT),
#              sphere_radius=LARGE_ISOTOPE_RADIUS, table=DEFAULT_TABLE):
#     - Inputs:
#       - config: The only isotope this bucket accepts.
#       - position: Centre of the bucket opening.
#     - Invariants:
#       - capacity == number of slots; each slot holds at most one atom.
#       - every held atom's container is this bucket.

class MonoIsotopeBucket:
    """
    An ordered, capacity-bounded holder for atoms of one isotope.
    """
    def __init__(
        self,
        config: IsotopeConfig,
        position: Sequence[float],
        size: Tuple[float, float] = (BUCKET_WIDTH, BUCKET_HEIGHT),
        sphere_radius: float = LARGE_ISOTOPE_RADIUS,
        table: IsotopeTable = DEFAULT_TABLE
    ):
        self.config = config
        self.position = np.array(position, dtype=np.float64)
        self.size = size
        self.sphere_radius = float(sphere_radius)
        self.caption = f"{table.get_element_name(config.proton_count)}-{config.mass_number}"
        self._slot_positions = self._layout_slots()
        self._slots: List[Optional[IsotopeInstance]] = [None] * len(self._slot_positions)

    def _layout_slots(self) -> List[np.ndarray]:
        diameter = 2 * self.sphere_radius
        per_row = max(int(self.size[0] // diameter), 1)
        row_height = self.sphere_radius * math.sqrt(3)
        slots = []
        for row in range(per_row):
            count = per_row - row
            left = self.position[0] - (count - 1) * self.sphere_radius
            y = self.position[1] + self.sphere_radius + row * row_height
            for column in range(count):
                slots.append(np.array([left + column * diameter, y]))
        return slots

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def particles(self) -> Tuple[IsotopeInstance, ...]:
        return tuple(isotope for isotope in self._slots if isotope is not None)

    def includes(self, isotope: IsotopeInstance) -> bool:
        return any(held is isotope for held in self._slots)

    def is_isotope_allowed(self, config: IsotopeConfig) -> bool:
        return config == self.config

    def _open_slots(self) -> List[int]:
        return [index for index, held in enumerate(self._slots) if held is None]

    def _place(self, isotope: IsotopeInstance, slot: int, move_immediately: bool) -> None:
        self._slots[slot] = isotope
        isotope.container = self
        if move_immediately:
            isotope.set_position_and_destination(self._slot_positions[slot])
        else:
            isotope.destination = self._slot_positions[slot].copy()

    def _check_can_add(self, isotope: IsotopeInstance) -> List[int]:
        if not self.is_isotope_allowed(isotope.config):
            raise ValueError(f"Bucket {self.caption} does not accept {isotope!r}.")
        open_slots = self._open_slots()
        if not open_slots:
            msg = f"Bucket {self.caption} is full ({self.capacity} atoms)."
            logging.error(msg)
            raise ValueError(msg)
        return open_slots

    def add_particle_first_open(self, isotope: IsotopeInstance, move_immediately: bool = True) -> None:
        open_slots = self._check_can_add(isotope)
        self._place(isotope, open_slots[0], move_immediately)

    def add_particle_nearest_open(self, isotope: IsotopeInstance, move_immediately: bool = True) -> None:
        open_slots = self._check_can_add(isotope)
        nearest = min(
            open_slots,
            key=lambda slot: np.linalg.norm(self._slot_positions[slot] - isotope.position)
        )
        self._place(isotope, nearest, move_immediately)

    def remove_particle(self, isotope: IsotopeInstance) -> None:
        for index, held in enumerate(self._slots):
            if held is isotope:
                self._slots[index] = None
                isotope.container = None
                return
        raise ValueError(f"{isotope!r} is not in bucket {self.caption}.")

    def reset(self) -> None:
        """Empties the bucket, releasing every atom it held."""
        for isotope in self.particles:
            isotope.container = None
        self._slots = [None] * len(self._slot_positions)
