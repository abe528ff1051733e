# chamber.py
"""
Handles the isotope test chamber and its overlap relaxation.

This module defines the TestChamber class, a bounded rectangle into which
isotope instances are placed. The chamber keeps the count and average
atomic mass of its contents up to date, pushes overlapping atoms apart,
and can capture and restore its contents as a ChamberState.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from numba import jit

from constants import (
    CHAMBER_WIDTH, CHAMBER_HEIGHT, CHAMBER_WALL_BUFFER,
    MAX_OVERLAP_ADJUST_POPULATION, MAX_OVERLAP_ITERATIONS,
    INTER_PARTICLE_FORCE_CONST, WALL_FORCE_CONST, MIN_INTER_PARTICLE_DISTANCE
)
from atomic_data import DEFAULT_TABLE, IsotopeTable
from isotope import IsotopeConfig, IsotopeInstance

# --- Data Contracts ---
#
# class TestChamber:
#   - __init__(self, bounds=None, rng=None, table=DEFAULT_TABLE):
#     - Inputs:
#       - bounds: Fixed for the chamber's lifetime. Defaults to a
#         CHAMBER_WIDTH x CHAMBER_HEIGHT rectangle centred on the origin.
#       - rng: Source of all randomness (random positions, random push
#         directions for coincident atoms).
#       - table: Atomic data used for every mass in the statistics.
#     - Invariants (hold after every public call):
#       - count == len(contained_isotopes)
#       - average_mass == mean mass of contained isotopes, or 0 when empty.
#       - every contained isotope's container is this chamber.
#
#   - adjust_for_overlap(self) -> int:
#     - Outputs: number of relaxation iterations performed.
#     - Side Effects: moves contained isotopes.
#     - Raises ValueError when more than MAX_OVERLAP_ADJUST_POPULATION
#       isotopes are contained.

@dataclass(frozen=True)
class Bounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def centered(cls, width: float, height: float) -> "Bounds":
        return cls(-width / 2, -height / 2, width / 2, height / 2)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains_point(self, point: Sequence[float]) -> bool:
        return self.min_x <= point[0] <= self.max_x and self.min_y <= point[1] <= self.max_y

    def constrained_point(self, point: Sequence[float]) -> np.ndarray:
        """Closest point inside the bounds."""
        return np.array([
            min(max(point[0], self.min_x), self.max_x),
            min(max(point[1], self.min_y), self.max_y)
        ], dtype=np.float64)


@dataclass(frozen=True)
class ChamberState:
    """Contents of a test chamber at the moment it was captured."""
    contained_isotopes: Tuple[IsotopeInstance, ...]
    positions: Tuple[Tuple[float, float], ...]


@jit(nopython=True)
def _overlap_exists_numba(positions, radii):
    """
    Numba-jitted check for any pair of circles that overlap.
    """
    particle_count = positions.shape[0]
    for i in range(particle_count):
        for j in range(i + 1, particle_count):
            dx = positions[i, 0] - positions[j, 0]
            dy = positions[i, 1] - positions[j, 1]
            if np.sqrt(dx * dx + dy * dy) < radii[i] + radii[j]:
                return True
    return False

@jit(nopython=True)
def _calculate_forces_numba(
    positions, radii, random_angles, min_x, min_y, max_x, max_y,
    particle_force_const, wall_force_const, min_distance
):
    """
    Numba-jitted function to calculate the repulsive push on every isotope.

    Overlapping isotopes repel with a force inversely proportional to the
    squared distance between centres. Walls repel any isotope whose edge
    touches or crosses them, ten times harder, so that the walls win
    against the crowd. The result is used directly as a displacement.
    """
    particle_count = positions.shape[0]
    total_force = np.zeros_like(positions)
    max_force = particle_force_const / (min_distance * min_distance)

    for i in range(particle_count):
        x = positions[i, 0]
        y = positions[i, 1]
        radius = radii[i]

        for j in range(particle_count):
            if i == j:
                continue
            dx = x - positions[j, 0]
            dy = y - positions[j, 1]
            distance = np.sqrt(dx * dx + dy * dy)

            if distance == 0.0:
                # Sitting right on top of each other, push in a random direction.
                angle = random_angles[i, j]
                total_force[i, 0] += max_force * np.cos(angle)
                total_force[i, 1] += max_force * np.sin(angle)
            elif distance < radius + radii[j]:
                clamped = max(distance, min_distance)
                magnitude = particle_force_const / (clamped * clamped)
                total_force[i, 0] += dx / distance * magnitude
                total_force[i, 1] += dy / distance * magnitude

        # Wall distances are clamped like inter-particle ones, which also
        # covers a centre lying exactly on or beyond a wall.
        if x + radius >= max_x:
            d = max(max_x - x, min_distance)
            total_force[i, 0] -= wall_force_const / (d * d)
        elif x - radius <= min_x:
            d = max(x - min_x, min_distance)
            total_force[i, 0] += wall_force_const / (d * d)
        if y + radius >= max_y:
            d = max(max_y - y, min_distance)
            total_force[i, 1] -= wall_force_const / (d * d)
        elif y - radius <= min_y:
            d = max(y - min_y, min_distance)
            total_force[i, 1] += wall_force_const / (d * d)

    return total_force


class TestChamber:
    """
    A rectangular region holding the isotopes of the current mixture.
    """
    __test__ = False  # keep pytest from collecting this as a test class

    def __init__(
        self,
        bounds: Optional[Bounds] = None,
        rng: Optional[np.random.Generator] = None,
        table: IsotopeTable = DEFAULT_TABLE
    ):
        self.bounds = bounds if bounds is not None else Bounds.centered(CHAMBER_WIDTH, CHAMBER_HEIGHT)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.table = table
        self._contained: List[IsotopeInstance] = []
        self._count = 0
        self._average_mass = 0.0

        logging.debug(
            f"TestChamber created with bounds ({self.bounds.min_x}, {self.bounds.min_y}) - "
            f"({self.bounds.max_x}, {self.bounds.max_y})."
        )

    @property
    def count(self) -> int:
        return self._count

    @property
    def average_mass(self) -> float:
        return self._average_mass

    @property
    def contained_isotopes(self) -> Tuple[IsotopeInstance, ...]:
        return tuple(self._contained)

    def includes(self, isotope: IsotopeInstance) -> bool:
        return any(contained is isotope for contained in self._contained)

    def is_positioned_over_chamber(self, isotope: IsotopeInstance) -> bool:
        return self.bounds.contains_point(isotope.position)

    def _mass_of(self, isotope: IsotopeInstance) -> float:
        return isotope.config.get_atomic_mass(self.table)

    def add_particle(self, isotope: IsotopeInstance, perform_updates: bool = True) -> None:
        """
        Adds an isotope to the chamber.

        An isotope whose centre lies outside the chamber is moved to the
        nearest point inside it, and one whose edge sticks out past a wall
        is pushed back in, so that the whole atom ends up inside.

        An isotope still held by a bucket or another chamber is taken out
        of it first.

        Args:
            isotope (IsotopeInstance): The isotope to add.
            perform_updates (bool): Update count and average mass now. Pass
                False only when adding in bulk and recomputing afterwards.
        """
        previous = isotope.container
        if previous is not None and previous is not self:
            previous.remove_particle(isotope)

        if not self.is_positioned_over_chamber(isotope):
            # Drag and drop can release an atom just outside the chamber.
            logging.debug(f"Constraining {isotope!r} to the chamber before adding.")
            isotope.set_position_and_destination(self.bounds.constrained_point(isotope.position))

        self._contained.append(isotope)
        isotope.container = self

        x, y = isotope.position
        radius = isotope.radius
        protrusion = x + radius - self.bounds.max_x + CHAMBER_WALL_BUFFER
        if protrusion >= 0:
            x -= protrusion
        else:
            protrusion = self.bounds.min_x + CHAMBER_WALL_BUFFER - (x - radius)
            if protrusion >= 0:
                x += protrusion
        protrusion = y + radius - self.bounds.max_y + CHAMBER_WALL_BUFFER
        if protrusion >= 0:
            y -= protrusion
        else:
            protrusion = self.bounds.min_y + CHAMBER_WALL_BUFFER - (y - radius)
            if protrusion >= 0:
                y += protrusion
        if x != isotope.position[0] or y != isotope.position[1]:
            isotope.set_position_and_destination((x, y))

        if perform_updates:
            self._count = len(self._contained)
            self._average_mass = (
                (self._average_mass * (self._count - 1)) + self._mass_of(isotope)
            ) / self._count

    def bulk_add(self, isotopes: Sequence[IsotopeInstance]) -> None:
        for isotope in isotopes:
            self.add_particle(isotope, False)
        self._recompute_statistics()

    def _recompute_statistics(self) -> None:
        self._count = len(self._contained)
        if self._count > 0:
            total_mass = sum(self._mass_of(isotope) for isotope in self._contained)
            self._average_mass = total_mass / self._count
        else:
            self._average_mass = 0.0

    def remove_particle(self, isotope: IsotopeInstance) -> None:
        for index, contained in enumerate(self._contained):
            if contained is isotope:
                del self._contained[index]
                break
        else:
            raise ValueError(f"{isotope!r} is not in the test chamber.")

        self._count = len(self._contained)
        isotope.container = None

        if self._count > 0:
            self._average_mass = (
                self._average_mass * (self._count + 1) - self._mass_of(isotope)
            ) / self._count
        else:
            self._average_mass = 0.0

    def remove_isotope_matching_config(self, config: IsotopeConfig) -> Optional[IsotopeInstance]:
        """
        Removes the first contained isotope with the given configuration.

        Returns:
            Optional[IsotopeInstance]: The removed isotope, or None if no
            contained isotope matches.
        """
        for isotope in self._contained:
            if isotope.config == config:
                self.remove_particle(isotope)
                return isotope
        return None

    def remove_all_isotopes(self) -> None:
        for isotope in self._contained:
            isotope.container = None
        self._contained.clear()
        self._count = 0
        self._average_mass = 0.0

    def get_isotope_count(self, config: IsotopeConfig) -> int:
        return sum(1 for isotope in self._contained if isotope.config == config)

    def get_isotope_proportion(self, config: IsotopeConfig) -> float:
        if not self._contained:
            return 0.0
        return self.get_isotope_count(config) / len(self._contained)

    def generate_random_position(self) -> np.ndarray:
        return self.rng.uniform(
            low=[self.bounds.min_x, self.bounds.min_y],
            high=[self.bounds.max_x, self.bounds.max_y]
        )

    def overlap_exists(self) -> bool:
        if len(self._contained) < 2:
            return False
        positions = np.array([isotope.position for isotope in self._contained], dtype=np.float64)
        radii = np.array([isotope.radius for isotope in self._contained], dtype=np.float64)
        return bool(_overlap_exists_numba(positions, radii))

    def adjust_for_overlap(self) -> int:
        """
        Moves the contained isotopes until none of them overlap.

        This is a relaxation, not an integrator: every iteration computes a
        push for each isotope from the current positions, then applies all
        pushes at once. It stops as soon as no pair overlaps or after
        MAX_OVERLAP_ITERATIONS, whichever comes first.

        Returns:
            int: The number of iterations performed.
        """
        particle_count = len(self._contained)
        if particle_count > MAX_OVERLAP_ADJUST_POPULATION:
            msg = (
                f"Cannot adjust for overlap with {particle_count} isotopes in the chamber; "
                f"the limit is {MAX_OVERLAP_ADJUST_POPULATION}."
            )
            logging.error(msg)
            raise ValueError(msg)
        if particle_count < 2:
            return 0

        positions = np.array([isotope.position for isotope in self._contained], dtype=np.float64)
        radii = np.array([isotope.radius for isotope in self._contained], dtype=np.float64)
        b = self.bounds

        iterations = 0
        while iterations < MAX_OVERLAP_ITERATIONS and _overlap_exists_numba(positions, radii):
            random_angles = self.rng.uniform(0.0, 2.0 * np.pi, size=(particle_count, particle_count))
            total_force = _calculate_forces_numba(
                positions, radii, random_angles,
                b.min_x, b.min_y, b.max_x, b.max_y,
                INTER_PARTICLE_FORCE_CONST, WALL_FORCE_CONST, MIN_INTER_PARTICLE_DISTANCE
            )
            positions += total_force
            iterations += 1

        for isotope, position in zip(self._contained, positions):
            isotope.set_position_and_destination(position)

        if iterations >= MAX_OVERLAP_ITERATIONS:
            logging.warning(
                f"Overlap adjustment stopped at the iteration cap ({MAX_OVERLAP_ITERATIONS}) "
                f"with {particle_count} isotopes."
            )
        else:
            logging.debug(f"Overlap resolved for {particle_count} isotopes in {iterations} iterations.")
        return iterations

    def get_state(self) -> ChamberState:
        return ChamberState(
            contained_isotopes=tuple(self._contained),
            positions=tuple((float(i.position[0]), float(i.position[1])) for i in self._contained)
        )

    def set_state(self, state: ChamberState) -> None:
        """Replaces the chamber contents with a previously captured state."""
        self.remove_all_isotopes()
        for isotope, position in zip(state.contained_isotopes, state.positions):
            isotope.set_position_and_destination(position)
        self.bulk_add(state.contained_isotopes)
