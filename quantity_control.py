# quantity_control.py
"""
Numerical controls for adding and removing small isotopes.

In the sliders interactivity mode there are no buckets. Instead each
possible isotope gets a NumericalQuantityControl through which the number
of its atoms in the test chamber is set directly.
"""
import logging
from typing import Sequence, TYPE_CHECKING

import numpy as np

from constants import NUMERICAL_CONTROL_CAPACITY, SMALL_ISOTOPE_RADIUS
from isotope import IsotopeConfig

if TYPE_CHECKING:
    from mixture import MixtureController


class NumericalQuantityControl:
    """
    Sets the quantity of one isotope in the test chamber.
    """
    def __init__(self, controller: "MixtureController", config: IsotopeConfig, position: Sequence[float]):
        self.controller = controller
        self.config = config
        self.center_position = np.array(position, dtype=np.float64)

    @property
    def quantity(self) -> int:
        return self.controller.test_chamber.get_isotope_count(self.config)

    def set_isotope_quantity(self, target_quantity: int) -> None:
        """
        Adds or removes atoms so the chamber holds `target_quantity` of them.

        New atoms are small and placed at random positions in the chamber.
        """
        if not 0 <= target_quantity <= NUMERICAL_CONTROL_CAPACITY:
            msg = (
                f"Quantity {target_quantity} for {self.config} is outside "
                f"0..{NUMERICAL_CONTROL_CAPACITY}."
            )
            logging.error(msg)
            raise ValueError(msg)

        chamber = self.controller.test_chamber
        change = target_quantity - chamber.get_isotope_count(self.config)
        if change > 0:
            for _ in range(change):
                isotope = self.controller.particle_factory(
                    self.config.proton_count,
                    self.config.neutron_count,
                    chamber.generate_random_position(),
                    SMALL_ISOTOPE_RADIUS
                )
                chamber.add_particle(isotope, True)
                self.controller.isotopes_list.append(isotope)
        elif change < 0:
            for _ in range(-change):
                isotope = chamber.remove_isotope_matching_config(self.config)
                if isotope is not None:
                    self.controller.isotopes_list.remove(isotope)

        logging.debug(f"Quantity of {self.config} set to {target_quantity}.")
