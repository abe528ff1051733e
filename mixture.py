# mixture.py
"""
Orchestrates the isotope mixture shown in the test chamber.

This module defines the MixtureController class. It decides which element
is being worked with, whether the user drives the mixture with buckets or
with numerical controls, and whether the user's own mixture or nature's
mixture is shown. Every user mixture is cached per element and mode so that
switching away and back restores it exactly.
"""
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from atomic_data import DEFAULT_TABLE, IsotopeTable
from bucket import MonoIsotopeBucket
from chamber import TestChamber
from constants import (
    BUCKET_WIDTH, BUCKET_HEIGHT, LARGE_ISOTOPE_RADIUS, SMALL_ISOTOPE_RADIUS,
    NUM_LARGE_ISOTOPES_PER_BUCKET, NUM_NATURES_MIX_ATOMS,
    NATURAL_ABUNDANCE_DIGITS, ABUNDANCE_SORT_DIGITS,
    CONTROLLER_Y_OFFSET_BUCKET, CONTROLLER_Y_OFFSET_SLIDER,
    WIDE_CONTROLLER_X_OFFSET, WIDE_CONTROLLER_SPREAD
)
from isotope import DEFAULT_PROTOTYPE_ISOTOPE, IsotopeConfig, IsotopeInstance, make_isotope_instance
from mixture_state import InteractivityMode, MixtureState, StateCache
from quantity_control import NumericalQuantityControl
from utils import round_symmetric

# --- Data Contracts ---
#
# class MixtureController:
#   - __init__(self, params: Dict[str, Any], table: IsotopeTable = DEFAULT_TABLE,
#              particle_factory: Callable = make_isotope_instance):
#     - Inputs:
#       - params: Dictionary of simulation parameters from config.json.
#         - "seed": int (optional)
#         - "initial_proton_count": int
#         - "interactivity_mode": "bucketsAndLargeAtoms" | "slidersAndSmallAtoms"
#         - "natures_mix_atom_count": int
#         - "isotopes_per_bucket": int
#       - table: Atomic data lookup.
#       - particle_factory: (protons, neutrons, position, radius) -> IsotopeInstance
#     - Side Effects: Builds the test chamber and the initial user's mix.
#     - Invariants:
#       - prototype_isotope identifies the selected element; only its proton
#         count is significant.
#       - possible_isotopes is sorted by ascending atomic mass.
#       - Every state in the cache is a user's mix (showing_natures_mix False).
#       - isotopes_list holds every user-mix atom, whether in the chamber or
#         in a bucket; nature's mix atoms live in natures_isotopes_list.

ParticleFactory = Callable[[int, int, Any, float], IsotopeInstance]


class MixtureController:
    """
    Keeps the test chamber, buckets and numerical controls consistent with
    the selected element, interactivity mode and mix.
    """
    def __init__(
        self,
        params: Optional[Dict[str, Any]] = None,
        table: IsotopeTable = DEFAULT_TABLE,
        particle_factory: ParticleFactory = make_isotope_instance
    ):
        params = params or {}
        self.table = table
        self.particle_factory = particle_factory
        self.natures_mix_atom_count = int(params.get('natures_mix_atom_count', NUM_NATURES_MIX_ATOMS))
        self.isotopes_per_bucket = int(params.get('isotopes_per_bucket', NUM_LARGE_ISOTOPES_PER_BUCKET))
        self.default_prototype = IsotopeConfig(
            int(params.get('initial_proton_count', DEFAULT_PROTOTYPE_ISOTOPE.proton_count)), 0
        )
        self.default_mode = InteractivityMode(
            params.get('interactivity_mode', InteractivityMode.BUCKETS_AND_LARGE_ATOMS.value)
        )

        # All randomness is controlled by a single seed.
        self.rng = np.random.default_rng(params.get('seed'))
        self.test_chamber = TestChamber(rng=self.rng, table=self.table)

        self.prototype_isotope = self.default_prototype
        self.interactivity_mode = self.default_mode
        self.showing_natures_mix = False
        self.possible_isotopes: Tuple[IsotopeConfig, ...] = ()

        self.bucket_list: List[MonoIsotopeBucket] = []
        self.isotopes_list: List[IsotopeInstance] = []
        self.natures_isotopes_list: List[IsotopeInstance] = []
        self.numerical_controllers: List[NumericalQuantityControl] = []
        self._state_cache = StateCache()

        self.update_possible_isotopes_list()
        self.set_up_initial_users_mix()

        logging.info(
            f"MixtureController initialized for {self.table.get_element_name(self.selected_proton_count)} "
            f"in {self.interactivity_mode.value} mode."
        )

    @property
    def selected_proton_count(self) -> int:
        return self.prototype_isotope.proton_count

    @property
    def state_cache(self) -> StateCache:
        return self._state_cache

    @property
    def natures_average_atomic_mass(self) -> float:
        return self.table.get_standard_atomic_weight(self.selected_proton_count)

    # --- Element, mode and mix selection ---

    def set_atom_configuration(self, new_config: IsotopeConfig) -> None:
        """
        Switches to the element of `new_config`.

        While nature's mix is shown it is simply regenerated for the new
        element. Otherwise the current user's mix is cached for the old
        element and the cached mix of the new element, if any, is restored.
        """
        previous_proton_count = self.selected_proton_count
        new_proton_count = new_config.proton_count

        # Make sure the new element is usable before touching any state.
        self._stable_isotopes_of(new_proton_count)

        if self.showing_natures_mix:
            self.prototype_isotope = IsotopeConfig(new_proton_count, new_config.neutron_count)
            self.update_possible_isotopes_list()
            self.show_natures_mix()
            return

        if new_proton_count == previous_proton_count:
            logging.debug(f"Element {new_proton_count} is already selected.")
            return

        self.save_state(previous_proton_count, self.interactivity_mode)
        self.prototype_isotope = IsotopeConfig(new_proton_count, new_config.neutron_count)
        self.update_possible_isotopes_list()

        saved_state = self._state_cache.get(new_proton_count, self.interactivity_mode)
        if saved_state is not None:
            self.set_state(saved_state)
        else:
            self.set_up_initial_users_mix()

        logging.info(f"Selected element changed to {self.table.get_element_name(new_proton_count)}.")

    def set_interactivity_mode(self, new_mode: InteractivityMode) -> None:
        new_mode = InteractivityMode(new_mode)
        old_mode = self.interactivity_mode
        if new_mode == old_mode:
            return

        if self.showing_natures_mix:
            # Nothing to cache, nature's mix looks the same in both modes.
            self.interactivity_mode = new_mode
            self.show_natures_mix()
            return

        self.save_state(self.selected_proton_count, old_mode)
        self.interactivity_mode = new_mode

        saved_state = self._state_cache.get(self.selected_proton_count, new_mode)
        if saved_state is not None:
            self.set_state(saved_state)
        else:
            self.remove_all_isotopes_from_chamber_and_model()
            self.add_isotope_controllers()

        logging.info(f"Interactivity mode changed from {old_mode.value} to {new_mode.value}.")

    def set_showing_natures_mix(self, showing_natures_mix: bool) -> None:
        if showing_natures_mix == self.showing_natures_mix:
            return

        if showing_natures_mix:
            users_mix_state = replace(self.get_current_state(), showing_natures_mix=False)
            self._state_cache.put(self.selected_proton_count, self.interactivity_mode, users_mix_state)
            self.showing_natures_mix = True
            self.show_natures_mix()
        else:
            self.showing_natures_mix = False
            self.natures_isotopes_list.clear()
            saved_state = self._state_cache.get(self.selected_proton_count, self.interactivity_mode)
            if saved_state is not None:
                self.set_state(saved_state)
            else:
                self.set_up_initial_users_mix()

        logging.info(f"Showing {'nature' if showing_natures_mix else 'user'}'s mix.")

    # --- Possible isotopes and nature's mix ---

    def _stable_isotopes_of(self, proton_count: int) -> List[Tuple[int, int]]:
        stable_isotopes = self.table.get_stable_isotopes(proton_count)
        if not stable_isotopes:
            msg = f"No stable isotopes known for element with {proton_count} protons."
            logging.error(msg)
            raise ValueError(msg)
        return stable_isotopes

    def update_possible_isotopes_list(self) -> None:
        """
        Rebuilds the list of stable isotopes of the current element, lightest
        first. Buckets, controls and nature's mix all depend on this order.
        """
        configs = [
            IsotopeConfig(protons, neutrons)
            for protons, neutrons in self._stable_isotopes_of(self.selected_proton_count)
        ]
        configs.sort(key=lambda config: self.table.get_atomic_mass(config.proton_count, config.neutron_count))
        self.possible_isotopes = tuple(configs)

    def _natural_abundance(self, config: IsotopeConfig, digits: int) -> float:
        return self.table.get_natural_abundance(config.proton_count, config.neutron_count, digits)

    def show_natures_mix(self) -> None:
        """
        Fills the chamber with nature's mix of the current element.

        Each stable isotope gets round(natures_mix_atom_count * abundance)
        small atoms at random positions, and at least one so that no stable
        isotope is ever missing. The atoms may overlap.
        """
        if not self.showing_natures_mix:
            msg = "Nature's mix can only be generated while it is being shown."
            logging.error(msg)
            raise RuntimeError(msg)

        self.remove_all_isotopes_from_chamber_and_model()
        self.natures_isotopes_list.clear()

        # Least abundant last, so they are drawn on top.
        by_abundance = sorted(
            self.possible_isotopes,
            key=lambda config: self._natural_abundance(config, ABUNDANCE_SORT_DIGITS),
            reverse=True
        )

        for config in by_abundance:
            num_to_create = round_symmetric(
                self.natures_mix_atom_count * self._natural_abundance(config, NATURAL_ABUNDANCE_DIGITS)
            )
            if num_to_create == 0:
                num_to_create = 1
            isotopes_to_add = [
                self.particle_factory(
                    config.proton_count,
                    config.neutron_count,
                    self.test_chamber.generate_random_position(),
                    SMALL_ISOTOPE_RADIUS
                )
                for _ in range(num_to_create)
            ]
            self.natures_isotopes_list.extend(isotopes_to_add)
            self.test_chamber.bulk_add(isotopes_to_add)

        self.add_isotope_controllers()

        logging.info(
            f"Nature's mix generated: {self.test_chamber.count} isotopes, "
            f"average atomic mass {self.test_chamber.average_mass:.5f}."
        )

    # --- Controllers ---

    def set_up_initial_users_mix(self) -> None:
        self.remove_all_isotopes_from_chamber_and_model()
        self.showing_natures_mix = False
        self.add_isotope_controllers()

    def _controller_layout(self) -> Tuple[float, float]:
        """Returns (x of first controller, distance between controllers)."""
        bounds = self.test_chamber.bounds
        isotope_count = len(self.possible_isotopes)
        if isotope_count < 4:
            spacing = bounds.width / isotope_count
            return bounds.min_x + spacing / 2, spacing
        return WIDE_CONTROLLER_X_OFFSET, bounds.width * WIDE_CONTROLLER_SPREAD / isotope_count

    def add_isotope_controllers(self) -> None:
        """
        Replaces the current buckets or numerical controls with fresh ones
        for the possible isotopes. Buckets are used in the buckets mode and
        whenever nature's mix is shown; for a user's mix they start full.
        """
        self.remove_buckets()
        self.remove_numerical_controllers()

        use_buckets = (
            self.interactivity_mode == InteractivityMode.BUCKETS_AND_LARGE_ATOMS
            or self.showing_natures_mix
        )
        x_offset, spacing = self._controller_layout()

        for index, config in enumerate(self.possible_isotopes):
            x = x_offset + spacing * index
            if use_buckets:
                self.bucket_list.append(MonoIsotopeBucket(
                    config,
                    (x, CONTROLLER_Y_OFFSET_BUCKET),
                    size=(BUCKET_WIDTH, BUCKET_HEIGHT),
                    sphere_radius=LARGE_ISOTOPE_RADIUS,
                    table=self.table
                ))
                if not self.showing_natures_mix:
                    for _ in range(self.isotopes_per_bucket):
                        self.create_and_add_isotope(config)
            else:
                self.numerical_controllers.append(
                    NumericalQuantityControl(self, config, (x, CONTROLLER_Y_OFFSET_SLIDER))
                )

    def get_bucket_for_isotope(self, config: IsotopeConfig) -> Optional[MonoIsotopeBucket]:
        for bucket in self.bucket_list:
            if bucket.is_isotope_allowed(config):
                return bucket
        return None

    def create_and_add_isotope(self, config: IsotopeConfig) -> Optional[IsotopeInstance]:
        """
        Creates a large atom in the bucket for `config`. Only meaningful in
        the buckets mode; returns None otherwise or when there is no bucket.
        """
        if self.interactivity_mode != InteractivityMode.BUCKETS_AND_LARGE_ATOMS:
            return None
        bucket = self.get_bucket_for_isotope(config)
        if bucket is None:
            return None
        isotope = self.particle_factory(config.proton_count, config.neutron_count, (0.0, 0.0), LARGE_ISOTOPE_RADIUS)
        bucket.add_particle_first_open(isotope, True)
        self.isotopes_list.append(isotope)
        return isotope

    def remove_buckets(self) -> None:
        for bucket in self.bucket_list:
            bucket.reset()
        self.bucket_list.clear()

    def remove_numerical_controllers(self) -> None:
        self.numerical_controllers.clear()

    def remove_all_isotopes_from_chamber_and_model(self) -> None:
        """
        Empties the chamber and the buckets without refilling anything.
        """
        self.test_chamber.remove_all_isotopes()
        for bucket in self.bucket_list:
            bucket.reset()
        self.isotopes_list.clear()

    def clear_box(self) -> None:
        self.remove_all_isotopes_from_chamber_and_model()
        self.add_isotope_controllers()

    def reset(self) -> None:
        """Returns to the initial element, mode and mix and forgets all saved mixes."""
        self._state_cache.clear()
        self.natures_isotopes_list.clear()
        self.interactivity_mode = self.default_mode
        self.showing_natures_mix = False
        self.prototype_isotope = self.default_prototype
        self.update_possible_isotopes_list()
        self.set_up_initial_users_mix()
        logging.info("Mixture controller reset.")

    # --- Drag and drop placement ---

    def begin_drag(self, isotope: IsotopeInstance) -> None:
        isotope.user_controlled = True
        container = isotope.container
        if container is not None:
            container.remove_particle(isotope)

    def end_drag(self, isotope: IsotopeInstance) -> None:
        """
        Drops a dragged atom: into the chamber if it is over it, otherwise
        back into its bucket at the nearest open slot.
        """
        isotope.user_controlled = False
        bucket = self.get_bucket_for_isotope(isotope.config)
        if bucket is None:
            logging.warning(f"No bucket for dropped {isotope!r}, leaving it unplaced.")
            return
        if bucket.includes(isotope) or self.test_chamber.includes(isotope):
            return
        self._place_isotope(isotope, bucket)

    def _place_isotope(self, isotope: IsotopeInstance, bucket: MonoIsotopeBucket) -> None:
        if self.test_chamber.is_positioned_over_chamber(isotope):
            self.test_chamber.add_particle(isotope, True)
            self.test_chamber.adjust_for_overlap()
        else:
            bucket.add_particle_nearest_open(isotope, True)

    # --- State capture and restore ---

    def get_current_state(self, element_proton_count: Optional[int] = None) -> MixtureState:
        """
        Captures the current mixture. Atoms still being dragged are dropped
        first so that none is left outside both the chamber and the buckets.
        """
        for isotope in self.isotopes_list:
            if isotope.user_controlled:
                self.end_drag(isotope)

        return MixtureState.capture(
            element_proton_count=(
                self.selected_proton_count if element_proton_count is None else element_proton_count
            ),
            chamber_state=self.test_chamber.get_state(),
            interactivity_mode=self.interactivity_mode,
            showing_natures_mix=self.showing_natures_mix,
            buckets=self.bucket_list
        )

    def save_state(self, element_proton_count: int, mode: InteractivityMode) -> None:
        state = replace(self.get_current_state(element_proton_count), interactivity_mode=mode)
        self._state_cache.put(element_proton_count, mode, state)

    def set_state(self, state: MixtureState) -> None:
        """Restores a mixture captured by get_current_state."""
        self.remove_all_isotopes_from_chamber_and_model()

        if state.element_proton_count != self.selected_proton_count:
            self.prototype_isotope = IsotopeConfig(state.element_proton_count, 0)
        self.update_possible_isotopes_list()
        self.showing_natures_mix = state.showing_natures_mix

        self.test_chamber.set_state(state.chamber_state)
        self.isotopes_list.extend(self.test_chamber.contained_isotopes)

        if self.interactivity_mode == InteractivityMode.BUCKETS_AND_LARGE_ATOMS:
            # Put back the very buckets that were saved, with their atoms.
            self.remove_buckets()
            self.remove_numerical_controllers()
            for bucket in state.bucket_list:
                bucket.reset()
                self.bucket_list.append(bucket)
                for isotope in state.bucket_contents.get(bucket, ()):
                    self.isotopes_list.append(isotope)
                    bucket.add_particle_first_open(isotope, True)
        else:
            self.add_isotope_controllers()

        logging.debug(
            f"Restored mixture for element {state.element_proton_count}: "
            f"{self.test_chamber.count} isotopes in chamber, {len(self.bucket_list)} buckets."
        )
