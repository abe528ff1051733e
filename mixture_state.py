# mixture_state.py
"""
Saved mixture states and the cache that holds them.

A MixtureState records everything needed to put a user's mixture back
exactly as it was: the element, what was in the test chamber, the buckets
and which atoms sat in each of them. States are cached per element and per
interactivity mode so that each combination remembers its own mixture.
"""
import enum
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from bucket import MonoIsotopeBucket
from chamber import ChamberState
from isotope import IsotopeInstance


class InteractivityMode(enum.Enum):
    # Large atoms dragged between buckets and the chamber.
    BUCKETS_AND_LARGE_ATOMS = "bucketsAndLargeAtoms"
    # Small atoms added and removed with numerical controls.
    SLIDERS_AND_SMALL_ATOMS = "slidersAndSmallAtoms"


@dataclass(frozen=True)
class MixtureState:
    element_proton_count: int
    chamber_state: ChamberState
    interactivity_mode: InteractivityMode
    showing_natures_mix: bool
    bucket_list: Tuple[MonoIsotopeBucket, ...]
    bucket_contents: Mapping[MonoIsotopeBucket, Tuple[IsotopeInstance, ...]]

    @classmethod
    def capture(
        cls,
        element_proton_count: int,
        chamber_state: ChamberState,
        interactivity_mode: InteractivityMode,
        showing_natures_mix: bool,
        buckets
    ) -> "MixtureState":
        bucket_list = tuple(buckets)
        return cls(
            element_proton_count=element_proton_count,
            chamber_state=chamber_state,
            interactivity_mode=interactivity_mode,
            showing_natures_mix=showing_natures_mix,
            bucket_list=bucket_list,
            bucket_contents=MappingProxyType({bucket: bucket.particles for bucket in bucket_list})
        )


class StateCache:
    """
    Two-level map of element proton count -> interactivity mode -> state.
    """
    def __init__(self):
        self._states: Dict[int, Dict[InteractivityMode, MixtureState]] = {}

    def get(self, proton_count: int, mode: InteractivityMode) -> Optional[MixtureState]:
        return self._states.get(proton_count, {}).get(mode)

    def put(self, proton_count: int, mode: InteractivityMode, state: MixtureState) -> None:
        self._states.setdefault(proton_count, {})[mode] = state
        logging.debug(
            f"Cached mixture for element {proton_count} in mode {mode.value} "
            f"({len(state.chamber_state.contained_isotopes)} isotopes in chamber)."
        )

    def clear(self) -> None:
        self._states.clear()

    def __contains__(self, key: Tuple[int, InteractivityMode]) -> bool:
        return self.get(*key) is not None

    def __len__(self) -> int:
        return sum(len(states) for states in self._states.values())
