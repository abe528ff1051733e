# atomic_data.py
"""
Atomic data lookup for the light elements.

This module defines the IsotopeTable class, which answers the chemistry
questions the rest of the framework needs: the atomic mass of an isotope,
its natural abundance, whether it only exists in trace amounts, and the
list of stable isotopes of an element. The table is a pure lookup with no
side effects. A module-level DEFAULT_TABLE holds the built-in data for
hydrogen through argon.
"""
import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

# --- Data Contracts ---
#
# class IsotopeTable:
#   - __init__(self, records: Iterable[IsotopeRecord], element_names: Dict[int, str]):
#     - Inputs:
#       - records: One IsotopeRecord per known isotope.
#       - element_names: Proton count -> element name.
#     - Invariants: At most one record per (proton_count, neutron_count).
#
#   - get_atomic_mass(proton_count, neutron_count) -> float
#     - Raises ValueError for an isotope with no record.
#   - get_natural_abundance(proton_count, neutron_count, digits) -> float
#     - 0.0 for unknown or trace-only isotopes.
#   - get_stable_isotopes(proton_count) -> List[Tuple[int, int]]
#     - (proton_count, neutron_count) pairs in table order, which is not
#       guaranteed to be sorted by mass.

class IsotopeRecord(NamedTuple):
    proton_count: int
    neutron_count: int
    atomic_mass: float
    natural_abundance: float
    trace: bool = False


ELEMENT_NAMES = {
    1: "Hydrogen", 2: "Helium", 3: "Lithium", 4: "Beryllium", 5: "Boron",
    6: "Carbon", 7: "Nitrogen", 8: "Oxygen", 9: "Fluorine", 10: "Neon",
    11: "Sodium", 12: "Magnesium", 13: "Aluminum", 14: "Silicon",
    15: "Phosphorus", 16: "Sulfur", 17: "Chlorine", 18: "Argon",
}

# Masses in unified atomic mass units, abundances as fractions of 1.
ISOTOPE_RECORDS = [
    # Hydrogen
    IsotopeRecord(1, 0, 1.00782503207, 0.999885),
    IsotopeRecord(1, 1, 2.0141017778, 0.000115),
    IsotopeRecord(1, 2, 3.0160492777, 0.0, trace=True),
    # Helium
    IsotopeRecord(2, 1, 3.0160293191, 0.00000134),
    IsotopeRecord(2, 2, 4.00260325415, 0.99999866),
    # Lithium
    IsotopeRecord(3, 3, 6.015122795, 0.0759),
    IsotopeRecord(3, 4, 7.01600455, 0.9241),
    # Beryllium
    IsotopeRecord(4, 5, 9.0121822, 1.0),
    # Boron
    IsotopeRecord(5, 5, 10.0129370, 0.199),
    IsotopeRecord(5, 6, 11.0093054, 0.801),
    # Carbon
    IsotopeRecord(6, 6, 12.0, 0.9893),
    IsotopeRecord(6, 7, 13.0033548378, 0.0107),
    IsotopeRecord(6, 8, 14.003241989, 0.0, trace=True),
    # Nitrogen
    IsotopeRecord(7, 7, 14.0030740048, 0.99636),
    IsotopeRecord(7, 8, 15.0001088982, 0.00364),
    # Oxygen
    IsotopeRecord(8, 8, 15.99491461956, 0.99757),
    IsotopeRecord(8, 9, 16.99913170, 0.00038),
    IsotopeRecord(8, 10, 17.9991610, 0.00205),
    # Fluorine
    IsotopeRecord(9, 10, 18.99840322, 1.0),
    # Neon
    IsotopeRecord(10, 10, 19.9924401754, 0.9048),
    IsotopeRecord(10, 11, 20.99384668, 0.0027),
    IsotopeRecord(10, 12, 21.991385114, 0.0925),
    # Sodium
    IsotopeRecord(11, 12, 22.9897692809, 1.0),
    # Magnesium
    IsotopeRecord(12, 12, 23.985041700, 0.7899),
    IsotopeRecord(12, 13, 24.98583692, 0.1000),
    IsotopeRecord(12, 14, 25.982592929, 0.1101),
    # Aluminum
    IsotopeRecord(13, 14, 26.98153863, 1.0),
    # Silicon
    IsotopeRecord(14, 14, 27.9769265325, 0.92223),
    IsotopeRecord(14, 15, 28.976494700, 0.04685),
    IsotopeRecord(14, 16, 29.97377017, 0.03092),
    # Phosphorus
    IsotopeRecord(15, 16, 30.97376163, 1.0),
    # Sulfur
    IsotopeRecord(16, 16, 31.97207100, 0.9499),
    IsotopeRecord(16, 17, 32.97145876, 0.0075),
    IsotopeRecord(16, 18, 33.96786690, 0.0425),
    IsotopeRecord(16, 20, 35.96708076, 0.0001),
    # Chlorine
    IsotopeRecord(17, 18, 34.96885268, 0.7576),
    IsotopeRecord(17, 20, 36.96590259, 0.2424),
    # Argon
    IsotopeRecord(18, 18, 35.967545106, 0.003365),
    IsotopeRecord(18, 20, 37.9627324, 0.000632),
    IsotopeRecord(18, 22, 39.9623831225, 0.996003),
]


class IsotopeTable:
    """
    Read-only lookup of isotope masses and abundances.
    """
    def __init__(self, records: Iterable[IsotopeRecord], element_names: Optional[Dict[int, str]] = None):
        self._records: Dict[Tuple[int, int], IsotopeRecord] = {}
        for record in records:
            key = (record.proton_count, record.neutron_count)
            if key in self._records:
                msg = f"Duplicate isotope record for {key}."
                logging.critical(msg)
                raise ValueError(msg)
            self._records[key] = record
        self._element_names = dict(element_names or {})

    def _get_record(self, proton_count: int, neutron_count: int) -> Optional[IsotopeRecord]:
        return self._records.get((proton_count, neutron_count))

    def get_atomic_mass(self, proton_count: int, neutron_count: int) -> float:
        record = self._get_record(proton_count, neutron_count)
        if record is None:
            raise ValueError(
                f"No atomic mass known for isotope with {proton_count} protons "
                f"and {neutron_count} neutrons."
            )
        return record.atomic_mass

    def get_natural_abundance(self, proton_count: int, neutron_count: int, digits: int) -> float:
        """
        Natural abundance as a fraction, rounded to `digits` decimal places.
        """
        record = self._get_record(proton_count, neutron_count)
        if record is None:
            return 0.0
        return round(record.natural_abundance, digits)

    def exists_in_trace_amounts(self, proton_count: int, neutron_count: int) -> bool:
        record = self._get_record(proton_count, neutron_count)
        return record is not None and record.trace

    def get_stable_isotopes(self, proton_count: int) -> List[Tuple[int, int]]:
        return [
            key for key, record in self._records.items()
            if key[0] == proton_count and record.natural_abundance > 0 and not record.trace
        ]

    def get_element_name(self, proton_count: int) -> str:
        return self._element_names.get(proton_count, f"Element-{proton_count}")

    def get_standard_atomic_weight(self, proton_count: int) -> float:
        """Abundance-weighted mean mass of the element's stable isotopes."""
        return sum(
            self._records[key].atomic_mass * self._records[key].natural_abundance
            for key in self.get_stable_isotopes(proton_count)
        )


DEFAULT_TABLE = IsotopeTable(ISOTOPE_RECORDS, ELEMENT_NAMES)
