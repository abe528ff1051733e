"""Tests for atomic_data.py - the isotope lookup table."""
import pytest

from atomic_data import DEFAULT_TABLE, ELEMENT_NAMES, IsotopeRecord, IsotopeTable


def test_stable_isotopes_exclude_trace_isotopes():
    assert sorted(DEFAULT_TABLE.get_stable_isotopes(1)) == [(1, 0), (1, 1)]
    assert sorted(DEFAULT_TABLE.get_stable_isotopes(6)) == [(6, 6), (6, 7)]
    assert DEFAULT_TABLE.exists_in_trace_amounts(6, 8)
    assert not DEFAULT_TABLE.exists_in_trace_amounts(6, 6)


def test_every_light_element_has_stable_isotopes():
    for proton_count in range(1, 19):
        assert DEFAULT_TABLE.get_stable_isotopes(proton_count)


def test_natural_abundance_is_rounded():
    assert DEFAULT_TABLE.get_natural_abundance(2, 1, 5) == 0.0
    assert DEFAULT_TABLE.get_natural_abundance(2, 1, 10) == pytest.approx(0.00000134)
    assert DEFAULT_TABLE.get_natural_abundance(99, 99, 5) == 0.0


def test_unknown_isotope_mass_raises():
    with pytest.raises(ValueError, match="No atomic mass known"):
        DEFAULT_TABLE.get_atomic_mass(1, 5)


def test_standard_atomic_weight_of_chlorine():
    assert DEFAULT_TABLE.get_standard_atomic_weight(17) == pytest.approx(35.453, abs=1e-3)


def test_element_names():
    assert DEFAULT_TABLE.get_element_name(8) == "Oxygen"
    assert DEFAULT_TABLE.get_element_name(200) == "Element-200"
    assert len(ELEMENT_NAMES) == 18


def test_duplicate_records_are_rejected():
    with pytest.raises(ValueError, match="Duplicate isotope record"):
        IsotopeTable([IsotopeRecord(1, 0, 1.0, 1.0), IsotopeRecord(1, 0, 1.0, 1.0)])
