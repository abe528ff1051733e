"""Tests for chamber.py - statistics, placement, overlap relaxation and state."""
import itertools

import numpy as np
import pytest

from atomic_data import IsotopeRecord, IsotopeTable
from bucket import MonoIsotopeBucket
from chamber import Bounds, TestChamber
from constants import CHAMBER_WALL_BUFFER, MAX_OVERLAP_ITERATIONS
from isotope import IsotopeConfig

from conftest import HYDROGEN_1, HYDROGEN_2, make_isotope

LITHIUM_6 = IsotopeConfig(3, 3)
LITHIUM_7 = IsotopeConfig(3, 4)


def mean_mass(chamber):
    return np.mean([isotope.config.get_atomic_mass(chamber.table) for isotope in chamber.contained_isotopes])


def test_empty_chamber_statistics_are_zero(chamber):
    assert chamber.count == 0
    assert chamber.average_mass == 0
    assert chamber.get_isotope_proportion(HYDROGEN_1) == 0
    assert chamber.get_isotope_count(HYDROGEN_1) == 0


def test_random_add_remove_sequence_keeps_statistics_consistent(chamber, rng):
    configs = [HYDROGEN_1, HYDROGEN_2, LITHIUM_6, LITHIUM_7]
    live = []
    for _ in range(300):
        if live and rng.random() < 0.4:
            isotope = live.pop(int(rng.integers(len(live))))
            chamber.remove_particle(isotope)
        else:
            isotope = make_isotope(configs[int(rng.integers(len(configs)))], chamber.generate_random_position())
            chamber.add_particle(isotope, True)
            live.append(isotope)

        assert chamber.count == len(chamber.contained_isotopes)
        if chamber.count:
            assert abs(chamber.average_mass - mean_mass(chamber)) < 1e-9
        else:
            assert chamber.average_mass == 0


def test_removing_last_isotope_resets_average(chamber):
    isotope = make_isotope()
    chamber.add_particle(isotope)
    chamber.remove_particle(isotope)
    assert chamber.count == 0
    assert chamber.average_mass == 0


def test_bulk_add_recomputes_statistics(chamber):
    isotopes = [make_isotope(HYDROGEN_1, (i, 0)) for i in range(3)] + [make_isotope(HYDROGEN_2, (0, i)) for i in range(2)]
    chamber.bulk_add(isotopes)
    assert chamber.count == 5
    expected = (3 * HYDROGEN_1.get_atomic_mass() + 2 * HYDROGEN_2.get_atomic_mass()) / 5
    assert chamber.average_mass == pytest.approx(expected, abs=1e-12)


def test_proportions_sum_to_one(chamber):
    for i, config in enumerate([HYDROGEN_1, HYDROGEN_1, HYDROGEN_2, LITHIUM_7, HYDROGEN_1]):
        chamber.add_particle(make_isotope(config, (i * 5, 0)))
    total = sum(chamber.get_isotope_proportion(c) for c in {HYDROGEN_1, HYDROGEN_2, LITHIUM_7})
    assert total == pytest.approx(1.0)
    assert chamber.get_isotope_proportion(HYDROGEN_1) == pytest.approx(0.6)
    assert chamber.get_isotope_count(LITHIUM_6) == 0


def test_container_back_reference_follows_membership(chamber):
    isotope = make_isotope()
    chamber.add_particle(isotope)
    assert isotope.container is chamber
    assert chamber.includes(isotope)
    chamber.remove_particle(isotope)
    assert isotope.container is None
    assert not chamber.includes(isotope)


def test_remove_all_isotopes_clears_back_references(chamber):
    isotopes = [make_isotope(position=(i * 30, 0)) for i in range(4)]
    chamber.bulk_add(isotopes)
    chamber.remove_all_isotopes()
    assert chamber.count == 0
    assert chamber.average_mass == 0
    assert all(isotope.container is None for isotope in isotopes)


def test_remove_particle_not_in_chamber_raises(chamber):
    with pytest.raises(ValueError, match="not in the test chamber"):
        chamber.remove_particle(make_isotope())


def test_remove_isotope_matching_config_returns_first_match(chamber):
    first = make_isotope(HYDROGEN_2, (0, 0))
    second = make_isotope(HYDROGEN_2, (50, 0))
    chamber.add_particle(make_isotope(HYDROGEN_1, (-50, 0)))
    chamber.add_particle(first)
    chamber.add_particle(second)

    assert chamber.remove_isotope_matching_config(HYDROGEN_2) is first
    assert first.container is None
    assert chamber.count == 2
    assert chamber.remove_isotope_matching_config(LITHIUM_6) is None
    assert chamber.count == 2


@pytest.mark.parametrize("position", [
    (225.0, 0.0), (-225.0, 0.0), (0.0, 140.0), (0.0, -140.0),
    (400.0, 300.0), (-1000.0, -5.0), (224.0, -139.5),
])
def test_added_isotope_ends_up_fully_inside(chamber, position):
    isotope = make_isotope(position=position, radius=10.0)
    chamber.add_particle(isotope)
    b = chamber.bounds
    x, y = isotope.position
    assert x + isotope.radius <= b.max_x - CHAMBER_WALL_BUFFER + 1e-9
    assert x - isotope.radius >= b.min_x + CHAMBER_WALL_BUFFER - 1e-9
    assert y + isotope.radius <= b.max_y - CHAMBER_WALL_BUFFER + 1e-9
    assert y - isotope.radius >= b.min_y + CHAMBER_WALL_BUFFER - 1e-9
    assert np.array_equal(isotope.destination, isotope.position)


def test_position_over_chamber_ignores_radius(chamber):
    assert chamber.is_positioned_over_chamber(make_isotope(position=(225.0, 140.0)))
    assert not chamber.is_positioned_over_chamber(make_isotope(position=(225.1, 0.0)))


def test_generate_random_position_is_inside(chamber):
    for _ in range(200):
        assert chamber.bounds.contains_point(chamber.generate_random_position())


def test_adjust_for_overlap_separates_coincident_isotopes(chamber):
    isotopes = [make_isotope(position=(0.0, 0.0), radius=10.0) for _ in range(10)]
    for isotope in isotopes:
        chamber.add_particle(isotope)

    iterations = chamber.adjust_for_overlap()

    assert 0 < iterations < MAX_OVERLAP_ITERATIONS
    for a, b in itertools.combinations(isotopes, 2):
        assert np.linalg.norm(a.position - b.position) >= a.radius + b.radius
    assert not chamber.overlap_exists()
    assert chamber.count == 10


def test_adjust_for_overlap_without_overlap_does_nothing(chamber):
    isotopes = [make_isotope(position=(-100.0 + 40 * i, 0.0)) for i in range(5)]
    chamber.bulk_add(isotopes)
    before = [isotope.position.copy() for isotope in isotopes]
    assert chamber.adjust_for_overlap() == 0
    for isotope, position in zip(isotopes, before):
        assert np.array_equal(isotope.position, position)


def test_adjust_for_overlap_rejects_large_populations(chamber):
    chamber.bulk_add([make_isotope(position=chamber.generate_random_position(), radius=4) for _ in range(101)])
    with pytest.raises(ValueError, match="limit is 100"):
        chamber.adjust_for_overlap()


def test_state_round_trip_preserves_contents(chamber):
    isotopes = [make_isotope(c, chamber.generate_random_position()) for c in [HYDROGEN_1, HYDROGEN_2, HYDROGEN_1]]
    chamber.bulk_add(isotopes)
    count, average = chamber.count, chamber.average_mass

    chamber.set_state(chamber.get_state())

    assert chamber.count == count
    assert chamber.average_mass == pytest.approx(average, abs=1e-12)
    assert set(map(id, chamber.contained_isotopes)) == set(map(id, isotopes))
    assert all(isotope.container is chamber for isotope in isotopes)


def test_set_state_restores_captured_positions(chamber):
    isotope = make_isotope(position=(10.0, 20.0))
    chamber.add_particle(isotope)
    state = chamber.get_state()
    chamber.remove_particle(isotope)
    isotope.set_position_and_destination((500.0, 500.0))

    chamber.set_state(state)

    assert tuple(isotope.position) == (10.0, 20.0)
    assert chamber.count == 1


def test_custom_bounds():
    chamber = TestChamber(Bounds(0, 0, 100, 50), rng=np.random.default_rng(0))
    isotope = make_isotope(position=(120.0, 25.0), radius=5.0)
    chamber.add_particle(isotope)
    assert isotope.position[0] == pytest.approx(100 - 5 - CHAMBER_WALL_BUFFER)
    assert chamber.bounds.width == 100
    assert chamber.bounds.height == 50


def test_statistics_use_the_chamber_table(rng):
    table = IsotopeTable([
        IsotopeRecord(50, 68, 117.9016, 0.5),
        IsotopeRecord(50, 70, 119.9022, 0.5),
    ])
    chamber = TestChamber(rng=rng, table=table)
    tin_118 = make_isotope(IsotopeConfig(50, 68), (-50.0, 0.0))
    tin_120 = make_isotope(IsotopeConfig(50, 70), (50.0, 0.0))

    chamber.add_particle(tin_118)
    chamber.add_particle(tin_120)
    assert chamber.average_mass == pytest.approx((117.9016 + 119.9022) / 2)

    chamber.remove_particle(tin_118)
    assert chamber.average_mass == pytest.approx(119.9022)

    chamber.bulk_add([make_isotope(IsotopeConfig(50, 68), (0.0, 50.0))])
    assert chamber.average_mass == pytest.approx((117.9016 + 119.9022) / 2)


def test_adding_takes_isotope_out_of_its_bucket(chamber):
    bucket = MonoIsotopeBucket(HYDROGEN_1, (0.0, -250.0))
    isotope = make_isotope(HYDROGEN_1)
    bucket.add_particle_first_open(isotope)

    chamber.add_particle(isotope)

    assert not bucket.includes(isotope)
    assert bucket.particles == ()
    assert isotope.container is chamber
    assert chamber.count == 1


def test_adding_takes_isotope_out_of_another_chamber(chamber, rng):
    other = TestChamber(rng=rng)
    isotope = make_isotope(HYDROGEN_2)
    other.add_particle(isotope)

    chamber.add_particle(isotope)

    assert other.count == 0
    assert other.average_mass == 0
    assert chamber.includes(isotope)
    assert isotope.container is chamber
