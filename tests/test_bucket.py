"""Tests for bucket.py - mono-isotope buckets."""
import numpy as np
import pytest

from bucket import MonoIsotopeBucket

from conftest import HYDROGEN_1, HYDROGEN_2, make_isotope


@pytest.fixture
def bucket():
    return MonoIsotopeBucket(HYDROGEN_2, (0.0, -250.0))


def test_caption_and_capacity(bucket):
    assert bucket.caption == "Hydrogen-2"
    # Rows of 6, 5, 4, 3, 2 and 1 slots fit above a 120 wide opening.
    assert bucket.capacity == 21


def test_first_open_fills_slots_in_order(bucket):
    first = make_isotope(HYDROGEN_2)
    second = make_isotope(HYDROGEN_2)
    bucket.add_particle_first_open(first)
    bucket.add_particle_first_open(second)
    assert bucket.particles == (first, second)
    assert first.container is bucket
    assert not np.array_equal(first.position, second.position)


def test_nearest_open_picks_closest_slot(bucket):
    isotope = make_isotope(HYDROGEN_2, position=(60.0, -240.0))
    bucket.add_particle_nearest_open(isotope)
    # The right-most slot of the bottom row is the closest.
    assert isotope.position[0] == pytest.approx(50.0)
    assert isotope.position[1] == pytest.approx(-240.0)


def test_animated_add_only_sets_destination(bucket):
    isotope = make_isotope(HYDROGEN_2, position=(5.0, 5.0))
    bucket.add_particle_first_open(isotope, move_immediately=False)
    assert tuple(isotope.position) == (5.0, 5.0)
    assert not np.array_equal(isotope.destination, isotope.position)


def test_rejects_other_isotopes(bucket):
    with pytest.raises(ValueError, match="does not accept"):
        bucket.add_particle_first_open(make_isotope(HYDROGEN_1))


def test_full_bucket_raises(bucket):
    for _ in range(bucket.capacity):
        bucket.add_particle_first_open(make_isotope(HYDROGEN_2))
    with pytest.raises(ValueError, match="is full"):
        bucket.add_particle_first_open(make_isotope(HYDROGEN_2))


def test_remove_frees_the_slot(bucket):
    isotope = make_isotope(HYDROGEN_2)
    bucket.add_particle_first_open(isotope)
    bucket.remove_particle(isotope)
    assert not bucket.includes(isotope)
    assert isotope.container is None
    with pytest.raises(ValueError):
        bucket.remove_particle(isotope)


def test_reset_releases_all_atoms(bucket):
    isotopes = [make_isotope(HYDROGEN_2) for _ in range(3)]
    for isotope in isotopes:
        bucket.add_particle_first_open(isotope)
    bucket.reset()
    assert bucket.particles == ()
    assert all(isotope.container is None for isotope in isotopes)
