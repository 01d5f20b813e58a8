import pytest

from zoneforge.zones.rng import SeededRandom, random_seed


def test_same_seed_same_sequence():
    a = SeededRandom(12345)
    b = SeededRandom(12345)
    assert [a.random() for _ in range(50)] == [b.random() for _ in range(50)]


def test_different_seeds_diverge():
    a = SeededRandom(1)
    b = SeededRandom(2)
    assert [a.random() for _ in range(10)] != [b.random() for _ in range(10)]


def test_seed_zero_is_deterministic_not_random():
    rng = SeededRandom(0)
    assert rng.seed == 0
    assert rng.random() == pytest.approx(49297 / 233280)


def test_values_stay_in_unit_interval():
    rng = SeededRandom(777)
    for _ in range(2000):
        v = rng.random()
        assert 0.0 <= v < 1.0


def test_none_seed_draws_in_range():
    rng = SeededRandom()
    assert 1 <= rng.seed <= 1_000_000
    assert 1 <= random_seed() <= 1_000_000


def test_randint_inclusive_bounds():
    rng = SeededRandom(99)
    seen = {rng.randint(2, 4) for _ in range(500)}
    assert seen == {2, 3, 4}


def test_randint_below_and_choice():
    rng = SeededRandom(5)
    for _ in range(200):
        assert 0 <= rng.randint_below(7) < 7
    items = ["a", "b", "c"]
    assert all(rng.choice(items) in items for _ in range(50))


def test_shuffle_returns_permutation_copy():
    rng = SeededRandom(42)
    items = list(range(20))
    shuffled = rng.shuffle(items)
    assert items == list(range(20))
    assert sorted(shuffled) == items
    assert SeededRandom(42).shuffle(items) == shuffled
