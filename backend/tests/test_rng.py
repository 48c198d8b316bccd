"""Tests for injectable randomness."""
from landlord.logic.rng import ProductionRNG, SeededRNG


class TestShuffle:
    """Tests for RNGBase.shuffle()."""

    def test_shuffle_is_permutation(self):
        """Shuffled output holds exactly the input items."""
        items = list(range(25))
        shuffled = SeededRNG(seed=7).shuffle(items)
        assert sorted(shuffled) == items

    def test_shuffle_leaves_input_untouched(self):
        """The input list is copied, not shuffled in place."""
        items = list(range(25))
        SeededRNG(seed=7).shuffle(items)
        assert items == list(range(25))

    def test_shuffle_empty_and_single(self):
        rng = SeededRNG(seed=1)
        assert rng.shuffle([]) == []
        assert rng.shuffle(["only"]) == ["only"]

    def test_seeded_determinism(self):
        """Same seed produces the same order."""
        items = list(range(25))
        assert SeededRNG(seed=123).shuffle(items) == SeededRNG(seed=123).shuffle(items)

    def test_shuffle_reaches_every_position(self):
        """Over many shuffles each item lands in the first slot at least once."""
        rng = SeededRNG(seed=99)
        firsts = {rng.shuffle(list(range(5)))[0] for _ in range(500)}
        assert firsts == set(range(5))


class TestProductionRNG:
    """Tests for ProductionRNG."""

    def test_randint_in_range(self):
        rng = ProductionRNG()
        for _ in range(200):
            assert 3 <= rng.randint(3, 7) <= 7

    def test_random_in_unit_interval(self):
        rng = ProductionRNG()
        for _ in range(200):
            assert 0.0 <= rng.random() < 1.0

    def test_shuffle_is_permutation(self):
        items = list(range(25))
        assert sorted(ProductionRNG().shuffle(items)) == items
