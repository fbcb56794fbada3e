"""Tests for the generic population engine."""

import numpy as np
import pytest

from stockcut.algorithms.optimizer import generate_random_units
from stockcut.algorithms.population import Breedable, EpochStats, Population
from stockcut.core.exceptions import EmptyPopulationError
from stockcut.core.models import PieceCatalog


class Scalar(Breedable):
    """Toy unit: fitness is a number in [0, 1]; children land near the parents' mean."""

    def __init__(self, value):
        self.value = value

    def fitness(self):
        return self.value

    def breed_with(self, other, rng):
        child = (self.value + other.value) / 2 + rng.normal(0.0, 0.05)
        return Scalar(float(min(1.0, max(0.0, child))))


@pytest.fixture
def scalars():
    return [Scalar(v) for v in np.linspace(0.0, 0.5, 10)]


# ---------------------------------------------------------------------------
# 1. Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_empty_population_rejected(self):
        with pytest.raises(EmptyPopulationError):
            Population([])

    @pytest.mark.parametrize(
        "kwargs",
        [{"breed_factor": 0.0}, {"survival_factor": 0.0}, {"survival_factor": 1.5}, {"size": 0}],
    )
    def test_invalid_parameters_rejected(self, scalars, kwargs):
        with pytest.raises(ValueError):
            Population(scalars, **kwargs)

    def test_sorted_best_first(self, scalars):
        population = Population(scalars, seed=1)
        assert population.fitnesses == sorted(population.fitnesses, reverse=True)
        assert population.best().value == pytest.approx(0.5)

    def test_size_defaults_to_unit_count(self, scalars):
        assert Population(scalars).size == 10


# ---------------------------------------------------------------------------
# 2. Epochs
# ---------------------------------------------------------------------------

class TestEpochs:
    def test_size_restored_every_epoch(self, scalars):
        """survival 0.2 keeps 2 of 10; replenishment must refill to 10."""
        sizes = []
        population = Population(scalars, size=10, breed_factor=0.3, survival_factor=0.2, seed=3)
        population.epochs(15, on_epoch=lambda stats: sizes.append(len(population)))
        assert sizes == [10] * 15

    def test_small_initial_population_grows_to_size(self, scalars):
        population = Population(scalars[:2], size=8, seed=3)
        population.epochs(1)
        assert len(population) == 8

    def test_best_fitness_never_decreases(self, scalars):
        population = Population(scalars, seed=5)
        population.epochs(30)
        best = [stats.best_fitness for stats in population.history]
        assert all(b2 >= b1 for b1, b2 in zip(best, best[1:]))
        assert best[0] >= 0.5

    def test_search_improves_fitness(self, scalars):
        population = Population(scalars, seed=8)
        population.epochs(60)
        assert population.best_fitness > 0.5

    def test_history_and_callback(self, scalars):
        seen = []
        population = Population(scalars, seed=2)
        population.epochs(4, on_epoch=seen.append)
        assert [s.epoch for s in population.history] == [1, 2, 3, 4]
        assert seen == population.history
        assert all(isinstance(s, EpochStats) for s in seen)
        assert all(s.mean_fitness <= s.best_fitness for s in seen)
        assert population.epoch == 4

    def test_zero_epochs_is_noop(self, scalars):
        population = Population(scalars, seed=2)
        assert population.epochs(0).finish() == population.units
        assert population.history == []

    def test_same_seed_same_result(self, scalars):
        a = Population(scalars, seed=99).epochs(20)
        b = Population(scalars, seed=99).epochs(20)
        assert a.fitnesses == b.fitnesses

    def test_single_unit_breeds_with_itself(self):
        population = Population([Scalar(0.3)], size=4, seed=0)
        population.epochs(3)
        assert len(population) == 4


# ---------------------------------------------------------------------------
# 3. Parent selection
# ---------------------------------------------------------------------------

class Recorder(Scalar):
    """Scalar that logs every (self, other) pair it breeds with."""

    pairs = []

    def breed_with(self, other, rng):
        Recorder.pairs.append((self, other))
        return Recorder(self.value)


class TestSelection:
    DRAWS = 3000

    @pytest.fixture
    def ranked(self):
        return Population([Scalar(v) for v in (0.9, 0.7, 0.5, 0.3, 0.1)], seed=21)

    def test_rank_weighted_frequencies(self, ranked):
        """Weights 5:4:3:2:1; inclusion odds for two draws without replacement."""
        rank_of = {id(unit): r for r, unit in enumerate(ranked.units)}
        counts = [0] * 5
        for _ in range(self.DRAWS):
            a, b = ranked._select_parents(ranked._scored)
            counts[rank_of[id(a)]] += 1
            counts[rank_of[id(b)]] += 1

        assert counts == sorted(counts, reverse=True)
        assert counts[0] > 3 * counts[4]
        assert counts[0] / self.DRAWS == pytest.approx(0.613, abs=0.04)
        assert counts[4] / self.DRAWS == pytest.approx(0.151, abs=0.04)

    def test_parents_are_distinct(self, ranked):
        for _ in range(500):
            a, b = ranked._select_parents(ranked._scored)
            assert a is not b

    def test_two_units_always_pair_up(self):
        population = Population([Scalar(0.4), Scalar(0.2)], seed=0)
        for _ in range(50):
            a, b = population._select_parents(population._scored)
            assert {a.value, b.value} == {0.4, 0.2}

    def test_single_unit_selected_twice(self):
        only = Scalar(0.3)
        population = Population([only], seed=0)
        assert population._select_parents(population._scored) == (only, only)

    def test_breeding_never_pairs_unit_with_itself(self):
        Recorder.pairs = []
        Population([Recorder(v) for v in (0.8, 0.6, 0.4, 0.2)], seed=6).epochs(10)
        assert Recorder.pairs
        assert all(a is not b for a, b in Recorder.pairs)

    def test_single_unit_population_breeds_with_itself(self):
        Recorder.pairs = []
        Population([Recorder(0.5)], size=1, seed=6).epochs(3)
        assert Recorder.pairs
        assert all(a is b for a, b in Recorder.pairs)


# ---------------------------------------------------------------------------
# 4. Parallel epochs
# ---------------------------------------------------------------------------

class TestParallelEpochs:
    @pytest.fixture
    def packing_units(self):
        catalog = PieceCatalog([40, 40, 17, 45, 20, 30, 40, 50, 60, 10, 90, 33])
        return generate_random_units([96, 120], catalog, 1, 12, seed=4)

    def test_parallel_keeps_units_valid(self, packing_units):
        population = Population(packing_units, seed=4)
        population.epochs_parallel(3, workers=2)
        assert len(population) == 12
        for unit in population.finish():
            assert unit.is_complete()
        assert population.fitnesses == sorted(population.fitnesses, reverse=True)

    def test_parallel_is_repeatable_for_same_seed(self, packing_units):
        a = Population(packing_units, seed=4).epochs_parallel(2, workers=2)
        b = Population(packing_units, seed=4).epochs_parallel(2, workers=2)
        assert a.fitnesses == b.fitnesses

    def test_one_worker_matches_single_process_path(self, packing_units):
        a = Population(packing_units, seed=4).epochs_parallel(3, workers=1)
        b = Population(packing_units, seed=4).epochs(3)
        assert a.fitnesses == b.fitnesses
