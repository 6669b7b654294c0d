import numpy as np
import pytest

from physarum.grid import GridShapeError, TrailGrid, is_power_of_two, quantile


@pytest.mark.parametrize("width,height", [(5, 5), (8, 6), (0, 8), (12, 16)])
def test_non_power_of_two_dimensions_are_rejected(width, height, population, rng):
    with pytest.raises(GridShapeError):
        TrailGrid(width, height, population)
    with pytest.raises(GridShapeError):
        TrailGrid.random(width, height, population, rng)


def test_is_power_of_two():
    assert [n for n in range(1, 20) if is_power_of_two(n)] == [1, 2, 4, 8, 16]
    assert not is_power_of_two(0)


def test_random_grid_starts_with_unit_noise_and_empty_mix(population, rng):
    grid = TrailGrid.random(16, 8, population, rng)
    assert grid.field.shape == (8, 16)
    assert grid.field.size == grid.mix_buffer.size == 16 * 8
    assert grid.field.min() >= 0.0
    assert grid.field.max() < 1.0
    assert not grid.mix_buffer.any()


def test_index_truncates_and_wraps(population):
    grid = TrailGrid(8, 8, population)
    assert grid.index(0.5, 0.6) == (0, 0)
    assert grid.index(1.5, 0.6) == (0, 1)
    assert grid.index(0.5, 1.6) == (1, 0)
    assert grid.index(2.5, 1.6) == (1, 2)
    assert grid.index(7.9, 7.9) == (7, 7)
    assert grid.index(-0.5, -0.6) == (7, 7)


def test_sample_mix_negative_coordinates_wrap(population):
    grid = TrailGrid(8, 8, population)
    grid.mix_buffer[:] = np.arange(64, dtype=np.float32).reshape(8, 8)
    assert grid.sample_mix(-0.5, -0.6) == grid.sample_mix(7, 7) == 63
    assert grid.sample_mix(3.2, 2.9) == 2 * 8 + 3


def test_sample_mix_is_vectorized(population):
    grid = TrailGrid(8, 8, population)
    grid.mix_buffer[:] = np.arange(64, dtype=np.float32).reshape(8, 8)
    values = grid.sample_mix(np.array([0.1, 8.5, -1.0]), np.array([0.1, 1.2, 0.0]))
    np.testing.assert_array_equal(values, [0, 8, 7])


def test_deposit_accumulates_repeated_cells(population):
    grid = TrailGrid(8, 8, population)
    xs = np.array([1.2, 1.7, 1.1, 4.0], dtype=np.float32)
    ys = np.array([2.5, 2.1, 2.9, 4.0], dtype=np.float32)
    grid.deposit(xs, ys)
    assert grid.field[2, 1] == pytest.approx(15.0)
    assert grid.field[4, 4] == pytest.approx(5.0)
    assert grid.field.sum() == pytest.approx(20.0)

    grid.deposit(0.5, 0.5, amount=2.0)
    assert grid.field[0, 0] == pytest.approx(2.0)


def test_diffuse_spreads_and_decays(population):
    grid = TrailGrid(16, 16, population)
    grid.deposit(8.0, 8.0, amount=100.0)
    grid.diffuse(1.5)
    assert grid.field.sum() == pytest.approx(100.0 * population.decay_factor, rel=1e-5)
    assert grid.field[8, 8] < 100.0 * population.decay_factor
    assert grid.field[8, 9] > 0.0
    assert grid.field[9, 8] > 0.0


def test_quantile_extremes(population, rng):
    grid = TrailGrid.random(16, 16, population, rng)
    assert grid.quantile(1.0) == grid.field.max()
    assert grid.quantile(0.0) == grid.field.min()


def test_quantile_nearest_rank():
    values = np.arange(10, dtype=np.float32)[::-1]
    assert quantile(values, 0.5) == 5
    assert quantile(values, 0.25) == 3
    assert quantile(values, 0.99) == 9


@pytest.mark.parametrize("fraction", [-0.1, 1.5])
def test_quantile_rejects_fraction_outside_unit_interval(fraction):
    with pytest.raises(ValueError):
        quantile(np.zeros(4), fraction)


def test_population_config_summary(population):
    text = str(population)
    assert "Sensor Distance: 3.000" in text
    assert "Deposition Amount: 5.000" in text
