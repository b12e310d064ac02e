import math

import numpy as np
import pytest

from starlight.dynamics import (
    FieldDynamics,
    FieldParams,
    circular_gradient,
    circular_laplacian,
    dft_magnitudes,
    mean,
    variance,
)


def zero_field(n=8, **kw):
    return FieldDynamics(dimensions=n, dt=0.1, dx=1.0, initial_field=np.zeros(n), **kw)


def test_single_impulse_step():
    fd = zero_field(8)
    fd.integrate([1, 0, 0, 0, 0, 0, 0, 0])
    phi = fd.primary_field
    assert phi[0] == pytest.approx(0.0910025, abs=1e-10)
    # Laplacian 0.1 at the neighbors: 0.1 * (0.5*0.1 + 0.01*0.0125)
    assert phi[1] == pytest.approx(0.0050125, abs=1e-10)
    assert phi[7] == pytest.approx(phi[1])
    assert fd.last_chaos_reduced is False


def test_update_reads_pre_update_neighbors():
    fd = zero_field(8)
    fd.integrate([1, 0, 0, 0, 0, 0, 0, 0])
    p = fd.params
    phi = np.zeros(8)
    phi[0] = 0.1
    lap = np.array([(phi[i - 1] - 2 * phi[i] + phi[(i + 1) % 8]) for i in range(8)])
    rate = p.gamma * lap + p.alpha * phi - p.beta * phi ** 3 + p.global_feedback_strength * phi.mean()
    assert np.allclose(fd.primary_field, phi + rate * 0.1)


def test_chaos_reduction_fires_once_on_high_variance():
    fd = FieldDynamics(dimensions=8, initial_field=[1, -1, 1, -1, 1, -1, 1, -1])
    fd.integrate(np.zeros(8))
    # Euler step gives ±0.8 (variance 0.64), then one controller pass: ×(1 − 0.5·0.1)
    assert fd.last_chaos_reduced is True
    assert np.allclose(fd.primary_field, 0.76 * np.array([1, -1, 1, -1, 1, -1, 1, -1]))


def test_chaos_reduction_moves_every_index_toward_zero():
    fd = FieldDynamics(dimensions=32, rng_seed=5)
    before = fd.primary_field.copy()
    signal = fd.apply_chaos_reduction()
    after = fd.primary_field
    assert np.allclose(signal, -0.5 * before)
    nz = before != 0
    assert np.all(np.abs(after[nz]) < np.abs(before[nz]))
    assert np.all(np.sign(after[nz]) == np.sign(before[nz]))


def test_stability_range():
    assert zero_field(8).get_patterns().stability == 1.0
    fd = FieldDynamics(dimensions=50, rng_seed=1)
    for _ in range(20):
        fd.integrate(np.zeros(50))
        p = fd.get_patterns()
        assert 0.0 < p.stability <= 1.0
        assert p.stability == pytest.approx(1.0 / (1.0 + 10.0 * p.variance))
        if p.variance > 1e-9:
            assert p.stability < 1.0


def test_patterns_dominant_frequency():
    n = 16
    i = np.arange(n)
    fd = FieldDynamics(dimensions=n, initial_field=np.cos(2 * math.pi * 3 * i / n))
    p = fd.get_patterns()
    assert p.dominant_freq_idx == 3
    assert p.mean_value == pytest.approx(0.0, abs=1e-12)
    assert p.variance == pytest.approx(0.5)


def test_patterns_ties_pick_lowest_index():
    # all magnitudes exactly zero: first index of the band wins
    assert zero_field(16).get_patterns().dominant_freq_idx == 1


def test_patterns_tiny_field_has_empty_band():
    fd = FieldDynamics(dimensions=3, initial_field=[0.3, -0.1, 0.2])
    assert fd.get_patterns().dominant_freq_idx == 1


def test_dft_magnitudes_agree_with_fft():
    x = np.random.default_rng(3).normal(size=20)
    assert np.allclose(dft_magnitudes(x, 1, 10), np.abs(np.fft.fft(x))[1:10])
    assert dft_magnitudes(x, 1, 1).size == 0


def test_auxiliary_fields_gradient_idempotent_pattern_not():
    fd = FieldDynamics(dimensions=4, initial_field=[0, 1, 0, 0])
    fd.evolve_auxiliary_fields()
    g1, p1 = fd.gradient_field.copy(), fd.pattern_field.copy()
    fd.evolve_auxiliary_fields()
    assert np.array_equal(fd.gradient_field, g1)
    assert not np.array_equal(fd.pattern_field, p1)
    assert np.allclose(g1, [0.5, 0.0, -0.5, 0.0])
    assert np.allclose(p1, [0, 0.05, 0, 0])
    assert np.allclose(fd.pattern_field, [0, 0.0975, 0, 0])


def test_field_lengths_stay_fixed():
    fd = FieldDynamics(dimensions=12, rng_seed=2)
    for _ in range(5):
        fd.integrate(np.ones(12))
        fd.evolve_auxiliary_fields()
        assert fd.primary_field.shape == fd.gradient_field.shape == fd.pattern_field.shape == (12,)


def test_helpers_guard_short_arrays():
    assert mean([]) == 0.0
    assert variance([]) == 0.0
    assert variance([3.0]) == 0.0
    assert variance([1.0, 3.0]) == pytest.approx(1.0)
    assert np.allclose(circular_laplacian([0, 1, 0, 0]), [1, -2, 1, 0])
    assert np.allclose(circular_gradient([0, 1, 0, 0], dx=0.5), [1, 0, -1, 0])


def test_adjust_param_bounds_and_monotonic():
    fd = zero_field(8)
    assert fd.adjust_param("beta", 0.05) == pytest.approx(0.15)
    assert fd.adjust_param("beta", 10.0) == pytest.approx(0.3)
    assert fd.adjust_param("beta", -1.0) == pytest.approx(0.3)
    assert fd.adjust_param("alpha", 1.0) == pytest.approx(0.2)
    assert fd.adjust_param("control_gain", 1.0) == pytest.approx(1.0)
    with pytest.raises(KeyError):
        fd.adjust_param("delta", 0.1)


def test_params_are_copies():
    fd = zero_field(8)
    p = fd.params
    p.alpha = 99.0
    assert fd.alpha == pytest.approx(0.1)
    with pytest.raises(AttributeError):
        fd.alpha = 0.5


def test_custom_params_and_state_copy():
    fd = FieldDynamics(dimensions=4, params=FieldParams(variance_threshold=1.0), initial_field=np.zeros(4))
    state = fd.get_state()
    state["primary_field"][0] = 42.0
    assert fd.primary_field[0] == 0.0
    assert state["variance_threshold"] == 1.0


def test_seeded_init_and_reset():
    a = FieldDynamics(dimensions=10, rng_seed=9)
    b = FieldDynamics(dimensions=10, rng_seed=9)
    assert np.array_equal(a.primary_field, b.primary_field)
    assert np.all((a.primary_field >= -0.5) & (a.primary_field < 0.5))
    start = a.primary_field.copy()
    a.integrate(np.ones(10))
    a.adjust_param("alpha", 0.05)
    a.reset()
    assert np.array_equal(a.primary_field, start)
    assert a.alpha == pytest.approx(0.1)


def test_validation_errors():
    with pytest.raises(ValueError):
        FieldDynamics(dimensions=0)
    with pytest.raises(ValueError):
        FieldDynamics(dimensions=4, dt=0.0)
    with pytest.raises(ValueError):
        FieldDynamics(dimensions=4, initial_field=[0.0, 0.0])
    fd = zero_field(4)
    with pytest.raises(ValueError):
        fd.integrate([1.0, 2.0])


def test_rejects_multidimensional_input():
    fd = zero_field(8)
    with pytest.raises(ValueError):
        fd.integrate(np.zeros((2, 4)))
    with pytest.raises(ValueError):
        fd.integrate(0.0)
    with pytest.raises(ValueError):
        FieldDynamics(dimensions=8, initial_field=np.zeros((8, 1)))


def test_warns_on_non_finite_field():
    fd = zero_field(8)
    with np.errstate(over="ignore", invalid="ignore"):
        with pytest.warns(RuntimeWarning, match="non-finite"):
            fd.integrate(np.full(8, 1e200))
    assert not np.all(np.isfinite(fd.primary_field))
