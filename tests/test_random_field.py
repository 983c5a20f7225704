import numpy as np
import pytest

from random_field import PROVIDERS, get_provider, timed_generate


@pytest.fixture(params=sorted(PROVIDERS))
def provider(request):
    return get_provider(request.param, seed=42)


def test_values_are_uniform_in_unit_interval(provider):
    values = provider.generate(20000)

    assert values.shape == (20000,)
    assert values.dtype == np.float32
    assert values.min() >= 0.0
    assert values.max() < 1.0
    assert abs(values.mean() - 0.5) < 0.02
    counts, _ = np.histogram(values, bins=10, range=(0.0, 1.0))
    assert np.all(np.abs(counts / len(values) - 0.1) < 0.02)


def test_consecutive_values_are_not_correlated(provider):
    values = provider.generate(20000).astype(np.float64)

    assert abs(np.corrcoef(values[:-1], values[1:])[0, 1]) < 0.05


def test_same_seed_same_values():
    for name in PROVIDERS:
        first = get_provider(name, seed=7).generate(64)
        second = get_provider(name, seed=7).generate(64)
        assert np.array_equal(first, second), name


def test_edge_counts(provider):
    assert provider.generate(0).shape == (0,)
    with pytest.raises(ValueError):
        provider.generate(-1)


def test_unknown_provider():
    with pytest.raises(ValueError):
        get_provider("curand")


def test_timed_generate_releases_provider(provider):
    values, elapsed = timed_generate(provider, 64)

    assert values.shape == (64,)
    assert elapsed >= 0.0
    assert provider._generator is None


def test_context_manager_scope(provider):
    with provider as p:
        assert p is provider
        assert provider._generator is not None
    assert provider._generator is None
