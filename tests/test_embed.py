import warnings

import numpy as np
import pytest

from constraints import ALPHA
from embed import EmbeddingStrategy, EmbedParameters, embed
from errors import DegenerateBlock
from selection import select_target
from transform import forward


def test_toy_block_embeds_into_first_tied_cell():
    coeffs = np.array([[10.0, 0.0], [0.0, 0.0]], dtype=np.float32)

    with pytest.warns(DegenerateBlock):
        out = embed(coeffs, 1.0, EmbedParameters(alpha=0.5))

    assert np.array_equal(out, np.array([[10.0, 0.5], [0.0, 0.0]], dtype=np.float32))
    # pure: input untouched
    assert coeffs[0, 1] == 0.0


@pytest.mark.parametrize("strategy", list(EmbeddingStrategy))
def test_only_selected_coefficient_changes(strategy):
    rng = np.random.default_rng(3)
    coeffs = forward(rng.random((8, 8)).astype(np.float32))
    target = select_target(coeffs)

    out = embed(coeffs, 0.8, EmbedParameters(alpha=0.5, strategy=strategy))

    changed = np.argwhere(out != coeffs)
    assert [tuple(c) for c in changed] == [target]
    mask = np.ones_like(coeffs, dtype=bool)
    mask[target] = False
    assert np.array_equal(out[mask], coeffs[mask])


def test_additive_strategy():
    coeffs = np.zeros((4, 4))
    coeffs[0, 0] = 20
    coeffs[2, 1] = -3

    out = embed(coeffs, 0.4, EmbedParameters(alpha=0.5, strategy=EmbeddingStrategy.ADDITIVE))
    assert out[2, 1] == pytest.approx(-3 + 0.5 * 0.4)


def test_multiplicative_strategy():
    coeffs = np.zeros((4, 4))
    coeffs[0, 0] = 20
    coeffs[2, 1] = -3

    out = embed(coeffs, 0.4, EmbedParameters(alpha=0.5, strategy=EmbeddingStrategy.MULTIPLICATIVE))
    assert out[2, 1] == pytest.approx(-3 * (1 + 0.5 * 0.4))


def test_zero_watermark_leaves_block_unchanged():
    coeffs = forward(np.random.default_rng(4).random((8, 8)))

    assert np.array_equal(embed(coeffs, 0.0, EmbedParameters()), coeffs)


def test_default_parameters():
    params = EmbedParameters()

    assert params.alpha == ALPHA == 0.5
    assert params.strategy == EmbeddingStrategy.ADDITIVE


def test_degenerate_warning_can_be_silenced():
    coeffs = np.zeros((4, 4))

    with warnings.catch_warnings():
        warnings.simplefilter("error", DegenerateBlock)
        out = embed(coeffs, 1.0, EmbedParameters(alpha=0.5, warn_degenerate=False))
    assert out[0, 1] == 0.5
