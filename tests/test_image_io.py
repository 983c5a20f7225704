import numpy as np
import pytest

from errors import DecodeError, DimensionMismatch, WatermarkError
from image_io import load_grayscale, normalize, pad_to_dft_size, save_image, to_uint8


def test_load_missing_file(tmp_path):
    with pytest.raises(DecodeError):
        load_grayscale(str(tmp_path / "nope.png"))


def test_load_reads_single_channel(gray_image, image_file):
    img = load_grayscale(image_file(gray_image))

    assert img.shape == (512, 512)
    assert img.dtype == np.uint8
    assert np.array_equal(img, gray_image)


def test_pad_keeps_optimal_sizes():
    img = np.ones((512, 512), dtype=np.uint8)

    assert pad_to_dft_size(img) is img


def test_pad_adds_zeros_bottom_right():
    img = np.ones((509, 510), dtype=np.uint8)
    padded = pad_to_dft_size(img)

    assert padded.shape == (512, 512)
    assert padded[:509, :510].all()
    assert not padded[509:, :].any()
    assert not padded[:, 510:].any()


def test_pad_rejects_non_square_result():
    with pytest.raises(DimensionMismatch):
        pad_to_dft_size(np.zeros((300, 500), dtype=np.uint8))
    with pytest.raises(DimensionMismatch):
        pad_to_dft_size(np.zeros((8, 8, 3), dtype=np.uint8))


def test_normalize_and_back():
    img = np.arange(256, dtype=np.uint8).reshape(16, 16)
    values = normalize(img)

    assert values.dtype == np.float32
    assert values.min() == 0.0 and values.max() == pytest.approx(1.0)
    assert np.array_equal(to_uint8(values), img)
    assert np.array_equal(to_uint8(normalize(img, (-1.0, 1.0)), (-1.0, 1.0)), img)


def test_to_uint8_saturates():
    out = to_uint8(np.array([[-0.5, 0.5], [1.0, 7.0]]))

    assert out.tolist() == [[0, 128], [255, 255]]


def test_invalid_range():
    with pytest.raises(ValueError):
        normalize(np.zeros((2, 2), dtype=np.uint8), (1.0, 1.0))


def test_save_to_missing_folder_fails(tmp_path):
    with pytest.raises(WatermarkError):
        save_image(str(tmp_path / "missing" / "out.png"), np.zeros((4, 4), dtype=np.uint8))
