import cv2
import numpy as np
import pytest


def make_gray_image(h=512, w=512):
    """Smooth gradient with some texture so DCT blocks are not trivial."""
    y, x = np.mgrid[0:h, 0:w]
    img = 128 + 60 * np.sin(x / 23.0) * np.cos(y / 31.0) + 0.1 * (x - y)
    return np.clip(np.rint(img), 0, 255).astype(np.uint8)


@pytest.fixture
def gray_image():
    return make_gray_image()


@pytest.fixture
def image_file(tmp_path):
    def _write(img, name="input.png"):
        path = tmp_path / name
        assert cv2.imwrite(str(path), img)
        return str(path)

    return _write
