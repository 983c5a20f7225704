"""
Sources of uniform random values for the watermark field.

Every provider honours the same contract: ``generate(count)`` returns a 1-D
float32 array of ``count`` independent values uniformly distributed in
[0, 1). Providers are context managers; a generator is acquired when the
``with`` block is entered and released when it exits, so several providers
can be timed one after the other without sharing state. Calling
``generate`` outside a ``with`` block acquires the generator on first use.

Available providers:

* ``numpy``: the local baseline, ``numpy.random.default_rng`` (PCG64).
* ``opencv``: OpenCV's ``cv2.randu`` on its global RNG.
* ``philox``: counter-based Philox4x32 bit generator, the family used by
  GPU random number libraries.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, Optional, Tuple, Type

import cv2
import numpy as np

from constraints import SEED

logger = logging.getLogger(__name__)

_BELOW_ONE = np.nextafter(np.float32(1.0), np.float32(0.0))


class RandomFieldProvider:
    name = "base"

    def __init__(self, seed: Optional[int] = SEED) -> None:
        self.seed = seed
        self._generator = None

    def __enter__(self) -> "RandomFieldProvider":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if self._generator is None:
            self._generator = self._acquire()

    def close(self) -> None:
        self._generator = None

    def _acquire(self):
        raise NotImplementedError

    def _draw(self, count: int) -> np.ndarray:
        raise NotImplementedError

    def generate(self, count: int) -> np.ndarray:
        if count < 0:
            raise ValueError(f"Cannot generate {count} values")
        self.open()
        if count == 0:
            return np.empty(0, dtype=np.float32)
        values = np.asarray(self._draw(count), dtype=np.float32).reshape(-1)
        # float32 rounding can reach 1.0, keep the half-open interval
        return np.minimum(values, _BELOW_ONE)


class NumpyProvider(RandomFieldProvider):
    name = "numpy"

    def _acquire(self):
        return np.random.default_rng(self.seed)

    def _draw(self, count: int) -> np.ndarray:
        return self._generator.random(count, dtype=np.float32)


class OpenCVProvider(RandomFieldProvider):
    name = "opencv"

    def _acquire(self):
        if self.seed is not None:
            cv2.setRNGSeed(int(self.seed))
        return cv2.randu

    def _draw(self, count: int) -> np.ndarray:
        values = np.empty((count, 1), dtype=np.float32)
        values = self._generator(values, 0.0, 1.0)
        return values


class PhiloxProvider(RandomFieldProvider):
    name = "philox"

    def _acquire(self):
        return np.random.Generator(np.random.Philox(self.seed))

    def _draw(self, count: int) -> np.ndarray:
        return self._generator.random(count, dtype=np.float32)


PROVIDERS: Dict[str, Type[RandomFieldProvider]] = {
    cls.name: cls for cls in (NumpyProvider, OpenCVProvider, PhiloxProvider)
}


def get_provider(name: str, seed: Optional[int] = SEED) -> RandomFieldProvider:
    try:
        return PROVIDERS[name](seed=seed)
    except KeyError:
        raise ValueError(f"Unknown random field provider {name!r}, choose from {sorted(PROVIDERS)}") from None


def timed_generate(provider: RandomFieldProvider, count: int) -> Tuple[np.ndarray, float]:
    """Run ``provider.generate(count)`` in its own scope and time it in seconds."""
    with provider:
        start = time.perf_counter()
        values = provider.generate(count)
        elapsed = time.perf_counter() - start
    logger.debug("%s generated %d values in %.1f us", provider.name, count, elapsed * 1e6)
    return values, elapsed
