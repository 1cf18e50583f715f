"""
Random Sources

The sampler consumes randomness through a two-method capability:

    uniform() -> float in [0, 1)
    normal()  -> float ~ N(0, 1)

Draw order is part of the reproducibility contract: every call returns the
next value of one fixed stream, so two models built the same way and given
equally seeded sources produce identical chains.

Implementations:
    NumpyRandomSource - numpy Generator (PCG64), the default
    JaxRandomSource   - JAX PRNG keys; draws are generated in blocks of
                        `block_size` and served from a host-side buffer
"""

from typing import Optional, Protocol, runtime_checkable

import numpy as np

from . import jax_config  # noqa: F401
import jax
import jax.random as random


@runtime_checkable
class RandomSource(Protocol):
    """Capability consumed by nodes and the model."""

    def uniform(self) -> float:
        ...

    def normal(self) -> float:
        ...


class NumpyRandomSource:
    """
    Random source backed by numpy.random.Generator.

    Args:
        seed: Seed for np.random.default_rng. None uses system entropy.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._gen = np.random.default_rng(seed)

    def uniform(self) -> float:
        return float(self._gen.random())

    def normal(self) -> float:
        return float(self._gen.standard_normal())

    def __repr__(self):
        return f"NumpyRandomSource(seed={self.seed})"


def gen_rng_keys(rng_seed: int):
    """Generate JAX random keys from seed.

    Returns:
        (uniform_key, normal_key): Tuple of JAX PRNGKeys, one per stream
    """
    mkey = jax.random.PRNGKey(rng_seed)
    uniform_key, normal_key = random.split(mkey, 2)
    return uniform_key, normal_key


class _KeyedStream:
    """Host-side buffer over a JAX key, refilled one block at a time."""

    def __init__(self, key, block_size, draw_fn):
        self._key = key
        self._block_size = block_size
        self._draw_fn = draw_fn
        self._buffer = np.empty(0)
        self._pos = 0

    def next(self) -> float:
        if self._pos >= self._buffer.shape[0]:
            self._key, draw_key = random.split(self._key)
            self._buffer = np.asarray(self._draw_fn(draw_key, (self._block_size,)))
            self._pos = 0
        value = self._buffer[self._pos]
        self._pos += 1
        return float(value)


class JaxRandomSource:
    """
    Random source backed by JAX's counter-based PRNG.

    The uniform and normal streams use independent keys split from the seed,
    so the sequence of normals never depends on how many uniforms were drawn.

    Args:
        seed: Integer seed for jax.random.PRNGKey
        block_size: Number of draws generated per device call
    """

    def __init__(self, seed: int = 42, block_size: int = 4096):
        if block_size < 1:
            raise ValueError(f"block_size must be >= 1, got {block_size}")
        self.seed = seed
        self.block_size = block_size
        uniform_key, normal_key = gen_rng_keys(seed)
        self._uniform = _KeyedStream(uniform_key, block_size, random.uniform)
        self._normal = _KeyedStream(normal_key, block_size, random.normal)

    def uniform(self) -> float:
        return self._uniform.next()

    def normal(self) -> float:
        return self._normal.next()

    def __repr__(self):
        return f"JaxRandomSource(seed={self.seed}, block_size={self.block_size})"
