# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Name-keyed registry for the two choice points of the chain.

The chain has exactly two places where a variant is picked: the matrix
source (``mandel`` or ``randmat``) and the mask strategy (``invperc`` or
``thresh``). Each variant registers a builder that takes the ChainConfig
and returns a ready-to-call capability:

  MatrixSource:  source(rows, cols, workers) -> IntMatrix
  MaskStrategy:  strategy(matrix) -> BoolMatrix

The chain resolves both once, before the first stage runs, so a typo in
the config fails before any work is done. Registries are filled exactly
once at import time by ``_register_builtins()``.
"""

import functools
import logging
from typing import Callable, Protocol

import torch

from cowichan.config.schema import ChainConfig
from cowichan.kernels.generators import mandel, randmat
from cowichan.kernels.masks import invperc, thresh

logger = logging.getLogger(__name__)


class MatrixSource(Protocol):
    """Produces the integer matrix I."""

    def __call__(self, rows: int, cols: int, workers: int) -> torch.Tensor: ...


class MaskStrategy(Protocol):
    """Derives the boolean matrix B from I."""

    def __call__(self, matrix: torch.Tensor) -> torch.Tensor: ...


GeneratorBuilder = Callable[[ChainConfig], MatrixSource]
MaskBuilder = Callable[[ChainConfig], MaskStrategy]

_GENERATOR_REGISTRY: dict[str, GeneratorBuilder] = {}
_MASK_REGISTRY: dict[str, MaskBuilder] = {}


def register_generator(name: str, builder: GeneratorBuilder) -> None:
    """
    Register a matrix source builder under a unique name.

    Raises:
        ValueError: If ``name`` is already registered.
    """
    if name in _GENERATOR_REGISTRY:
        raise ValueError(f"Generator '{name}' is already registered")
    _GENERATOR_REGISTRY[name] = builder
    logger.debug("registered_generator", extra={"generator": name})


def register_mask(name: str, builder: MaskBuilder) -> None:
    """
    Register a mask strategy builder under a unique name.

    Raises:
        ValueError: If ``name`` is already registered.
    """
    if name in _MASK_REGISTRY:
        raise ValueError(f"Mask '{name}' is already registered")
    _MASK_REGISTRY[name] = builder
    logger.debug("registered_mask", extra={"mask": name})


def build_source(config: ChainConfig) -> MatrixSource:
    """
    Resolve ``config.generator`` into a configured MatrixSource.

    Raises:
        KeyError: If the generator name is not registered.
    """
    if config.generator not in _GENERATOR_REGISTRY:
        available = sorted(_GENERATOR_REGISTRY)
        raise KeyError(f"Unknown generator '{config.generator}'. Available: {available}")
    return _GENERATOR_REGISTRY[config.generator](config)


def build_mask(config: ChainConfig) -> MaskStrategy:
    """
    Resolve ``config.mask`` into a configured MaskStrategy.

    Raises:
        KeyError: If the mask name is not registered.
    """
    if config.mask not in _MASK_REGISTRY:
        available = sorted(_MASK_REGISTRY)
        raise KeyError(f"Unknown mask '{config.mask}'. Available: {available}")
    return _MASK_REGISTRY[config.mask](config)


def list_generators() -> list[str]:
    """Return sorted list of all registered generator names."""
    return sorted(_GENERATOR_REGISTRY)


def list_masks() -> list[str]:
    """Return sorted list of all registered mask names."""
    return sorted(_MASK_REGISTRY)


def _mandel_source(config: ChainConfig) -> MatrixSource:
    region = config.mandel

    def source(rows: int, cols: int, workers: int) -> torch.Tensor:
        return mandel(rows, cols, region.x0, region.y0, region.dx, region.dy, workers=workers)

    return source


def _randmat_source(config: ChainConfig) -> MatrixSource:
    params = config.randmat

    def source(rows: int, cols: int, workers: int) -> torch.Tensor:
        return randmat(rows, cols, params.seed, limit=params.limit, workers=workers)

    return source


def _register_builtins() -> None:
    register_generator("mandel", _mandel_source)
    register_generator("randmat", _randmat_source)
    register_mask("invperc", lambda config: functools.partial(invperc, fill_count=config.invperc.fill_count))
    register_mask("thresh", lambda config: functools.partial(thresh, percent=config.thresh.percent))


_register_builtins()
