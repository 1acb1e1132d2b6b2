"""
Helpers shared by the engine, the CLI and the fitness model.
"""

import logging
from typing import Optional

import torch


LOG_FORMAT = '[%(levelname)s] %(name)s: %(message)s'


def setup_logger(name: str, level: str = 'INFO') -> logging.Logger:
    """
    Attach one stream handler to the `name` logger and set its level.

    Child loggers (neuroracer.engine, neuroracer.selection, ...) propagate to
    it, so configuring the package logger once covers every module. Calling
    it again only changes the level.

    Args:
        name: Logger to configure, normally 'neuroracer'
        level: Level name such as 'DEBUG' or 'info'
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger


def make_generator(seed: Optional[int] = None) -> torch.Generator:
    """
    Create the random context used by every randomized operation.

    Args:
        seed: Seed for reproducible runs; None seeds from system entropy

    Returns:
        A CPU torch.Generator
    """
    generator = torch.Generator()
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(seed)
    return generator


def format_time(seconds: float) -> str:
    """Wall-clock duration as '42.0s', '3.5m' or '1.2h'."""
    for unit, size in (('h', 3600.0), ('m', 60.0)):
        if seconds >= size:
            return f"{seconds / size:.1f}{unit}"
    return f"{seconds:.1f}s"


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """numerator / denominator, or `default` when nothing was counted."""
    if denominator == 0:
        return default
    return numerator / denominator
