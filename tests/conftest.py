"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

WHITE_PX = (255, 255, 255, 255)
BLACK_PX = (0, 0, 0, 255)
MID_GRAY_PX = (130, 130, 130, 255)


def solid(width: int, height: int, rgba: tuple[int, int, int, int]) -> np.ndarray:
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[:, :] = rgba
    return img


def centered_square(size: int, square: int, fg: tuple, bg: tuple = WHITE_PX) -> np.ndarray:
    """``size``×``size`` canvas of ``bg`` with a ``square``×``square`` block of ``fg`` in the middle."""
    img = solid(size, size, bg)
    start = (size - square) // 2
    img[start:start + square, start:start + square] = fg
    return img


def ring_with_hole(size: int = 11) -> np.ndarray:
    """White canvas, black square ring (2px wall) enclosing a white hole."""
    img = solid(size, size, WHITE_PX)
    img[2:size - 2, 2:size - 2] = BLACK_PX
    img[4:size - 4, 4:size - 4] = WHITE_PX
    return img


def save_png(path, pixels: np.ndarray) -> None:
    Image.fromarray(pixels).save(path, format="PNG")


@pytest.fixture
def black_square_image() -> np.ndarray:
    # 10×10 white border around a 4×4 opaque black centre
    return centered_square(10, 4, BLACK_PX)


@pytest.fixture
def gray_square_image() -> np.ndarray:
    return centered_square(10, 4, MID_GRAY_PX)


@pytest.fixture
def transparent_image() -> np.ndarray:
    return solid(5, 5, (0, 0, 0, 0))


@pytest.fixture
def full_bleed_image() -> np.ndarray:
    """Dark frame on every border pixel with white pixels only inside."""
    img = solid(8, 8, BLACK_PX)
    img[3:5, 3:5] = WHITE_PX
    return img


@pytest.fixture
def ring_image() -> np.ndarray:
    return ring_with_hole()
