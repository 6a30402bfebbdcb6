"""Deterministic hash embeddings used by the keyword and fallback tiers.

Each UTF-8 byte ``b`` at position ``i`` of the lowercased text is scattered
into three positions of the vector:

    (b*7  + i)   % D  += b/255 * cos(0.1 i)
    (b*13 + 3i)  % D  += b/255 * sin(0.1 i)
    (b*19 + 5i)  % D  += b/255 * 0.5

The result is L2-normalized unless its magnitude is zero (empty input).
These functions are pure: the same text always yields the same vector.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

DEFAULT_DIM = 768


def l2_normalize(vector: np.ndarray) -> np.ndarray:
    """Scale ``vector`` to unit length; the zero vector is returned unchanged."""
    magnitude = float(np.linalg.norm(vector))
    if magnitude == 0.0:
        return vector
    return vector / magnitude


def _byte_positions(text: str) -> tuple[np.ndarray, np.ndarray]:
    data = text.lower().encode("utf-8")
    values = np.frombuffer(data, dtype=np.uint8).astype(np.int64)
    positions = np.arange(len(values), dtype=np.int64)
    return values, positions


def _scatter_text(vector: np.ndarray, text: str) -> None:
    values, positions = _byte_positions(text)
    if values.size == 0:
        return

    dim = vector.shape[0]
    scaled = values / 255.0
    phase = positions * 0.1

    np.add.at(vector, (values * 7 + positions) % dim, scaled * np.cos(phase))
    np.add.at(vector, (values * 13 + positions * 3) % dim, scaled * np.sin(phase))
    np.add.at(vector, (values * 19 + positions * 5) % dim, scaled * 0.5)


def hash_embedding(text: str, dimension: int = DEFAULT_DIM) -> list[float]:
    """Pure byte-scatter embedding of ``text``."""
    vector = np.zeros(dimension, dtype=np.float64)
    _scatter_text(vector, text)
    return l2_normalize(vector).tolist()


def keyword_hash_embedding(
    text: str,
    keywords: Sequence[str],
    dimension: int = DEFAULT_DIM,
) -> list[float]:
    """Byte-scatter embedding of ``text`` reinforced by ranked keywords.

    The text and keywords are scattered together, then every keyword adds
    ``2 * b/255 * weight`` at ``(b*23 + k*7 + i) % D`` where the weight
    decays linearly from 1.0 for the first keyword toward 0.5 for the last.
    """
    vector = np.zeros(dimension, dtype=np.float64)
    _scatter_text(vector, f"{text} {' '.join(keywords)}")

    total = len(keywords)
    for rank, keyword in enumerate(keywords):
        values, positions = _byte_positions(keyword)
        if values.size == 0:
            continue
        weight = 1.0 - (rank / total) * 0.5
        np.add.at(
            vector,
            (values * 23 + rank * 7 + positions) % dimension,
            (values / 255.0) * weight * 2.0,
        )

    return l2_normalize(vector).tolist()
