from __future__ import annotations

from collections.abc import Iterable, Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as _pairwise_cosine

from ..directory.models import BusinessRecord


class DimensionMismatch(ValueError):
    """Raised when two vectors were built from different category lists."""


def build_category_list(businesses: Iterable[BusinessRecord]) -> list[str]:
    """Distinct categories across *businesses*, sorted so repeated calls agree."""
    categories: set[str] = set()
    for business in businesses:
        categories.update(business.categories)
    return sorted(categories)


def vectorize(business: BusinessRecord, category_list: Sequence[str]) -> np.ndarray:
    """Binary vector: dimension i is 1 when the business carries ``category_list[i]``."""
    owned = set(business.categories)
    return np.array([1.0 if cat in owned else 0.0 for cat in category_list])


def vectorize_all(
    businesses: Sequence[BusinessRecord], category_list: Sequence[str],
) -> np.ndarray:
    """Stack ``vectorize`` results into an (N, D) matrix."""
    matrix = np.zeros((len(businesses), len(category_list)))
    position = {cat: i for i, cat in enumerate(category_list)}
    for row, business in enumerate(businesses):
        for cat in set(business.categories):
            col = position.get(cat)
            if col is not None:
                matrix[row, col] = 1.0
    return matrix


def user_preference_vector(
    bookmarked: Sequence[BusinessRecord], category_list: Sequence[str],
) -> np.ndarray:
    """
    Fraction of bookmarked businesses that carry each category.

    With no bookmarks every category gets the same weight ``1/N``.
    """
    if not category_list:
        return np.zeros(0)
    if not bookmarked:
        return np.full(len(category_list), 1.0 / len(category_list))
    return vectorize_all(bookmarked, category_list).sum(axis=0) / len(bookmarked)


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Cosine similarity clipped to ``[0, 1]``.

    Returns 0.0 when either vector has zero norm.

    Raises:
        DimensionMismatch: if the vectors differ in length.
    """
    a = np.asarray(vec_a, dtype=float).ravel()
    b = np.asarray(vec_b, dtype=float).ravel()
    if a.shape != b.shape:
        raise DimensionMismatch(f"Vector lengths differ: {a.size} != {b.size}")

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = float(np.dot(a, b) / (norm_a * norm_b))
    return min(1.0, max(0.0, similarity))


def score_candidates(user_vector: np.ndarray, candidate_matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of every candidate row against *user_vector*."""
    if candidate_matrix.shape[0] == 0:
        return np.zeros(0)
    if candidate_matrix.shape[1] != user_vector.shape[0]:
        raise DimensionMismatch(
            f"Vector lengths differ: {user_vector.shape[0]} != {candidate_matrix.shape[1]}"
        )
    if user_vector.shape[0] == 0:
        return np.zeros(candidate_matrix.shape[0])

    # Rows with zero norm come back as 0 from sklearn's normalisation
    scores = _pairwise_cosine(user_vector.reshape(1, -1), candidate_matrix).flatten()
    return np.clip(scores, 0.0, 1.0)
