"""K-means clustering of color samples into a fixed-size palette."""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np

from palettegen.types import (
    ClusteringCancelled,
    ColorSample,
    InvalidArgument,
    SampleArray,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 65536


@dataclass
class KMeansResult:
    """Outcome of one clustering run."""
    centroids: np.ndarray  # (k, 3), centroid-index order
    labels: np.ndarray     # (n,), assignment to the centroids of the last update
    n_iter: int
    converged: bool

    def colors(self) -> List[ColorSample]:
        return [ColorSample.from_array(c) for c in self.centroids]


def _as_samples(samples: Union[SampleArray, Sequence]) -> np.ndarray:
    """Coerce samples to a float (n, 3) array."""
    try:
        if not isinstance(samples, np.ndarray):
            samples = [tuple(s) for s in samples]
        array = np.asarray(samples, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"samples must be RGB triples: {e}") from e

    if array.size == 0:
        raise InvalidArgument("Cannot cluster an empty sample sequence")
    if array.ndim != 2 or array.shape[1] != 3:
        raise InvalidArgument(f"samples must have shape (n, 3), got {array.shape}")
    if not np.all(np.isfinite(array)):
        raise InvalidArgument("samples contain NaN or infinite values")
    return array


def _make_rng(
    seed: Optional[int], rng: Optional[np.random.Generator]
) -> np.random.Generator:
    if rng is not None:
        return rng
    return np.random.default_rng(seed)


def initial_centroids(samples: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """
    Pick k starting centroids from the samples.

    Shuffles the sample indices and takes the first k. When there are
    fewer samples than centroids, indices are drawn with replacement.
    """
    n = samples.shape[0]
    if n >= k:
        indices = rng.permutation(n)[:k]
    else:
        indices = rng.choice(n, size=k, replace=True)
    return samples[indices].copy()


def assign_labels(samples: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """
    Index of the nearest centroid for every sample.

    Distance is squared Euclidean over R, G, B. Ties resolve to the
    lowest centroid index.
    """
    d2 = ((samples[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)
    return d2.argmin(axis=1)


def _partial_sums(
    chunk: np.ndarray, centroids: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Labels plus per-centroid offset sums and counts for one chunk.

    Offsets are taken from the assigned centroid rather than from zero,
    so samples sitting exactly on a centroid add exactly nothing.
    """
    k = centroids.shape[0]
    labels = assign_labels(chunk, centroids)
    counts = np.bincount(labels, minlength=k)
    offsets = chunk - centroids[labels]
    sums = np.zeros((k, 3), dtype=np.float64)
    for c in range(3):
        sums[:, c] = np.bincount(labels, weights=offsets[:, c], minlength=k)
    return labels, sums, counts


def _update(centroids: np.ndarray, offset_sums: np.ndarray, counts: np.ndarray) -> np.ndarray:
    """Mean of each cluster; empty clusters keep their previous centroid."""
    updated = centroids.copy()
    filled = counts > 0
    updated[filled] = centroids[filled] + offset_sums[filled] / counts[filled, None]
    return np.clip(updated, 0.0, 1.0)


def kmeans(
    samples: Union[SampleArray, Sequence],
    k: int,
    max_iterations: int = 10,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    n_jobs: int = 1,
    should_stop: Optional[Callable[[], bool]] = None,
) -> KMeansResult:
    """
    Cluster color samples into k centroids.

    Runs Lloyd iterations until no centroid changes value or
    max_iterations is reached. Samples are assigned in chunks; each chunk
    contributes per-centroid offset sums and counts that are reduced before the
    centroids are updated, so chunks can be processed on a thread pool.

    Args:
        samples: (n, 3) array or sequence of RGB triples in [0, 1]
        k: Number of centroids (>= 1, may exceed n)
        max_iterations: Upper bound on iterations (>= 0)
        seed: Seed for the initialization RNG
        rng: Generator to use instead of seeding a new one
        chunk_size: Samples per assignment chunk
        n_jobs: Threads used for the assignment step
        should_stop: Polled once per iteration; True aborts the run

    Returns:
        KMeansResult with exactly k centroids in index order

    Raises:
        InvalidArgument: If samples is empty or malformed, k < 1,
            max_iterations < 0, chunk_size < 1 or n_jobs < 1
        ClusteringCancelled: If should_stop returned True
    """
    if k < 1:
        raise InvalidArgument(f"k must be >= 1, got {k}")
    if max_iterations < 0:
        raise InvalidArgument(f"max_iterations must be >= 0, got {max_iterations}")
    if chunk_size < 1:
        raise InvalidArgument(f"chunk_size must be >= 1, got {chunk_size}")
    if n_jobs < 1:
        raise InvalidArgument(f"n_jobs must be >= 1, got {n_jobs}")

    data = _as_samples(samples)
    n = data.shape[0]
    generator = _make_rng(seed, rng)

    centroids = initial_centroids(data, k, generator)
    chunks = [data[i:i + chunk_size] for i in range(0, n, chunk_size)]

    logger.info(f"Clustering {n} samples into {k} colors (max {max_iterations} iterations)")

    executor = ThreadPoolExecutor(max_workers=n_jobs) if n_jobs > 1 and len(chunks) > 1 else None
    n_iter = 0
    converged = False
    try:
        for _ in range(max_iterations):
            if should_stop is not None and should_stop():
                raise ClusteringCancelled(f"Clustering stopped after {n_iter} iterations")

            if executor is not None:
                partials = list(executor.map(lambda c: _partial_sums(c, centroids), chunks))
            else:
                partials = [_partial_sums(c, centroids) for c in chunks]

            # Barrier: every chunk is reduced before centroids move
            labels = np.concatenate([p[0] for p in partials])
            offset_sums = np.sum([p[1] for p in partials], axis=0)
            counts = np.sum([p[2] for p in partials], axis=0)

            previous = centroids
            centroids = _update(previous, offset_sums, counts)
            n_iter += 1

            empty = int(np.count_nonzero(counts == 0))
            if empty:
                logger.debug(f"Iteration {n_iter}: {empty} empty clusters kept their centroid")

            if np.array_equal(centroids, previous):
                converged = True
                break
    finally:
        if executor is not None:
            executor.shutdown(wait=True)

    if n_iter == 0:
        # No iteration ran; report the assignment to the initial centroids
        labels = np.concatenate([assign_labels(c, centroids) for c in chunks])

    if converged:
        logger.info(f"Converged after {n_iter} iterations")
    else:
        logger.debug(f"Stopped after {n_iter} iterations without convergence")

    return KMeansResult(centroids=centroids, labels=labels, n_iter=n_iter, converged=converged)


def cluster(
    samples: Union[SampleArray, Sequence],
    k: int,
    max_iterations: int = 10,
    seed: Optional[int] = None,
    **kwargs,
) -> List[ColorSample]:
    """Cluster samples and return the k centroid colors in index order."""
    return kmeans(samples, k, max_iterations, seed=seed, **kwargs).colors()
