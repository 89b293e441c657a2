"""
Similarity distances between temporal values.
The values are compared as the ordered lists of their instant values, whatever their interpolation.
"""
import numpy as np
from scipy.spatial.distance import directed_hausdorff

from rt_temporal_commons.Shared.Errors import DomainError
from rt_temporal_core.Temporal.Temporal import Temporal


def __matrices(a: Temporal, b: Temporal) -> tuple[np.ndarray, np.ndarray]:
	if a.domain != b.domain: raise DomainError(f"Cannot compare {a.domain} with {b.domain}.")
	return (a.domain.toArray(a.values()), b.domain.toArray(b.values()))

def __pairwise(p: np.ndarray, q: np.ndarray) -> np.ndarray:
	"""The Euclidean distance between every row of `p` and every row of `q`."""
	return np.linalg.norm(p[:, np.newaxis, :] - q[np.newaxis, :, :], axis=2)

def frechetDistance(a: Temporal, b: Temporal) -> float:
	"""The discrete Fréchet distance."""
	(p, q) = __matrices(a, b)
	d = __pairwise(p, q)
	(n, m) = d.shape
	ca = np.full((n, m), np.inf)
	ca[0, 0] = d[0, 0]
	for i in range(1, n): ca[i, 0] = max(ca[i - 1, 0], d[i, 0])
	for j in range(1, m): ca[0, j] = max(ca[0, j - 1], d[0, j])
	for i in range(1, n):
		for j in range(1, m):
			ca[i, j] = max(min(ca[i - 1, j], ca[i - 1, j - 1], ca[i, j - 1]), d[i, j])
	return float(ca[n - 1, m - 1])

def dynTimeWarpDistance(a: Temporal, b: Temporal) -> float:
	"""The dynamic time warping distance, the least total distance of a monotonic matching of both instant lists."""
	(p, q) = __matrices(a, b)
	d = __pairwise(p, q)
	(n, m) = d.shape
	cost = np.full((n + 1, m + 1), np.inf)
	cost[0, 0] = 0.0
	for i in range(1, n + 1):
		for j in range(1, m + 1):
			cost[i, j] = d[i - 1, j - 1] + min(cost[i - 1, j], cost[i - 1, j - 1], cost[i, j - 1])
	return float(cost[n, m])

def hausdorffDistance(a: Temporal, b: Temporal) -> float:
	(p, q) = __matrices(a, b)
	return float(max(directed_hausdorff(p, q)[0], directed_hausdorff(q, p)[0]))
