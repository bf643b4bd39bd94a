import numpy as np

from errors import ConfigurationError


def validate_points(points):
    points = np.asarray(points)
    if points.ndim != 2 or points.shape[1] != 2:
        raise ConfigurationError(
            f"Constellation must be a list of 2D points (got shape {points.shape}).")
    if not np.issubdtype(points.dtype, np.integer):
        raise ConfigurationError("Constellation coordinates must be integers.")
    q = len(points)
    if q < 2 or q & (q - 1):
        raise ConfigurationError(
            f"Constellation size {q} is not a power of two (characteristic 2 only).")
    return points.astype(np.int64)


def validate_mapping(mapping, q):
    mapping = np.asarray(mapping)
    if mapping.ndim != 1 or len(mapping) != q:
        raise ConfigurationError(
            f"Mapping must hold exactly {q} values (got {mapping.size}).")
    if not np.issubdtype(mapping.dtype, np.integer):
        raise ConfigurationError("Mapping values must be integers.")
    bad = np.flatnonzero((mapping < 0) | (mapping >= q))
    if bad.size:
        raise ConfigurationError(
            f"Mapping value {int(mapping[bad[0]])} at position {int(bad[0])} "
            f"is out of range [0, {q}).")
    return mapping.astype(np.int64)


def quadrance_matrix(points, mapping):
    """Q[i, j] = squared distance between points[mapping[i]] and points[mapping[j]]."""
    mapped = points[mapping]
    diff = mapped[:, None, :] - mapped[None, :, :]
    return np.sum(diff * diff, axis=-1)


def neighbor_ranking(quadrances):
    """
    Row i lists every element sorted by increasing quadrance from i.
    Ties are broken by putting i itself first, then by index, so that
    V[i, 0] == i even when two points coincide.
    """
    q = len(quadrances)
    index = np.broadcast_to(np.arange(q), (q, q))
    not_self = ~np.eye(q, dtype=bool)
    return np.lexsort((index, not_self, quadrances), axis=-1).astype(np.int64)


def minimum_quadrance(quadrances, neighbors):
    """Smallest quadrance between two distinct field elements."""
    q = len(quadrances)
    return int(quadrances[np.arange(q), neighbors[:, 1]].min())


def cutoff_table(sorted_quadrances, qmax, min_quadrance, n):
    """
    dcap[w, j]: first neighbor rank of j that cannot belong to a pair below
    qmax when w free coordinates are active.

    A pair with w >= 1 active free coordinates differs in at least
    max(w, 2) coordinates (one free change always moves the last one), and
    every other differing coordinate adds at least min_quadrance.
    """
    q = sorted_quadrances.shape[0]
    dcap = np.zeros((n + 1, q), dtype=np.int64)
    for w in range(n + 1):
        budget = qmax - max(w - 1, 1) * min_quadrance
        for j in range(q):
            dcap[w, j] = np.searchsorted(sorted_quadrances[j], budget, side="left")
    return dcap


class NeighborTables:
    """
    Everything derived from one (constellation, mapping) pair: quadrances,
    neighbor ranking, minimum quadrance and the depth-adaptive cutoffs.
    Rebuilt as a whole whenever the mapping changes.
    """

    def __init__(self, points, mapping, qmax, n):
        self.points = validate_points(points)
        self.q = len(self.points)
        self.mapping = validate_mapping(mapping, self.q)
        if qmax < 0:
            raise ConfigurationError(f"qmax must be non-negative (got {qmax}).")
        self.qmax = qmax
        self.n = n

        self.quadrances = quadrance_matrix(self.points, self.mapping)
        self.neighbors = neighbor_ranking(self.quadrances)
        self.sorted_quadrances = np.take_along_axis(self.quadrances, self.neighbors, axis=1)
        self.min_quadrance = minimum_quadrance(self.quadrances, self.neighbors)
        self.cutoffs = cutoff_table(self.sorted_quadrances, qmax, self.min_quadrance, n)

    def circles(self, radius_max):
        """circles[r][x]: elements at exactly quadrance r from x, nearest first."""
        circles = [[[] for _ in range(self.q)] for _ in range(radius_max + 1)]
        for x in range(self.q):
            for y, r in zip(self.neighbors[x].tolist(), self.sorted_quadrances[x].tolist()):
                if r > radius_max:
                    break
                circles[r][x].append(y)
        return circles
