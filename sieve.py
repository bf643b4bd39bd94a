"""
Partition sieve: best parity for a single target quadrance.

Instead of walking neighbor ranks, every pair at exactly `quad` is reached
through the per-coordinate quadrances it splits into: an integer partition
of quad into at most n parts, in every distinct order. Free coordinates
pick a neighbor on the circle of the chosen radius, the last coordinate
must land on its own radius. A parity is dropped as soon as its pair count
exceeds the best count found so far.
"""
import itertools
import time

from enumeration import CosetEnumerator, check_code_length, distinct_permutations, integer_partitions, iter_parities
from errors import ConfigurationError
from geometry import NeighborTables
from report import format_multiplicity


def quadrance_patterns(quad, n):
    """Every ordered split of quad into n non-negative per-coordinate quadrances."""
    patterns = []
    for partition in integer_partitions(quad, n):
        padded = partition + (0,) * (n - len(partition))
        patterns.extend(distinct_permutations(padded))
    return patterns


class PartitionSieve:

    def __init__(self, field, points, n, quad, verbose=True):
        check_code_length(n, field.q)
        if len(points) != field.q:
            raise ConfigurationError(
                f"Constellation has {len(points)} points, GF({field.q}) needs {field.q}.")
        if quad < 1:
            raise ConfigurationError(f"Target quadrance must be positive (got {quad}).")
        self.field = field
        self.points = points
        self.n = n
        self.quad = quad
        self.verbose = verbose
        self.patterns = quadrance_patterns(quad, n)

        self.tables = None
        self.circles = None
        self._quadrance_rows = None
        self.stats = None
        self.reset_stats()

    def reset_stats(self):
        self.stats = {'parities_examined': 0, 'parities_aborted': 0, 'pairs_checked': 0}

    def prepare(self, mapping):
        self.tables = NeighborTables(self.points, mapping, self.quad + 1, self.n)
        self.circles = self.tables.circles(self.quad)
        self._quadrance_rows = self.tables.quadrances.tolist()

    def search(self, mapping, parities=None):
        self.reset_stats()
        start_time = time.time()
        self.prepare(mapping)
        if self.verbose:
            print(f"    > [Sieve] {len(self.patterns)} quadrance patterns for quad={self.quad}")

        if parities is None:
            parities = iter_parities(self.n, self.field.q)

        best_parity = None
        best_multiplicity = None
        improvements = []
        for h in parities:
            multiplicity, aborted = self.parity_multiplicity(h, best_multiplicity)
            if aborted:
                continue
            if best_multiplicity is None or multiplicity <= best_multiplicity:
                best_parity = tuple(h)
                best_multiplicity = multiplicity
                improvements.append((best_parity, multiplicity))
                if self.verbose:
                    print(format_multiplicity(self.field, best_parity, multiplicity), flush=True)

        return {
            'mapping': self.tables.mapping.tolist(),
            'best_parity': best_parity,
            'best_multiplicity': best_multiplicity,
            'improvements': improvements,
            'stats': dict(self.stats),
            'search_time': time.time() - start_time,
        }

    def parity_multiplicity(self, h, bound=None):
        """
        Number of codeword pairs of h at exactly quad.

        Returns (multiplicity, aborted); counting stops once it exceeds bound.
        """
        if self.tables is None:
            raise RuntimeError("prepare() must be called with a mapping first")
        free = self.n - 1
        h = tuple(h)
        scaled = [self.field.scale_table(k) for k in h[:free]]
        circles = self.circles
        self.stats['parities_examined'] += 1

        multiplicity = 0
        checked = 0
        for pattern in self.patterns:
            target = pattern[free]
            coset = CosetEnumerator(self.field, h)
            x = coset.first()
            while True:
                rings = [circles[pattern[i]][x[i]] for i in range(free)]
                if all(rings) and circles[target][x[free]]:
                    last_row = self._quadrance_rows[x[free]]
                    for ys in itertools.product(*rings):
                        acc = 0
                        for j in range(free):
                            acc ^= scaled[j][ys[j]]
                        checked += 1
                        if last_row[acc] == target:
                            multiplicity += 1
                            if bound is not None and multiplicity > bound:
                                self.stats['pairs_checked'] += checked
                                self.stats['parities_aborted'] += 1
                                return multiplicity, True
                if not coset.advance():
                    break

        self.stats['pairs_checked'] += checked
        return multiplicity, False
