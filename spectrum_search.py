import time

import numpy as np

from enumeration import CosetEnumerator, check_code_length, iter_parities
from errors import ConfigurationError
from geometry import NeighborTables
from report import format_improvement
from spectrum import is_at_least_as_good
from traversal import NeighborOdometer


class SpectrumSearch:
    """
    Best single-parity-check code for a constellation, one mapping at a time.

    For every canonical parity the distance spectrum of its coset is
    accumulated codeword by codeword; a parity is dropped as soon as its
    partial spectrum is worse than the best complete one.
    """

    def __init__(self, field, points, n, qmax, qmin=1, early_abort=True, verbose=True):
        check_code_length(n, field.q)
        if len(points) != field.q:
            raise ConfigurationError(
                f"Constellation has {len(points)} points, GF({field.q}) needs {field.q}.")
        if qmax < 0:
            raise ConfigurationError(f"qmax must be non-negative (got {qmax}).")
        if qmin < 0:
            raise ConfigurationError(f"qmin must be non-negative (got {qmin}).")
        self.field = field
        self.points = points
        self.n = n
        self.qmax = qmax
        self.qmin = qmin
        self.early_abort = early_abort
        self.verbose = verbose

        # Scratch state shared by every parity and codeword of a run
        free = n - 1
        self.odometer = NeighborOdometer(free, field.q - 1)
        self.coset = CosetEnumerator(field, (0,) * n)
        self.tables = None
        self._quadrance_rows = None
        self._neighbor_rows = None
        self._cap_columns = None
        self._spectrum = [0] * max(qmax, 0)
        self._scaled = [[0] * field.q for _ in range(free)]
        self._q_rows = [None] * free
        self._v_rows = [None] * free
        self._caps = [None] * free
        self._y = [0] * free

        self.stats = None
        self.reset_stats()

    def reset_stats(self):
        self.stats = {
            'parities_examined': 0,
            'parities_aborted': 0,
            'codewords_visited': 0,
            'combinations_visited': 0,
            'pairs_recorded': 0,
        }

    def prepare(self, mapping):
        """Rebuild quadrances, neighbor ranking and cutoffs for a new mapping."""
        self.tables = NeighborTables(self.points, mapping, self.qmax, self.n)
        self._quadrance_rows = self.tables.quadrances.tolist()
        self._neighbor_rows = self.tables.neighbors.tolist()
        self._cap_columns = self.tables.cutoffs.T.tolist()
        if self.verbose:
            print(f"    > [Tables] min quadrance {self.tables.min_quadrance}, "
                  f"level-1 cutoffs {self.tables.cutoffs[1].tolist()}")

    def search(self, mapping, parities=None):
        """
        Search every parity (canonical ones by default) under one mapping.

        Returns:
            dict: best parity and spectrum, every improvement in order,
            statistics and elapsed time.
        """
        self.reset_stats()
        start_time = time.time()
        self.prepare(mapping)

        if parities is None:
            parities = iter_parities(self.n, self.field.q)

        best_parity = None
        best_spectrum = None
        improvements = []
        for h in parities:
            spectrum, aborted = self.parity_spectrum(h, best_spectrum)
            if aborted:
                continue
            if is_at_least_as_good(spectrum, best_spectrum, self.qmin):
                best_parity = tuple(h)
                best_spectrum = spectrum
                improvements.append((best_parity, spectrum))
                if self.verbose:
                    print(format_improvement(self.field, best_parity, spectrum), flush=True)

        return {
            'mapping': self.tables.mapping.tolist(),
            'best_parity': best_parity,
            'best_spectrum': best_spectrum,
            'improvements': improvements,
            'stats': dict(self.stats),
            'search_time': time.time() - start_time,
        }

    def spectrum_table(self, mapping, parities=None):
        """
        Complete spectrum of every parity (canonical ones by default), with
        no best-parity selection and no early abort.

        Returns:
            dict: `spectra` as a list of (parity, spectrum) in enumeration
            order, statistics and elapsed time.
        """
        self.reset_stats()
        start_time = time.time()
        self.prepare(mapping)

        if parities is None:
            parities = iter_parities(self.n, self.field.q)

        spectra = []
        for h in parities:
            spectrum, _ = self.parity_spectrum(h)
            spectra.append((tuple(h), spectrum))

        return {
            'mapping': self.tables.mapping.tolist(),
            'spectra': spectra,
            'stats': dict(self.stats),
            'search_time': time.time() - start_time,
        }

    def parity_spectrum(self, h, best=None):
        """
        Spectrum of the coset of h.

        Returns (spectrum, aborted); aborted is True when the partial
        spectrum became worse than `best` and the codeword loop stopped.
        """
        if self.tables is None:
            raise RuntimeError("prepare() must be called with a mapping first")
        h = tuple(h)
        for j in range(self.n - 1):
            self.field.scale_table(h[j], self._scaled[j])
        spectrum = self._spectrum
        for d in range(len(spectrum)):
            spectrum[d] = 0

        self.stats['parities_examined'] += 1
        coset = self.coset
        x = coset.first(h)
        while True:
            self._codeword_pairs(x, spectrum)
            self.stats['codewords_visited'] += 1

            if (self.early_abort and best is not None
                    and not is_at_least_as_good(spectrum, best, self.qmin)):
                self.stats['parities_aborted'] += 1
                return np.array(spectrum, dtype=np.int64), True

            if not coset.advance():
                break

        return np.array(spectrum, dtype=np.int64), False

    def _codeword_pairs(self, x, spectrum):
        """Record every neighbor of codeword x closer than qmax."""
        qmax = self.qmax
        free = self.n - 1
        scaled = self._scaled
        q_rows = self._q_rows
        v_rows = self._v_rows
        caps = self._caps
        y = self._y
        for i in range(free):
            v = x[i]
            q_rows[i] = self._quadrance_rows[v]
            v_rows[i] = self._neighbor_rows[v]
            caps[i] = self._cap_columns[v]
            y[i] = v
        last_row = self._quadrance_rows[x[free]]
        acc = x[free]
        partial = 0

        odometer = self.odometer
        odometer.reset(caps)
        ranks = odometer.ranks
        visited = 0
        recorded = 0
        while True:
            total = partial + last_row[acc]
            visited += 1
            if total < qmax:
                spectrum[total] += 1
                recorded += 1

            j = odometer.advance()
            if j is None:
                break
            old = y[j]
            new = v_rows[j][ranks[j]]
            y[j] = new
            partial += q_rows[j][new] - q_rows[j][old]
            acc ^= scaled[j][old] ^ scaled[j][new]

        self.stats['combinations_visited'] += visited
        self.stats['pairs_recorded'] += recorded
