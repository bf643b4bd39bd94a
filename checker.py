"""
Independent checks of the search engine: exhaustive reference spectra,
codeword verification with the `galois` library, parity list sanity.
"""
import itertools

import galois
import numpy as np

from enumeration import is_canonical, iter_codewords


def reference_field(field):
    """The same GF(2^m) built by galois from the same polynomial."""
    if field.m == 1:
        return galois.GF(2)
    return galois.GF(field.q, irreducible_poly=galois.Poly.Int(field.polynomial))


def galois_syndrome(field, h, x):
    GF = reference_field(field)
    alpha = GF(field.alpha)
    total = GF(0)
    for k, v in zip(h, x):
        total += (alpha ** int(k)) * GF(int(v))
    return int(total)


def verify_codeword(field, h, x):
    return len(x) == len(h) and galois_syndrome(field, h, x) == 0


def verify_parities(parities, q):
    """Canonical form and no duplicates."""
    seen = set()
    for h in parities:
        h = tuple(h)
        if not is_canonical(h, q) or h in seen:
            return False
        seen.add(h)
    return True


def brute_force_spectrum(field, tables, h, qmax=None):
    """
    Spectrum of h without any cutoff: every codeword against every rank
    vector 0..q-1 on each free coordinate.
    """
    if qmax is None:
        qmax = tables.qmax
    q = field.q
    n = len(h)
    free = n - 1
    Q = tables.quadrances.tolist()
    V = tables.neighbors.tolist()
    spectrum = np.zeros(max(qmax, 0), dtype=np.int64)
    for x in iter_codewords(field, h):
        for ranks in itertools.product(range(q), repeat=free):
            y = [V[x[i]][ranks[i]] for i in range(free)]
            y_last = field.parity_value(h, y)
            total = Q[x[free]][y_last] + sum(Q[x[i]][y[i]] for i in range(free))
            if total < qmax:
                spectrum[total] += 1
    return spectrum
