"""
Distance spectra: S[d] counts the (codeword, neighbor) pairs at quadrance d,
for d < qmax.

Ordering: at the first quadrance (from qmin upward) where two spectra
differ, the one with fewer pairs is better, i.e. a better spectrum has a
larger effective minimum distance or fewer nearest neighbors. Adding pairs
can only make a spectrum worse, which is what makes early abort valid.
"""
import numpy as np


def new_spectrum(qmax):
    return np.zeros(max(qmax, 0), dtype=np.int64)


def accumulate(spectrum, quadrance):
    if 0 <= quadrance < len(spectrum):
        spectrum[quadrance] += 1


def compare(a, b, qmin=1):
    """-1 if a is better than b, 1 if worse, 0 if equal on [qmin, qmax)."""
    a = np.asarray(a)
    b = np.asarray(b)
    stop = min(len(a), len(b))
    if qmin >= stop:
        return 0
    diff = np.flatnonzero(a[qmin:stop] != b[qmin:stop])
    if diff.size == 0:
        return 0
    d = qmin + diff[0]
    return -1 if a[d] < b[d] else 1


def is_at_least_as_good(candidate, best, qmin=1):
    """True when there is no best yet or candidate does not compare worse."""
    return best is None or compare(candidate, best, qmin) <= 0


def total_pairs(spectrum):
    return int(np.sum(spectrum))


def minimum_distance(spectrum, qmin=1):
    """First quadrance >= qmin with at least one pair, None if there is none."""
    nonzero = np.flatnonzero(np.asarray(spectrum)[qmin:])
    if nonzero.size == 0:
        return None
    return int(qmin + nonzero[0])
