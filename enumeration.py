"""
Enumerators over the discrete search space: canonical parity vectors,
the codewords (coset) of one parity, and the integer partitions /
permutations used by the partition sieve.
"""
import math

from errors import ConfigurationError


def check_code_length(n, q):
    if n < 2:
        raise ConfigurationError(f"codelength must be at least 2 (got {n}).")
    if n >= q:
        raise ConfigurationError(
            f"codelength must be smaller than the field order ({n} >= {q}).")


###############################################################################
# Parity vectors
###############################################################################

class ParityEnumerator:
    """
    Canonical parity vectors h of length n as discrete logarithms.

    Canonical form: h[0] > h[1] > ... > h[n-2] >= h[n-1] = 0 with values
    in [0, q-1). Scaling the whole constraint lets the last coefficient be
    alpha^0, and permuting coordinates does not change the distance
    spectrum. These C(q-1, n-1) vectors are the representatives searched;
    vectors with repeated free exponents, such as (3, 3, 0, 0) or the
    all-zero vector, are not reachable from them and are only searched when
    given explicitly (parity files of the sieve).
    """

    def __init__(self, n, q):
        check_code_length(n, q)
        self.n = n
        self.q = q
        self.h = [0] * n

    def first(self):
        n = self.n
        for i in range(n - 1):
            self.h[i] = n - 2 - i
        self.h[n - 1] = 0
        return self.h

    def advance(self):
        """Move to the next parity, False once every parity was produced."""
        h = self.h
        top = self.q - 2
        i = 0
        while h[i] >= top - i:
            i += 1
            if i > self.n - 2:
                return False
        h[i] += 1
        for k in range(i, 0, -1):
            h[k - 1] = h[k] + 1
        return True


def iter_parities(n, q):
    enumerator = ParityEnumerator(n, q)
    enumerator.first()
    while True:
        yield tuple(enumerator.h)
        if not enumerator.advance():
            return


def count_parities(n, q):
    check_code_length(n, q)
    return math.comb(q - 1, n - 1)


def is_canonical(h, q):
    n = len(h)
    if n < 2 or h[-1] != 0:
        return False
    if any(v < 0 or v > q - 2 for v in h):
        return False
    return all(h[i] > h[i + 1] for i in range(n - 2))


def normalize_parity(h, q):
    """
    Sorted, zero-terminated form of an arbitrary exponent vector:
    h0 >= h1 >= ... >= 0. Exponents are taken modulo q-1 first.
    """
    if len(h) < 2:
        raise ConfigurationError(f"Parity {list(h)} is too short.")
    reduced = sorted((int(v) % (q - 1) for v in h), reverse=True)
    low = reduced[-1]
    return tuple(v - low for v in reduced)


###############################################################################
# Codewords of one parity
###############################################################################

class CosetEnumerator:
    """
    Odometer over the free coordinates x[0..n-2] in base q. The last
    coordinate is recomputed from the parity after every step, so x is
    always a codeword.
    """

    def __init__(self, field, h):
        self.field = field
        self.h = tuple(h)
        self.n = len(h)
        self.x = [0] * self.n

    def first(self, h=None):
        """All-zero codeword; a new parity of the same length may be given."""
        if h is not None:
            if len(h) != self.n:
                raise ValueError(f"Parity length {len(h)} != {self.n}")
            self.h = tuple(h)
        for i in range(self.n):
            self.x[i] = 0
        return self.x

    def advance(self):
        x = self.x
        last = self.field.q - 1
        for i in range(self.n - 1):
            if x[i] == last:
                x[i] = 0
            else:
                x[i] += 1
                break
        else:
            return False
        x[self.n - 1] = self.field.parity_value(self.h, x)
        return True


def iter_codewords(field, h):
    enumerator = CosetEnumerator(field, h)
    enumerator.first()
    while True:
        yield tuple(enumerator.x)
        if not enumerator.advance():
            return


###############################################################################
# Partitions (partition sieve)
###############################################################################

def integer_partitions(total, max_parts, largest=None):
    """Partitions of `total` into at most `max_parts` positive parts, descending."""
    if largest is None:
        largest = total
    if total == 0:
        yield ()
        return
    if max_parts == 0:
        return
    for part in range(min(total, largest), 0, -1):
        for rest in integer_partitions(total - part, max_parts - 1, part):
            yield (part,) + rest


def distinct_permutations(values):
    """Every distinct ordering of a multiset, in lexicographic order."""
    p = sorted(values)
    n = len(p)
    while True:
        yield tuple(p)
        j = n - 2
        while j >= 0 and p[j] >= p[j + 1]:
            j -= 1
        if j < 0:
            return
        k = n - 1
        while p[k] <= p[j]:
            k -= 1
        p[j], p[k] = p[k], p[j]
        p[j + 1:] = reversed(p[j + 1:])
