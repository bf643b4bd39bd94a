import numpy as np

from errors import ConfigurationError

# Primitive polynomials for GF(2^m), binary representation.
# X^3 + X + 1 -> 1011 -> 0xb
PRIMITIVE_POLYNOMIALS = {
    1: 0x3,     # X + 1
    2: 0x7,     # X^2 + X + 1
    3: 0xb,     # X^3 + X + 1
    4: 0x13,    # X^4 + X + 1
    5: 0x25,    # X^5 + X^2 + 1
    6: 0x43,    # X^6 + X + 1
    7: 0x89,    # X^7 + X^3 + 1
    8: 0x11d,   # X^8 + X^4 + X^3 + X^2 + 1
    9: 0x221,   # X^9 + X^5 + 1
    10: 0x409,  # X^10 + X^3 + 1
}

MAX_DEGREE = max(PRIMITIVE_POLYNOMIALS)


class GaloisField:
    """
    GF(q) with q = 2^m, elements are the integers 0..q-1.

    Addition is XOR (characteristic 2). Multiplication goes through the
    discrete logarithm with respect to the primitive element alpha = X,
    so the two tables below are the whole field.
    """

    def __init__(self, m, polynomial=None):
        if m not in PRIMITIVE_POLYNOMIALS:
            raise ConfigurationError(
                f"GF(2^{m}) is not supported (degree must be 1..{MAX_DEGREE}).")
        self.m = m
        self.q = 1 << m
        self.order = self.q - 1
        self.polynomial = PRIMITIVE_POLYNOMIALS[m] if polynomial is None else polynomial
        if self.polynomial.bit_length() - 1 != m:
            raise ConfigurationError(
                f"Polynomial {self.polynomial:#x} does not have degree {m}.")
        self.log = np.full(self.q, -1, dtype=np.int64)
        self.exp = np.zeros(self.order, dtype=np.int64)
        self._init_tables()
        self.alpha = int(self.exp[1]) if self.order > 1 else 1

        # Plain lists for the hot loops
        self._log = self.log.tolist()
        self._exp = self.exp.tolist()

    @classmethod
    def from_polynomial(cls, polynomial):
        """Build the field whose size is implied by the degree of `polynomial`."""
        if polynomial < 2:
            raise ConfigurationError(f"Invalid primitive polynomial {polynomial:#x}.")
        return cls(polynomial.bit_length() - 1, polynomial)

    def _init_tables(self):
        x = 1
        for k in range(self.order):
            if x == 0 or self.log[x] != -1:
                raise ConfigurationError(
                    f"Polynomial {self.polynomial:#x} is not primitive "
                    f"(alpha has order {k}).")
            self.log[x] = k
            self.exp[k] = x
            x <<= 1
            if x >= self.q:
                x ^= self.polynomial
        if x != 1:
            raise ConfigurationError(
                f"Polynomial {self.polynomial:#x} is not primitive.")

    def __repr__(self):
        return f"GaloisField(q={self.q}, polynomial={self.polynomial:#x})"

    def add(self, a, b):
        return a ^ b

    def mul(self, a, b):
        if a == 0 or b == 0:
            return 0
        return self._exp[(self._log[a] + self._log[b]) % self.order]

    def power(self, k):
        """alpha^k for any integer exponent."""
        return self._exp[k % self.order]

    def inv(self, a):
        if a == 0:
            raise ZeroDivisionError("0 has no inverse in GF(q)")
        return self._exp[(-self._log[a]) % self.order]

    def multiply_accumulate(self, acc, log_coeff, element):
        """Return acc + alpha^log_coeff * element."""
        if element == 0:
            return acc
        return acc ^ self._exp[(log_coeff + self._log[element]) % self.order]

    def scale_table(self, log_coeff, row=None):
        """Row of alpha^log_coeff * e for every element e, filled into `row` if given."""
        if row is None:
            row = [0] * self.q
        row[0] = 0
        for e in range(1, self.q):
            row[e] = self._exp[(log_coeff + self._log[e]) % self.order]
        return row

    def syndrome(self, h, x):
        """Sum of alpha^h[i] * x[i] over every coordinate; 0 for a codeword."""
        acc = 0
        for hlog, xi in zip(h, x):
            acc = self.multiply_accumulate(acc, hlog, xi)
        return acc

    def parity_value(self, h, x):
        """
        Last coordinate making x a codeword of h (h[-1] == 0). Only x[0..n-2]
        is read, so x may be the free part alone or a full word.
        """
        acc = 0
        for i in range(len(h) - 1):
            acc = self.multiply_accumulate(acc, h[i], x[i])
        return acc


_gf_cache = {}


def get_gf(q):
    if q not in _gf_cache:
        m = q.bit_length() - 1
        if q < 2 or (1 << m) != q:
            raise ConfigurationError(f"Field order {q} is not a power of two.")
        _gf_cache[q] = GaloisField(m)
    return _gf_cache[q]
