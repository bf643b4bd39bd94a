import galois
import numpy as np
import pytest

from checker import galois_syndrome, reference_field, verify_codeword
from enumeration import iter_codewords
from errors import ConfigurationError
from galois_field import MAX_DEGREE, PRIMITIVE_POLYNOMIALS, GaloisField, get_gf


@pytest.mark.parametrize("m", range(1, MAX_DEGREE + 1))
def test_tables_are_inverse_permutations(m):
    field = GaloisField(m)
    assert field.q == 2 ** m
    assert sorted(field.exp.tolist()) == list(range(1, field.q))
    assert field.log[0] == -1
    for x in range(1, field.q):
        assert field.exp[field.log[x]] == x
    for k in range(field.order):
        assert field.log[field.exp[k]] == k


@pytest.mark.parametrize("m", range(2, MAX_DEGREE + 1))
def test_tables_agree_with_galois(m):
    field = GaloisField(m)
    GF = reference_field(field)
    alpha = GF(field.alpha)
    value = GF(1)
    for k in range(field.order):
        assert int(value) == field.exp[k]
        value = value * alpha


@pytest.mark.parametrize("m", [2, 3, 4, 8])
def test_mul_and_inverse_agree_with_galois(m):
    field = GaloisField(m)
    GF = galois.GF(field.q, irreducible_poly=galois.Poly.Int(PRIMITIVE_POLYNOMIALS[m]))
    rng = np.random.default_rng(m)
    for a, b in rng.integers(0, field.q, size=(200, 2)).tolist():
        assert field.mul(a, b) == int(GF(a) * GF(b))
        assert field.add(a, b) == int(GF(a) + GF(b))
        if a:
            assert field.inv(a) == int(GF(a) ** -1)


def test_multiply_accumulate(gf8):
    assert gf8.multiply_accumulate(5, 3, 0) == 5
    for acc in range(8):
        for k in range(7):
            for e in range(1, 8):
                expected = acc ^ gf8.mul(gf8.power(k), e)
                assert gf8.multiply_accumulate(acc, k, e) == expected


def test_scale_table(gf16):
    for k in (0, 1, 7, 14):
        row = gf16.scale_table(k)
        assert row[0] == 0
        assert sorted(row[1:]) == list(range(1, 16))
        assert row == [gf16.mul(gf16.power(k), e) for e in range(16)]


def test_power_wraps_around(gf8):
    assert gf8.power(0) == 1
    assert gf8.power(7) == 1
    assert gf8.power(-1) == gf8.inv(gf8.alpha)


def test_parity_value_closes_the_syndrome(gf16):
    h = (9, 4, 1, 0)
    for x in iter_codewords(gf16, h):
        assert gf16.syndrome(h, x) == 0
        assert x[-1] == gf16.parity_value(h, x[:-1])


def test_codewords_verified_by_galois(gf8):
    h = (4, 2, 0)
    for x in iter_codewords(gf8, h):
        assert verify_codeword(gf8, h, x)
    assert galois_syndrome(gf8, h, (1, 0, 0)) != 0


def test_from_polynomial():
    field = GaloisField.from_polynomial(0x13)
    assert field.q == 16
    assert field.polynomial == 0x13


def test_non_primitive_polynomial_rejected():
    # X^4 + X^3 + X^2 + X + 1 is irreducible but X has order 5
    with pytest.raises(ConfigurationError):
        GaloisField.from_polynomial(0x1f)
    # X^2 + 1 = (X + 1)^2
    with pytest.raises(ConfigurationError):
        GaloisField(2, 0x5)


def test_unsupported_degree():
    with pytest.raises(ConfigurationError):
        GaloisField(11)
    with pytest.raises(ConfigurationError):
        GaloisField(0)


def test_get_gf_caches_and_validates():
    assert get_gf(32) is get_gf(32)
    with pytest.raises(ConfigurationError):
        get_gf(12)
    with pytest.raises(ConfigurationError):
        get_gf(1)


def test_parity_value_ignores_last_coordinate(gf8):
    h = (5, 3, 0)
    assert gf8.parity_value(h, (6, 2, 7)) == gf8.parity_value(h, (6, 2))


def test_scale_table_fills_given_row(gf8):
    row = [9] * 8
    assert gf8.scale_table(3, row) is row
    assert row == gf8.scale_table(3)
