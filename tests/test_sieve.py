import numpy as np
import pytest

from checker import brute_force_spectrum
from enumeration import iter_parities
from errors import ConfigurationError
from sieve import PartitionSieve


@pytest.mark.parametrize("quad", [1, 2, 3, 5])
def test_multiplicity_matches_brute_force(gf8, psk8_grid, quad):
    sieve = PartitionSieve(gf8, psk8_grid, 3, quad, verbose=False)
    sieve.prepare(np.random.default_rng(quad).permutation(8))
    for h in iter_parities(3, 8):
        multiplicity, aborted = sieve.parity_multiplicity(h)
        assert not aborted
        assert multiplicity == brute_force_spectrum(gf8, sieve.tables, h, quad + 1)[quad]


def test_multiplicity_with_coinciding_points(gf4, unit_square):
    sieve = PartitionSieve(gf4, unit_square, 3, 1, verbose=False)
    sieve.prepare([0, 0, 1, 3])
    for h in iter_parities(3, 4):
        multiplicity, _ = sieve.parity_multiplicity(h)
        assert multiplicity == brute_force_spectrum(gf4, sieve.tables, h, 2)[1]


def test_best_parity_has_fewest_pairs(gf8, psk8_grid, identity):
    sieve = PartitionSieve(gf8, psk8_grid, 3, 2, verbose=False)
    result = sieve.search(identity(8))
    counts = {}
    for h in iter_parities(3, 8):
        counts[h] = brute_force_spectrum(gf8, sieve.tables, h, 3)[2]
    fewest = min(counts.values())
    assert result['best_multiplicity'] == fewest
    # ties replace the best, so the last parity reaching the minimum wins
    assert result['best_parity'] == [h for h in counts if counts[h] == fewest][-1]
    assert result['stats']['parities_examined'] == len(counts)


def test_bound_aborts_parity(gf8, psk8_grid, identity):
    sieve = PartitionSieve(gf8, psk8_grid, 3, 2, verbose=False)
    sieve.prepare(identity(8))
    full, _ = sieve.parity_multiplicity((5, 2, 0))
    assert full > 0
    partial, aborted = sieve.parity_multiplicity((5, 2, 0), bound=0)
    assert aborted
    assert partial == 1
    assert sieve.stats['parities_aborted'] == 1


def test_parity_list(gf8, psk8_grid, identity):
    sieve = PartitionSieve(gf8, psk8_grid, 3, 2, verbose=False)
    result = sieve.search(identity(8), parities=[(6, 6, 0), (3, 1, 0)])
    assert result['stats']['parities_examined'] == 2
    assert result['best_parity'] in [(6, 6, 0), (3, 1, 0)]


def test_invalid_quad(gf4, unit_square):
    with pytest.raises(ConfigurationError):
        PartitionSieve(gf4, unit_square, 3, 0)
