"""
Input files: constellation points, mapping lists and parity lists.

Constellation files hold one integer point per line ("x y", '#' comments
allowed). Mapping and parity files are plain whitespace-separated integers,
q values per mapping and n exponents per parity. A source of "-" reads
standard input.
"""
import io
import sys

import numpy as np
import pandas as pd

from enumeration import normalize_parity
from errors import ConfigurationError
from geometry import validate_mapping, validate_points


def read_constellation(path):
    try:
        df = pd.read_csv(path, sep=r"\s+", header=None, comment="#")
    except FileNotFoundError:
        raise ConfigurationError(f"Constellation file '{path}' not found.")
    except pd.errors.EmptyDataError:
        raise ConfigurationError(f"Constellation file '{path}' is empty.")
    except pd.errors.ParserError as e:
        raise ConfigurationError(f"Constellation file '{path}' is malformed: {e}")
    if df.shape[1] != 2:
        raise ConfigurationError(
            f"Constellation file '{path}' must have 2 columns (got {df.shape[1]}).")
    return validate_points(df.to_numpy())


def _read_integers(source):
    if source == "-":
        text = sys.stdin.read()
    elif isinstance(source, io.IOBase):
        text = source.read()
    else:
        try:
            with open(source, 'r', encoding='utf-8') as f:
                text = f.read()
        except FileNotFoundError:
            raise ConfigurationError(f"File '{source}' not found.")

    values = []
    for token in text.split():
        try:
            values.append(int(token))
        except ValueError:
            raise ConfigurationError(f"'{token}' is not an integer.")
    return values


def _chunks(values, size, what):
    if len(values) % size:
        raise ConfigurationError(
            f"Incomplete {what}: {len(values) % size} trailing values, {size} expected.")
    for start in range(0, len(values), size):
        yield values[start:start + size]


def iter_mappings(source, q):
    """Yield every mapping in `source` as an int64 array of length q."""
    values = _read_integers(source)
    if not values:
        raise ConfigurationError("No mapping found.")
    for chunk in _chunks(values, q, "mapping"):
        yield validate_mapping(np.array(chunk, dtype=np.int64), q)


def read_parities(source, n, q):
    """Parities in normalized form, duplicates after normalization dropped."""
    values = _read_integers(source)
    if not values:
        raise ConfigurationError("No parity found.")
    parities = []
    for chunk in _chunks(values, n, "parity"):
        h = normalize_parity(chunk, q)
        if h not in parities:
            parities.append(h)
    return parities
