"""Text formatting of search results (parities, spectra, run headers)."""
from spectrum import total_pairs


def parity_values(field, h):
    """Explicit coefficients alpha^h[i] of a parity given as exponents."""
    return [field.power(k) for k in h]


def format_parity(field, h):
    exponents = " ".join(f"{k:2d}" for k in h)
    values = " ".join(f"{v:2d}" for v in parity_values(field, h))
    return f"{exponents} | {values}"


def format_spectrum(spectrum):
    counts = "\t".join(str(int(c)) for c in spectrum)
    return f"{counts}\t({total_pairs(spectrum)})"


def format_improvement(field, h, spectrum):
    return f"{format_parity(field, h)}\t{format_spectrum(spectrum)}"


def format_multiplicity(field, h, multiplicity):
    return f"{format_parity(field, h)}\t{multiplicity}"


def format_header(constellation, field, n, bound_name, bound):
    lines = [
        f"Constellation: {constellation}",
        f"GF({field.q} = 2^{field.m})",
        f"codelength: {n}",
        f"{bound_name}: {bound}",
    ]
    return "\n".join(lines)


def format_mapping(mapping):
    return "Mapping: " + " ".join(str(int(v)) for v in mapping)


def format_table_row(field, index, h, spectrum):
    return f"{index:4d}: {format_improvement(field, h, spectrum)}"
