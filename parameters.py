from errors import ConfigurationError

USAGE = [
    "Usage: python main.py [--monitor] [--no-abort] [--quiet] [--qmin=K] [--results=FILE] "
    "<codelength> <qmax> <constellation> <mappings>",
    "       python main.py sieve [--monitor] [--quiet] [--results=FILE] "
    "<codelength> <quad> <constellation> <mappings> [parities]",
    "       python main.py spectra [--monitor] [--quiet] [--results=FILE] "
    "<codelength> <qmax> <constellation> <mappings>",
    "Example: python main.py 3 9 dataset/16qam.txt dataset/16qam_mappings.txt",
]


class SearchParameters:
    """
    Settings of one command-line run.

    Positional values fill `code_length`, the bound (qmax for the spectrum
    search, the target quadrance for the sieve) and the input files; every
    other setting starts from the defaults below.
    """

    def __init__(self, code_length, bound, constellation, mappings, **overrides):
        self.parameters = {}
        self._set_default_parameters()

        unknown = set(overrides) - set(self.parameters)
        if unknown:
            raise ConfigurationError(f"Unknown parameter(s): {', '.join(sorted(unknown))}")
        self.parameters.update(overrides)
        self.parameters.update({
            "code_length": code_length,
            "bound": bound,
            "constellation": constellation,
            "mappings": mappings,
        })
        self._validate()

    def _set_default_parameters(self):
        self.parameters = {
            "strategy": "spectrum",         # spectrum | sieve | spectra
            "qmin": 1,                      # first quadrance compared (0 holds the self pairs)
            "early_abort": True,
            "verbose": True,
            "parities": None,               # sieve only: parity file, canonical enumeration if None
            "results_csv": "search_results.csv",

            # Memory monitor
            "memory_monitoring": False,
            "monitor_interval_sec": 60,
            "monitor_time_limit_sec": 60 * 60,
        }

    def _validate(self):
        p = self.parameters
        if p["strategy"] not in ("spectrum", "sieve", "spectra"):
            raise ConfigurationError(f"Unknown strategy '{p['strategy']}'.")
        if p["code_length"] < 2:
            raise ConfigurationError(f"codelength must be at least 2 (got {p['code_length']}).")
        if p["strategy"] == "sieve":
            if p["bound"] < 1:
                raise ConfigurationError(f"Target quadrance must be positive (got {p['bound']}).")
        else:
            if p["bound"] < 0:
                raise ConfigurationError(f"qmax must be non-negative (got {p['bound']}).")
            if not 0 <= p["qmin"] <= max(p["bound"], 0):
                raise ConfigurationError(
                    f"qmin must lie in [0, qmax] (got {p['qmin']} with qmax={p['bound']}).")
        if p["parities"] is not None and p["strategy"] != "sieve":
            raise ConfigurationError("A parity file is only accepted by the sieve.")
        if p["monitor_interval_sec"] <= 0 or p["monitor_time_limit_sec"] < p["monitor_interval_sec"]:
            raise ConfigurationError("Invalid memory monitor interval / time limit.")

    def __getitem__(self, key):
        return self.parameters[key]

    def get_parameters(self):
        return self.parameters

    @classmethod
    def from_argv(cls, argv):
        """
        Parse `sys.argv[1:]`-style arguments.

        Raises:
            ConfigurationError: wrong argument count or malformed value.
        """
        args = list(argv)
        overrides = {}
        if args and args[0] in ("sieve", "spectra"):
            overrides["strategy"] = args.pop(0)

        positional = []
        for arg in args:
            if arg == "--monitor":
                overrides["memory_monitoring"] = True
            elif arg == "--no-abort":
                overrides["early_abort"] = False
            elif arg == "--quiet":
                overrides["verbose"] = False
            elif arg.startswith("--qmin="):
                overrides["qmin"] = _to_int(arg.split("=", 1)[1], "qmin")
            elif arg.startswith("--results="):
                overrides["results_csv"] = arg.split("=", 1)[1]
            elif arg.startswith("--") and arg != "-":
                raise ConfigurationError(f"Unknown option '{arg}'.")
            else:
                positional.append(arg)

        sieve = overrides.get("strategy") == "sieve"
        expected = (4, 5) if sieve else (4,)
        if len(positional) not in expected:
            raise ConfigurationError(
                f"Expected {' or '.join(map(str, expected))} positional arguments, got {len(positional)}.")
        if len(positional) == 5:
            overrides["parities"] = positional[4]

        return cls(
            _to_int(positional[0], "codelength"),
            _to_int(positional[1], "quad" if sieve else "qmax"),
            positional[2],
            positional[3],
            **overrides,
        )


def _to_int(value, name):
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer (got '{value}').")
