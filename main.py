import datetime
import os
import sys
import threading
import time

import pandas as pd
import psutil

from datasets import iter_mappings, read_constellation, read_parities
from errors import ConfigurationError
from galois_field import get_gf
from parameters import USAGE, SearchParameters
from report import format_header, format_mapping, format_spectrum, format_table_row
from sieve import PartitionSieve
from spectrum import minimum_distance, total_pairs
from spectrum_search import SpectrumSearch


def get_memory_usage_mb():
    """RSS of the current process in MB."""
    return psutil.Process(os.getpid()).memory_info().rss / (1024 * 1024)


class MemoryMonitor(threading.Thread):
    """
    Daemon thread sampling the process RSS into a CSV log. Once the time
    limit is reached it reports the mapping being searched and terminates
    the process; only mappings already written to the results CSV survive.

    `progress` is the dictionary filled by `run_search`.
    """

    COLUMNS = ["Timestamp", "Elapsed_Time_sec", "Memory_Usage_MB", "Mapping_Index"]

    def __init__(self, log_filename, time_limit_sec, interval_sec, progress, terminate=os._exit):
        super().__init__(daemon=True)
        self.log_filename = log_filename
        self.time_limit_sec = time_limit_sec
        self.interval_sec = interval_sec
        self.progress = progress
        self.terminate = terminate

    def sample(self, start_time):
        return {
            "Timestamp": datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "Elapsed_Time_sec": f"{time.time() - start_time:.2f}",
            "Memory_Usage_MB": f"{get_memory_usage_mb():.2f}",
            "Mapping_Index": self.progress.get('mapping_index'),
        }

    def run(self):
        start_time = time.time()
        try:
            pd.DataFrame(columns=self.COLUMNS).to_csv(self.log_filename, index=False)
        except OSError as e:
            print(f"  > [Monitor Error] Log file could not be written: {e}", file=sys.stderr)
            return
        print(f"  > [Monitor] Started. Logging every {self.interval_sec}s for {self.time_limit_sec}s.")

        for _ in range(int(self.time_limit_sec // self.interval_sec)):
            time.sleep(self.interval_sec)
            row = self.sample(start_time)
            try:
                pd.DataFrame([row]).to_csv(self.log_filename, mode='a', header=False, index=False)
            except OSError as e:
                print(f"  > [Monitor Error] Failed to log memory: {e}", file=sys.stderr)
                continue
            print(f"  > [Monitor] {row['Memory_Usage_MB']} MB at {row['Elapsed_Time_sec']}s")

        print(f"  > [Monitor] Time limit of ~{self.time_limit_sec}s reached. {self.interrupted()}",
              file=sys.stderr, flush=True)
        self.terminate(0)

    def interrupted(self):
        index = self.progress.get('mapping_index')
        if index is None:
            return "Terminating before the first mapping."
        mapping = " ".join(str(v) for v in self.progress['mapping'])
        return (f"Terminating during mapping #{index + 1} ({mapping}); "
                f"{self.progress['completed']} mapping(s) completed.")


def start_memory_monitor(params, progress):
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "memory_logs")
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    log_filename = os.path.join(log_dir, f"memory_log_n{params['code_length']}_{timestamp}.csv")
    print(f"\n[*] Starting memory monitoring (limit: {params['monitor_time_limit_sec']}s, "
          f"interval: {params['monitor_interval_sec']}s)")
    print(f"  > Log file: {log_filename}")
    monitor = MemoryMonitor(log_filename, params['monitor_time_limit_sec'],
                            params['monitor_interval_sec'], progress)
    monitor.start()
    return monitor


def _append_rows(filename, rows):
    df_new = pd.DataFrame(rows)
    if os.path.exists(filename):
        df_new.to_csv(filename, mode='a', header=False, index=False)
    else:
        df_new.to_csv(filename, mode='w', header=True, index=False)
    print(f"  > [Logged] Results saved to '{filename}'")


def _base_row(params, q, result):
    return {
        "Timestamp": datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "Strategy": params['strategy'],
        "Constellation": params['constellation'],
        "q": q,
        "n": params['code_length'],
        "Bound": params['bound'],
        "Mapping": " ".join(str(v) for v in result['mapping']),
    }


def save_search_results(filename, params, q, result):
    """Append one row per searched mapping to the results CSV."""
    row = _base_row(params, q, result)
    row.update({
        "Best_Parity": " ".join(str(v) for v in result['best_parity'] or ()),
        "Improvements": len(result['improvements']),
        "Parities": result['stats']['parities_examined'],
        "Aborted": result['stats']['parities_aborted'],
        "Search_Time": f"{result['search_time']:.4f}",
    })
    if params['strategy'] == "sieve":
        row["Result"] = result['best_multiplicity']
    else:
        spectrum = result['best_spectrum']
        row["Result"] = "" if spectrum is None else " ".join(str(int(c)) for c in spectrum)
    _append_rows(filename, [row])


def save_spectrum_table(filename, params, q, result):
    """Append one row per parity of a spectra run to the results CSV."""
    rows = []
    for index, (h, spectrum) in enumerate(result['spectra']):
        row = _base_row(params, q, result)
        row.update({
            "Parity_Index": index,
            "Parity": " ".join(str(v) for v in h),
            "Spectrum": " ".join(str(int(c)) for c in spectrum),
            "Total": total_pairs(spectrum),
        })
        rows.append(row)
    if rows:
        _append_rows(filename, rows)


def _report_result(params, field, result):
    stats = result['stats']
    print(f"  > Parities examined: {stats['parities_examined']} "
          f"(aborted: {stats['parities_aborted']})")
    if params['strategy'] == "spectra":
        print("Spectra")
        for index, (h, spectrum) in enumerate(result['spectra']):
            print(format_table_row(field, index, h, spectrum))
    elif params['strategy'] == "sieve":
        print(f"  > Best multiplicity at quad={params['bound']}: {result['best_multiplicity']}")
    elif result['best_spectrum'] is not None:
        spectrum = result['best_spectrum']
        print(f"  > Best spectrum: {format_spectrum(spectrum)}")
        print(f"  > Minimum quadrance: {minimum_distance(spectrum, params['qmin'])}, "
              f"pairs: {total_pairs(spectrum)}")
    print(f"  > Search time: {result['search_time']:.4f}s")


def run_search(params, progress=None):
    """
    Search every mapping of the mapping source; returns the per-mapping results.

    `progress` (optional dict) is kept up to date with the mapping being
    searched and the number of completed mappings.
    """
    if progress is None:
        progress = {}
    progress.update({'mapping_index': None, 'mapping': None, 'completed': 0})

    points = read_constellation(params['constellation'])
    field = get_gf(len(points))
    n = params['code_length']
    verbose = params['verbose']

    parities = None
    if params['strategy'] == "sieve":
        if params['parities'] is not None:
            parities = read_parities(params['parities'], n, field.q)
        engine = PartitionSieve(field, points, n, params['bound'], verbose=verbose)
        bound_name = "quad"
        run, save = engine.search, save_search_results
    elif params['strategy'] == "spectra":
        engine = SpectrumSearch(field, points, n, params['bound'], qmin=params['qmin'],
                                early_abort=False, verbose=verbose)
        bound_name = "qmax"
        run, save = engine.spectrum_table, save_spectrum_table
    else:
        engine = SpectrumSearch(field, points, n, params['bound'], qmin=params['qmin'],
                                early_abort=params['early_abort'], verbose=verbose)
        bound_name = "qmax"
        run, save = engine.search, save_search_results

    print("=" * 60)
    print(format_header(params['constellation'], field, n, bound_name, params['bound']))
    print("=" * 60)

    results = []
    for index, mapping in enumerate(iter_mappings(params['mappings'], field.q)):
        progress['mapping_index'] = index
        progress['mapping'] = mapping.tolist()
        print(f"\n[{index + 1}] {format_mapping(mapping)}")
        result = run(mapping, parities)
        _report_result(params, field, result)

        if params['results_csv']:
            save(params['results_csv'], params, field.q, result)
        results.append(result)
        progress['completed'] = index + 1
    return results


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    try:
        params = SearchParameters.from_argv(args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        for line in USAGE:
            print(line, file=sys.stderr)
        sys.exit(1)

    progress = {}
    if params['memory_monitoring']:
        print("[*] Memory monitoring enabled.")
        start_memory_monitor(params, progress)

    try:
        run_search(params, progress)
    except (ConfigurationError, MemoryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
