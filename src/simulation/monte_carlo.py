"""Monte Carlo population of equity paths."""

from concurrent.futures import ProcessPoolExecutor

from config.settings import BAND_SAMPLE_SIZE, SIMULATION_MAX_WORKERS, SIMULATION_PARALLEL_MIN_PATHS
from src.simulation.params import PathResult, SimulationParameters
from src.simulation.path import simulate_path
from src.simulation.random_source import RandomSource
from src.utils.logger import get_logger

log = get_logger(__name__)


def _run_path_chunk(args: tuple) -> list[PathResult]:
    """Simulate a contiguous block of paths (picklable for multiprocessing)."""
    params, sources, keep_flags = args
    return [
        simulate_path(params, source, keep_trace=keep)
        for source, keep in zip(sources, keep_flags)
    ]


class MonteCarloRunner:
    """Runs ``num_paths`` independent paths, each with its own child random stream.

    Streams are spawned up front, so results are identical whether paths run
    sequentially or across worker processes.
    """

    def __init__(
        self,
        params: SimulationParameters,
        random_source: RandomSource,
        band_sample_size: int = BAND_SAMPLE_SIZE,
        max_workers: int = SIMULATION_MAX_WORKERS,
    ) -> None:
        self.params = params
        self.random_source = random_source
        self.band_sample_size = max(0, band_sample_size)
        self.max_workers = max_workers

    def run(self) -> list[PathResult]:
        n_paths = int(self.params.num_paths)
        sources = self.random_source.spawn(n_paths)
        keep_flags = [i < self.band_sample_size for i in range(n_paths)]

        if self.max_workers <= 1 or n_paths < SIMULATION_PARALLEL_MIN_PATHS:
            return _run_path_chunk((self.params, sources, keep_flags))

        chunk_size = -(-n_paths // self.max_workers)
        chunks = [
            (self.params, sources[i:i + chunk_size], keep_flags[i:i + chunk_size])
            for i in range(0, n_paths, chunk_size)
        ]
        log.debug("monte_carlo_parallel", paths=n_paths, chunks=len(chunks), workers=self.max_workers)

        results: list[PathResult] = []
        with ProcessPoolExecutor(max_workers=self.max_workers) as executor:
            for chunk_results in executor.map(_run_path_chunk, chunks):
                results.extend(chunk_results)
        return results


def run_paths(params: SimulationParameters, random_source: RandomSource, **kwargs) -> list[PathResult]:
    return MonteCarloRunner(params, random_source, **kwargs).run()
