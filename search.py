import threading
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import Callable, Optional

from candidate import Candidate
from constants import SearchStatus
from errors import SearchCancelled, SearchExhausted
from shard_service import ShardService


class TargetedAccountSearch:
    """Draws candidates until one lands in the target shard.

    Each attempt is independent, so ``run(workers=n)`` just runs n copies of the
    loop on a thread pool against shared counters. The loop stops when:

    * a candidate lands in ``target_shard`` (returned),
    * ``stop_event`` is set (SearchCancelled),
    * ``max_attempts`` candidates were drawn without a match (SearchExhausted),
    * the generator raises (propagated as is).

    Ctrl-C while running is turned into SearchCancelled.
    """

    def __init__(self,
                 topology: list[int],
                 target_shard: int,
                 generate_candidate: Callable[[], Candidate],
                 on_miss: Optional[Callable[[Candidate, Optional[int]], None]] = None,
                 stop_event: Optional[threading.Event] = None,
                 max_attempts: Optional[int] = None) -> None:
        ShardService.validate_target(topology, target_shard)
        self.topology = list(topology)
        self.target_shard = target_shard
        self.generate_candidate = generate_candidate
        self.on_miss = on_miss
        self.stop_event = stop_event or threading.Event()
        self.max_attempts = max_attempts or 0

        self.status = SearchStatus.PENDING
        self.attempts = 0
        self.misses = 0
        self.started_at: Optional[float] = None
        self.finished_at: Optional[float] = None

        self._halt = threading.Event()
        self._lock = threading.Lock()

    def run(self, workers: int = 1) -> Candidate:
        self.status = SearchStatus.RUNNING
        self.started_at = time.time()
        try:
            if workers <= 1:
                candidate = self._search_loop()
            else:
                candidate = self._run_workers(workers)
        except SearchCancelled:
            self.status = SearchStatus.CANCELLED
            raise
        except KeyboardInterrupt:
            self.stop_event.set()
            self.status = SearchStatus.CANCELLED
            raise SearchCancelled(self.attempts) from None
        except SearchExhausted:
            self.status = SearchStatus.EXHAUSTED
            raise
        except BaseException:
            self.status = SearchStatus.FAILED
            raise
        finally:
            self.finished_at = time.time()
        self.status = SearchStatus.FOUND
        return candidate

    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        return (self.finished_at or time.time()) - self.started_at

    def _run_workers(self, workers: int) -> Candidate:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self._search_loop) for _ in range(workers)]
            try:
                done, _ = wait(futures, return_when=FIRST_COMPLETED)
            finally:
                self._halt.set()

        # a worker still generating when another one gave up may have matched
        for future in futures:
            if future.exception() is None:
                return future.result()
        return next(iter(done)).result()

    def _next_attempt(self) -> int:
        with self._lock:
            if self.stop_event.is_set() or self._halt.is_set():
                raise SearchCancelled(self.attempts)
            if self.max_attempts and self.attempts >= self.max_attempts:
                raise SearchExhausted(self.attempts)
            self.attempts += 1
            return self.attempts

    def _search_loop(self) -> Candidate:
        while True:
            self._next_attempt()
            candidate = self.generate_candidate()
            shard = ShardService.find_shard(self.topology, candidate.address)
            if shard == self.target_shard:
                return candidate

            with self._lock:
                self.misses += 1
            if self.on_miss:
                self.on_miss(candidate, shard)


def search(topology: list[int],
           target_shard: int,
           generate_candidate: Callable[[], Candidate],
           on_miss: Optional[Callable[[Candidate, Optional[int]], None]] = None,
           stop_event: Optional[threading.Event] = None,
           max_attempts: Optional[int] = None,
           workers: int = 1) -> Candidate:
    return TargetedAccountSearch(topology, target_shard, generate_candidate,
                                 on_miss, stop_event, max_attempts).run(workers)
