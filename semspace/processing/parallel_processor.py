# semspace/processing/parallel_processor.py
import os
from concurrent.futures import ThreadPoolExecutor

from semspace.constants import MAX_WORKERS
from semspace.processing.base import BaseDocumentProcessor


class ParallelDocumentProcessor(BaseDocumentProcessor):
    """
    Feeds documents to the space from a fixed pool of worker threads.

    The first document that fails aborts the run: its exception is raised once
    the pool has shut down, and process_space() is never reached.
    """

    def __init__(self, space, profiler=None, num_workers=None):
        super().__init__(space, profiler)
        self.num_workers = num_workers or self.get_optimal_num_workers()

    def process_documents(self, documents) -> int:
        timer_label = f"Parallel Document Processing ({self.num_workers} workers)"
        documents = list(documents)

        with self.profiler.timer(timer_label):
            with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
                futures = [executor.submit(self.space.process_document, doc) for doc in documents]
                for future in futures:
                    future.result()
        return len(documents)

    @staticmethod
    def get_optimal_num_workers():
        return max(1, min(MAX_WORKERS, (os.cpu_count() or 2) - 1))
