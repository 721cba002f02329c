# semspace/cooccurrence/store.py
from collections import Counter, defaultdict
from threading import Lock
from typing import Dict, Mapping, Tuple

import numpy as np
from scipy.sparse import csr_matrix

from semspace.constants import DEFAULT_LOCK_STRIPES
from semspace.index.locks import StripedLock


class DocumentAccumulator:
    """
    Counts gathered while reading a single document.

    Rows are keyed by term and context by word string, so nothing is resolved
    against the shared vocabularies until the document has been read in full.
    """

    def __init__(self):
        self.words = defaultdict(Counter)               # word -> {context word -> weight}
        self.compounds = defaultdict(Counter)           # compound -> {context word -> weight}
        self.compound_following = defaultdict(Counter)  # compound -> {following word -> weight}
        self.word_counts = Counter()
        self.compound_counts = Counter()

    def is_empty(self) -> bool:
        return not (self.words or self.compounds or self.word_counts or self.compound_counts)


class SemanticVectorStore:
    """
    Global sparse rows keyed by term index.

    Row creation uses double-checked locking. Merges into an existing row are
    serialized per row through a striped lock, so documents touching different
    terms merge in parallel.
    """

    def __init__(self, stripes: int = DEFAULT_LOCK_STRIPES):
        self._rows: Dict[int, Dict[int, float]] = {}
        self._create_lock = Lock()
        self._row_locks = StripedLock(stripes)

    def vector_for(self, index: int) -> Dict[int, float]:
        row = self._rows.get(index)
        if row is not None:
            return row
        with self._create_lock:
            row = self._rows.get(index)
            if row is None:
                row = {}
                self._rows[index] = row
            return row

    def merge(self, index: int, values: Mapping[int, float]) -> None:
        row = self.vector_for(index)
        with self._row_locks.for_key(index):
            for col, value in values.items():
                row[col] = row.get(col, 0.0) + value

    def get_row(self, index: int) -> Dict[int, float]:
        return dict(self._rows.get(index, {}))

    def __len__(self):
        return len(self._rows)

    def __contains__(self, index):
        return index in self._rows

    def nnz(self) -> int:
        return sum(len(row) for row in self._rows.values())

    def to_csr(self, shape: Tuple[int, int]) -> csr_matrix:
        """Materializes the rows as a CSR matrix of the given shape."""
        n = self.nnz()
        rows = np.empty(n, dtype=np.int64)
        cols = np.empty(n, dtype=np.int64)
        data = np.empty(n, dtype=np.float64)

        pos = 0
        for row_index, row in self._rows.items():
            size = len(row)
            if not size:
                continue
            rows[pos:pos + size] = row_index
            cols[pos:pos + size] = np.fromiter(row.keys(), dtype=np.int64, count=size)
            data[pos:pos + size] = np.fromiter(row.values(), dtype=np.float64, count=size)
            pos += size

        if n and (rows.max() >= shape[0] or cols.max() >= shape[1]):
            raise ValueError(f"Stored rows do not fit in a matrix of shape {shape}")

        matrix = csr_matrix((data, (rows, cols)), shape=shape, dtype=np.float64)
        matrix.sum_duplicates()
        return matrix
