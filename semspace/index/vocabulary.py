# semspace/index/vocabulary.py
"""
Vocabulary Index and Frequency Table

Both structures are shared by every worker thread while documents are being
processed. Reads go straight to the underlying dict; only the insertion of a
new key takes a lock, and the key is checked again once the lock is held so
that a racing thread's insertion is reused rather than duplicated.
"""
from threading import Lock
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from semspace.constants import DEFAULT_LOCK_STRIPES
from semspace.index.locks import StripedLock


class Vocabulary:
    """
    Bijection between terms and dense indices, assigned in order of first sight.

    Once frozen, unknown terms are no longer registered and lookups for them
    return None.
    """

    def __init__(self):
        self._index: Dict[str, int] = {}
        self._terms: List[str] = []
        self._lock = Lock()
        self._frozen = False

    @classmethod
    def from_terms(cls, terms: Iterable[str], frozen: bool = True) -> 'Vocabulary':
        vocabulary = cls()
        for term in terms:
            if term in vocabulary._index:
                raise ValueError(f"Duplicate term in vocabulary: {term!r}")
            vocabulary._index[term] = len(vocabulary._terms)
            vocabulary._terms.append(term)
        vocabulary._frozen = frozen
        return vocabulary

    def get_index(self, term: str) -> Optional[int]:
        """Returns the index of term, registering it first unless the vocabulary is frozen."""
        index = self._index.get(term)
        if index is not None or self._frozen:
            return index

        with self._lock:
            index = self._index.get(term)
            if index is None:
                if self._frozen:
                    return None
                index = len(self._terms)
                self._terms.append(term)
                self._index[term] = index
            return index

    def lookup(self, term: str) -> Optional[int]:
        return self._index.get(term)

    def term_at(self, index: int) -> str:
        return self._terms[index]

    def terms(self) -> List[str]:
        return list(self._terms)

    def freeze(self):
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self):
        return len(self._terms)

    def __contains__(self, term):
        return term in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._terms))

    def __getstate__(self):
        return {'terms': list(self._terms), 'frozen': self._frozen}

    def __setstate__(self, state):
        self._terms = list(state['terms'])
        self._index = {term: i for i, term in enumerate(self._terms)}
        self._lock = Lock()
        self._frozen = state['frozen']


class FrequencyTable:
    """Total occurrence count per word, updated with per-key locking."""

    def __init__(self, stripes: int = DEFAULT_LOCK_STRIPES):
        self._counts: Dict[str, int] = {}
        self._locks = StripedLock(stripes)

    def add(self, term: str, count: int = 1) -> int:
        with self._locks.for_key(term):
            total = self._counts.get(term, 0) + count
            self._counts[term] = total
            return total

    def update(self, counts) -> None:
        for term, count in counts.items():
            self.add(term, count)

    def get(self, term: str) -> int:
        return self._counts.get(term, 0)

    def ranked(self, terms: Optional[Iterable[str]] = None) -> List[Tuple[str, int]]:
        """
        Terms ordered by descending frequency, ties broken by descending term string.

        Args:
            terms (iterable, optional): Restrict the ranking to these terms. Terms
                never counted rank with a frequency of 0.

        Returns:
            list: (term, frequency) pairs
        """
        if terms is None:
            items = list(self._counts.items())
        else:
            items = [(term, self._counts.get(term, 0)) for term in terms]
        return sorted(items, key=lambda x: (x[1], x[0]), reverse=True)

    def most_common(self, n: int = 10) -> List[Tuple[str, int]]:
        return self.ranked()[:n]

    def items(self):
        return list(self._counts.items())

    def __len__(self):
        return len(self._counts)

    def __contains__(self, term):
        return term in self._counts
