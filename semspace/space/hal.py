# semspace/space/hal.py
"""
HAL Semantic Space

Hyperspace Analogue to Language (Lund and Burgess). Only the words in front
of the focus are counted: cell (focus, w) holds the weighted number of times
w preceded focus. A word vector is its row followed by its column, i.e. the
words that precede it and the words that follow it.

Compounds get the same two halves: the words before the compound's first
word, and the words after its last word weighted by their distance from it.

Optionally only informative columns are kept, either every column whose
entropy reaches a threshold or a fixed number of highest-entropy columns.
The two options are mutually exclusive.
"""
import logging
from typing import Optional

import numpy as np
from scipy.sparse import hstack

from semspace.constants import HAL_WINDOW_SIZE
from semspace.cooccurrence.store import DocumentAccumulator, SemanticVectorStore
from semspace.cooccurrence.weighting import get_weighting
from semspace.cooccurrence.window import compound_preceding, score_context, sliding_windows
from semspace.exceptions import ConfigurationError
from semspace.matrix.masked import CellMaskedSparseMatrix
from semspace.space.base import BaseSemanticSpace
from semspace.text.tokenizer import window_word

logger = logging.getLogger(__name__)


def column_entropy(matrix) -> np.ndarray:
    """Shannon entropy (bits) of each column's value distribution. Empty columns score 0."""
    csc = matrix.tocsc().astype(np.float64)
    csc.eliminate_zeros()
    sums = np.asarray(csc.sum(axis=0), dtype=np.float64).ravel()
    counts = np.diff(csc.indptr)
    if csc.nnz == 0:
        return np.zeros(csc.shape[1])

    p = csc.data / np.repeat(sums, counts)
    plogp = csc.copy()
    plogp.data = -p * np.log2(p)
    return np.asarray(plogp.sum(axis=0), dtype=np.float64).ravel()


class HalSpace(BaseSemanticSpace):
    SPACE_PREFIX = "HAL"

    def __init__(self, window_size: int = HAL_WINDOW_SIZE, weighting='linear',
                 column_threshold: Optional[float] = None, retain_columns: int = 0,
                 transform='none', reduced_dimensions: int = 0, tokenizer=None, compounds=None,
                 svd_solver='auto', scale_by_singular_values: bool = False, profiler=None):
        if window_size is None or window_size <= 0:
            raise ConfigurationError(f"window_size must be positive, got {window_size}")
        if retain_columns is None:
            retain_columns = 0
        if retain_columns < 0:
            raise ConfigurationError(f"retain_columns must not be negative, got {retain_columns}")
        if column_threshold is not None and retain_columns > 0:
            raise ConfigurationError("column_threshold and retain_columns cannot both be set")

        super().__init__(tokenizer, compounds, transform, reduced_dimensions, svd_solver,
                         scale_by_singular_values, profiler)
        self.window_size = window_size
        self.weighting = get_weighting(weighting)
        self.column_threshold = column_threshold
        self.retain_columns = retain_columns
        self._compound_following_store = SemanticVectorStore()
        self.retained_columns = None

    def _scan(self, tokens, accumulator: DocumentAccumulator):
        ws = self.window_size
        weighting = self.weighting
        after = ws if self.compounds is not None else 0

        for context in sliding_windows(tokens, ws, after):
            focus_word = window_word(context.focus)

            if focus_word:
                accumulator.word_counts[focus_word] += 1
                score_context(accumulator.words[focus_word], reversed(context.previous), ws, weighting)

            if self.compounds is not None:
                match = self.compounds.match(context.focus, context.history)
                if match is not None:
                    preceding = compound_preceding(context.history, match.span, ws)
                    score_context(accumulator.compounds[match.key], reversed(preceding), ws, weighting)
                    score_context(accumulator.compound_following[match.key], context.following, ws, weighting)

    def _merge(self, accumulator: DocumentAccumulator):
        super()._merge(accumulator)
        for compound, context in accumulator.compound_following.items():
            index = self.compound_vocabulary.get_index(compound)
            self._compound_following_store.merge(index, self._resolve_context(context))

    def _select_columns(self, matrix) -> np.ndarray:
        n_cols = matrix.shape[1]
        if self.column_threshold is None and not self.retain_columns:
            return np.arange(n_cols)

        entropy = column_entropy(matrix)
        if self.column_threshold is not None:
            keep = np.flatnonzero(entropy >= self.column_threshold)
            logger.info("Retaining %d/%d columns with entropy >= %s",
                        keep.size, n_cols, self.column_threshold)
        else:
            order = np.argsort(-entropy, kind='stable')
            keep = np.sort(order[:self.retain_columns])
            logger.info("Retaining the %d highest entropy columns of %d", keep.size, n_cols)
        return keep

    def _build_matrices(self):
        n_words = len(self.word_vocabulary)
        n_compounds = len(self.compound_vocabulary)

        cooccurrence = self._word_store.to_csr((n_words, n_words))
        words = hstack([cooccurrence, cooccurrence.T]).tocsr()
        compounds = hstack([
            self._compound_store.to_csr((n_compounds, n_words)),
            self._compound_following_store.to_csr((n_compounds, n_words))
        ]).tocsr()

        self.retained_columns = self._select_columns(words)
        words = CellMaskedSparseMatrix(words, np.arange(n_words), self.retained_columns).to_csr()
        compounds = CellMaskedSparseMatrix(compounds, np.arange(n_compounds), self.retained_columns).to_csr()
        return words, compounds

    def space_name(self) -> str:
        name = self.SPACE_PREFIX
        if self.compounds_enabled:
            name += "C"
        name += f"_W{self.window_size}_R{self.retain_columns}"
        if self.reduced_dimensions:
            name += f"_D{self.reduced_dimensions}"
        return name

    def statistics(self):
        stats = super().statistics()
        stats.update({
            'window_size': self.window_size,
            'column_threshold': self.column_threshold,
            'retain_columns': self.retain_columns
        })
        return stats
