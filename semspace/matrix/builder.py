# semspace/matrix/builder.py
"""
Matrix Builder / Reducer

Converts the accumulated co-occurrence rows into a matrix and keeps only the
most frequent words as rows and the most frequent words as context columns.
Rows and columns are selected independently from the same frequency ranking.
Compound rows are all kept but live in the reduced column space.
"""
import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from semspace.cooccurrence.store import SemanticVectorStore
from semspace.index.vocabulary import FrequencyTable, Vocabulary
from semspace.matrix.masked import CellMaskedSparseMatrix

logger = logging.getLogger(__name__)


def retained_count(limit: int, available: int) -> int:
    """A limit of 0, or one larger than what is available, keeps everything."""
    if limit <= 0 or limit > available:
        return available
    return limit


@dataclass
class ReducedMatrices:
    words: CellMaskedSparseMatrix
    compounds: CellMaskedSparseMatrix
    word_vocabulary: Vocabulary
    feature_terms: List[str]


class MatrixBuilder:
    def __init__(self, vocabulary: Vocabulary, frequencies: FrequencyTable,
                 word_store: SemanticVectorStore,
                 compound_vocabulary: Vocabulary = None,
                 compound_store: SemanticVectorStore = None):
        self.vocabulary = vocabulary
        self.frequencies = frequencies
        self.word_store = word_store
        self.compound_vocabulary = compound_vocabulary or Vocabulary()
        self.compound_store = compound_store or SemanticVectorStore()

    def build_matrix(self, max_words: int = 0, max_dimensions: int = 0) -> ReducedMatrices:
        """
        Build the reduced word and compound matrices.

        Args:
            max_words (int): Number of most frequent words kept as rows (0 keeps all)
            max_dimensions (int): Number of most frequent words kept as columns (0 keeps all)

        Returns:
            ReducedMatrices: masked word and compound matrices, the re-indexed
                word vocabulary and the term behind each retained column
        """
        n_words = len(self.vocabulary)
        ranking = self.frequencies.ranked(self.vocabulary.terms())

        n_rows = retained_count(max_words, n_words)
        n_cols = retained_count(max_dimensions, n_words)

        row_terms = [term for term, _ in ranking[:n_rows]]
        col_terms = [term for term, _ in ranking[:n_cols]]

        row_mask = np.fromiter((self.vocabulary.lookup(t) for t in row_terms), dtype=np.int64, count=n_rows)
        col_mask = np.fromiter((self.vocabulary.lookup(t) for t in col_terms), dtype=np.int64, count=n_cols)

        logger.info("Retaining %d/%d words as rows and %d/%d as columns", n_rows, n_words, n_cols, n_words)

        word_matrix = self.word_store.to_csr((n_words, n_words))
        n_compounds = len(self.compound_vocabulary)
        compound_matrix = self.compound_store.to_csr((n_compounds, n_words))

        return ReducedMatrices(
            words=CellMaskedSparseMatrix(word_matrix, row_mask, col_mask),
            compounds=CellMaskedSparseMatrix(compound_matrix, np.arange(n_compounds), col_mask),
            word_vocabulary=Vocabulary.from_terms(row_terms, frozen=True),
            feature_terms=col_terms
        )
