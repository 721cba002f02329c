# tests/test_matrix.py
import numpy as np
import pytest
from scipy.sparse import csr_matrix

from semspace.cooccurrence import SemanticVectorStore
from semspace.index import FrequencyTable, Vocabulary
from semspace.matrix import CellMaskedSparseMatrix, MatrixBuilder, retained_count


@pytest.fixture
def backing():
    return csr_matrix(np.array([[1, 0, 2], [0, 3, 0], [4, 0, 5]], dtype=float))


class TestCellMaskedSparseMatrix:
    """Masked views over a backing matrix."""

    def test_shape_and_values(self, backing):
        view = CellMaskedSparseMatrix(backing, [2, 0], [2, 0])

        assert view.shape == (2, 2)
        np.testing.assert_array_equal(view.to_csr().toarray(), [[5, 4], [2, 1]])

    def test_masked_columns_are_dropped(self, backing):
        view = CellMaskedSparseMatrix(backing, [0, 1], [0, 1])
        assert view.to_csr().nnz == 2

    def test_backing_is_not_copied(self, backing):
        view = CellMaskedSparseMatrix(backing, [0], [0])
        assert view.backing is backing

    def test_mask_out_of_range(self, backing):
        with pytest.raises(IndexError):
            CellMaskedSparseMatrix(backing, [3], [0])


class TestRetainedCount:
    def test_zero_keeps_all(self):
        assert retained_count(0, 5) == 5

    def test_larger_than_available_keeps_all(self):
        assert retained_count(10, 5) == 5

    def test_limit(self):
        assert retained_count(3, 5) == 3


def make_builder(counts, rows, compound_rows=()):
    vocab = Vocabulary()
    for term in counts:
        vocab.get_index(term)
    freqs = FrequencyTable()
    freqs.update(counts)
    store = SemanticVectorStore()
    for index, row in rows.items():
        store.merge(index, row)

    compounds = Vocabulary()
    compound_store = SemanticVectorStore()
    for name, row in compound_rows:
        compound_store.merge(compounds.get_index(name), row)

    for v in (vocab, compounds):
        v.freeze()
    return MatrixBuilder(vocab, freqs, store, compounds, compound_store)


class TestMatrixBuilder:
    """Frequency pruning of rows and columns."""

    counts = {"a": 1, "b": 5, "c": 3, "d": 3}
    rows = {
        0: {1: 1.0},            # a: b
        1: {0: 1.0, 2: 2.0},    # b: a, c
        2: {3: 4.0},            # c: d
        3: {1: 6.0, 2: 1.0},    # d: b, c
    }

    def test_rows_ordered_by_frequency_then_reverse_term(self):
        reduced = make_builder(self.counts, self.rows).build_matrix(0, 0)
        assert reduced.word_vocabulary.terms() == ["b", "d", "c", "a"]
        assert reduced.feature_terms == ["b", "d", "c", "a"]

    def test_rows_and_columns_cut_independently(self):
        reduced = make_builder(self.counts, self.rows).build_matrix(2, 3)

        assert reduced.word_vocabulary.terms() == ["b", "d"]
        assert reduced.feature_terms == ["b", "d", "c"]
        assert reduced.words.shape == (2, 3)
        np.testing.assert_array_equal(reduced.words.to_csr().toarray(), [[0, 0, 2], [6, 0, 1]])

    def test_dropped_words_are_not_addressable(self):
        reduced = make_builder(self.counts, self.rows).build_matrix(2, 0)
        assert reduced.word_vocabulary.lookup("a") is None
        assert reduced.word_vocabulary.get_index("a") is None

    def test_monotonic_cutoff(self):
        reduced = make_builder(self.counts, self.rows).build_matrix(3, 0)
        kept = set(reduced.word_vocabulary.terms())
        dropped = set(self.counts) - kept
        assert len(kept) == 3
        assert min(self.counts[t] for t in kept) >= max(self.counts[t] for t in dropped)

    def test_compounds_share_column_mask(self):
        builder = make_builder(self.counts, self.rows, [("b c", {0: 2.0, 3: 1.0}), ("c d", {})])
        reduced = builder.build_matrix(1, 2)

        assert reduced.compounds.shape == (2, 2)
        # columns are b, d
        np.testing.assert_array_equal(reduced.compounds.to_csr().toarray(), [[0, 1], [0, 0]])
