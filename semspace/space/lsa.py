# semspace/space/lsa.py
"""
Term-Document Space

Rows are terms and columns are documents. Each document that yields at least
one word or compound becomes one column; empty documents are counted as
processed but get no column. Compounds are counted per document with the
same recognizer as the windowed models, and their rows are scored against
the statistics of the word matrix.

With reduced_dimensions set this is Latent Semantic Analysis: the tf-log-idf
matrix is factorized and compound rows are projected into the latent space.
The documents themselves form a second space (V, one row per column of the
matrix), and unseen documents can be folded into it with project_document().

A processed space can save its statistics (terms, document columns, fitted
transform, SVD factors). A space loaded from them is fed the same documents
in the same order; it only counts compounds, places each document's counts
in the column that document had in the saved run, and projects the
compound rows with the saved transform and factors.
"""
import logging
from threading import Lock
from typing import Dict, List, Optional

import numpy as np
from scipy.sparse import csr_matrix

from semspace.cooccurrence.store import DocumentAccumulator
from semspace.cooccurrence.window import sliding_windows
from semspace.exceptions import DocumentReadError
from semspace.index.vocabulary import Vocabulary
from semspace.matrix.svd import SVDReducer
from semspace.space.base import BaseSemanticSpace
from semspace.text.tokenizer import window_word

logger = logging.getLogger(__name__)


class TermDocumentSpace(BaseSemanticSpace):
    SPACE_PREFIX = "LSA"

    def __init__(self, transform='tflogidf', reduced_dimensions: int = 0, tokenizer=None,
                 compounds=None, svd_solver='auto', scale_by_singular_values: bool = False,
                 profiler=None):
        super().__init__(tokenizer, compounds, transform, reduced_dimensions, svd_solver,
                         scale_by_singular_values, profiler)
        self._column_lock = Lock()
        self._column_count = 0
        self._documents_seen = 0
        self.document_numbers: List[int] = []   # column -> processing order of its document
        self._document_space = None

        # load mode
        self._saved_terms: Optional[Vocabulary] = None
        self._saved_columns: Optional[Dict[int, int]] = None

    @property
    def column_count(self) -> int:
        return self._column_count

    @property
    def load_mode(self) -> bool:
        return self._saved_columns is not None

    @property
    def terms(self) -> Vocabulary:
        """The term rows documents are expressed in."""
        return self._saved_terms if self.load_mode else self.word_vocabulary

    def _scan(self, tokens, accumulator: DocumentAccumulator):
        count_words = not self.load_mode
        for context in sliding_windows(tokens, 0, 0):
            if self.compounds is not None:
                match = self.compounds.match(context.focus, context.history)
                if match is not None:
                    accumulator.compound_counts[match.key] += 1

            word = window_word(context.focus)
            if word and count_words:
                accumulator.word_counts[word] += 1

    def _merge(self, accumulator: DocumentAccumulator):
        with self._column_lock:
            ordinal = self._documents_seen
            self._documents_seen += 1
            if self.load_mode:
                column = self._saved_columns.get(ordinal)
            elif accumulator.is_empty():
                column = None
            else:
                column = self._column_count
                self._column_count += 1
                self.document_numbers.append(ordinal)

        if column is None:
            if self.load_mode and accumulator.compound_counts:
                logger.debug("Document %d had no column in the saved space; its compounds are ignored", ordinal)
            return

        words = {self.word_vocabulary.get_index(w): c for w, c in accumulator.word_counts.items()}
        compounds = {self.compound_vocabulary.get_index(t): c for t, c in accumulator.compound_counts.items()}

        for index, count in words.items():
            self._word_store.merge(index, {column: float(count)})
        for index, count in compounds.items():
            self._compound_store.merge(index, {column: float(count)})

        self.frequencies.update(accumulator.word_counts)

    def _build_matrices(self):
        n_columns = self.transform.statistics.n_cols if self.load_mode else self._column_count
        words = self._word_store.to_csr((len(self.word_vocabulary), n_columns))
        compounds = self._compound_store.to_csr((len(self.compound_vocabulary), n_columns))
        return words, compounds

    def _transform_matrices(self, words, compounds):
        if self.load_mode:
            return self.transform.transform_rows(words), self.transform.transform_rows(compounds)
        return super()._transform_matrices(words, compounds)

    def _reduce(self, words, compounds):
        if self.load_mode:
            with self.profiler.timer("Compound Projection"):
                return self.reducer.project(words), self.reducer.project(compounds)
        return super()._reduce(words, compounds)

    def process_space(self):
        super().process_space()
        if self.reducer is not None:
            self._document_space = self.reducer.column_space()
        elif not self.load_mode:
            self._document_space = self.word_space.T.tocsr()
        return self

    # Document space

    def _require_document_space(self):
        self._ensure_processed()
        if self._document_space is None:
            raise RuntimeError("No document space: the statistics were saved without an SVD")

    def document_space_size(self) -> int:
        self._require_document_space()
        return int(self._document_space.shape[0])

    def get_document_vector(self, column: int) -> np.ndarray:
        """
        Returns the vector of the document that was given the column, in
        processing order (see document_numbers).
        """
        self._require_document_space()
        if column < 0 or column >= self._document_space.shape[0]:
            raise IndexError(f"Document {column} is outside the {self._document_space.shape[0]} documents")
        return self._dense_row(self._document_space, column)

    def project_document(self, document) -> np.ndarray:
        """
        Folds an unseen document into the document space.

        Only words already present as rows are counted. The counts are scaled
        with the fitted transform and, after an SVD, projected with U * Sigma^-1.

        Args:
            document: pathlib.Path of a text file, document text as str, or an
                open text stream

        Returns:
            np.ndarray: Vector comparable with get_document_vector()
        """
        self._require_document_space()
        terms = self.terms

        counts = {}
        try:
            for token in self._read_tokens(document):
                index = terms.lookup(window_word(token))
                if index is not None:
                    counts[index] = counts.get(index, 0.0) + 1.0
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(f"Failed to read {self._describe(document)}: {e}") from e

        column = csr_matrix(
            (list(counts.values()), (list(counts.keys()), [0] * len(counts))),
            shape=(len(terms), 1), dtype=np.float64
        )
        transformed = self.transform.transform_column(column)
        if self.reducer is None:
            return transformed.toarray().ravel()
        return self.reducer.project_columns(transformed.T)[0]

    def space_name(self) -> str:
        name = self.SPACE_PREFIX
        if self.compounds_enabled:
            name += "C"
        if self.reduced_dimensions:
            name += f"_D{self.reduced_dimensions}"
        return name

    def statistics(self):
        stats = super().statistics()
        stats['document_columns'] = self.transform.statistics.n_cols if self.load_mode else self._column_count
        stats['load_mode'] = self.load_mode
        if self._document_space is not None:
            stats['document_space_shape'] = tuple(self._document_space.shape)
        return stats

    # Statistics files

    def save_statistics(self, filepath: str) -> None:
        """
        Save what a later run needs to place compounds and documents into this space.

        Args:
            filepath (str): Destination pickle file
        """
        self._require_trained()
        self._write_statistics(filepath, 'lsa', {
            'words': self.word_vocabulary.terms(),
            'document_numbers': list(self.document_numbers),
            'documents_processed': self._documents_seen,
            'transform': self.transform,
            'factors': self.reducer.factors if self.reducer is not None else None,
            'scale_by_singular_values': self.scale_by_singular_values
        })

    @classmethod
    def load_statistics(cls, filepath: str, tokenizer=None, compounds=None,
                        profiler=None) -> 'TermDocumentSpace':
        """
        Create a space that projects compounds into a saved term-document space.

        The documents must be fed again, sequentially and in the order of the
        saved run, so each one lands in its saved column.

        Args:
            filepath (str): File written by save_statistics()
            tokenizer (OrderPreservingTokenizer, optional): Token feed for documents
            compounds (CompoundRecognizer, optional): Compounds to build vectors for
            profiler (Profiler, optional): Performance profiler for timing operations

        Returns:
            TermDocumentSpace: Space in load mode, ready for process_document()
        """
        state = cls._read_statistics(filepath, 'lsa')

        space = cls(transform=state['transform'], tokenizer=tokenizer, compounds=compounds,
                    scale_by_singular_values=state['scale_by_singular_values'], profiler=profiler)
        space._saved_terms = Vocabulary.from_terms(state['words'], frozen=True)
        space._saved_columns = {ordinal: column for column, ordinal in enumerate(state['document_numbers'])}
        space.document_numbers = list(state['document_numbers'])

        if state['factors'] is not None:
            space.reducer = SVDReducer.from_factors(state['factors'], state['scale_by_singular_values'])
            space.reduced_dimensions = state['factors'].rank

        logger.info("Loaded statistics for %s: %d terms, %d document columns",
                    space.space_name(), len(space._saved_terms), len(space._saved_columns))
        return space
