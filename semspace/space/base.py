# semspace/space/base.py
"""
Base Semantic Space

Defines the pipeline shared by every model:

    process_document()  many times, possibly from several threads
    process_space()     once, after every process_document() call has returned
    get_vector()        afterwards

Each document is scanned into a DocumentAccumulator first. Its counts reach
the shared vocabularies, frequency table and vector stores only once the
whole document has been read, so a read failure leaves the global state as
it was before the document was started.
"""
import logging
import pickle
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.sparse import csr_matrix, issparse

from semspace.cooccurrence.store import DocumentAccumulator, SemanticVectorStore
from semspace.exceptions import ConfigurationError, DocumentReadError, InvariantViolation
from semspace.index.vocabulary import FrequencyTable, Vocabulary
from semspace.matrix.svd import SVDReducer
from semspace.matrix.transform import TransformFactory
from semspace.performance_monitoring import Profiler
from semspace.text.compounds import CompoundRecognizer
from semspace.text.tokenizer import OrderPreservingTokenizer

logger = logging.getLogger(__name__)

STATISTICS_FORMAT_VERSION = 1


class BaseSemanticSpace:
    """
    Abstract base class for semantic space models.

    Attributes:
        word_vocabulary (Vocabulary): Word -> row index
        compound_vocabulary (Vocabulary): Compound key -> row index in the compound space
        frequencies (FrequencyTable): Total corpus count of every word
        word_space: Final word vectors (sparse matrix, or ndarray after SVD)
        compound_space: Final compound vectors in the same feature space as word_space
    """
    SPACE_PREFIX = "SPACE"

    def __init__(self, tokenizer: OrderPreservingTokenizer = None, compounds: CompoundRecognizer = None,
                 transform=None, reduced_dimensions: int = 0, svd_solver='auto',
                 scale_by_singular_values: bool = False, profiler: Profiler = None):
        """
        Args:
            tokenizer (OrderPreservingTokenizer, optional): Token feed for documents
            compounds (CompoundRecognizer, optional): Enables compound accounting when given
            transform: Transform name or instance applied before the SVD
            reduced_dimensions (int): Target SVD rank, 0 disables the SVD
            svd_solver: 'auto', 'scipy', 'randomized' or a solver instance
            scale_by_singular_values (bool): Use U * Sigma as the word space
            profiler (Profiler, optional): Performance profiler for timing operations
        """
        if reduced_dimensions is None:
            reduced_dimensions = 0
        if reduced_dimensions < 0:
            raise ConfigurationError(f"reduced_dimensions must not be negative, got {reduced_dimensions}")

        self.tokenizer = tokenizer or OrderPreservingTokenizer()
        self.compounds = compounds
        self.transform = TransformFactory.create_transform(transform)
        self.reduced_dimensions = reduced_dimensions
        self.reducer = SVDReducer(reduced_dimensions, svd_solver, scale_by_singular_values) \
            if reduced_dimensions else None
        self.scale_by_singular_values = scale_by_singular_values
        self.profiler = profiler or Profiler()

        self.word_vocabulary = Vocabulary()
        self.compound_vocabulary = Vocabulary()
        self.frequencies = FrequencyTable()
        self._word_store = SemanticVectorStore()
        self._compound_store = SemanticVectorStore()

        self._state_lock = Lock()
        self._document_count = 0
        self._processed = False
        self.word_space = None
        self.compound_space = None

    @property
    def compounds_enabled(self) -> bool:
        return self.compounds is not None

    @property
    def document_count(self) -> int:
        return self._document_count

    @property
    def processed(self) -> bool:
        return self._processed

    # Document processing

    def process_document(self, document) -> None:
        """
        Accumulate the statistics of one document. Safe to call from several threads.

        Args:
            document: pathlib.Path of a text file, document text as str, or an
                open text stream

        Raises:
            DocumentReadError: The document could not be read; nothing was merged
            RuntimeError: process_space() has already run
        """
        if self._processed:
            raise RuntimeError("Cannot process documents after process_space() has been called")

        accumulator = DocumentAccumulator()
        try:
            self._scan(self._read_tokens(document), accumulator)
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentReadError(f"Failed to read {self._describe(document)}: {e}") from e

        self._merge(accumulator)
        with self._state_lock:
            self._document_count += 1

    def _read_tokens(self, document):
        if isinstance(document, Path):
            with open(document, 'r', encoding='utf-8') as f:
                yield from self.tokenizer.tokenize(f)
        else:
            yield from self.tokenizer.tokenize(document)

    @staticmethod
    def _describe(document) -> str:
        if isinstance(document, Path):
            return str(document)
        if isinstance(document, str):
            preview = document[:30].replace("\n", " ")
            return f"document text '{preview}...'"
        return getattr(document, 'name', repr(document))

    def _scan(self, tokens, accumulator: DocumentAccumulator) -> None:
        raise NotImplementedError("Subclasses must implement _scan()")

    def _merge(self, accumulator: DocumentAccumulator) -> None:
        for word, context in accumulator.words.items():
            index = self._row_index(word)
            if index is not None:
                self._word_store.merge(index, self._resolve_context(context))

        for compound, context in accumulator.compounds.items():
            index = self.compound_vocabulary.get_index(compound)
            self._compound_store.merge(index, self._resolve_context(context))

        self.frequencies.update(accumulator.word_counts)

    def _row_index(self, word: str) -> Optional[int]:
        return self.word_vocabulary.get_index(word)

    def _context_index(self, word: str) -> Optional[int]:
        return self.word_vocabulary.get_index(word)

    def _resolve_context(self, context) -> Dict[int, float]:
        resolved = {}
        for word, weight in context.items():
            index = self._context_index(word)
            if index is not None:
                resolved[index] = resolved.get(index, 0.0) + weight
        return resolved

    # Space processing

    def process_space(self) -> 'BaseSemanticSpace':
        """
        Build, transform and optionally reduce the accumulated matrices.

        Must only be called once every process_document() call has returned.
        """
        with self._state_lock:
            if self._processed:
                raise RuntimeError("process_space() has already been called")
            self._processed = True

        self.word_vocabulary.freeze()
        self.compound_vocabulary.freeze()

        with self.profiler.timer("Matrix Building"):
            words, compounds = self._build_matrices()
        logger.info("%s: built %dx%d word matrix and %d compound rows",
                    self.space_name(), words.shape[0], words.shape[1], compounds.shape[0])

        with self.profiler.timer("Matrix Transform"):
            words, compounds = self._transform_matrices(words, compounds)
        self._require_sparse(words, "word matrix")
        self._require_sparse(compounds, "compound matrix")

        if self.reducer is not None:
            self.word_space, self.compound_space = self._reduce(words, compounds)
        else:
            self.word_space, self.compound_space = words, compounds

        logger.info("%s: processing finished, %d words and %d compounds with %d dimensions",
                    self.space_name(), len(self.word_vocabulary), len(self.compound_vocabulary),
                    self.vector_length())
        return self

    def _build_matrices(self) -> Tuple[csr_matrix, csr_matrix]:
        raise NotImplementedError("Subclasses must implement _build_matrices()")

    def _transform_matrices(self, words, compounds):
        words = self.transform.transform(words)
        compounds = self.transform.transform_rows(compounds)
        return words, compounds

    def _reduce(self, words, compounds):
        with self.profiler.timer("SVD Reduction"):
            word_space = self.reducer.reduce(words)
        with self.profiler.timer("Compound Projection"):
            compound_space = self.reducer.project(compounds)
        return word_space, compound_space

    @staticmethod
    def _require_sparse(matrix, label):
        if not issparse(matrix):
            raise InvariantViolation(f"Expected a sparse {label} from the transform, got {type(matrix).__name__}")

    # Output surface

    def _ensure_processed(self):
        if not self._processed or self.word_space is None:
            raise RuntimeError("The space has not been processed; call process_space() first")

    @staticmethod
    def _dense_row(space, index: int) -> np.ndarray:
        if issparse(space):
            return space.getrow(index).toarray().ravel()
        return np.array(space[index], dtype=np.float64)

    def get_vector(self, term: str) -> Optional[np.ndarray]:
        """
        Returns the vector for a word or compound, or None if the term is unknown.
        """
        self._ensure_processed()
        index = self.word_vocabulary.lookup(term)
        if index is not None:
            return self._dense_row(self.word_space, index)
        index = self.compound_vocabulary.lookup(term)
        if index is not None:
            return self._dense_row(self.compound_space, index)
        return None

    def contains(self, term: str) -> bool:
        return term in self.word_vocabulary or term in self.compound_vocabulary

    def get_words(self) -> List[str]:
        """Words in index order, followed by compounds in index order."""
        return self.word_vocabulary.terms() + self.compound_vocabulary.terms()

    def vector_length(self) -> int:
        self._ensure_processed()
        return int(self.word_space.shape[1])

    def space_name(self) -> str:
        raise NotImplementedError("Subclasses must implement space_name()")

    def statistics(self) -> Dict:
        stats = {
            'space_name': self.space_name(),
            'documents_processed': self._document_count,
            'word_count': len(self.word_vocabulary),
            'compound_count': len(self.compound_vocabulary),
            'registered_compounds': len(self.compounds) if self.compounds is not None else 0,
            'processed': self._processed,
            'top_words': self.frequencies.most_common(10)
        }
        if self._processed and self.word_space is not None:
            stats['vector_length'] = self.vector_length()
            stats['word_space_shape'] = tuple(self.word_space.shape)
            stats['compound_space_shape'] = tuple(self.compound_space.shape)
        return stats

    # Statistics files

    def _require_trained(self):
        if not self._processed or self.load_mode:
            raise RuntimeError("Only a processed space built from documents can save its statistics")

    @property
    def load_mode(self) -> bool:
        return False

    def _write_statistics(self, filepath: str, model: str, state: Dict) -> None:
        try:
            with open(filepath, 'wb') as f:
                pickle.dump({'version': STATISTICS_FORMAT_VERSION, 'model': model, **state}, f)
        except OSError as e:
            raise RuntimeError(f"Failed to save statistics to {filepath}: {e}") from e
        logger.info("Saved statistics of %s to %s", self.space_name(), filepath)

    @staticmethod
    def _read_statistics(filepath: str, model: str) -> Dict:
        try:
            with open(filepath, 'rb') as f:
                state = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            raise RuntimeError(f"Failed to load statistics from {filepath}: {e}") from e

        if not isinstance(state, dict) or state.get('model') != model \
                or state.get('version') != STATISTICS_FORMAT_VERSION:
            raise ConfigurationError(f"{filepath} does not contain {model.upper()} statistics")
        if not state['transform'].fitted:
            raise InvariantViolation("Saved transform has no statistics")
        return state
