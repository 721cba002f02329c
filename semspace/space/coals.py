# semspace/space/coals.py
"""
COALS Semantic Space

Correlated Occurrence Analogue to Lexical Semantics (Rohde, Gonnerman and
Plaut). Every non-stopword focus word scores the words up to window_size
slots before and after it with a ramped weight, the matrix is pruned to the
most frequent words and features, scaled with the correlation transform and
optionally reduced with an SVD.

When compounds are registered, a compound ending at the focus is scored
against the words around it exactly as a single word would be. Compound rows
never take part in pruning, fitting or factorization; they are transformed
against the word statistics and projected into the word space afterwards.

A processed space can save its statistics (retained words, feature terms,
fitted transform, SVD factors). A space loaded from them only builds rows
for words outside the saved vocabulary and for compounds, and places those
rows into the saved space without refitting anything.
"""
import logging
from typing import List, Optional

from semspace.constants import (
    COALS_MAX_DIMENSIONS, COALS_MAX_WORDS, COALS_WINDOW_SIZE
)
from semspace.cooccurrence.store import DocumentAccumulator
from semspace.cooccurrence.weighting import get_weighting
from semspace.cooccurrence.window import compound_preceding, score_context, sliding_windows
from semspace.exceptions import ConfigurationError
from semspace.index.vocabulary import Vocabulary
from semspace.matrix.builder import MatrixBuilder, ReducedMatrices
from semspace.matrix.svd import SVDReducer
from semspace.space.base import BaseSemanticSpace
from semspace.text.tokenizer import window_word

logger = logging.getLogger(__name__)


class CoalsSpace(BaseSemanticSpace):
    SPACE_PREFIX = "COALS"

    def __init__(self, window_size: int = COALS_WINDOW_SIZE, weighting='linear',
                 max_words: int = COALS_MAX_WORDS, max_dimensions: int = COALS_MAX_DIMENSIONS,
                 reduced_dimensions: int = 0, transform='correlation', tokenizer=None,
                 compounds=None, svd_solver='auto', scale_by_singular_values: bool = False,
                 profiler=None):
        if window_size is None or window_size <= 0:
            raise ConfigurationError(f"window_size must be positive, got {window_size}")
        if max_words < 0 or max_dimensions < 0:
            raise ConfigurationError("max_words and max_dimensions must not be negative")
        if reduced_dimensions and 0 < max_dimensions < reduced_dimensions:
            raise ConfigurationError(
                f"Cannot reduce to {reduced_dimensions} dimensions with only {max_dimensions} features"
            )

        super().__init__(tokenizer, compounds, transform, reduced_dimensions, svd_solver,
                         scale_by_singular_values, profiler)
        self.window_size = window_size
        self.weighting = get_weighting(weighting)
        self.max_words = max_words
        self.max_dimensions = max_dimensions

        self.feature_terms: List[str] = []
        self.reduced: Optional[ReducedMatrices] = None

        # load mode
        self._known_words = None
        self._features: Optional[Vocabulary] = None

    @property
    def load_mode(self) -> bool:
        return self._known_words is not None

    def _scan(self, tokens, accumulator: DocumentAccumulator):
        ws = self.window_size
        weighting = self.weighting

        for context in sliding_windows(tokens, ws, ws):
            focus_word = window_word(context.focus)

            if focus_word and self._accepts_focus(focus_word):
                accumulator.word_counts[focus_word] += 1
                row = accumulator.words[focus_word]
                score_context(row, reversed(context.previous), ws, weighting)
                score_context(row, context.following, ws, weighting)

            if self.compounds is not None:
                match = self.compounds.match(context.focus, context.history)
                if match is not None:
                    row = accumulator.compounds[match.key]
                    preceding = compound_preceding(context.history, match.span, ws)
                    score_context(row, reversed(preceding), ws, weighting)
                    score_context(row, context.following, ws, weighting)

    def _accepts_focus(self, word: str) -> bool:
        return self._known_words is None or word not in self._known_words

    def _context_index(self, word: str) -> Optional[int]:
        if self._features is not None:
            return self._features.lookup(word)
        return self.word_vocabulary.get_index(word)

    def _build_matrices(self):
        if self.load_mode:
            return self._build_held_out_matrices()

        builder = MatrixBuilder(self.word_vocabulary, self.frequencies, self._word_store,
                                self.compound_vocabulary, self._compound_store)
        self.reduced = builder.build_matrix(self.max_words, self.max_dimensions)
        self.word_vocabulary = self.reduced.word_vocabulary
        self.feature_terms = self.reduced.feature_terms
        return self.reduced.words.to_csr(), self.reduced.compounds.to_csr()

    def _build_held_out_matrices(self):
        n_features = len(self._features)
        words = self._word_store.to_csr((len(self.word_vocabulary), n_features))
        compounds = self._compound_store.to_csr((len(self.compound_vocabulary), n_features))
        return words, compounds

    def _transform_matrices(self, words, compounds):
        if self.load_mode:
            return self.transform.transform_rows(words), self.transform.transform_rows(compounds)
        return super()._transform_matrices(words, compounds)

    def _reduce(self, words, compounds):
        if self.load_mode:
            with self.profiler.timer("Held-out Projection"):
                return self.reducer.project(words), self.reducer.project(compounds)
        return super()._reduce(words, compounds)

    def space_name(self) -> str:
        name = self.SPACE_PREFIX
        if self.compounds_enabled:
            name += "C"
        name += f"_M{self.max_words}_N{self.max_dimensions}"
        if self.reduced_dimensions:
            name += f"_D{self.reduced_dimensions}"
        return name

    def statistics(self):
        stats = super().statistics()
        stats.update({
            'window_size': self.window_size,
            'max_words': self.max_words,
            'max_dimensions': self.max_dimensions,
            'feature_count': len(self._features) if self._features is not None else len(self.feature_terms),
            'load_mode': self.load_mode
        })
        return stats

    def save_statistics(self, filepath: str) -> None:
        """
        Save everything a later run needs to place new words into this space.

        Args:
            filepath (str): Destination pickle file
        """
        self._require_trained()
        self._write_statistics(filepath, 'coals', {
            'window_size': self.window_size,
            'weighting': self.weighting.name,
            'max_words': self.max_words,
            'max_dimensions': self.max_dimensions,
            'words': self.word_vocabulary.terms(),
            'feature_terms': list(self.feature_terms),
            'transform': self.transform,
            'factors': self.reducer.factors if self.reducer is not None else None,
            'scale_by_singular_values': self.scale_by_singular_values
        })

    @classmethod
    def load_statistics(cls, filepath: str, tokenizer=None, compounds=None, profiler=None) -> 'CoalsSpace':
        """
        Create a space that projects unseen words and compounds into a saved space.

        Args:
            filepath (str): File written by save_statistics()
            tokenizer (OrderPreservingTokenizer, optional): Token feed for documents
            compounds (CompoundRecognizer, optional): Compounds to build vectors for
            profiler (Profiler, optional): Performance profiler for timing operations

        Returns:
            CoalsSpace: Space in load mode, ready for process_document()
        """
        state = cls._read_statistics(filepath, 'coals')

        space = cls(window_size=state['window_size'], weighting=state['weighting'],
                    max_words=state['max_words'], max_dimensions=state['max_dimensions'],
                    transform=state['transform'], tokenizer=tokenizer, compounds=compounds,
                    scale_by_singular_values=state['scale_by_singular_values'], profiler=profiler)
        space._known_words = frozenset(state['words'])
        space._features = Vocabulary.from_terms(state['feature_terms'], frozen=True)
        space.feature_terms = list(state['feature_terms'])

        if state['factors'] is not None:
            space.reducer = SVDReducer.from_factors(state['factors'], state['scale_by_singular_values'])
            space.reduced_dimensions = state['factors'].rank

        logger.info("Loaded statistics for %s: %d known words, %d features",
                    space.space_name(), len(space._known_words), len(space._features))
        return space
