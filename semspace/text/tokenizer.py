# semspace/text/tokenizer.py
"""
Order Preserving Tokenizer

Turns raw document text into the token stream consumed by the windowing code.
Filtered words are not removed from the stream: they are returned with
STOPWORD_FLAG appended so that they keep occupying a window slot and can still
take part in compound matching.
"""
import logging
import re
from typing import Iterable, Iterator, Optional, Set, Union, TextIO

import nltk
from nltk.stem import PorterStemmer
from nltk.tokenize import RegexpTokenizer, word_tokenize

from semspace.constants import EMPTY_TOKEN, STOPWORD_FLAG

logger = logging.getLogger(__name__)


def is_stopword_token(token: str) -> bool:
    return token.endswith(STOPWORD_FLAG)


def window_word(token: Optional[str]) -> Optional[str]:
    """Role of a token inside a context window: flagged tokens become EMPTY_TOKEN."""
    if token is None:
        return None
    if token.endswith(STOPWORD_FLAG):
        return EMPTY_TOKEN
    return token


def real_word(token: Optional[str]) -> Optional[str]:
    """Surface text of a token with the stopword flag stripped."""
    if token is None:
        return None
    if token.endswith(STOPWORD_FLAG):
        return token[:-len(STOPWORD_FLAG)]
    return token


def load_stopwords(filepath: Optional[str]) -> Set[str]:
    if not filepath:
        return set()
    try:
        with open(filepath, encoding="utf-8") as file:
            return {line.strip().lower() for line in file if line.strip()}
    except OSError as e:
        logger.warning("Failed to load stopwords from %s: %s", filepath, e)
        return set()


def load_special_chars(filepath: Optional[str]) -> Set[str]:
    if not filepath:
        return set()
    try:
        with open(filepath, encoding="utf-8") as file:
            return {line.strip() for line in file if line.strip()}
    except OSError as e:
        logger.warning("Failed to load special characters from %s: %s", filepath, e)
        return set()


class OrderPreservingTokenizer:
    """
    Lazily tokenizes text line by line without changing token order.

    Args:
        stopwords (set, optional): Words to flag instead of drop
        special_chars (set, optional): Characters stripped from every token
        stem (bool): Apply the Porter stemmer to words that are not stopwords
        mode (str): 'regexp' for a word-character tokenizer, 'punkt' for nltk's word_tokenize
    """
    MODES = ('regexp', 'punkt')

    def __init__(self, stopwords: Optional[Iterable[str]] = None,
                 special_chars: Optional[Iterable[str]] = None,
                 stem: bool = False, mode: str = 'regexp'):
        if mode not in self.MODES:
            raise ValueError(f"Unknown tokenizer mode: {mode}")
        self.stopwords = {w.lower() for w in (stopwords or ())}
        self.special_chars = set(special_chars or ())
        self.mode = mode
        self.stemmer = PorterStemmer() if stem else None
        self._regexp = RegexpTokenizer(r"\w+")
        self._special_pattern = None
        if self.special_chars:
            self._special_pattern = re.compile(f'[{re.escape("".join(sorted(self.special_chars)))}]')
        if mode == 'punkt':
            self._ensure_punkt()

    @staticmethod
    def _ensure_punkt():
        for resource in ('punkt', 'punkt_tab'):
            try:
                nltk.data.find(f'tokenizers/{resource}')
            except LookupError:
                nltk.download(resource, quiet=True)

    def _split(self, line: str):
        if self.mode == 'punkt':
            return word_tokenize(line)
        return self._regexp.tokenize(line)

    def normalize(self, raw: str) -> Optional[str]:
        """Normalizes one surface word. Returns None when nothing is left of it."""
        token = raw.lower()
        if self._special_pattern is not None:
            token = self._special_pattern.sub('', token)
        if not token or not any(ch.isalnum() for ch in token):
            return None
        if token in self.stopwords:
            return token + STOPWORD_FLAG
        if self.stemmer is not None:
            token = self.stemmer.stem(token)
        return token

    def tokenize(self, source: Union[str, TextIO, Iterable[str]]) -> Iterator[str]:
        """
        Yields the tokens of a document in order.

        Args:
            source: Document text, or an open text stream / iterable of lines

        Yields:
            str: Normalized token, stopwords carrying STOPWORD_FLAG
        """
        lines = source.splitlines() if isinstance(source, str) else source
        for line in lines:
            for raw in self._split(line):
                token = self.normalize(raw)
                if token is not None:
                    yield token

    def __repr__(self):
        return (f"OrderPreservingTokenizer(mode={self.mode!r}, stopwords={len(self.stopwords)}, "
                f"stem={self.stemmer is not None})")
