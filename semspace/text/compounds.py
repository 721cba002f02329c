# semspace/text/compounds.py
import logging
from typing import Iterable, NamedTuple, Optional, Sequence

from semspace.text.tokenizer import OrderPreservingTokenizer, real_word, window_word

logger = logging.getLogger(__name__)


class CompoundMatch(NamedTuple):
    key: str
    span: int


def canonical_key(phrase: str) -> str:
    """Index key of a registered phrase: trigrams lose their middle word."""
    words = phrase.split(" ")
    if len(words) == 3:
        return f"{words[0]} {words[2]}"
    return phrase


class CompoundRecognizer:
    """
    Detects registered bigram/trigram phrases ending at the current focus token.

    A trigram is tested as (two back, one back, focus). The outer words are
    tested in their window form, so a stopword can only appear as the middle
    word. A bigram is tested as (one back, focus). When both match, only the
    trigram is reported.
    """

    def __init__(self, phrases: Iterable[str]):
        self._phrases = frozenset(phrases)

    def __len__(self):
        return len(self._phrases)

    def __contains__(self, phrase):
        return phrase in self._phrases

    @property
    def phrases(self):
        return self._phrases

    def match(self, focus: str, previous: Sequence[str]) -> Optional[CompoundMatch]:
        focus_word = window_word(focus)
        if not focus_word:
            return None

        if len(previous) >= 2:
            trigram = f"{window_word(previous[-2])} {real_word(previous[-1])} {focus_word}"
            if trigram in self._phrases:
                return CompoundMatch(canonical_key(trigram), 3)

        if previous:
            bigram = f"{window_word(previous[-1])} {focus_word}"
            if bigram in self._phrases:
                return CompoundMatch(bigram, 2)

        return None

    def keys(self):
        """Canonical keys of every registered phrase."""
        return {canonical_key(phrase) for phrase in self._phrases}


def load_compounds(filepath: str, tokenizer: Optional[OrderPreservingTokenizer] = None) -> CompoundRecognizer:
    """
    Load compound phrases, one per line.

    Each word is normalized through the tokenizer so the phrase matches the
    token stream (case, special characters, stemming). Stopwords keep their
    surface text. Lines that do not normalize to two or three words are skipped.

    Args:
        filepath (str): Path to the phrase file
        tokenizer (OrderPreservingTokenizer, optional): Tokenizer used for the documents

    Returns:
        CompoundRecognizer: Recognizer over the loaded phrases
    """
    tokenizer = tokenizer or OrderPreservingTokenizer()
    phrases = set()
    skipped = 0

    with open(filepath, encoding="utf-8") as f:
        for line_no, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            words = [real_word(token) for token in tokenizer.tokenize(line)]
            if len(words) not in (2, 3):
                logger.warning("Skipping compound on line %d of %s: %r has %d words",
                               line_no, filepath, line, len(words))
                skipped += 1
                continue
            phrases.add(" ".join(words))

    logger.info("Loaded %d compounds from %s (%d skipped)", len(phrases), filepath, skipped)
    return CompoundRecognizer(phrases)
