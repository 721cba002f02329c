# semspace/text/__init__.py
from semspace.text.tokenizer import (
    OrderPreservingTokenizer, window_word, real_word, is_stopword_token,
    load_stopwords, load_special_chars
)
from semspace.text.compounds import CompoundRecognizer, CompoundMatch, canonical_key, load_compounds

__all__ = [
    'OrderPreservingTokenizer',
    'window_word',
    'real_word',
    'is_stopword_token',
    'load_stopwords',
    'load_special_chars',
    'CompoundRecognizer',
    'CompoundMatch',
    'canonical_key',
    'load_compounds'
]
