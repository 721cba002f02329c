# semspace/index/__init__.py
from semspace.index.locks import StripedLock
from semspace.index.vocabulary import Vocabulary, FrequencyTable

__all__ = [
    'StripedLock',
    'Vocabulary',
    'FrequencyTable'
]
