# semspace/__init__.py
from semspace.exceptions import (
    SemanticSpaceError, ConfigurationError, DocumentReadError, InvariantViolation, SVDError
)
from semspace.text import OrderPreservingTokenizer, CompoundRecognizer, load_compounds
from semspace.space import CoalsSpace, HalSpace, TermDocumentSpace, SpaceFactory
from semspace.processing import ProcessorFactory

__version__ = "1.0.0"

__all__ = [
    'SemanticSpaceError',
    'ConfigurationError',
    'DocumentReadError',
    'InvariantViolation',
    'SVDError',
    'OrderPreservingTokenizer',
    'CompoundRecognizer',
    'load_compounds',
    'CoalsSpace',
    'HalSpace',
    'TermDocumentSpace',
    'SpaceFactory',
    'ProcessorFactory'
]
