# semspace/processing/__init__.py
from semspace.processing.base import BaseDocumentProcessor, list_documents, read_corpus_lines
from semspace.processing.standard_processor import StandardDocumentProcessor
from semspace.processing.parallel_processor import ParallelDocumentProcessor
from semspace.processing.factory import ProcessorFactory

__all__ = [
    'BaseDocumentProcessor',
    'list_documents',
    'read_corpus_lines',
    'StandardDocumentProcessor',
    'ParallelDocumentProcessor',
    'ProcessorFactory'
]
