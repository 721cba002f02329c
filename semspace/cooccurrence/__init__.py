# semspace/cooccurrence/__init__.py
from semspace.cooccurrence.weighting import LinearWeighting, UniformWeighting, get_weighting
from semspace.cooccurrence.window import WindowContext, sliding_windows, compound_preceding, score_context
from semspace.cooccurrence.store import DocumentAccumulator, SemanticVectorStore

__all__ = [
    'LinearWeighting',
    'UniformWeighting',
    'get_weighting',
    'WindowContext',
    'sliding_windows',
    'compound_preceding',
    'score_context',
    'DocumentAccumulator',
    'SemanticVectorStore'
]
