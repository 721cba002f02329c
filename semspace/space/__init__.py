# semspace/space/__init__.py
from semspace.space.base import BaseSemanticSpace
from semspace.space.coals import CoalsSpace
from semspace.space.hal import HalSpace, column_entropy
from semspace.space.lsa import TermDocumentSpace
from semspace.space.factory import SpaceFactory

__all__ = [
    'BaseSemanticSpace',
    'CoalsSpace',
    'HalSpace',
    'column_entropy',
    'TermDocumentSpace',
    'SpaceFactory'
]
