# semspace/processing/base.py
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)


def list_documents(documents_dir) -> List[Path]:
    """All .txt files directly inside documents_dir, sorted by name."""
    if not documents_dir or not os.path.isdir(documents_dir):
        raise ValueError(f"Cannot list documents: directory '{documents_dir}' not found")
    return sorted(Path(documents_dir) / f for f in os.listdir(documents_dir) if f.endswith('.txt'))


def read_corpus_lines(corpus_file) -> List[str]:
    """One document per non-empty line."""
    with open(corpus_file, encoding="utf-8") as f:
        return [line.rstrip("\n") for line in f if line.strip()]


class BaseDocumentProcessor(ABC):
    def __init__(self, space, profiler=None):
        self.space = space
        self.profiler = profiler or space.profiler

    @abstractmethod
    def process_documents(self, documents: Iterable) -> int:
        pass

    def run(self, documents: Iterable):
        """Process every document, then the space. Returns the processed space."""
        count = self.process_documents(documents)
        logger.info("Processed %d documents into %s", count, self.space.space_name())
        self.space.process_space()
        return self.space
