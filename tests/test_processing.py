# tests/test_processing.py
import pytest

from semspace.exceptions import DocumentReadError
from semspace.processing import (
    ParallelDocumentProcessor, ProcessorFactory, StandardDocumentProcessor, list_documents, read_corpus_lines
)
from semspace.space import CoalsSpace


@pytest.fixture
def space(tokenizer):
    return CoalsSpace(window_size=1, max_words=0, max_dimensions=0, transform='none', tokenizer=tokenizer)


class TestProcessorFactory:
    def test_auto_below_threshold(self, space):
        processor = ProcessorFactory.create_processor(space, mode='auto', parallel_threshold=10, doc_count=3)
        assert isinstance(processor, StandardDocumentProcessor)

    def test_auto_above_threshold(self, space):
        processor = ProcessorFactory.create_processor(space, mode='auto', parallel_threshold=10, doc_count=10)
        assert isinstance(processor, ParallelDocumentProcessor)

    def test_explicit_parallel(self, space):
        processor = ProcessorFactory.create_processor(space, mode='parallel', num_workers=3)
        assert isinstance(processor, ParallelDocumentProcessor)
        assert processor.num_workers == 3

    def test_unknown_mode_falls_back(self, space):
        processor = ProcessorFactory.create_processor(space, mode='gpu')
        assert isinstance(processor, StandardDocumentProcessor)

    def test_optimal_workers(self):
        assert ParallelDocumentProcessor.get_optimal_num_workers() >= 1


class TestProcessors:
    def test_standard_run(self, space, animal_corpus):
        result = StandardDocumentProcessor(space).run(animal_corpus)
        assert result is space
        assert space.processed
        assert space.document_count == 2

    def test_parallel_run(self, space, animal_corpus):
        ParallelDocumentProcessor(space, num_workers=2).run(animal_corpus * 5)
        assert space.document_count == 10
        assert space.frequencies.get("sat") == 10

    def test_failure_aborts_run(self, space, tmp_path):
        good = tmp_path / "good.txt"
        good.write_text("cat sat mat", encoding="utf-8")

        with pytest.raises(DocumentReadError):
            ParallelDocumentProcessor(space, num_workers=2).run([good, tmp_path / "missing.txt"])
        assert not space.processed

    def test_timing_recorded(self, space, animal_corpus):
        StandardDocumentProcessor(space).run(animal_corpus)
        assert "Sequential Document Processing" in space.profiler.timings
        assert "Matrix Building" in space.profiler.timings


class TestDocumentSources:
    def test_list_documents(self, tmp_path):
        (tmp_path / "b.txt").write_text("b")
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "notes.md").write_text("skip")

        assert [p.name for p in list_documents(str(tmp_path))] == ["a.txt", "b.txt"]

    def test_list_documents_missing_dir(self, tmp_path):
        with pytest.raises(ValueError):
            list_documents(str(tmp_path / "nowhere"))

    def test_read_corpus_lines(self, tmp_path):
        corpus = tmp_path / "corpus.txt"
        corpus.write_text("cat sat mat\n\n  \ndog sat mat\n", encoding="utf-8")

        assert read_corpus_lines(str(corpus)) == ["cat sat mat", "dog sat mat"]
