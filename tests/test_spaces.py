# tests/test_spaces.py
import math

import numpy as np
import pytest

from semspace.exceptions import ConfigurationError, DocumentReadError
from semspace.processing import ParallelDocumentProcessor, StandardDocumentProcessor
from semspace.space import CoalsSpace, HalSpace, SpaceFactory, TermDocumentSpace, column_entropy
from semspace.text import CompoundRecognizer


def build(space, documents):
    for document in documents:
        space.process_document(document)
    return space.process_space()


def by_feature(space, term):
    vector = space.get_vector(term)
    return {feature: value for feature, value in zip(space.feature_terms, vector) if value}


def plain_coals(tokenizer, **kwargs):
    options = {'window_size': 1, 'max_words': 0, 'max_dimensions': 0, 'transform': 'none'}
    options.update(kwargs)
    return CoalsSpace(tokenizer=tokenizer, **options)


class TestCoalsSpace:
    def test_words_ranked_by_frequency(self, tokenizer, animal_corpus):
        space = build(plain_coals(tokenizer), animal_corpus)
        assert space.get_words() == ["sat", "mat", "dog", "cat"]
        assert space.feature_terms == ["sat", "mat", "dog", "cat"]

    def test_raw_counts(self, tokenizer, animal_corpus):
        space = build(plain_coals(tokenizer), animal_corpus)
        assert by_feature(space, "sat") == {"mat": 2.0, "dog": 1.0, "cat": 1.0}
        assert by_feature(space, "cat") == {"sat": 1.0}
        assert space.get_vector("bird") is None

    def test_compound_row(self, tokenizer, animal_corpus, sat_mat):
        space = build(plain_coals(tokenizer, compounds=sat_mat), animal_corpus)

        assert space.compound_vocabulary.lookup("sat mat") == 0
        assert by_feature(space, "sat mat") == {"cat": 1.0, "dog": 1.0}
        assert space.get_words()[-1] == "sat mat"
        assert space.contains("sat mat")

    def test_symmetric_ramped_window(self, tokenizer):
        space = build(plain_coals(tokenizer, window_size=3), ["p q n r s"])

        assert by_feature(space, "p")["n"] == 2.0
        assert by_feature(space, "s")["n"] == 2.0
        assert by_feature(space, "q")["n"] == 3.0
        assert by_feature(space, "r")["n"] == 3.0
        assert by_feature(space, "n") == {"p": 2.0, "q": 3.0, "r": 3.0, "s": 2.0}

    def test_uniform_weighting(self, tokenizer):
        space = build(plain_coals(tokenizer, window_size=3, weighting='uniform'), ["p q n r s"])
        assert by_feature(space, "n") == {"p": 1.0, "q": 1.0, "r": 1.0, "s": 1.0}

    def test_stopword_keeps_its_slot(self, stop_tokenizer):
        space = build(plain_coals(stop_tokenizer, window_size=2), ["cat the dog"])

        assert by_feature(space, "cat") == {"dog": 1.0}
        assert by_feature(space, "dog") == {"cat": 1.0}
        assert space.get_vector("the") is None
        assert "the" not in space.get_words()

    def test_pruning(self, tokenizer):
        space = build(plain_coals(tokenizer, max_words=2, max_dimensions=1), ["a a a b b c"])

        assert space.get_words() == ["a", "b"]
        assert space.feature_terms == ["a"]
        np.testing.assert_array_equal(space.get_vector("b"), [1.0])
        np.testing.assert_array_equal(space.get_vector("a"), [4.0])
        assert space.get_vector("c") is None

    def test_trigram_compound_key(self, stop_tokenizer, story_corpus, story_compounds):
        space = build(plain_coals(stop_tokenizer, window_size=2, compounds=story_compounds), story_corpus)

        assert "bank america" in space.compound_vocabulary
        assert space.get_vector("bank america") is not None
        assert space.get_vector("bank of america") is None

    def test_trigram_compound_row(self, stop_tokenizer):
        space = build(plain_coals(stop_tokenizer, window_size=2,
                                  compounds=CompoundRecognizer(["bank of america"])),
                      ["w x y bank of america z q"])

        assert by_feature(space, "bank america") == {"x": 1.0, "y": 2.0, "z": 2.0, "q": 1.0}

    def test_trigram_takes_precedence_over_bigram(self, tokenizer):
        space = build(plain_coals(tokenizer, compounds=CompoundRecognizer(["a b c", "b c"])),
                      ["a b c d"])

        assert space.compound_vocabulary.terms() == ["a c"]

    def test_compound_does_not_change_word_rows(self, stop_tokenizer, story_corpus, story_compounds):
        plain = build(plain_coals(stop_tokenizer, window_size=2), story_corpus)
        with_compounds = build(plain_coals(stop_tokenizer, window_size=2, compounds=story_compounds),
                               story_corpus)

        assert plain.get_words() == with_compounds.word_vocabulary.terms()
        for word in plain.word_vocabulary.terms():
            np.testing.assert_array_equal(plain.get_vector(word), with_compounds.get_vector(word))

    def test_parallel_matches_sequential(self, stop_tokenizer, story_corpus, story_compounds):
        sequential = StandardDocumentProcessor(
            CoalsSpace(window_size=2, max_words=0, max_dimensions=0, tokenizer=stop_tokenizer,
                       compounds=story_compounds)
        ).run(story_corpus)
        parallel = ParallelDocumentProcessor(
            CoalsSpace(window_size=2, max_words=0, max_dimensions=0, tokenizer=stop_tokenizer,
                       compounds=story_compounds),
            num_workers=4
        ).run(story_corpus)

        assert sorted(sequential.get_words()) == sorted(parallel.get_words())
        for term in sequential.get_words():
            seq = dict(zip(sequential.feature_terms, sequential.get_vector(term)))
            par = dict(zip(parallel.feature_terms, parallel.get_vector(term)))
            assert seq == pytest.approx(par)

    def test_correlation_space_is_non_negative(self, stop_tokenizer, story_corpus):
        space = build(CoalsSpace(window_size=2, max_words=0, max_dimensions=0, tokenizer=stop_tokenizer),
                      story_corpus)
        assert space.word_space.min() >= 0.0

    def test_reduced_space(self, stop_tokenizer, story_corpus, story_compounds):
        space = build(CoalsSpace(window_size=2, max_words=0, max_dimensions=0, reduced_dimensions=2,
                                 tokenizer=stop_tokenizer, compounds=story_compounds), story_corpus)

        assert space.vector_length() == 2
        assert space.get_vector("dog").shape == (2,)
        assert space.get_vector("new york").shape == (2,)

    def test_reduction_larger_than_features(self):
        with pytest.raises(ConfigurationError):
            CoalsSpace(max_dimensions=5, reduced_dimensions=10)

    def test_invalid_window(self):
        with pytest.raises(ConfigurationError):
            CoalsSpace(window_size=0)

    def test_space_name(self, sat_mat):
        assert CoalsSpace(max_words=10, max_dimensions=5, reduced_dimensions=2,
                          compounds=sat_mat).space_name() == "COALSC_M10_N5_D2"
        assert CoalsSpace().space_name() == "COALS_M15000_N14000"


class TestSpaceLifecycle:
    """process_document / process_space / get_vector ordering."""

    def test_no_documents_after_processing(self, tokenizer, animal_corpus):
        space = build(plain_coals(tokenizer), animal_corpus)
        with pytest.raises(RuntimeError):
            space.process_document("cat sat")

    def test_process_space_once(self, tokenizer, animal_corpus):
        space = build(plain_coals(tokenizer), animal_corpus)
        with pytest.raises(RuntimeError):
            space.process_space()

    def test_vector_before_processing(self, tokenizer):
        space = plain_coals(tokenizer)
        space.process_document("cat sat mat")
        with pytest.raises(RuntimeError):
            space.get_vector("cat")

    def test_missing_file(self, tokenizer, tmp_path):
        space = plain_coals(tokenizer)
        with pytest.raises(DocumentReadError):
            space.process_document(tmp_path / "missing.txt")
        assert space.document_count == 0

    def test_failed_read_leaves_state_untouched(self, tokenizer):
        def failing_stream():
            yield "cat sat mat"
            raise OSError("disk went away")

        space = plain_coals(tokenizer)
        with pytest.raises(DocumentReadError):
            space.process_document(failing_stream())

        assert len(space.word_vocabulary) == 0
        assert space.frequencies.get("cat") == 0
        assert space.document_count == 0

    def test_invalid_utf8(self, tokenizer, tmp_path):
        path = tmp_path / "latin1.txt"
        path.write_bytes("caf\xe9 sat".encode("latin-1"))

        space = plain_coals(tokenizer)
        with pytest.raises(DocumentReadError):
            space.process_document(path)

    def test_path_documents(self, tokenizer, tmp_path, animal_corpus):
        paths = []
        for i, text in enumerate(animal_corpus):
            path = tmp_path / f"doc{i}.txt"
            path.write_text(text, encoding="utf-8")
            paths.append(path)

        space = build(plain_coals(tokenizer), paths)

        assert space.document_count == 2
        assert by_feature(space, "sat") == {"mat": 2.0, "dog": 1.0, "cat": 1.0}

    def test_statistics(self, tokenizer, animal_corpus):
        stats = build(plain_coals(tokenizer), animal_corpus).statistics()

        assert stats['documents_processed'] == 2
        assert stats['word_count'] == 4
        assert stats['vector_length'] == 4
        assert stats['top_words'][0] == ("sat", 2)


class TestHalSpace:
    def test_directional_vectors(self, tokenizer):
        space = build(HalSpace(window_size=2, tokenizer=tokenizer), ["a b c"])

        assert space.get_words() == ["a", "b", "c"]
        np.testing.assert_array_equal(space.get_vector("a"), [0, 0, 0, 0, 2, 1])
        np.testing.assert_array_equal(space.get_vector("b"), [2, 0, 0, 0, 0, 2])
        np.testing.assert_array_equal(space.get_vector("c"), [1, 2, 0, 0, 0, 0])
        assert space.vector_length() == 6

    def test_compound_vector(self, tokenizer):
        space = build(HalSpace(window_size=2, tokenizer=tokenizer, compounds=CompoundRecognizer(["b c"])),
                      ["a b c d"])
        np.testing.assert_array_equal(space.get_vector("b c"), [2, 0, 0, 0, 0, 0, 0, 2])

    def test_retain_columns(self, tokenizer):
        space = build(HalSpace(window_size=2, retain_columns=2, tokenizer=tokenizer), ["a b c"])

        np.testing.assert_array_equal(space.retained_columns, [0, 5])
        np.testing.assert_array_equal(space.get_vector("a"), [0, 1])
        np.testing.assert_array_equal(space.get_vector("b"), [2, 2])
        np.testing.assert_array_equal(space.get_vector("c"), [1, 0])

    def test_column_threshold(self, tokenizer):
        space = build(HalSpace(window_size=2, column_threshold=0.5, tokenizer=tokenizer), ["a b c"])
        np.testing.assert_array_equal(space.retained_columns, [0, 5])

    def test_threshold_and_retain_are_exclusive(self):
        with pytest.raises(ConfigurationError):
            HalSpace(column_threshold=0.5, retain_columns=3)

    def test_space_name(self):
        assert HalSpace().space_name() == "HAL_W5_R0"
        assert HalSpace(window_size=3, retain_columns=20, reduced_dimensions=4).space_name() == "HAL_W3_R20_D4"


class TestColumnEntropy:
    def test_values(self):
        from scipy.sparse import csr_matrix
        matrix = csr_matrix(np.array([[1, 0, 0], [1, 2, 0]], dtype=float))
        np.testing.assert_allclose(column_entropy(matrix), [1.0, 0.0, 0.0])


class TestTermDocumentSpace:
    def test_counts(self, tokenizer):
        space = build(TermDocumentSpace(transform='none', tokenizer=tokenizer), ["cat dog cat", "dog bird"])

        np.testing.assert_array_equal(space.get_vector("cat"), [2, 0])
        np.testing.assert_array_equal(space.get_vector("dog"), [1, 1])
        np.testing.assert_array_equal(space.get_vector("bird"), [0, 1])

    def test_empty_document_gets_no_column(self, stop_tokenizer):
        space = build(TermDocumentSpace(transform='none', tokenizer=stop_tokenizer),
                      ["cat dog", "", "the of a", "dog"])

        assert space.document_count == 4
        assert space.column_count == 2
        np.testing.assert_array_equal(space.get_vector("dog"), [1, 1])

    def test_tflogidf(self, tokenizer):
        space = build(TermDocumentSpace(tokenizer=tokenizer), ["cat dog", "dog bird", "bird fish"])

        cat = space.get_vector("cat")
        assert cat[0] == pytest.approx(math.log(2) * math.log(1.5))
        assert cat[1] == 0.0
        np.testing.assert_allclose(space.get_vector("dog"), [0, 0, 0], atol=1e-12)

    def test_compound_counts(self, stop_tokenizer, story_corpus, story_compounds):
        space = build(TermDocumentSpace(transform='none', tokenizer=stop_tokenizer, compounds=story_compounds),
                      story_corpus)

        new_york = space.get_vector("new york")
        assert list(np.flatnonzero(new_york)) == [3, 4, 7]
        assert list(np.flatnonzero(space.get_vector("bank america"))) == [7, 8]
        assert list(np.flatnonzero(space.get_vector("lazy dog"))) == [0, 1]

    def test_latent_space(self, stop_tokenizer, story_corpus):
        space = build(TermDocumentSpace(reduced_dimensions=3, tokenizer=stop_tokenizer), story_corpus)
        assert space.vector_length() == 3

    def test_space_name(self, sat_mat):
        assert TermDocumentSpace().space_name() == "LSA"
        assert TermDocumentSpace(compounds=sat_mat, reduced_dimensions=300).space_name() == "LSAC_D300"


class TestSpaceFactory:
    def test_models(self):
        assert isinstance(SpaceFactory.create_space({'model': 'coals'}), CoalsSpace)
        assert isinstance(SpaceFactory.create_space({'model': 'hal'}), HalSpace)
        assert isinstance(SpaceFactory.create_space({'model': 'lsa'}), TermDocumentSpace)

    def test_model_defaults(self):
        coals = SpaceFactory.create_space({'model': 'coals', 'window_size': None})
        hal = SpaceFactory.create_space({'model': 'hal'})

        assert coals.window_size == 4
        assert hal.window_size == 5
        assert type(coals.transform).__name__ == "CorrelationTransform"
        assert type(hal.transform).__name__ == "NoTransform"

    def test_unknown_model(self):
        with pytest.raises(ConfigurationError):
            SpaceFactory.create_space({'model': 'word2vec'})

    def test_load_statistics_rejects_hal(self):
        with pytest.raises(ConfigurationError):
            SpaceFactory.create_space({'model': 'hal', 'load_statistics': True, 'statistics_file': 'x.pkl'})
