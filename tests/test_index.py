# tests/test_index.py
import pickle
import random
import threading

from semspace.index import FrequencyTable, StripedLock, Vocabulary


def run_threads(target, count):
    threads = [threading.Thread(target=target, args=(i,)) for i in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()


class TestVocabulary:
    """Term to index mapping."""

    def test_assigns_dense_indices_in_order(self):
        vocab = Vocabulary()
        assert vocab.get_index("cat") == 0
        assert vocab.get_index("dog") == 1
        assert vocab.get_index("cat") == 0
        assert vocab.terms() == ["cat", "dog"]
        assert vocab.term_at(1) == "dog"
        assert len(vocab) == 2

    def test_frozen_vocabulary_returns_none_for_unknown(self):
        vocab = Vocabulary()
        vocab.get_index("cat")
        vocab.freeze()

        assert vocab.get_index("cat") == 0
        assert vocab.get_index("zebra") is None
        assert "zebra" not in vocab
        assert len(vocab) == 1

    def test_lookup_never_registers(self):
        vocab = Vocabulary()
        assert vocab.lookup("cat") is None
        assert len(vocab) == 0

    def test_from_terms(self):
        vocab = Vocabulary.from_terms(["b", "a"])
        assert vocab.frozen
        assert vocab.lookup("a") == 1

    def test_concurrent_registration_is_exactly_once(self):
        vocab = Vocabulary()
        terms = [f"term{i}" for i in range(500)]
        seen = [None] * 8

        def worker(n):
            order = terms[:]
            random.Random(n).shuffle(order)
            seen[n] = {term: vocab.get_index(term) for term in order}

        run_threads(worker, 8)

        assert len(vocab) == len(terms)
        assert sorted(vocab.lookup(t) for t in terms) == list(range(len(terms)))
        for mapping in seen:
            assert mapping == seen[0]

    def test_pickle_round_trip(self):
        vocab = Vocabulary()
        for term in ("x", "y", "z"):
            vocab.get_index(term)
        vocab.freeze()

        restored = pickle.loads(pickle.dumps(vocab))

        assert restored.terms() == ["x", "y", "z"]
        assert restored.frozen
        assert restored.get_index("new") is None


class TestFrequencyTable:
    def test_ranked_breaks_ties_by_descending_term(self):
        table = FrequencyTable()
        table.update({"a": 2, "b": 2, "c": 3, "d": 1})
        assert table.ranked() == [("c", 3), ("b", 2), ("a", 2), ("d", 1)]

    def test_ranked_restricted_to_terms(self):
        table = FrequencyTable()
        table.update({"a": 2})
        assert table.ranked(["a", "z"]) == [("a", 2), ("z", 0)]

    def test_concurrent_increments(self):
        table = FrequencyTable()

        def worker(n):
            for _ in range(1000):
                table.add("shared")
            table.add(f"own{n}", 5)

        run_threads(worker, 8)

        assert table.get("shared") == 8000
        assert table.get("own3") == 5
        assert len(table) == 9


class TestStripedLock:
    def test_same_key_same_lock(self):
        locks = StripedLock(4)
        assert locks.for_key("cat") is locks.for_key("cat")
        assert len(locks) == 4
