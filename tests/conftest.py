# tests/conftest.py
import pytest

from semspace.text import OrderPreservingTokenizer, CompoundRecognizer, real_word


@pytest.fixture
def tokenizer():
    return OrderPreservingTokenizer()


@pytest.fixture
def stop_tokenizer():
    return OrderPreservingTokenizer(stopwords={"the", "of", "a"})


@pytest.fixture
def animal_corpus():
    return ["cat sat mat", "dog sat mat"]


@pytest.fixture
def sat_mat():
    return CompoundRecognizer(["sat mat"])


@pytest.fixture
def story_corpus():
    return [
        "the quick brown fox jumps over the lazy dog",
        "a lazy dog sleeps in the warm sun",
        "the brown dog chases the quick cat",
        "new york is a big city with a lazy river",
        "the cat sleeps in new york",
        "a quick fox and a brown cat play in the sun",
        "the dog and the cat share the warm house",
        "bank of america opened a branch in new york",
        "the river runs past the bank of america tower",
        "the fox jumps over the river near the city",
    ]


@pytest.fixture
def story_compounds(stop_tokenizer):
    phrases = set()
    for phrase in ("new york", "bank of america", "lazy dog"):
        phrases.add(" ".join(real_word(t) for t in stop_tokenizer.tokenize(phrase)))
    return CompoundRecognizer(phrases)
