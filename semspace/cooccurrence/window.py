# semspace/cooccurrence/window.py
"""
Sliding Window

A single pass over a token stream that exposes, for each focus token, the raw
tokens before and after it. Raw tokens keep their stopword flag: a filtered
word still occupies its slot, it is only skipped when scoring.

The history holds two more tokens than the scoring window so that a compound
ending at the focus can still see a full window of words in front of its
first word after the sliding queue has moved past them.
"""
from collections import Counter, deque
from itertools import islice
from typing import Callable, Iterable, Iterator, NamedTuple, Optional, Sequence, Tuple

from semspace.constants import EMPTY_TOKEN
from semspace.text.tokenizer import window_word

_END = object()


class WindowContext(NamedTuple):
    focus: str
    history: Tuple[str, ...]
    following: Tuple[str, ...]
    window_size: int

    @property
    def previous(self) -> Tuple[str, ...]:
        """The scored preceding tokens, oldest first."""
        if self.window_size <= 0:
            return ()
        return self.history[-self.window_size:]


def sliding_windows(tokens: Iterable[str], before: int, after: int) -> Iterator[WindowContext]:
    """
    Slide over tokens one focus at a time.

    Args:
        tokens (iterable): Raw token stream, consumed lazily
        before (int): Number of preceding tokens that are scored
        after (int): Number of following tokens that are scored

    Yields:
        WindowContext: focus token, up to before + 2 preceding tokens (oldest
            first) and up to after following tokens (nearest first)
    """
    it = iter(tokens)
    following = deque(islice(it, after + 1))
    history = deque(maxlen=max(before, 0) + 2)

    while following:
        focus = following.popleft()
        nxt = next(it, _END)
        if nxt is not _END:
            following.append(nxt)
        yield WindowContext(focus, tuple(history), tuple(following), before)
        history.append(focus)


def compound_preceding(history: Sequence[str], span: int, window_size: int) -> Tuple[str, ...]:
    """Tokens in front of the first word of a compound ending at the focus."""
    if window_size <= 0:
        return ()
    end = len(history) - (span - 1)
    if end <= 0:
        return ()
    return tuple(history[:end][-window_size:])


def score_context(row: Counter, neighbors: Iterable[str], window_size: int, weighting,
                  resolve: Optional[Callable[[str], Optional[object]]] = None) -> None:
    """
    Add weighted co-occurrence counts for neighbors into row.

    Args:
        row (Counter): Context key -> accumulated weight
        neighbors (iterable): Raw tokens ordered nearest first
        window_size (int): Window size passed to the weighting function
        weighting: Object exposing weight(distance, window_size)
        resolve (callable, optional): Maps a word to its context key. Words it
            maps to None are ignored. Defaults to the word itself.
    """
    for distance, token in enumerate(neighbors, 1):
        word = window_word(token)
        if word == EMPTY_TOKEN:
            continue
        key = word if resolve is None else resolve(word)
        if key is None:
            continue
        row[key] += weighting.weight(distance, window_size)
