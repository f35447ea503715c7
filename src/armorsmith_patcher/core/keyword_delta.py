"""Add/remove bookkeeping for one keyword-like set.

``ensure`` and ``remove`` cancel each other, so whichever rule runs last
decides the outcome for a keyword. A keyword is therefore never pending
addition and removal at the same time.
"""

from typing import Iterable, Set


class KeywordDelta:
    """Pending additions and removals against a fixed set of present keys."""

    def __init__(self, present: Iterable[str]):
        self.present = frozenset(present)
        self.added: Set[str] = set()
        self.removed: Set[str] = set()

    def ensure(self, keys: Iterable[str]) -> None:
        """Make sure every key ends up present."""
        for key in keys:
            self.removed.discard(key)
            if key not in self.present:
                self.added.add(key)

    def remove(self, keys: Iterable[str]) -> None:
        """Make sure every key ends up absent."""
        for key in keys:
            self.added.discard(key)
            if key in self.present:
                self.removed.add(key)

    def apply_exclusive(self, target: str, candidates: Iterable[str]) -> None:
        """Keep ``target`` as the single member of ``candidates``.

        When ``target`` is not among the candidates it is added unless already
        present. Otherwise every other candidate is removed.
        """
        candidates = set(candidates)
        if target not in candidates:
            self.removed.discard(target)
            if target not in self.present:
                self.added.add(target)
            return

        candidates.discard(target)
        for key in candidates:
            self.added.discard(key)
            self.removed.add(key)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)

    def __repr__(self) -> str:
        return f"KeywordDelta(added={sorted(self.added)}, removed={sorted(self.removed)})"
