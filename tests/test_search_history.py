from __future__ import annotations

import json

from code_roaster.storage import SEARCH_HISTORY_KEY, LocalStorage, SearchHistory


def test_terms_are_prepended_without_duplicates() -> None:
    storage = LocalStorage()
    history = SearchHistory(storage)

    history.add("react")
    history.add("sql")
    history.add("react")
    history.add("   ")

    assert history.terms == ["sql", "react"]
    assert json.loads(storage.get_item(SEARCH_HISTORY_KEY)) == ["sql", "react"]


def test_terms_are_capped() -> None:
    history = SearchHistory(LocalStorage(), limit=3)

    for term in ("a", "b", "c", "d"):
        history.add(term)

    assert history.terms == ["d", "c", "b"]


def test_clear_and_reload() -> None:
    storage = LocalStorage()
    SearchHistory(storage).add("hooks")

    reloaded = SearchHistory(storage)
    assert reloaded.terms == ["hooks"]

    reloaded.clear()
    assert SearchHistory(storage).terms == []


def test_corrupt_value_starts_empty() -> None:
    storage = LocalStorage()
    storage.set_item(SEARCH_HISTORY_KEY, "{oops")

    assert SearchHistory(storage).terms == []
