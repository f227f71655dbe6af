"""
Reproduction scenarios for the slug rollback bug.

Replays the three manual steps of the write-up against a throwaway
in-memory database and reports expected vs actual values.
"""

from __future__ import annotations

from typing import Any, Callable

from slug_guard.config import Settings
from slug_guard.connectors.sqlite import SQLiteConnector
from slug_guard.core.store import PostStore


def _result(scenario: str, expected: Any, actual: Any) -> dict[str, Any]:
    return {
        "scenario": scenario,
        "expected": expected,
        "actual": actual,
        "passed": expected == actual,
    }


def slug_follows_title(store: PostStore) -> list[dict[str, Any]]:
    post = store.create(title="My First Post", body="My Deep Thoughts")
    created = _result("slug set on create", "my-first-post", post.slug)

    store.update(post, title="Changed My Mind")
    updated = _result("slug follows title update", "changed-my-mind", post.slug)
    return [created, updated]


def rollback_on_valid(store: PostStore) -> list[dict[str, Any]]:
    post = store.create(title="My Second Post", body="More Deep Thoughts")

    post.assign_attributes({"title": ""})
    passed = store.valid(post)
    return [
        _result("blank title fails valid()", False, passed),
        _result("no pending slug change after valid()", None, post.changes.get("slug")),
    ]


def rollback_on_save(store: PostStore) -> list[dict[str, Any]]:
    post = store.create(title="My Third Post", body="My Deepest Thoughts")
    original_slug = post.slug

    store.update(post, title="")
    return [
        _result("title error after save()", ["can't be blank"], post.errors["title"]),
        _result("slug kept after failed save()", original_slug, post.slug),
    ]


SCENARIOS: list[Callable[[PostStore], list[dict[str, Any]]]] = [
    slug_follows_title,
    rollback_on_valid,
    rollback_on_save,
]


def run_scenarios(settings: Settings | None = None) -> list[dict[str, Any]]:
    """
    Run every scenario in a fresh in-memory store.

    Returns:
        One result dict per check: scenario, expected, actual, passed
    """
    settings = settings or Settings()
    results: list[dict[str, Any]] = []

    for scenario in SCENARIOS:
        with PostStore(SQLiteConnector(":memory:"), settings) as store:
            results.extend(scenario(store))

    return results
