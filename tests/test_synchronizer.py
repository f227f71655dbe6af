"""Tests for the slug synchronizer hooks."""

import logging
import uuid

import pytest

from slug_guard.config import RollbackPolicy, SlugOptions
from slug_guard.core.slugify import slugify
from slug_guard.core.synchronizer import SlugFieldConfig, SlugSynchronizer
from slug_guard.core.validation import ValidationPipeline
from slug_guard.models import Post


def saved_post(title: str, body: str = "Body") -> Post:
    """A post as it looks after a successful save."""
    return Post.from_row({"id": 1, "title": title, "body": body, "slug": slugify(title)})


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


class TestPrepareSlug:
    """Tests for speculative regeneration before validation."""

    def test_new_post_gets_slug_from_title(self) -> None:
        """A new post derives its slug from the title."""
        post = Post(title="My First Post", body="My Deep Thoughts")
        SlugSynchronizer().prepare_slug(post)

        assert post.slug == "my-first-post"
        assert post.changes["slug"].previous is None

    def test_title_change_regenerates(self) -> None:
        """Changing the title regenerates the slug and tracks the old one."""
        post = saved_post("My First Post")
        post.title = "Changed My Mind"

        SlugSynchronizer().prepare_slug(post)

        assert post.slug == "changed-my-mind"
        assert post.changes.to_dict()["slug"] == ["my-first-post", "changed-my-mind"]

    def test_unchanged_title_does_not_regenerate(self) -> None:
        """Without a title change the slug is left alone."""
        post = saved_post("My First Post")
        post.body = "Edited body"
        synchronizer = SlugSynchronizer()

        assert synchronizer.should_regenerate(post) is False
        synchronizer.prepare_slug(post)
        assert post.slug == "my-first-post"
        assert "slug" not in post.changes

    def test_prepare_twice_is_idempotent(self) -> None:
        """A second prepare without a new title change keeps the slug."""
        post = saved_post("My First Post")
        post.title = "New Title"
        synchronizer = SlugSynchronizer()

        synchronizer.prepare_slug(post)
        first = post.slug
        synchronizer.prepare_slug(post)

        assert first == "new-title"
        assert post.slug == first

    def test_prepare_twice_keeps_conflict_suffix(self) -> None:
        """A UUID slug from a blank title is not replaced by a new UUID."""
        post = saved_post("My First Post")
        post.title = ""
        synchronizer = SlugSynchronizer()

        synchronizer.prepare_slug(post)
        first = post.slug
        synchronizer.prepare_slug(post)

        assert is_uuid(first)
        assert post.slug == first

    def test_stale_pending_slug_regenerates_after_title_revert(self) -> None:
        """A pending slug from an abandoned title is rebuilt from the stored title."""
        post = saved_post("My First Post")
        synchronizer = SlugSynchronizer()
        post.title = "Other Title"
        synchronizer.prepare_slug(post)

        post.title = "My First Post"
        assert "title" not in post.changes
        assert synchronizer.should_regenerate(post) is True

        synchronizer.prepare_slug(post)
        assert post.slug == "my-first-post"
        assert "slug" not in post.changes

    def test_empty_slug_always_regenerates(self) -> None:
        """An empty slug is filled even with no pending change."""
        post = Post.from_row({"id": 7, "title": "Hello World", "body": "b", "slug": None})
        assert len(post.changes) == 0

        synchronizer = SlugSynchronizer()
        assert synchronizer.should_regenerate(post) is True
        synchronizer.prepare_slug(post)
        assert post.slug == "hello-world"

    def test_custom_field_names(self) -> None:
        """Field names come from configuration."""
        post = Post(title="ignored", body="Body As Source")
        synchronizer = SlugSynchronizer(SlugFieldConfig(source_field="body", slug_field="slug"))

        synchronizer.prepare_slug(post)
        assert post.slug == "body-as-source"


class TestDedupe:
    """Tests for slug conflict resolution."""

    def test_free_candidate_used_as_is(self) -> None:
        synchronizer = SlugSynchronizer(slug_exists=lambda candidate, entity: False)
        assert synchronizer.dedupe("my-post", Post()) == "my-post"

    def test_taken_candidate_gets_uuid_suffix(self) -> None:
        """A taken candidate is joined with a random UUID."""
        synchronizer = SlugSynchronizer(slug_exists=lambda candidate, entity: True)
        slug = synchronizer.dedupe("my-post", Post())

        assert slug.startswith("my-post-")
        assert is_uuid(slug[len("my-post-"):])

    def test_blank_candidate_becomes_uuid(self) -> None:
        slug = SlugSynchronizer().dedupe("", Post())
        assert is_uuid(slug)

    def test_lookup_receives_entity(self) -> None:
        """The uniqueness lookup is told which entity is asking."""
        seen = []
        synchronizer = SlugSynchronizer(
            slug_exists=lambda candidate, entity: seen.append((candidate, entity)) or False
        )
        post = Post(title="Hi")
        synchronizer.dedupe("hi", post)
        assert seen == [("hi", post)]


class TestReconcileSlug:
    """Tests for rollback after validation."""

    def test_source_error_rolls_back(self) -> None:
        """A title error restores the slug and drops it from the change set."""
        post = saved_post("My Second Post")
        post.title = ""
        synchronizer = SlugSynchronizer()
        synchronizer.prepare_slug(post)
        post.errors.add("title", "can't be blank")

        synchronizer.reconcile_slug(post)

        assert post.slug == "my-second-post"
        assert "slug" not in post.changes
        assert post.changes.get("slug") is None

    def test_slug_error_rolls_back(self) -> None:
        """An error keyed by the slug field also rolls back."""
        post = saved_post("My Post")
        post.title = "Other Post"
        synchronizer = SlugSynchronizer()
        synchronizer.prepare_slug(post)
        post.errors.add("slug", "has already been taken")

        synchronizer.reconcile_slug(post)

        assert post.slug == "my-post"
        assert "slug" not in post.changes

    def test_no_errors_keeps_speculative_slug(self) -> None:
        post = saved_post("My Post")
        post.title = "Other Post"
        synchronizer = SlugSynchronizer()
        synchronizer.prepare_slug(post)

        synchronizer.reconcile_slug(post)

        assert post.slug == "other-post"
        assert "slug" in post.changes

    def test_noop_without_pending_slug_change(self) -> None:
        """Nothing to roll back when the slug was not touched."""
        post = saved_post("My Post")
        post.errors.add("title", "is too long")

        SlugSynchronizer().reconcile_slug(post)

        assert post.slug == "my-post"
        assert len(post.changes) == 0

    def test_new_post_rolls_back_to_none(self) -> None:
        """A rejected new post ends up with no slug rather than a UUID."""
        post = Post(title="", body="Body")
        synchronizer = SlugSynchronizer()
        synchronizer.prepare_slug(post)
        assert is_uuid(post.slug)

        post.errors.add("title", "can't be blank")
        synchronizer.reconcile_slug(post)

        assert post.slug is None
        assert "slug" not in post.changes

    def test_rollback_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        post = saved_post("My Post")
        post.title = ""
        synchronizer = SlugSynchronizer()
        synchronizer.prepare_slug(post)
        post.errors.add("title", "can't be blank")

        with caplog.at_level(logging.INFO, logger="slug_guard.core.synchronizer"):
            synchronizer.reconcile_slug(post)

        assert "Rolled back slug" in caplog.text
        assert "'my-post'" in caplog.text


class TestPipelineIntegration:
    """Tests for the hooks installed on a validation pipeline."""

    def test_invalid_title_leaves_slug_untouched(self, pipeline: ValidationPipeline) -> None:
        """Blank title: validation fails and no slug change is pending."""
        post = saved_post("My Second Post")
        post.assign_attributes({"title": ""})

        assert pipeline.run(post) is False
        assert post.errors["title"] == ["can't be blank"]
        assert post.slug == "my-second-post"
        assert post.changes.get("slug") is None

    def test_without_reconcile_the_slug_leaks(self) -> None:
        """Only prepare installed: the speculative slug survives a failed pass."""
        pipeline = ValidationPipeline(rules=list(Post.rules))
        pipeline.before_validate.append(SlugSynchronizer().prepare_slug)
        post = saved_post("My Second Post")
        post.title = ""

        assert pipeline.run(post) is False
        assert post.changes.to_dict()["slug"][0] == "my-second-post"
        assert is_uuid(post.slug)

    def test_unrelated_error_keeps_speculative_slug(self, pipeline: ValidationPipeline) -> None:
        """Default policy: a body error does not roll back the new slug."""
        post = saved_post("My Post")
        post.assign_attributes({"title": "Renamed Post", "body": ""})

        assert pipeline.run(post) is False
        assert post.errors["body"] == ["can't be blank"]
        assert post.slug == "renamed-post"
        assert "slug" in post.changes

    def test_title_revert_after_unrelated_error(self, pipeline: ValidationPipeline) -> None:
        """The next passing run leaves the slug derived from the current title."""
        post = saved_post("My Post")
        post.assign_attributes({"title": "Renamed Post", "body": ""})
        assert pipeline.run(post) is False
        assert post.slug == "renamed-post"

        post.assign_attributes({"title": "My Post", "body": "Fixed"})
        assert pipeline.run(post) is True
        assert post.slug == slugify(post.title)
        assert post.changes.to_dict() == {"body": ["Body", "Fixed"]}

    def test_any_error_policy_rolls_back_on_unrelated_error(self) -> None:
        """ANY_ERROR policy: a body error also rolls back the slug."""
        pipeline = ValidationPipeline(rules=list(Post.rules))
        SlugSynchronizer(rollback_policy=RollbackPolicy.ANY_ERROR).install(pipeline)
        post = saved_post("My Post")
        post.assign_attributes({"title": "Renamed Post", "body": ""})

        assert pipeline.run(post) is False
        assert post.slug == "my-post"
        assert "slug" not in post.changes

    def test_install_twice_registers_once(self) -> None:
        pipeline = ValidationPipeline()
        synchronizer = SlugSynchronizer()
        synchronizer.install(pipeline)
        synchronizer.install(pipeline)

        assert len(pipeline.before_validate) == 1
        assert len(pipeline.after_validate) == 1


class TestFromOptions:
    """Tests for building a synchronizer from settings."""

    def test_separator_and_max_length(self) -> None:
        options = SlugOptions(separator="_", max_length=10)
        synchronizer = SlugSynchronizer.from_options(options)
        post = Post(title="A Rather Long Title", body="b")

        synchronizer.prepare_slug(post)

        assert post.slug == "a_rather"

    def test_policy_and_fields(self) -> None:
        options = SlugOptions(source_field="body", rollback_policy=RollbackPolicy.ANY_ERROR)
        synchronizer = SlugSynchronizer.from_options(options)

        assert synchronizer.config.source_field == "body"
        assert synchronizer.config.slug_field == "slug"
        assert synchronizer.rollback_policy == RollbackPolicy.ANY_ERROR
