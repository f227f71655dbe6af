"""Tests for the validation pipeline."""

from slug_guard.core.entity import Entity
from slug_guard.core.validation import ValidationPipeline, length_of, presence_of
from slug_guard.models import Post


class TestValidationPipeline:
    """Tests for hook and rule ordering."""

    def test_stage_order(self) -> None:
        """Before hooks, then rules, then after hooks, each in order."""
        calls: list[str] = []

        def record(label: str):
            def step(entity: Entity) -> None:
                calls.append(label)
            return step

        pipeline = ValidationPipeline(
            before_validate=[record("before-1"), record("before-2")],
            rules=[record("rule")],
            after_validate=[record("after")],
        )
        pipeline.validate(Post())

        assert calls == ["before-1", "before-2", "rule", "after"]

    def test_after_hooks_see_errors(self) -> None:
        seen = {}

        def capture(entity: Entity) -> None:
            seen.update(entity.errors.to_dict())

        pipeline = ValidationPipeline(rules=[presence_of("title")], after_validate=[capture])
        pipeline.run(Post(title=""))

        assert seen == {"title": ["can't be blank"]}

    def test_errors_reset_each_pass(self) -> None:
        pipeline = ValidationPipeline(rules=list(Post.rules))
        post = Post(title="", body="Body")

        assert pipeline.run(post) is False
        post.title = "Fixed"
        assert pipeline.run(post) is True
        assert post.errors.to_dict() == {}


class TestRules:
    """Tests for the built-in field rules."""

    def test_presence_of(self) -> None:
        rule = presence_of("title")
        for value in (None, "", "   "):
            post = Post(title=value)
            rule(post)
            assert post.errors["title"] == ["can't be blank"]

        post = Post(title="x")
        rule(post)
        assert "title" not in post.errors

    def test_length_of(self) -> None:
        rule = length_of("title", 5)

        post = Post(title="toolong")
        rule(post)
        assert post.errors["title"] == ["is too long (maximum is 5 characters)"]

        post = Post(title=None)
        rule(post)
        assert "title" not in post.errors

    def test_post_rules(self) -> None:
        pipeline = ValidationPipeline(rules=list(Post.rules))
        post = Post(title="x" * 201, body="")

        assert pipeline.run(post) is False
        assert post.errors.to_dict() == {
            "title": ["is too long (maximum is 200 characters)"],
            "body": ["can't be blank"],
        }
