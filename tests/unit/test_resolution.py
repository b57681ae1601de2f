"""Unit tests for convention-based resolution.

Tests cover:
- Route base and label derivation from controller class names
- Pluralization rules (irregular, uncountable, -y/-es endings)
- Model probing and explicit model override
- Transformer probing (present and absent)
"""

import pytest

from autocrud import ConfigurationError, CrudController
from autocrud.presentation.controllers.resolution import (
    kebab,
    model_candidates,
    pluralize,
    resolve_model,
    resolve_transformer,
    resource_label,
    resource_name,
    route_base,
    singularize,
)
from tests.fixtures.app.controllers.comment_controller import CommentController
from tests.fixtures.app.controllers.post_controller import PostController
from tests.fixtures.app.models import Comment, Document, Post
from tests.fixtures.app.resources import PostResource

APP = "tests.fixtures.app"


def controller(name: str, **attrs) -> type:
    return type(name, (CrudController,), attrs)


class TestRouteBase:
    """Route base naming."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("PostController", "posts"),
            ("BlogPostController", "blog-posts"),
            ("CategoryController", "categories"),
            ("BoxController", "boxes"),
            ("PersonController", "people"),
            ("HTTPLogController", "http-logs"),
            ("NewsController", "news"),
        ],
    )
    def test_route_base(self, name, expected):
        assert route_base(controller(name)) == expected

    def test_kebab_handles_acronyms(self):
        assert kebab("HTTPLog") == "http-log"
        assert kebab("BlogPost") == "blog-post"

    def test_singularize_reverses_pluralize(self):
        for word in ["post", "category", "box", "person", "church"]:
            assert singularize(pluralize(word)) == word

    def test_resource_label(self):
        assert resource_label("blog-posts") == "Blog Post"
        assert resource_label("categories") == "Category"

    def test_resource_name_is_camel_case(self):
        blog_post = type("BlogPost", (), {})
        assert resource_name(blog_post) == "blogPost"


class TestResolveModel:
    """Model resolution."""

    def test_resolves_model_next_to_controllers_package(self):
        assert resolve_model(PostController, APP) is Post
        assert resolve_model(CommentController, APP) is Comment

    def test_explicit_model_wins(self):
        custom = controller("PostController", model=Document)
        assert resolve_model(custom, APP) is Document

    def test_probes_app_package_last(self):
        candidates = model_candidates(PostController, "app")
        assert candidates == [APP, f"{APP}.models", "app.models", "app"]

    def test_missing_model_raises_configuration_error(self):
        ghost = controller("GhostController")
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_model(ghost, APP)
        assert "Model Ghost not found" in str(exc_info.value)


class TestResolveTransformer:
    """Transformer resolution."""

    def test_finds_resource_class_by_convention(self):
        assert resolve_transformer(PostController, Post, APP) is PostResource

    def test_returns_none_without_resource_class(self):
        assert resolve_transformer(CommentController, Comment, APP) is None

    def test_explicit_transformer_wins(self):
        custom = controller("CommentController", transformer=PostResource)
        assert resolve_transformer(custom, Comment, APP) is PostResource
