"""Tests for scope resolution and the default URL builder."""

from unittest.mock import MagicMock

import pytest

from cloudflare_purge.core.models import PurgeScope, UrlBuilderArgs
from cloudflare_purge.services.scope_resolver import default_url_builder, resolve_scope


def _args(doc, base_url="https://x.com", operation="update"):
    return UrlBuilderArgs(doc=doc, operation=operation, base_url=base_url, collection_slug="posts")


class TestDefaultUrlBuilder:
    def test_slug_with_trailing_slash_base(self):
        assert default_url_builder(_args({"slug": "hello"}, base_url="https://x.com/")) == [
            "https://x.com/hello"
        ]

    def test_no_base_url_yields_nothing(self):
        assert default_url_builder(_args({"slug": "hello"}, base_url="")) == []

    def test_id_fallback(self):
        assert default_url_builder(_args({"id": "42"})) == ["https://x.com/42"]

    def test_path_takes_precedence(self):
        doc = {"path": "/blog/hello", "slug": "hello", "id": "42"}
        assert default_url_builder(_args(doc)) == ["https://x.com/blog/hello"]

    def test_slug_before_id(self):
        assert default_url_builder(_args({"slug": "hello", "id": "42"})) == ["https://x.com/hello"]

    def test_root_when_nothing_identifies_doc(self):
        assert default_url_builder(_args({})) == ["https://x.com/"]

    def test_multiple_trailing_slashes_stripped(self):
        assert default_url_builder(_args({"slug": "a"}, base_url="https://x.com///")) == [
            "https://x.com/a"
        ]

    def test_numeric_id(self):
        assert default_url_builder(_args({"id": 7})) == ["https://x.com/7"]


class TestResolveScope:
    @pytest.mark.asyncio
    async def test_static_everything_never_calls_builder(self, make_config):
        builder = MagicMock(return_value=["https://x.com/a"])
        config = make_config(purge_everything=True, url_builder=builder)

        scope = await resolve_scope(_args({"slug": "a"}), config, "c-1")

        assert scope == PurgeScope.everything()
        builder.assert_not_called()

    @pytest.mark.asyncio
    async def test_computed_policy_evaluated_with_event(self, make_config):
        policy = MagicMock(return_value=True)
        config = make_config(purge_everything=policy)
        args = _args({"slug": "a"}, operation="delete")

        scope = await resolve_scope(args, config, "c-1")

        assert scope.purge_everything is True
        policy.assert_called_once_with(args)

    @pytest.mark.asyncio
    async def test_precomputed_policy_is_not_reevaluated(self, make_config):
        policy = MagicMock(return_value=True)
        config = make_config(purge_everything=policy)

        scope = await resolve_scope(_args({"slug": "a"}), config, "c-1", purge_everything=False)

        policy.assert_not_called()
        assert scope == PurgeScope.for_files(["https://x.com/a"])

    @pytest.mark.asyncio
    async def test_uses_configured_builder_and_drops_falsy_urls(self, make_config):
        config = make_config(url_builder=lambda args: ["https://x.com/a", "", None, "https://x.com/b"])

        scope = await resolve_scope(_args({"slug": "a"}), config, "c-1")

        assert scope.files == ("https://x.com/a", "https://x.com/b")

    @pytest.mark.asyncio
    async def test_builder_returning_none_is_empty(self, make_config):
        config = make_config(url_builder=lambda args: None)

        scope = await resolve_scope(_args({"slug": "a"}), config, "c-1")

        assert scope.is_empty

    @pytest.mark.asyncio
    async def test_missing_builder_is_logged_noop(self, make_config, caplog):
        config = make_config(url_builder=None)

        with caplog.at_level("WARNING"):
            scope = await resolve_scope(_args({"slug": "a"}), config, "c-9")

        assert scope.is_empty
        assert caplog.records[-1].extra_fields["correlation_id"] == "c-9"

    @pytest.mark.asyncio
    async def test_default_builder_is_used_when_omitted(self, make_config):
        config = make_config(base_url="https://www.example.com/")

        scope = await resolve_scope(_args({"slug": "hello"}, base_url=config.base_url), config, "c-1")

        assert scope.files == ("https://www.example.com/hello",)

    @pytest.mark.asyncio
    async def test_async_builder_is_awaited(self, make_config):
        async def builder(args):
            return [f"https://x.com/parent/{args.doc['slug']}"]

        config = make_config(url_builder=builder)

        scope = await resolve_scope(_args({"slug": "a"}), config, "c-1")

        assert scope.files == ("https://x.com/parent/a",)

    @pytest.mark.asyncio
    async def test_single_url_string_is_one_url(self, make_config):
        config = make_config(url_builder=lambda args: "https://x.com/a")

        scope = await resolve_scope(_args({"slug": "a"}), config, "c-1")

        assert scope.files == ("https://x.com/a",)

    @pytest.mark.asyncio
    async def test_async_builder_returning_string(self, make_config):
        async def builder(args):
            return "https://x.com/a"

        scope = await resolve_scope(_args({"slug": "a"}), make_config(url_builder=builder), "c-1")

        assert scope.files == ("https://x.com/a",)


class TestPurgeScope:
    def test_everything_ignores_files(self):
        scope = PurgeScope(purge_everything=True, files=("https://x.com/a",))
        assert scope.files == ()
        assert scope.to_provider_body() == {"purge_everything": True}

    def test_file_body(self):
        assert PurgeScope.for_files(["a", "b"]).to_provider_body() == {"files": ["a", "b"]}

    def test_scope_is_immutable(self):
        scope = PurgeScope.for_files(["a"])
        with pytest.raises(AttributeError):
            scope.files = ("b",)
