"""
RouteLens — Annotation Service Unit Tests
==========================================

What:  Tests for AnnotationResolver resolution, caching and invalidation.
How:   RouteIndex runs over a mocked RouteSource; the ViewSource is mocked
       too, so no filesystem access happens here.

What we test:
    ✅ One annotation per `def <action>` line with a route, 0-based lines
    ✅ Navigation target only when a view exists
    ✅ Cache hit skips route resolution; invalidate() is per document
    ✅ Failures → empty result, one warning, nothing cached
    ✅ Controller-named files outside app/controllers raise
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from routelens.exceptions import ControllerPathError, RouteDumpError, ViewLookupError
from routelens.models.document import Document
from routelens.models.route import OPEN_VIEW_COMMAND
from routelens.services.annotation_service import AnnotationResolver
from routelens.services.notifier import HostNotifier
from routelens.services.route_index import RouteIndex

WORKSPACE = "/srv/blog"
POSTS_PATH = f"{WORKSPACE}/app/controllers/posts_controller.rb"


def _document(text, path=POSTS_PATH):
    return Document(path=path, text=text)


class TestControllerPaths:

    def setup_method(self):
        self.resolver = AnnotationResolver(
            route_index=AsyncMock(), views=AsyncMock(), workspace_path=WORKSPACE
        )

    def test_controller_name_simple(self):
        assert self.resolver.controller_name(_document("")) == "posts"

    def test_controller_name_namespaced(self):
        doc = _document("", path=f"{WORKSPACE}/app/controllers/admin/users_controller.rb")
        assert self.resolver.controller_name(doc) == "admin/users"

    def test_controller_name_windows_separators(self):
        doc = _document("", path="C:\\blog\\app\\controllers\\posts_controller.rb")
        assert self.resolver.controller_name(doc) == "posts"

    def test_controller_name_outside_controllers_raises(self):
        doc = _document("", path=f"{WORKSPACE}/lib/tasks/fake_controller.rb")
        with pytest.raises(ControllerPathError):
            self.resolver.controller_name(doc)

    def test_is_controller_file(self):
        assert self.resolver.is_controller_file(_document(""))
        assert not self.resolver.is_controller_file(
            _document("", path=f"{WORKSPACE}/app/models/post.rb")
        )


class TestResolve:

    def setup_method(self):
        self.notifier = HostNotifier()

    def _resolver(self, route_source, view_source):
        index = RouteIndex(route_source, notifier=self.notifier)
        return AnnotationResolver(
            route_index=index,
            views=view_source,
            notifier=self.notifier,
            workspace_path=WORKSPACE,
        )

    @pytest.mark.asyncio
    async def test_non_controller_document_is_skipped(self, mock_route_source, mock_view_source):
        resolver = self._resolver(mock_route_source, mock_view_source)

        result = await resolver.resolve(
            _document("def index\nend", path=f"{WORKSPACE}/app/models/post.rb")
        )

        assert result == []
        mock_route_source.fetch_raw_route_lines.assert_not_awaited()
        assert len(resolver) == 0

    @pytest.mark.asyncio
    async def test_def_on_line_ten_annotates_line_ten(self, mock_route_source, mock_view_source):
        resolver = self._resolver(mock_route_source, mock_view_source)
        lines = ["# filler"] * 10 + ["  def index", "  end"]

        result = await resolver.resolve(_document("\n".join(lines)))

        assert len(result) == 1
        assert result[0].line == 10
        assert result[0].route.action == "index"
        mock_route_source.fetch_raw_route_lines.assert_awaited_once_with(WORKSPACE, "posts")

    @pytest.mark.asyncio
    async def test_only_routed_actions_are_annotated(
        self, mock_route_source, mock_view_source, posts_controller_source
    ):
        resolver = self._resolver(mock_route_source, mock_view_source)

        result = await resolver.resolve(_document(posts_controller_source))

        # set_post is private and has no route
        assert [(a.line, a.route.action) for a in result] == [
            (3, "index"),
            (7, "show"),
            (10, "create"),
        ]

    @pytest.mark.asyncio
    async def test_access_modifier_one_liners_are_annotated(
        self, mock_route_source, mock_view_source
    ):
        resolver = self._resolver(mock_route_source, mock_view_source)
        text = "  def index\n  end\n  private def show\n  end\n  protected def edit\n  end"

        result = await resolver.resolve(_document(text))

        assert [(a.line, a.route.action) for a in result] == [
            (0, "index"),
            (2, "show"),
            (4, "edit"),
        ]

    @pytest.mark.asyncio
    async def test_class_methods_and_comments_are_not_actions(
        self, mock_route_source, mock_view_source
    ):
        resolver = self._resolver(mock_route_source, mock_view_source)

        result = await resolver.resolve(_document("def self.index\n# def show\n"))

        assert result == []

    @pytest.mark.asyncio
    async def test_action_match_is_case_insensitive(self, mock_route_source, mock_view_source):
        resolver = self._resolver(mock_route_source, mock_view_source)

        result = await resolver.resolve(_document("def Index\nend"))

        assert len(result) == 1

    @pytest.mark.asyncio
    async def test_label_without_view(self, mock_route_source, mock_view_source):
        resolver = self._resolver(mock_route_source, mock_view_source)

        annotation = (await resolver.resolve(_document("def create")))[0]

        assert annotation.title == "🌐 POST | /posts(.:format) | "
        assert annotation.command is None
        assert annotation.arguments == []
        assert not annotation.navigable

    @pytest.mark.asyncio
    async def test_label_with_view_is_navigable(self, mock_route_source, mock_view_source):
        view = f"{WORKSPACE}/app/views/posts/index.html.erb"
        mock_view_source.locate_view_file = AsyncMock(return_value=view)
        resolver = self._resolver(mock_route_source, mock_view_source)

        annotation = (await resolver.resolve(_document("def index")))[0]

        assert annotation.title == "🌐 GET | /posts(.:format) | posts 👁️"
        assert annotation.command == OPEN_VIEW_COMMAND
        assert annotation.arguments == [view]
        assert annotation.view_path == view
        assert annotation.tooltip == "navigate to view: posts#index"
        mock_view_source.locate_view_file.assert_awaited_once_with(WORKSPACE, "posts", "index")

    @pytest.mark.asyncio
    async def test_tooltip_uses_document_spelling(self, mock_route_source, mock_view_source):
        mock_view_source.locate_view_file = AsyncMock(return_value="/v/index.html.erb")
        resolver = self._resolver(mock_route_source, mock_view_source)

        annotation = (await resolver.resolve(_document("  def Index")))[0]

        assert annotation.tooltip == "navigate to view: posts#Index"
        # View lookup still uses the route as the dump spells it
        mock_view_source.locate_view_file.assert_awaited_once_with(WORKSPACE, "posts", "index")

    @pytest.mark.asyncio
    async def test_results_keep_line_order(self, mock_route_source, mock_view_source):
        async def slow_for_early_lines(workspace, controller, action):
            # Earlier actions finish last
            delays = {"index": 0.03, "show": 0.02, "create": 0.0}
            await asyncio.sleep(delays[action])
            return ""

        mock_view_source.locate_view_file = AsyncMock(side_effect=slow_for_early_lines)
        resolver = self._resolver(mock_route_source, mock_view_source)

        result = await resolver.resolve(_document("def index\ndef show\ndef create"))

        assert [a.line for a in result] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_document_workspace_overrides_default(self, mock_route_source, mock_view_source):
        resolver = self._resolver(mock_route_source, mock_view_source)
        doc = Document(path=POSTS_PATH, text="def index", workspace_path="/other")

        await resolver.resolve(doc)

        mock_route_source.fetch_raw_route_lines.assert_awaited_once_with("/other", "posts")

    @pytest.mark.asyncio
    async def test_controller_outside_controllers_dir_raises(
        self, mock_route_source, mock_view_source
    ):
        resolver = self._resolver(mock_route_source, mock_view_source)

        with pytest.raises(ControllerPathError):
            await resolver.resolve(
                _document("def index", path=f"{WORKSPACE}/lib/fake_controller.rb")
            )


class TestResolveCache:

    def setup_method(self):
        self.notifier = HostNotifier()
        self.route_index = AsyncMock()
        self.route_index.lookup_routes = AsyncMock(return_value=[])

    def _resolver(self, view_source):
        return AnnotationResolver(
            route_index=self.route_index,
            views=view_source,
            notifier=self.notifier,
            workspace_path=WORKSPACE,
        )

    @pytest.mark.asyncio
    async def test_second_resolve_hits_cache(self, mock_view_source):
        resolver = self._resolver(mock_view_source)
        doc = _document("def index")

        await resolver.resolve(doc)
        await resolver.resolve(doc)

        assert self.route_index.lookup_routes.await_count == 1

    @pytest.mark.asyncio
    async def test_identity_ignores_text(self, mock_view_source):
        resolver = self._resolver(mock_view_source)

        await resolver.resolve(_document("def index"))
        await resolver.resolve(_document("def index\ndef show"))

        assert self.route_index.lookup_routes.await_count == 1

    @pytest.mark.asyncio
    async def test_invalidate_clears_only_that_document(self, mock_view_source):
        resolver = self._resolver(mock_view_source)
        posts = _document("def index")
        users = _document("def index", path=f"{WORKSPACE}/app/controllers/users_controller.rb")

        await resolver.resolve(posts)
        await resolver.resolve(users)
        assert resolver.invalidate(posts.identity) is True

        await resolver.resolve(users)
        assert self.route_index.lookup_routes.await_count == 2

        await resolver.resolve(posts)
        assert self.route_index.lookup_routes.await_count == 3

    @pytest.mark.asyncio
    async def test_invalidate_unknown_identity(self, mock_view_source):
        resolver = self._resolver(mock_view_source)
        assert resolver.invalidate("file:///nowhere") is False

    @pytest.mark.asyncio
    async def test_view_failure_returns_empty_and_is_not_cached(
        self, mock_route_source, mock_view_source
    ):
        mock_view_source.locate_view_file = AsyncMock(
            side_effect=[ViewLookupError(), ""]
        )
        resolver = AnnotationResolver(
            route_index=RouteIndex(mock_route_source, notifier=self.notifier),
            views=mock_view_source,
            notifier=self.notifier,
            workspace_path=WORKSPACE,
        )
        doc = _document("def index")

        with self.notifier.collect() as warnings:
            assert await resolver.resolve(doc) == []

        assert warnings == [AnnotationResolver.RESOLVE_WARNING]
        assert resolver.cached(doc.identity) is None

        assert len(await resolver.resolve(doc)) == 1
        assert resolver.cached(doc.identity) is not None


class TestResolveFailures:

    def setup_method(self):
        self.notifier = HostNotifier()

    def _resolver(self, route_source, view_source):
        return AnnotationResolver(
            route_index=RouteIndex(route_source, notifier=self.notifier),
            views=view_source,
            notifier=self.notifier,
            workspace_path=WORKSPACE,
        )

    @pytest.mark.asyncio
    async def test_route_fetch_failure_is_retried_on_next_resolve(
        self, mock_route_source, mock_view_source
    ):
        rows = mock_route_source.fetch_raw_route_lines.return_value
        mock_route_source.fetch_raw_route_lines = AsyncMock(
            side_effect=[RouteDumpError(message="missing dump"), rows]
        )
        resolver = self._resolver(mock_route_source, mock_view_source)
        doc = _document("def index")

        with self.notifier.collect() as warnings:
            assert await resolver.resolve(doc) == []

        # One warning, from the route lookup only
        assert warnings == [RouteIndex.FETCH_WARNING]
        assert resolver.cached(doc.identity) is None

        second = await resolver.resolve(doc)

        assert [a.line for a in second] == [0]
        assert mock_route_source.fetch_raw_route_lines.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_view_lookup_waits_for_sibling_lines(
        self, mock_route_source, mock_view_source
    ):
        finished = []

        async def locate(workspace, controller, action):
            if action == "index":
                raise ViewLookupError(message="permission denied")
            await asyncio.sleep(0.02)
            finished.append(action)
            return ""

        mock_view_source.locate_view_file = AsyncMock(side_effect=locate)
        resolver = self._resolver(mock_route_source, mock_view_source)

        with self.notifier.collect() as warnings:
            result = await resolver.resolve(_document("def index\ndef show\ndef create"))

        assert result == []
        assert sorted(finished) == ["create", "show"]
        assert warnings == [AnnotationResolver.RESOLVE_WARNING]
