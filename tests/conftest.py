"""
RouteLens — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── sample_dump: `rails routes` output in the dump format
    ├── rails_workspace: Temporary Rails tree with controllers, views and a dump
    ├── mock_route_source: AsyncMock RouteSource
    ├── mock_view_source: AsyncMock ViewSource (no views)
    ├── notifier: Fresh HostNotifier
    └── test_client: HTTPX AsyncClient for API endpoint testing
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any routelens imports
os.environ["WORKSPACE_ROOT"] = tempfile.mkdtemp(prefix="routelens_test_")
os.environ["REGENERATE_ON_STARTUP"] = "false"
os.environ["RETRY_MAX_ATTEMPTS"] = "1"  # no backoff sleeps in failure tests
os.environ["LOG_LEVEL"] = "WARNING"

from routelens.services.notifier import HostNotifier  # noqa: E402
from routelens.services.sources_base import RouteSource, ViewSource  # noqa: E402


SAMPLE_DUMP = """\
                   posts GET    /posts(.:format)                posts#index
                         POST   /posts(.:format)                posts#create
                new_post GET    /posts/new(.:format)            posts#new
               edit_post GET    /posts/:id/edit(.:format)       posts#edit
                    post GET    /posts/:id(.:format)            posts#show
                         PATCH  /posts/:id(.:format)            posts#update
                         DELETE /posts/:id(.:format)            posts#destroy
             admin_users GET    /admin/users(.:format)          admin/users#index
                  health GET    /up(.:format)                   rails/health#show
"""

POSTS_CONTROLLER = """\
class PostsController < ApplicationController
  before_action :set_post, only: %i[show edit update destroy]

  def index
    @posts = Post.all
  end

  def show
  end

  def create
    @post = Post.new(post_params)
  end

  private

  def set_post
    @post = Post.find(params[:id])
  end
end
"""


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def sample_dump():
    return SAMPLE_DUMP


@pytest.fixture
def posts_controller_source():
    return POSTS_CONTROLLER


@pytest.fixture
def rails_workspace(tmp_path):
    """
    Provides a minimal Rails tree on disk.

    Layout:
        app/controllers/posts_controller.rb
        app/controllers/admin/users_controller.rb
        app/views/posts/index.html.erb
        app/views/posts/index.json.jbuilder
        app/views/posts/show.json.jbuilder
        tmp/routes_file.txt
    """
    controllers = tmp_path / "app" / "controllers"
    (controllers / "admin").mkdir(parents=True)
    (controllers / "posts_controller.rb").write_text(POSTS_CONTROLLER)
    (controllers / "admin" / "users_controller.rb").write_text(
        "class Admin::UsersController < ApplicationController\n  def index\n  end\nend\n"
    )

    views = tmp_path / "app" / "views" / "posts"
    views.mkdir(parents=True)
    (views / "index.html.erb").write_text("<h1>Posts</h1>\n")
    (views / "index.json.jbuilder").write_text("json.array! @posts\n")
    (views / "show.json.jbuilder").write_text("json.extract! @post, :id\n")

    (tmp_path / "tmp").mkdir()
    (tmp_path / "tmp" / "routes_file.txt").write_text(SAMPLE_DUMP)
    return tmp_path


@pytest.fixture
def mock_route_source():
    """
    A RouteSource whose fetch returns the posts rows of the sample dump.

    Usage:
        index = RouteIndex(mock_route_source)
        mock_route_source.fetch_raw_route_lines.side_effect = RouteDumpError()
    """
    source = MagicMock(spec=RouteSource)
    posts_rows = "\n".join(line for line in SAMPLE_DUMP.splitlines() if "posts#" in line)
    source.fetch_raw_route_lines = AsyncMock(return_value=posts_rows)
    source.regenerate_route_dump = AsyncMock(return_value="/tmp/routes_file.txt")
    return source


@pytest.fixture
def mock_view_source():
    source = MagicMock(spec=ViewSource)
    source.locate_view_file = AsyncMock(return_value="")
    return source


@pytest.fixture
def notifier():
    return HostNotifier()


@pytest_asyncio.fixture
async def test_client():
    """
    Provides an async HTTP test client for endpoint testing.

    ASGITransport does not run the lifespan, so no route dump is generated.
    """
    from routelens.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
