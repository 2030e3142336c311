"""Fixtures for API tests."""

import falcon
import falcon.asgi
import pytest
from falcon.testing import TestClient

from scopeguard.application.services.authorization import AuthorizationService, ScopeEnforcer
from scopeguard.interfaces.api.errors import register_error_handlers
from scopeguard.interfaces.api.permissions import CollectionPermissions

from tests.conftest import InMemoryRecordsCounter


class ActorMiddleware:
    """Middleware that sets context.actor for testing."""

    def __init__(self, actor) -> None:
        self._actor = actor

    async def process_request(self, req, resp):
        req.context.actor = self._actor


class _Schemas:
    def __init__(self, *collections) -> None:
        self._collections = {c.name: c for c in collections}

    def get(self, collection_name):
        return self._collections.get(collection_name)


def build_permissions(
    collection_name: str,
    books,
    book_authors,
    mock_permission_directory,
    records_counter: InMemoryRecordsCounter,
    mock_verifier,
) -> CollectionPermissions:
    return CollectionPermissions(
        collection_name,
        AuthorizationService(mock_permission_directory, records_counter, mock_verifier),
        ScopeEnforcer(records_counter),
        _Schemas(books, book_authors),
        mock_permission_directory,
    )


def build_app(permissions: CollectionPermissions, actor) -> falcon.asgi.App:
    """App exposing a collection, one record, its custom actions and stats behind the hooks."""

    class CollectionResource:
        @falcon.before(permissions.browse)
        async def on_get(self, req, resp):
            resp.media = {"data": []}

        @falcon.before(permissions.add)
        async def on_post(self, req, resp):
            resp.status = falcon.HTTP_201
            resp.media = {"data": {}}

        @falcon.before(permissions.export)
        async def on_get_csv(self, req, resp):
            resp.media = {"data": "csv"}

    class RecordResource:
        @falcon.before(permissions.read)
        async def on_get(self, req, resp, record_id):
            resp.media = {"data": {"id": record_id}}

        @falcon.before(permissions.edit)
        async def on_put(self, req, resp, record_id):
            resp.media = {"data": {"id": record_id}}

        @falcon.before(permissions.delete)
        async def on_delete(self, req, resp, record_id):
            resp.status = falcon.HTTP_204

    class ActionResource:
        @falcon.before(permissions.custom_action)
        @falcon.before(permissions.record_ids_in_scope)
        async def on_post(self, req, resp, action_name):
            resp.media = {
                "action": action_name,
                "body": req.context.action_body,
                "ids": req.context.action_payload.ids,
                "requester_id": req.context.custom_action_request.requester_id,
            }

    class StatsResource:
        @falcon.before(permissions.chart)
        async def on_post(self, req, resp):
            resp.media = {"value": 3}

    app = falcon.asgi.App(middleware=[ActorMiddleware(actor)])
    register_error_handlers(app)
    app.add_route("/forest/books", CollectionResource())
    app.add_route("/forest/books.csv", CollectionResource(), suffix="csv")
    app.add_route("/forest/books/{record_id}", RecordResource())
    app.add_route("/forest/_actions/books/{action_name}", ActionResource())
    app.add_route("/forest/stats/books", StatsResource())
    return app


@pytest.fixture
def permissions(books, book_authors, mock_permission_directory, records_counter, mock_verifier):
    return build_permissions(
        "books", books, book_authors, mock_permission_directory, records_counter, mock_verifier
    )


@pytest.fixture
def client(permissions, actor) -> TestClient:
    return TestClient(build_app(permissions, actor))


@pytest.fixture
def anonymous_client(permissions) -> TestClient:
    return TestClient(build_app(permissions, None))
