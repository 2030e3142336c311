"""Falcon hooks enforcing collection permissions.

Usage::

    books = CollectionPermissions("books", authorization, scope_enforcer, schemas, directory)

    class BooksResource:
        @falcon.before(books.browse)
        async def on_get(self, req, resp): ...

Custom action routes take the action name from the ``action_name`` URI field.
Stats routes use ``chart``, with the chart definition as the request body.
"""

from typing import Any

import falcon
import falcon.asgi

from scopeguard.application.dto.custom_action_dto import CustomActionPayload
from scopeguard.application.ports import CollectionSchemas, PermissionDirectory
from scopeguard.application.services.authorization import (
    AuthorizationService,
    ScopeEnforcer,
    build_selection_filter,
)
from scopeguard.domain.entities import (
    Actor,
    CollectionDescriptor,
    CustomActionRequest,
    RecordsCounterParams,
)
from scopeguard.domain.value_objects import conjunction


def _actor(req: falcon.asgi.Request) -> Actor:
    actor = getattr(req.context, "actor", None)
    if actor is None:
        raise falcon.HTTPUnauthorized(title="Unauthorized")
    return actor


class CollectionPermissions:
    """``before`` hooks for one collection's routes."""

    def __init__(
        self,
        collection_name: str,
        authorization: AuthorizationService,
        scope_enforcer: ScopeEnforcer,
        schemas: CollectionSchemas,
        permission_directory: PermissionDirectory,
        action_name_param: str = "action_name",
    ) -> None:
        self._collection_name = collection_name
        self._authorization = authorization
        self._scope_enforcer = scope_enforcer
        self._schemas = schemas
        self._directory = permission_directory
        self._action_name_param = action_name_param

    async def browse(self, req, resp, resource, params) -> None:
        await self._authorization.assert_can_browse(
            _actor(req), self._collection_name, req.get_param("segmentQuery")
        )

    async def read(self, req, resp, resource, params) -> None:
        await self._authorization.assert_can_read(_actor(req), self._collection_name)

    async def add(self, req, resp, resource, params) -> None:
        await self._authorization.assert_can_add(_actor(req), self._collection_name)

    async def edit(self, req, resp, resource, params) -> None:
        await self._authorization.assert_can_edit(_actor(req), self._collection_name)

    async def delete(self, req, resp, resource, params) -> None:
        await self._authorization.assert_can_delete(_actor(req), self._collection_name)

    async def export(self, req, resp, resource, params) -> None:
        await self._authorization.assert_can_export(_actor(req), self._collection_name)

    async def chart(self, req, resp, resource, params) -> None:
        """Stats routes: the body is the chart definition."""
        actor = _actor(req)
        chart_request: dict[str, Any] = await req.get_media(default_when_empty={})
        await self._authorization.assert_can_retrieve_chart(
            actor=actor, chart_request=chart_request
        )

    async def custom_action(self, req, resp, resource, params) -> None:
        """Trigger or approve, depending on ``signed_approval_request`` in the body.

        Approvals replace the body with the verified signed parameters. The
        resource reads ``req.context.action_body``, ``req.context.action_payload``
        and ``req.context.custom_action_request``.
        """
        actor = _actor(req)
        collection = self._collection()
        body: dict[str, Any] = await req.get_media(default_when_empty={})
        payload = CustomActionPayload.from_body(body)
        is_approval = bool(payload.signed_approval_request)
        if is_approval:
            body = self._authorization.verify_signed_action_parameters(
                payload.signed_approval_request
            )
            payload = CustomActionPayload.from_body(body)

        request = CustomActionRequest(
            collection_name=self._collection_name,
            custom_action_name=params.get(self._action_name_param, ""),
            actor=actor,
            request_filter=await self._request_filter(actor, collection, payload),
            requester_id=payload.requester_id if is_approval else None,
        )
        action = {
            "actor": request.actor,
            "collection_name": request.collection_name,
            "custom_action_name": request.custom_action_name,
            "records_counter_params": self._counter_params(req, actor, collection),
            "request_filter": request.request_filter,
        }
        if is_approval:
            await self._authorization.assert_can_approve_custom_action(
                **action, requester_id=request.requester_id
            )
        else:
            await self._authorization.assert_can_trigger_custom_action(**action)

        req.context.action_body = body
        req.context.action_payload = payload
        req.context.custom_action_request = request

    async def record_ids_in_scope(self, req, resp, resource, params) -> None:
        """Reject explicit id selections that reach outside the actor's scope."""
        actor = _actor(req)
        collection = self._collection()
        payload = getattr(req.context, "action_payload", None)
        if payload is None:
            payload = CustomActionPayload.from_body(await req.get_media(default_when_empty={}))

        scope = await self._directory.get_scope(
            user_id=actor.id,
            collection_name=self._collection_name,
            rendering_id=actor.rendering_id,
        )
        await self._scope_enforcer.ensure_record_ids_in_scope(
            self._counter_params(req, actor, collection), payload.selection(), scope
        )

    def _collection(self) -> CollectionDescriptor:
        collection = self._schemas.get(self._collection_name)
        if collection is None:
            raise falcon.HTTPNotFound(description=f"Unknown collection {self._collection_name}")
        return collection

    def _counter_params(
        self, req: falcon.asgi.Request, actor: Actor, collection: CollectionDescriptor
    ) -> RecordsCounterParams:
        return RecordsCounterParams(
            actor=actor, model=collection, timezone=req.get_param("timezone") or "UTC"
        )

    async def _request_filter(
        self, actor: Actor, collection: CollectionDescriptor, payload: CustomActionPayload
    ):
        """Selected records, restricted to the actor's scope."""
        scope = await self._directory.get_scope(
            user_id=actor.id,
            collection_name=self._collection_name,
            rendering_id=actor.rendering_id,
        )
        return conjunction(build_selection_filter(collection, payload.selection()), scope)
