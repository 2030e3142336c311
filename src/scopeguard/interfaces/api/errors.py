"""Error handlers mapping domain errors to HTTP responses."""

import logging

import falcon
import falcon.asgi

from scopeguard.domain.exceptions import (
    ApprovalNotAllowedError,
    BadRequestError,
    CustomActionRequiresApprovalError,
    ForbiddenError,
    RecordsOutOfScopeError,
    ValidationError,
)

logger = logging.getLogger(__name__)


async def _forbidden(req, resp: falcon.asgi.Response, ex: ForbiddenError, params) -> None:
    resp.status = falcon.HTTP_403
    resp.media = {"error": str(ex)}


async def _approval_not_allowed(req, resp, ex: ApprovalNotAllowedError, params) -> None:
    resp.status = falcon.HTTP_403
    resp.media = {"error": str(ex), "role_ids": ex.role_ids}


async def _requires_approval(req, resp, ex: CustomActionRequiresApprovalError, params) -> None:
    resp.status = falcon.HTTP_403
    resp.media = {
        "error": str(ex),
        "role_ids_allowed_to_approve": ex.role_ids_allowed_to_approve,
    }


async def _bad_request(req, resp, ex: BadRequestError | ValidationError, params) -> None:
    resp.status = falcon.HTTP_400
    resp.media = {"error": str(ex)}


async def _out_of_scope(req, resp, ex: RecordsOutOfScopeError, params) -> None:
    resp.status = falcon.HTTP_400
    resp.media = {"error": f"Custom action: {ex}"}


async def _unexpected(req, resp, ex: Exception, params) -> None:
    logger.exception("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"title": "500 Internal Server Error"}


def register_error_handlers(app: falcon.asgi.App) -> None:
    """Register handlers; Falcon picks the most specific one for each error."""
    app.add_error_handler(Exception, _unexpected)
    app.add_error_handler(ForbiddenError, _forbidden)
    app.add_error_handler(ApprovalNotAllowedError, _approval_not_allowed)
    app.add_error_handler(CustomActionRequiresApprovalError, _requires_approval)
    app.add_error_handler(BadRequestError, _bad_request)
    app.add_error_handler(ValidationError, _bad_request)
    app.add_error_handler(RecordsOutOfScopeError, _out_of_scope)
