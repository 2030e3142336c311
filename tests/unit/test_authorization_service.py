"""Unit tests for AuthorizationService."""

from unittest.mock import AsyncMock

import pytest

from scopeguard.application.services.authorization import AuthorizationService
from scopeguard.domain.exceptions import (
    ApprovalNotAllowedError,
    BadRequestError,
    ChainedSQLQueryError,
    CustomActionRequiresApprovalError,
    CustomActionTriggerForbiddenError,
    EmptySQLQueryError,
    ForbiddenError,
    NonSelectSQLQueryError,
)
from scopeguard.domain.value_objects import CollectionActionEvent, ConditionLeaf

REQUEST_FILTER = ConditionLeaf(field="id", operator="in", value=[1, 2, 3])
CHART = {
    "type": "Value",
    "sourceCollectionName": "books",
    "aggregateFieldName": "price",
    "aggregator": "Sum",
}


def _service(directory, counter=None, verifier=None) -> AuthorizationService:
    return AuthorizationService(
        permission_directory=directory,
        records_counter=counter or AsyncMock(),
        signed_parameters_verifier=verifier,
    )


# --- coarse collection checks ---


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("method", "event"),
    [
        ("assert_can_browse", CollectionActionEvent.BROWSE),
        ("assert_can_read", CollectionActionEvent.READ),
        ("assert_can_add", CollectionActionEvent.ADD),
        ("assert_can_edit", CollectionActionEvent.EDIT),
        ("assert_can_delete", CollectionActionEvent.DELETE),
        ("assert_can_export", CollectionActionEvent.EXPORT),
    ],
)
async def test_collection_check_allowed(mock_permission_directory, actor, method, event) -> None:
    service = _service(mock_permission_directory)

    await getattr(service, method)(actor, "books")

    mock_permission_directory.can_on_collection.assert_awaited_once_with(
        user_id=16, collection_name="books", event=event
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method",
    [
        "assert_can_browse",
        "assert_can_read",
        "assert_can_add",
        "assert_can_edit",
        "assert_can_delete",
        "assert_can_export",
    ],
)
async def test_collection_check_denied(mock_permission_directory, actor, method) -> None:
    mock_permission_directory.can_on_collection.return_value = False
    service = _service(mock_permission_directory)

    with pytest.raises(ForbiddenError):
        await getattr(service, method)(actor, "books")
    assert mock_permission_directory.can_on_collection.await_count == 1


@pytest.mark.asyncio
async def test_browse_denied_skips_segment_check(mock_permission_directory, actor) -> None:
    mock_permission_directory.can_on_collection.return_value = False
    service = _service(mock_permission_directory)

    with pytest.raises(ForbiddenError):
        await service.assert_can_browse(actor, "books", "SELECT id FROM books")
    mock_permission_directory.can_execute_segment_query.assert_not_called()


@pytest.mark.asyncio
async def test_browse_segment_query_denied(mock_permission_directory, actor) -> None:
    """Collection browse allowed but segment denied still forbids."""
    mock_permission_directory.can_execute_segment_query.return_value = False
    service = _service(mock_permission_directory)

    with pytest.raises(ForbiddenError):
        await service.assert_can_browse(actor, "books", "segmentQuery")
    mock_permission_directory.can_execute_segment_query.assert_awaited_once_with(
        user_id=16,
        collection_name="books",
        rendering_id=42,
        segment_query="segmentQuery",
    )


@pytest.mark.asyncio
async def test_browse_without_segment_skips_segment_check(mock_permission_directory, actor) -> None:
    service = _service(mock_permission_directory)

    await service.assert_can_browse(actor, "books")
    mock_permission_directory.can_execute_segment_query.assert_not_called()


# --- charts ---


@pytest.mark.asyncio
async def test_chart_allowed(mock_permission_directory, actor) -> None:
    service = _service(mock_permission_directory)

    await service.assert_can_retrieve_chart(actor=actor, chart_request=CHART)
    mock_permission_directory.can_execute_chart.assert_awaited_once_with(
        user_id=16, rendering_id=42, chart_request=CHART
    )


@pytest.mark.asyncio
async def test_chart_denied(mock_permission_directory, actor) -> None:
    mock_permission_directory.can_execute_chart.return_value = False
    service = _service(mock_permission_directory)

    with pytest.raises(ForbiddenError):
        await service.assert_can_retrieve_chart(actor=actor, chart_request=CHART)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("error", "message"),
    [
        (EmptySQLQueryError(), "You cannot execute an empty SQL query."),
        (ChainedSQLQueryError(), "You cannot chain SQL queries."),
        (NonSelectSQLQueryError(), "Only SELECT queries are allowed."),
    ],
)
async def test_chart_sql_errors_become_bad_request(
    mock_permission_directory, actor, error, message
) -> None:
    mock_permission_directory.can_execute_chart.side_effect = error
    service = _service(mock_permission_directory)

    with pytest.raises(BadRequestError) as exc_info:
        await service.assert_can_retrieve_chart(actor=actor, chart_request={"query": "x"})
    assert str(exc_info.value) == message


@pytest.mark.asyncio
async def test_chart_unexpected_error_propagates(mock_permission_directory, actor) -> None:
    mock_permission_directory.can_execute_chart.side_effect = ConnectionError("down")
    service = _service(mock_permission_directory)

    with pytest.raises(ConnectionError):
        await service.assert_can_retrieve_chart(actor=actor, chart_request=CHART)


# --- signed parameters ---


def test_verify_signed_action_parameters(mock_permission_directory, mock_verifier) -> None:
    service = _service(mock_permission_directory, verifier=mock_verifier)

    assert service.verify_signed_action_parameters("signed") == {"foo": "bar"}
    mock_verifier.verify.assert_called_once_with("signed")


# --- trigger ---


@pytest.mark.asyncio
async def test_trigger_allowed(mock_permission_directory, actor, books_params) -> None:
    counter = AsyncMock()
    service = _service(mock_permission_directory, counter)

    await service.assert_can_trigger_custom_action(
        actor=actor,
        collection_name="books",
        custom_action_name="discount",
        records_counter_params=books_params,
        request_filter=REQUEST_FILTER,
    )

    mock_permission_directory.can_trigger_custom_action.assert_awaited_once_with(
        user_id=16, collection_name="books", custom_action_name="discount"
    )
    counter.count.assert_not_called()


@pytest.mark.asyncio
async def test_trigger_denied_short_circuits(mock_permission_directory, actor, books_params) -> None:
    mock_permission_directory.can_trigger_custom_action.return_value = False
    service = _service(mock_permission_directory)

    with pytest.raises(CustomActionTriggerForbiddenError):
        await service.assert_can_trigger_custom_action(
            actor=actor,
            collection_name="books",
            custom_action_name="discount",
            records_counter_params=books_params,
            request_filter=REQUEST_FILTER,
        )
    mock_permission_directory.get_conditional_trigger_condition.assert_not_called()


@pytest.mark.asyncio
async def test_trigger_condition_not_covering(
    mock_permission_directory, actor, books_params, records_counter
) -> None:
    mock_permission_directory.get_conditional_trigger_condition.return_value = ConditionLeaf(
        field="genre", operator="equal", value="scifi"
    )
    service = _service(mock_permission_directory, records_counter)

    with pytest.raises(CustomActionTriggerForbiddenError):
        await service.assert_can_trigger_custom_action(
            actor=actor,
            collection_name="books",
            custom_action_name="discount",
            records_counter_params=books_params,
            request_filter=REQUEST_FILTER,
        )


@pytest.mark.asyncio
async def test_trigger_accepts_plain_request_filter(
    mock_permission_directory, actor, books_params, records_counter
) -> None:
    mock_permission_directory.get_conditional_trigger_condition.return_value = ConditionLeaf(
        field="genre", operator="equal", value="scifi"
    )
    service = _service(mock_permission_directory, records_counter)

    await service.assert_can_trigger_custom_action(
        actor=actor,
        collection_name="books",
        custom_action_name="discount",
        records_counter_params=books_params,
        request_filter={"field": "id", "operator": "in", "value": [1, 3, 5]},
    )

    assert records_counter.calls[0] == ConditionLeaf(field="id", operator="in", value=[1, 3, 5])


@pytest.mark.asyncio
async def test_trigger_requiring_approval_lists_approvers(
    mock_permission_directory, actor, books_params, records_counter
) -> None:
    mock_permission_directory.does_trigger_require_approval.return_value = True
    mock_permission_directory.get_conditional_approve_conditions.return_value = {
        1: None,
        2: {"field": "genre", "operator": "equal", "value": "scifi"},
        3: {"field": "price", "operator": "less_than", "value": 100},
    }
    service = _service(mock_permission_directory, records_counter)

    with pytest.raises(CustomActionRequiresApprovalError) as exc_info:
        await service.assert_can_trigger_custom_action(
            actor=actor,
            collection_name="books",
            custom_action_name="discount",
            records_counter_params=books_params,
            request_filter=REQUEST_FILTER,
        )
    assert exc_info.value.role_ids_allowed_to_approve == [1, 3]


@pytest.mark.asyncio
async def test_trigger_approval_condition_not_matching(
    mock_permission_directory, actor, books_params, records_counter
) -> None:
    """Approval only required for expensive books; cheap ones run directly."""
    mock_permission_directory.does_trigger_require_approval.return_value = True
    mock_permission_directory.get_conditional_requires_approval_condition.return_value = (
        ConditionLeaf(field="price", operator="greater_than", value=50)
    )
    service = _service(mock_permission_directory, records_counter)

    await service.assert_can_trigger_custom_action(
        actor=actor,
        collection_name="books",
        custom_action_name="discount",
        records_counter_params=books_params,
        request_filter=REQUEST_FILTER,
    )
    mock_permission_directory.get_conditional_approve_conditions.assert_not_called()


# --- approve ---


@pytest.mark.asyncio
async def test_approve_allowed(mock_permission_directory, actor, books_params) -> None:
    counter = AsyncMock()
    service = _service(mock_permission_directory, counter)

    await service.assert_can_approve_custom_action(
        actor=actor,
        collection_name="books",
        custom_action_name="discount",
        records_counter_params=books_params,
        request_filter=REQUEST_FILTER,
        requester_id=42,
    )

    mock_permission_directory.can_approve_custom_action.assert_awaited_once_with(
        user_id=16, collection_name="books", custom_action_name="discount", requester_id=42
    )
    mock_permission_directory.get_conditional_approve_condition.assert_awaited_once_with(
        user_id=16, collection_name="books", custom_action_name="discount"
    )
    mock_permission_directory.get_conditional_approve_conditions.assert_not_called()
    counter.count.assert_not_called()


@pytest.mark.asyncio
async def test_approve_denied_when_one_group_not_covering(
    mock_permission_directory, actor, books_params
) -> None:
    """Three groups, reference total 3, matches [3, 1, 3]."""
    mock_permission_directory.can_approve_custom_action.return_value = False
    mock_permission_directory.get_conditional_approve_conditions.return_value = {
        10: {"value": "some", "field": "definition", "operator": "equal"},
        11: {"value": "other", "field": "definition", "operator": "equal"},
        12: {"value": "third", "field": "definition", "operator": "equal"},
        13: {"value": "third", "field": "definition", "operator": "equal"},
    }
    counter = AsyncMock()
    counter.count.side_effect = [3, 3, 1, 3]
    service = _service(mock_permission_directory, counter)

    with pytest.raises(ApprovalNotAllowedError) as exc_info:
        await service.assert_can_approve_custom_action(
            actor=actor,
            collection_name="books",
            custom_action_name="discount",
            records_counter_params=books_params,
            request_filter=REQUEST_FILTER,
            requester_id=42,
        )
    assert exc_info.value.role_ids == [10, 12, 13]
    assert counter.count.await_count == 4
    mock_permission_directory.get_conditional_approve_condition.assert_not_called()


@pytest.mark.asyncio
async def test_approve_allowed_when_every_group_covers(
    mock_permission_directory, actor, books_params, records_counter
) -> None:
    mock_permission_directory.can_approve_custom_action.return_value = False
    mock_permission_directory.get_conditional_approve_conditions.return_value = {
        1: {"field": "price", "operator": "less_than", "value": 100},
        2: {"field": "price", "operator": "greater_than", "value": 5},
    }
    service = _service(mock_permission_directory, records_counter)

    await service.assert_can_approve_custom_action(
        actor=actor,
        collection_name="books",
        custom_action_name="discount",
        records_counter_params=books_params,
        request_filter=REQUEST_FILTER,
        requester_id=42,
    )


@pytest.mark.asyncio
async def test_approve_denied_without_any_role(mock_permission_directory, actor, books_params) -> None:
    mock_permission_directory.can_approve_custom_action.return_value = False
    service = _service(mock_permission_directory)

    with pytest.raises(ApprovalNotAllowedError):
        await service.assert_can_approve_custom_action(
            actor=actor,
            collection_name="books",
            custom_action_name="discount",
            records_counter_params=books_params,
            request_filter=REQUEST_FILTER,
            requester_id=42,
        )


@pytest.mark.asyncio
async def test_approve_own_condition_failing_falls_back_to_groups(
    mock_permission_directory, actor, books_params, records_counter
) -> None:
    mock_permission_directory.get_conditional_approve_condition.return_value = ConditionLeaf(
        field="genre", operator="equal", value="classic"
    )
    mock_permission_directory.get_conditional_approve_conditions.return_value = {
        7: {"field": "genre", "operator": "equal", "value": "classic"},
    }
    service = _service(mock_permission_directory, records_counter)

    with pytest.raises(ApprovalNotAllowedError) as exc_info:
        await service.assert_can_approve_custom_action(
            actor=actor,
            collection_name="books",
            custom_action_name="discount",
            records_counter_params=books_params,
            request_filter=REQUEST_FILTER,
            requester_id=42,
        )
    assert exc_info.value.role_ids == []


@pytest.mark.asyncio
async def test_approve_directory_failure_propagates(
    mock_permission_directory, actor, books_params
) -> None:
    mock_permission_directory.can_approve_custom_action.side_effect = TimeoutError()
    service = _service(mock_permission_directory)

    with pytest.raises(TimeoutError):
        await service.assert_can_approve_custom_action(
            actor=actor,
            collection_name="books",
            custom_action_name="discount",
            records_counter_params=books_params,
            request_filter=REQUEST_FILTER,
            requester_id=42,
        )
