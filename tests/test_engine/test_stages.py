"""
Test suite for the preparation pipeline.
Tests: 1) stage order and context 2) failure wrapping with stage tags
3) short-circuit on first failure 4) cancellation passes through
"""

import asyncio

import pytest

from trustline_tx.engine.exceptions import (
    NoPathFound,
    PathQueryFailed,
    PreparationError,
    RelayRequestError,
)
from trustline_tx.engine.stages import PreparationPipeline, Stage


def returning(value):
    async def handler(context):
        return value

    return handler


def raising(exc):
    async def handler(context):
        raise exc

    return handler


class TestPreparationPipeline:
    @pytest.mark.asyncio
    async def test_stages_run_in_order_and_see_prior_results(self):
        seen = []

        async def first(context):
            seen.append("first")
            return context["input"] * 2

        async def second(context):
            seen.append("second")
            return context["first"] + 1

        pipeline = PreparationPipeline([
            Stage("first", "doubling", first),
            Stage("second", "incrementing", second),
        ])
        result = await pipeline.execute({"input": 4})

        assert seen == ["first", "second"]
        assert result["first"] == 8
        assert result["second"] == 9

    @pytest.mark.asyncio
    async def test_relay_error_is_wrapped_with_stage_context(self):
        cause = RelayRequestError("500 from path-info", status_code=500)
        pipeline = PreparationPipeline([
            Stage("path", "finding a path", raising(cause), PathQueryFailed),
        ])

        with pytest.raises(PathQueryFailed) as exc_info:
            await pipeline.execute({})

        error = exc_info.value
        assert str(error) == "error while finding a path: 500 from path-info"
        assert error.stage == "path"
        assert error.cause is cause
        assert error.__cause__ is cause

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self):
        pipeline = PreparationPipeline([
            Stage("data", "encoding the call", raising(KeyError("transfer"))),
        ])

        with pytest.raises(PreparationError) as exc_info:
            await pipeline.execute({})

        assert exc_info.value.stage == "data"
        assert isinstance(exc_info.value.cause, KeyError)

    @pytest.mark.asyncio
    async def test_typed_errors_propagate_and_get_tagged(self):
        error = NoPathFound("no path in 0xnetwork", network="0xnetwork")
        pipeline = PreparationPipeline([
            Stage("path", "finding a path", raising(error), PathQueryFailed),
        ])

        with pytest.raises(NoPathFound) as exc_info:
            await pipeline.execute({})

        assert exc_info.value is error
        assert error.stage == "path"

    @pytest.mark.asyncio
    async def test_existing_stage_tag_is_kept(self):
        error = PathQueryFailed("inner", stage="nonce")
        pipeline = PreparationPipeline([Stage("transfer", "building", raising(error))])

        with pytest.raises(PathQueryFailed):
            await pipeline.execute({})

        assert error.stage == "nonce"

    @pytest.mark.asyncio
    async def test_first_failure_short_circuits(self):
        ran = []

        async def later(context):
            ran.append("later")

        pipeline = PreparationPipeline([
            Stage("fail", "failing", raising(ValueError("boom"))),
            Stage("later", "running later", later),
        ])

        with pytest.raises(PreparationError):
            await pipeline.execute({})

        assert ran == []

    @pytest.mark.asyncio
    async def test_cancellation_is_not_wrapped(self):
        pipeline = PreparationPipeline([
            Stage("slow", "waiting", raising(asyncio.CancelledError())),
        ])

        with pytest.raises(asyncio.CancelledError):
            await pipeline.execute({})

    def test_duplicate_stage_names_are_rejected(self):
        with pytest.raises(ValueError):
            PreparationPipeline([
                Stage("path", "finding a path", returning(None)),
                Stage("path", "finding another path", returning(None)),
            ])
