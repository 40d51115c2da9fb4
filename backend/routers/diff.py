"""Diff API endpoints"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from models.diff import DiffRequest, DiffResult, Granularity, RenderedLine, SplitView
from services.config_manager import ConfigManager
from services.diff_engine import DiffComputationError, compute_diff
from services.diff_generator import (
    BASE_HEADER,
    BASE_LABEL,
    CURRENT_HEADER,
    CURRENT_LABEL,
    DiffGenerator,
    format_unified_patch,
)
from services.diff_renderer import render_split, render_unified

logger = logging.getLogger(__name__)

router = APIRouter()

DIFF_FAILED_MESSAGE = "Could not compute a diff for these documents."


def resolve_diff_settings(granularity: Granularity | None, context_lines: int | None) -> tuple[Granularity, int]:
    """Fill unset request options from configuration"""
    diff_config = ConfigManager.get_instance().get_config().get("diff", {})
    if granularity is None:
        granularity = Granularity(diff_config.get("granularity", "line"))
    if context_lines is None:
        context_lines = int(diff_config.get("context_lines", 3))
    if context_lines < 0:
        raise HTTPException(status_code=400, detail="context_lines must be >= 0")
    return granularity, context_lines


def diff_failed(e: DiffComputationError) -> HTTPException:
    logger.error("[Diff] Diff computation failed: %s", e)
    return HTTPException(status_code=500, detail=DIFF_FAILED_MESSAGE)


@router.post("", response_model=DiffResult)
async def create_diff(request: DiffRequest) -> DiffResult:
    """Structured diff: edit script, hunks, unified patch and stats"""
    granularity, context_lines = resolve_diff_settings(request.granularity, request.context_lines)
    try:
        return DiffGenerator(context_lines).generate_diff(
            request.base,
            request.candidate,
            name=request.name,
            granularity=granularity,
        )
    except DiffComputationError as e:
        raise diff_failed(e)


@router.post("/patch")
async def create_patch(request: DiffRequest) -> dict[str, str]:
    """Unified diff text"""
    _, context_lines = resolve_diff_settings(request.granularity, request.context_lines)
    try:
        patch = format_unified_patch(
            request.base,
            request.candidate,
            BASE_LABEL,
            request.name or CURRENT_LABEL,
            BASE_HEADER,
            CURRENT_HEADER,
            context_lines=context_lines,
        )
    except DiffComputationError as e:
        raise diff_failed(e)
    return {"patch": patch}


@router.post("/unified", response_model=list[RenderedLine])
async def create_unified_view(request: DiffRequest) -> list[RenderedLine]:
    """Unified view lines"""
    granularity, context_lines = resolve_diff_settings(request.granularity, request.context_lines)
    try:
        patch = format_unified_patch(
            request.base,
            request.candidate,
            BASE_LABEL,
            request.name or CURRENT_LABEL,
            BASE_HEADER,
            CURRENT_HEADER,
            context_lines=context_lines,
        )
        highlight = request.highlight_words or granularity == Granularity.WORD
        return render_unified(patch, highlight_words=highlight)
    except DiffComputationError as e:
        raise diff_failed(e)


@router.post("/split", response_model=SplitView)
async def create_split_view(request: DiffRequest) -> SplitView:
    """Side-by-side view rows"""
    granularity, _ = resolve_diff_settings(request.granularity, request.context_lines)
    try:
        script = compute_diff(request.base, request.candidate, granularity)
        return render_split(script, highlight_words=request.highlight_words)
    except DiffComputationError as e:
        raise diff_failed(e)
