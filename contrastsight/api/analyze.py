"""POST /api/analyze — single image analysis for the interactive front end."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import time

from fastapi import APIRouter, Depends, HTTPException

from contrastsight.config import Settings
from contrastsight.dependencies import get_settings
from contrastsight.engine.config import AnalysisConfig, build_config
from contrastsight.engine.pipeline import AnalysisResult, analyze_image
from contrastsight.errors import ConfigurationError, DecodeError, ExternalToolError
from contrastsight.models.requests import AnalyzeOptions, AnalyzeRequest
from contrastsight.models.responses import AnalyzeResponse
from contrastsight.utils.decoder import DecodeOptions, decode_bytes
from contrastsight.utils.overlay import render_overlay, to_png_bytes

logger = logging.getLogger(__name__)

router = APIRouter()


def _config_from_options(opts: AnalyzeOptions) -> AnalysisConfig:
    values = opts.model_dump()
    return build_config(
        backgrounds=values.pop("backgrounds"),
        segmentation_background=values.pop("segmentation_background"),
        sample_mode=values.pop("sample_mode"),
        **values,
    )


def _run(data: bytes, req: AnalyzeRequest, config: AnalysisConfig, settings: Settings) -> AnalysisResult:
    options = DecodeOptions(
        svg_density=settings.svg_density,
        vector_density=settings.vector_density,
        max_size=req.max_size or settings.max_image_size,
    )
    pixels = decode_bytes(data, req.filename, options)
    return analyze_image(pixels, config)


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(req: AnalyzeRequest, settings: Settings = Depends(get_settings)) -> AnalyzeResponse:
    start = time.perf_counter()

    try:
        config = _config_from_options(req.options)
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    try:
        data = base64.b64decode(req.image, validate=True)
    except (binascii.Error, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid base64 image data: {e}") from e
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Image exceeds the upload size limit")

    # Analysis is CPU-bound; keep the event loop free
    loop = asyncio.get_running_loop()
    try:
        result = await loop.run_in_executor(None, _run, data, req, config, settings)
    except (DecodeError, ExternalToolError) as e:
        logger.warning("analyze %s FAILED: %s", req.filename or "<upload>", e)
        raise HTTPException(status_code=400, detail=str(e)) from e

    overlay = None
    if req.include_overlay:
        overlay = base64.b64encode(to_png_bytes(render_overlay(result.failing_mask))).decode("ascii")

    elapsed = (time.perf_counter() - start) * 1000
    return AnalyzeResponse.from_result(result, overlay_png=overlay, processing_time_ms=round(elapsed, 1))
