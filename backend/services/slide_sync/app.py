"""Slide Sync Service API - stateless text to slide previews."""

from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from services.slide_sync.normalizer import normalize
from services.slide_sync.segmenter import segment
from services.slide_sync.service import slide_texts
from services.slide_sync.synthesizer import synthesize
from shared.models import (
    HealthResponse,
    NormalizeRequest,
    PreviewRequest,
    PreviewResponse,
    SegmentResponse,
)
from shared.utils import config, setup_logging

logger = setup_logging("slide-sync-api")

app = FastAPI(
    title="Slide Sync Service",
    description="Normalise editor content, split it into segments and preview generated slides",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="OK", timestamp=datetime.now(UTC).isoformat())


@app.post("/normalize", response_model=SegmentResponse)
async def normalize_content(request: NormalizeRequest):
    """Canonical plain text plus its segments, without the single-slide fallback."""
    try:
        normalized = normalize(request.content)
        return SegmentResponse(normalized=normalized, segments=segment(normalized))
    except Exception as e:
        logger.error(f"Normalization error: {e!s}")
        raise HTTPException(status_code=500, detail=f"Normalization failed: {e!s}") from e


@app.post("/segment", response_model=SegmentResponse)
async def segment_content(request: NormalizeRequest):
    """Segments as the sync pipeline would use them, fallback included."""
    try:
        return SegmentResponse(normalized=normalize(request.content), segments=slide_texts(request.content))
    except Exception as e:
        logger.error(f"Segmentation error: {e!s}")
        raise HTTPException(status_code=500, detail=f"Segmentation failed: {e!s}") from e


@app.post("/preview", response_model=PreviewResponse)
async def preview_slides(request: PreviewRequest):
    """Slides that saving this content would produce. Nothing is persisted."""
    try:
        slides = synthesize(
            request.owner_id,
            request.owner_title,
            slide_texts(request.content),
            request.background_url,
        )
    except Exception as e:
        logger.error(f"Preview error: {e!s}")
        raise HTTPException(status_code=500, detail=f"Preview failed: {e!s}") from e
    logger.info(f"Previewed {len(slides)} slides for {request.owner_id}")
    return PreviewResponse(slides=slides)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
