"""Storage Service API - persistence for collections, flows, slides and text content."""

from datetime import UTC, datetime

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from services.storage.repository import DuplicateRecordError, StorageRepository
from shared.enums import CollectionKind
from shared.models import (
    COLLECTION_MODELS,
    CollectionUpdate,
    ContentRecord,
    ContentResponse,
    Flow,
    FlowUpdate,
    HealthResponse,
    Slide,
    SlideUpdate,
    SuccessResponse,
    UpdateResponse,
)
from shared.utils import config, setup_logging

logger = setup_logging("storage-service")

app = FastAPI(
    title="ChurchBuddy Storage Service",
    description="Songs, sermons, asset decks, flows, slides and editor content",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_repository(db: Session = Depends(get_db)) -> StorageRepository:
    return StorageRepository(db)


def _database_error(action: str, error: SQLAlchemyError) -> HTTPException:
    logger.error(f"Failed to {action}: {error!s}")
    return HTTPException(status_code=500, detail=f"Failed to {action}: {error!s}")


@app.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="OK", timestamp=datetime.now(UTC).isoformat())


# Collections: one set of routes per kind


def register_collection_routes(kind: CollectionKind) -> None:
    model = COLLECTION_MODELS[kind]
    resource = kind.resource
    label = kind.value

    async def list_items(repo: StorageRepository = Depends(get_repository)):
        try:
            return [item.to_wire() for item in repo.list_collections(kind)]
        except SQLAlchemyError as e:
            raise _database_error(f"list {resource}", e) from e

    async def create_item(payload: model, repo: StorageRepository = Depends(get_repository)):
        try:
            created = repo.create_collection(payload)
        except DuplicateRecordError as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        except SQLAlchemyError as e:
            raise _database_error(f"create {label}", e) from e
        logger.info(f"Created {created.ref}")
        return created.to_wire()

    async def update_item(
        item_id: str, changes: CollectionUpdate, repo: StorageRepository = Depends(get_repository)
    ):
        try:
            updated_at = repo.update_collection(kind, item_id, changes)
        except SQLAlchemyError as e:
            raise _database_error(f"update {label} {item_id}", e) from e
        if updated_at is None:
            raise HTTPException(status_code=404, detail=f"{label} {item_id} not found")
        return UpdateResponse(updated_at=updated_at).to_wire()

    async def delete_item(item_id: str, repo: StorageRepository = Depends(get_repository)):
        try:
            repo.delete_collection(kind, item_id)
            removed = repo.delete_content_for_item(kind.item_type, item_id)
        except SQLAlchemyError as e:
            raise _database_error(f"delete {label} {item_id}", e) from e
        if removed:
            logger.info(f"Deleted {removed} content records of {label} {item_id}")
        return SuccessResponse()

    app.add_api_route(f"/{resource}", list_items, methods=["GET"], name=f"list_{label}s")
    app.add_api_route(f"/{resource}", create_item, methods=["POST"], name=f"create_{label}")
    app.add_api_route(f"/{resource}/{{item_id}}", update_item, methods=["PUT"], name=f"update_{label}")
    app.add_api_route(
        f"/{resource}/{{item_id}}",
        delete_item,
        methods=["DELETE"],
        name=f"delete_{label}",
        response_model=SuccessResponse,
    )


for collection_kind in CollectionKind:
    register_collection_routes(collection_kind)


# Slides


@app.get("/slides")
async def list_slides(repo: StorageRepository = Depends(get_repository)):
    """All slides ordered by their ``order`` number."""
    try:
        return [slide.to_wire() for slide in repo.list_slides()]
    except SQLAlchemyError as e:
        raise _database_error("list slides", e) from e


@app.post("/slides")
async def save_slide(slide: Slide, repo: StorageRepository = Depends(get_repository)):
    """Create or replace a slide by id."""
    try:
        return repo.upsert_slide(slide).to_wire()
    except SQLAlchemyError as e:
        raise _database_error(f"save slide {slide.id}", e) from e


@app.put("/slides/{slide_id}")
async def update_slide(slide_id: str, changes: SlideUpdate, repo: StorageRepository = Depends(get_repository)):
    try:
        updated_at = repo.update_slide(slide_id, changes)
    except SQLAlchemyError as e:
        raise _database_error(f"update slide {slide_id}", e) from e
    if updated_at is None:
        raise HTTPException(status_code=404, detail=f"slide {slide_id} not found")
    return UpdateResponse(updated_at=updated_at).to_wire()


@app.delete("/slides/{slide_id}", response_model=SuccessResponse)
async def delete_slide(slide_id: str, repo: StorageRepository = Depends(get_repository)):
    try:
        repo.delete_slide(slide_id)
    except SQLAlchemyError as e:
        raise _database_error(f"delete slide {slide_id}", e) from e
    return SuccessResponse()


# Editor content


@app.get("/content/{storage_key}", response_model=ContentResponse)
async def get_content(storage_key: str, repo: StorageRepository = Depends(get_repository)):
    try:
        return ContentResponse(content=repo.get_content(storage_key))
    except SQLAlchemyError as e:
        raise _database_error(f"read content {storage_key}", e) from e


@app.post("/content", response_model=SuccessResponse)
async def save_content(record: ContentRecord, repo: StorageRepository = Depends(get_repository)):
    try:
        repo.save_content(record)
    except SQLAlchemyError as e:
        raise _database_error(f"save content {record.storage_key}", e) from e
    return SuccessResponse()


@app.delete("/content/{storage_key}", response_model=SuccessResponse)
async def delete_content(storage_key: str, repo: StorageRepository = Depends(get_repository)):
    try:
        repo.delete_content(storage_key)
    except SQLAlchemyError as e:
        raise _database_error(f"delete content {storage_key}", e) from e
    return SuccessResponse()


# Flows


@app.get("/flows")
async def list_flows(repo: StorageRepository = Depends(get_repository)):
    try:
        return [flow.to_wire() for flow in repo.list_flows()]
    except SQLAlchemyError as e:
        raise _database_error("list flows", e) from e


@app.post("/flows")
async def create_flow(flow: Flow, repo: StorageRepository = Depends(get_repository)):
    try:
        created = repo.create_flow(flow)
    except DuplicateRecordError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except SQLAlchemyError as e:
        raise _database_error(f"create flow {flow.id}", e) from e
    logger.info(f"Created flow {created.id}")
    return created.to_wire()


@app.put("/flows/{flow_id}")
async def update_flow(flow_id: str, changes: FlowUpdate, repo: StorageRepository = Depends(get_repository)):
    try:
        updated_at = repo.update_flow(flow_id, changes)
    except SQLAlchemyError as e:
        raise _database_error(f"update flow {flow_id}", e) from e
    if updated_at is None:
        raise HTTPException(status_code=404, detail=f"flow {flow_id} not found")
    return UpdateResponse(updated_at=updated_at).to_wire()


@app.delete("/flows/{flow_id}", response_model=SuccessResponse)
async def delete_flow(flow_id: str, repo: StorageRepository = Depends(get_repository)):
    try:
        repo.delete_flow(flow_id)
    except SQLAlchemyError as e:
        raise _database_error(f"delete flow {flow_id}", e) from e
    return SuccessResponse()


if __name__ == "__main__":
    import uvicorn

    from database import init_database

    init_database()
    uvicorn.run(app, host="0.0.0.0", port=config.get("port", 5001))
