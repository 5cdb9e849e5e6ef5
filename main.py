import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

import store
from config import CORS_ORIGINS, configure_logging
from database import Base, engine, get_db
from errors import NotFound, VersionConflict
from identifiers import is_valid_ulid, normalize_ulid
from schemas import (
    AppState,
    CreateListRequest,
    ListResponse,
    ResolvedState,
    SettlementSummary,
    ShareRequest,
    ShareResponse,
    UpdateListRequest,
)
from settlement import summarize
from share import DATA_PARAM, LIST_PARAM, share_link, state_from_query

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="GroupPayback")
Base.metadata.create_all(bind=engine)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def valid_list_id(list_id: str) -> str:
    if not is_valid_ulid(list_id):
        raise HTTPException(status_code=400, detail="Invalid list ID format")
    return normalize_ulid(list_id)


def no_store(response: Response):
    response.headers["Cache-Control"] = "no-store"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request body", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("API error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.post(
    "/api/lists",
    status_code=201,
    response_model=ListResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(no_store)],
)
def create_list(body: CreateListRequest, db: Session = Depends(get_db)):
    row = store.create_list(db, body.data)
    return store.to_response(row)


@app.get(
    "/api/lists/{list_id}",
    response_model=ListResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(no_store)],
)
def get_list(list_id: str = Depends(valid_list_id), db: Session = Depends(get_db)):
    row = store.get_list(db, list_id)
    if not row:
        raise HTTPException(status_code=404, detail="List not found")
    return store.to_response(row)


@app.put(
    "/api/lists/{list_id}",
    response_model=ListResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(no_store)],
)
def update_list(body: UpdateListRequest, list_id: str = Depends(valid_list_id), db: Session = Depends(get_db)):
    result = store.update_list(db, list_id, body.data, body.version)

    if result.kind == NotFound.kind:
        raise HTTPException(status_code=404, detail="List not found")
    if result.kind == VersionConflict.kind:
        return JSONResponse(
            status_code=409,
            headers={"Cache-Control": "no-store"},
            content={
                "detail": "Version conflict",
                "code": "VERSION_CONFLICT",
                "expectedVersion": result.expected_version,
                "actualVersion": result.actual_version,
            },
        )
    return store.to_response(result.record)


@app.post("/api/settlements", response_model=SettlementSummary)
def compute_settlements(state: AppState):
    return summarize(state.people)


@app.post("/api/share", response_model=ShareResponse)
def create_share_link(body: ShareRequest):
    return share_link(body.origin, body.path, body.state)


@app.get("/api/state", response_model=ResolvedState, response_model_exclude_none=True)
def resolve_state(
    data: Optional[str] = Query(None, alias=DATA_PARAM),
    list_param: Optional[str] = Query(None, alias=LIST_PARAM),
    db: Session = Depends(get_db),
):
    # A list id wins over any encoded state in the same link
    if list_param is not None:
        list_id = valid_list_id(list_param)
        row = store.get_list(db, list_id)
        if not row:
            raise HTTPException(status_code=404, detail="List not found")
        return ResolvedState(mode="persisted", state=AppState.model_validate(row.data), list_id=row.id, version=row.version)

    return ResolvedState(mode="url", state=state_from_query({DATA_PARAM: data}))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
