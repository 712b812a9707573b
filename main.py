from fastapi import FastAPI, Body, Depends, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, List, Optional
import logging
import time

import config, database, schemas, task_utils, validation
from logging_setup import setup_logging
from store import TaskNotFound, TaskQuery, TaskStore

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"
INVALID_BODY = "Invalid request body"


def _errors(*codes: int) -> dict:
    # OpenAPI: every error body is {"error": "..."}
    return {code: {"model": schemas.ErrorResponse} for code in codes + (500,)}


# inserted at start-up when TODO_SEED_SAMPLE_TASKS is on
SAMPLE_TASKS = [
    {"title": "Complete project documentation", "description": "Write comprehensive docs for the TODO app", "priority": "high", "due_date": "2026-02-15"},
    {"title": "Review pull requests", "description": "Review and merge pending PRs", "priority": "medium", "due_date": "2026-02-14"},
    {"title": "Update dependencies", "description": "Check and update pip packages", "priority": "low", "due_date": None},
]


def get_store(request: Request) -> TaskStore:
    return request.app.state.store


def get_settings(request: Request) -> config.Settings:
    return request.app.state.settings


def _to_response(task) -> schemas.TaskResponse:
    return schemas.TaskResponse.model_validate(task)


def _storage_failure(message: str) -> HTTPException:
    logger.exception(message)
    return HTTPException(status_code=500, detail=message)


def create_app(settings: Optional[config.Settings] = None) -> FastAPI:
    settings = settings or config.load_settings()

    # 1. storage: built once here, handed to routes through app.state
    engine = database.create_db_engine(settings.database_url)
    database.init_db(engine)
    store = TaskStore(database.create_session_factory(engine))
    if settings.seed_sample_tasks and store.count() == 0:
        store.seed(SAMPLE_TASKS)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.configure_logging:
            setup_logging(settings.log_level)
        yield
        engine.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 2. access log, one line per request
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        logger.info("%s %s %s %.1fms", request.method, path, response.status_code, elapsed_ms)
        return response

    # 3. every error body is {"error": "..."}
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(validation.TaskValidationError)
    async def task_validation_error(request: Request, exc: validation.TaskValidationError):
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        logger.debug("Rejected request body: %s", exc.errors())
        return JSONResponse(status_code=400, content={"error": INVALID_BODY})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    # [health]
    @app.get("/", response_model=schemas.HealthStatus)
    def health():
        return {"status": "ok", "message": "Backend server is running"}

    # --- [CRUD API] ---
    @app.get("/tasks", response_model=List[schemas.TaskResponse], responses=_errors())
    def read_tasks(
        status: Optional[str] = None,
        priority: Optional[str] = None,
        sort: Optional[str] = None,
        store: TaskStore = Depends(get_store),
    ):
        query = TaskQuery.from_params(status=status, priority=priority, sort=sort)
        try:
            tasks = store.query(query)
        except SQLAlchemyError:
            raise _storage_failure("Failed to fetch tasks")
        return [_to_response(t) for t in tasks]

    @app.get("/tasks/counts", response_model=schemas.TaskCounts, responses=_errors())
    def count_tasks(
        store: TaskStore = Depends(get_store),
        settings: config.Settings = Depends(get_settings),
    ):
        try:
            tasks = store.query()
        except SQLAlchemyError:
            raise _storage_failure("Failed to fetch tasks")
        return task_utils.count_tasks(tasks, task_utils.now_in(settings.timezone))

    @app.post("/tasks", response_model=schemas.TaskResponse, status_code=201, responses=_errors(400))
    def create_task(task: schemas.TaskCreate, store: TaskStore = Depends(get_store)):
        title = validation.validate_title(task.title)
        priority = validation.normalize_priority(task.priority)
        try:
            new_task = store.insert(
                title=title,
                description=task.description or None,
                priority=priority,
                due_date=task.due_date or None,
            )
        except SQLAlchemyError:
            raise _storage_failure("Failed to create task")
        logger.info("Created task id=%s", new_task.id)
        return _to_response(new_task)

    @app.put("/tasks/{task_id}", response_model=schemas.TaskResponse, responses=_errors(400, 404))
    def update_task(
        task_id: str,
        payload: Any = Body(None),
        store: TaskStore = Depends(get_store),
    ):
        task_id = validation.parse_task_id(task_id)
        try:
            if store.find_by_id(task_id) is None:
                raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)

            # body shape is checked only once the task is known to exist
            try:
                changes = schemas.TaskUpdate.model_validate({} if payload is None else payload)
            except ValidationError:
                raise HTTPException(status_code=400, detail=INVALID_BODY)

            fields = changes.model_dump(exclude_unset=True)
            if "title" in fields:
                fields["title"] = validation.validate_title(fields["title"])
            if "priority" in fields:
                fields["priority"] = validation.require_priority(fields["priority"])

            updated = store.update(task_id, fields)
        except TaskNotFound:
            raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)
        except SQLAlchemyError:
            raise _storage_failure("Failed to update task")
        return _to_response(updated)

    @app.patch("/tasks/{task_id}/complete", response_model=schemas.TaskResponse, responses=_errors(400, 404))
    def toggle_task(task_id: str, store: TaskStore = Depends(get_store)):
        task_id = validation.parse_task_id(task_id)
        try:
            toggled = store.toggle_completed(task_id)
        except TaskNotFound:
            raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)
        except SQLAlchemyError:
            raise _storage_failure("Failed to toggle task completion")
        return _to_response(toggled)

    @app.delete("/tasks/{task_id}", response_model=schemas.TaskDeleted, responses=_errors(400, 404))
    def delete_task(task_id: str, store: TaskStore = Depends(get_store)):
        task_id = validation.parse_task_id(task_id)
        try:
            removed = store.delete(task_id)
        except SQLAlchemyError:
            raise _storage_failure("Failed to delete task")
        if not removed:
            raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)
        logger.info("Deleted task id=%s", task_id)
        return {"message": "Task deleted successfully", "id": task_id}

    return app


# uvicorn main:app
settings = config.load_settings()
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
