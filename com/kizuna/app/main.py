import logging
import time
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from com.kizuna.app.config.config import Config
from com.kizuna.app.common.network_responses import NetworkResponse, HTTPCode
from com.kizuna.app.common.memory_log_handler import MemoryLogHandler
from com.kizuna.app.common.service_container import ServiceContainer
from com.kizuna.app.services.approval_services.approval_workflow.approval_workflow_router import router as approval_router
from com.kizuna.app.services.conversation_services.conversation_log.conversation_log_router import router as conversation_router
from com.kizuna.app.services.realtime_services.complaint_tracker.complaint_tracker_router import router as complaint_router
from com.kizuna.app.services.realtime_services.realtime_event_bus.realtime_event_bus_router import router as realtime_router
from com.kizuna.app.services.triage_services.support_pipeline.support_pipeline_router import router as pipeline_router

logger = logging.getLogger(__name__)

def configure_logging(config: Config) -> MemoryLogHandler:
    """Console output plus an in-memory buffer served by /logs"""
    memory_log_handler = MemoryLogHandler(max_logs=config.log_buffer_size)
    memory_log_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s')
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.log_level, logging.DEBUG))
    root_logger.handlers.clear()
    root_logger.addHandler(logging.StreamHandler())
    root_logger.addHandler(memory_log_handler)
    return memory_log_handler

def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    config = services.config if services is not None else Config()
    memory_log_handler = configure_logging(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.services is None:
            app.state.services = ServiceContainer(config)
        await app.state.services.init()
        logger.info("Application started")
        yield
        await app.state.services.shutdown()
        logger.info("Application stopped")

    app = FastAPI(
        title="Kizuna Support Core",
        description="Multilingual support triage, approvals and realtime notifications",
        version="1.0.0",
        lifespan=lifespan
    )
    # built in the lifespan unless injected
    app.state.services = services
    app.state.memory_log_handler = memory_log_handler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report pydantic validation errors in the NetworkResponse envelope"""
        start_time = time.time()
        logger.warning(f"Validation error on {request.url}: {exc.errors()}")

        first_error = exc.errors()[0] if exc.errors() else {}
        field_name = " -> ".join(str(loc) for loc in first_error.get("loc", [])[1:])
        error_msg = first_error.get("msg", "Validation error")
        if first_error.get("type") == "missing":
            error_msg = f"Required field '{field_name}' is missing"
        elif first_error.get("type") == "string_too_short":
            error_msg = f"Field '{field_name}' cannot be empty"
        elif first_error.get("type") == "enum":
            error_msg = f"Invalid value for '{field_name}'"

        return NetworkResponse().json_response(
            http_code=HTTPCode.UNPROCESSABLE_ENTITY,
            error_message=error_msg,
            resource=request.url.path,
            start_time=start_time
        )

    app.include_router(pipeline_router)
    app.include_router(approval_router)
    app.include_router(conversation_router)
    app.include_router(realtime_router)
    app.include_router(complaint_router)

    @app.get("/")
    async def root():
        start_time = time.time()
        return NetworkResponse().success_response(
            http_code=HTTPCode.SUCCESS,
            message="API is running",
            data={"status": "active"},
            resource="/",
            start_time=start_time
        )

    @app.get("/health")
    async def health_check(request: Request):
        start_time = time.time()
        container: ServiceContainer = request.app.state.services
        return NetworkResponse().success_response(
            http_code=HTTPCode.SUCCESS,
            message="Service is healthy",
            data={
                "status": "healthy",
                "connections": container.event_bus.get_connection_count(),
                "pendingApprovals": len(container.approval_workflow.list_pending()),
            },
            resource="/health",
            start_time=start_time
        )

    @app.get("/logs")
    async def get_application_logs(limit: int = 100, level: Optional[str] = None, logger_name: Optional[str] = None):
        """Get application logs from memory"""
        start_time = time.time()
        return NetworkResponse().success_response(
            http_code=HTTPCode.SUCCESS,
            message="Application logs retrieved successfully",
            data={
                "logs": memory_log_handler.get_logs(limit, level=level, logger_prefix=logger_name),
                "memory_info": memory_log_handler.get_memory_usage_info()
            },
            resource="/logs",
            start_time=start_time
        )

    @app.post("/logs/clear")
    async def clear_application_logs():
        start_time = time.time()
        memory_log_handler.clear_logs()
        return NetworkResponse().success_response(
            http_code=HTTPCode.SUCCESS,
            message="Application logs cleared successfully",
            data={"cleared": True},
            resource="/logs/clear",
            start_time=start_time
        )

    logger.info("FastAPI application created")
    return app

app = create_app()
