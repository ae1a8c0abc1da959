"""
FastAPI application entry point
Main application initialization
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.config import AUTO_CREATE_TABLES, DEBUG, MODE, get_cms_backend
from app.common.errors import CMSError
from app.middleware.cors import setup_cors
from app.database import check_db_connection, init_db, close_db
from app.dependencies import init_repository, reset_repository
import logging

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="RE_CLAIM.D CMS API",
    description="Fashion brand site and lightweight CMS",
    version="0.1.0",
    debug=DEBUG,
)

# Setup CORS
setup_cors(app)


@app.exception_handler(CMSError)
async def cms_error_handler(request: Request, exc: CMSError):
    """Render repository and auth errors as {"detail", "code"} JSON"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@app.on_event("startup")
async def startup_event():
    """Create the content repository (and tables, when asked to)"""
    logger.info(f"Starting application in {MODE} mode")
    backend_name = get_cms_backend()
    if backend_name == "database" and AUTO_CREATE_TABLES:
        await init_db()
    repository = init_repository()
    if backend_name == "memory":
        from app.apps.cms.repository.seed import seed_default_content
        await seed_default_content(repository)
    logger.info("Application started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """Flush pending writes and close database connections on shutdown"""
    logger.info("Shutting down application")
    await reset_repository()
    await close_db()
    logger.info("Application shut down successfully")


@app.get("/")
async def root():
    """Root endpoint - health check"""
    return JSONResponse({
        "message": "RE_CLAIM.D CMS API",
        "version": "0.1.0",
        "mode": MODE,
        "status": "running"
    })


@app.get("/health")
async def health_check():
    """Health check endpoint; pings the database when it backs the content store"""
    backend = get_cms_backend()
    payload = {"status": "healthy", "mode": MODE, "backend": backend}
    if backend == "database":
        payload["database"] = "connected" if await check_db_connection() else "unreachable"
        if payload["database"] != "connected":
            payload["status"] = "unhealthy"
            return JSONResponse(payload, status_code=503)
    return JSONResponse(payload)


from app.apps.authentication.router import router as auth_router, admin_router as auth_admin_router
app.include_router(auth_router, prefix="/api/auth", tags=["authentication"])
app.include_router(auth_admin_router, prefix="/api/admin", tags=["admin"])

from app.apps.cms.router import router as cms_router, admin_router as cms_admin_router
app.include_router(cms_router, prefix="/api/cms", tags=["cms"])
app.include_router(cms_admin_router, prefix="/api/admin", tags=["admin"])

from app.apps.site.router import router as site_router, admin_router as site_admin_router
app.include_router(site_router, prefix="/api/site", tags=["site"])
app.include_router(site_admin_router, prefix="/api/admin", tags=["admin"])


if __name__ == "__main__":
    import uvicorn
    import os
    port = int(os.getenv("PORT", "5000"))
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=port,
        reload=DEBUG,
        log_level="debug" if DEBUG else "info"
    )
