from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional

from api import monitor as monitor_api
from config import Settings, load_settings
from services.site_monitor import SiteMonitor


def create_app(monitor: Optional[SiteMonitor] = None, settings: Optional[Settings] = None) -> FastAPI:
    app = FastAPI(
        title="Uptime Monitor API",
        description="Periodically probes registered sites and records their status transitions.",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.state.monitor = monitor or SiteMonitor(settings or load_settings())

    @app.on_event("startup")
    async def startup_event():
        """Seed configured sites and start the periodic checks."""
        print("Application starting up...")
        await app.state.monitor.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.monitor.stop()

    app.include_router(monitor_api.router, prefix="/api")

    @app.get("/", tags=["Root"])
    def read_root():
        return {"status": "ok", "message": "Welcome to the Uptime Monitor API"}

    @app.get("/health")
    def health_check():
        """
        Health check endpoint for deployment monitoring
        """
        scheduler = app.state.monitor.scheduler
        return {
            "status": "healthy",
            "service": "uptime-monitor",
            "scheduler_running": scheduler.running,
            "sites": len(app.state.monitor.registry),
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=app.state.monitor.settings.port)
