# File: src/chainforensics/api/server.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .routes import forensics_router
from ..engine import ForensicsEngine
from ..exceptions import ForensicsError

def create_app(engine: ForensicsEngine) -> FastAPI:
    app = FastAPI(title="chainforensics API")
    app.state.engine = engine
    
    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ForensicsError)
    async def forensics_error_handler(request: Request, exc: ForensicsError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})
    
    # Include routers
    app.include_router(forensics_router)
    
    return app
