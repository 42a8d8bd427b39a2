from .forensics import router as forensics_router

__all__ = ['forensics_router']
