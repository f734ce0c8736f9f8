# Routes package __init__.py - re-exports routers for main.py convenience
from .texts import router as texts_router
from .review import router as review_router

__all__ = ['texts_router', 'review_router']
