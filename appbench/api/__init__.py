"""
API package initialization.

Router modules:
- benchmark: Benchmark evaluation and reference snapshot endpoints
"""

from fastapi import APIRouter

from appbench.api.benchmark import router as benchmark_router

# Mounted under /api by appbench.main
api_router = APIRouter()

api_router.include_router(benchmark_router, tags=["benchmark"])

__all__ = [
    "api_router",
    "benchmark_router",
]
