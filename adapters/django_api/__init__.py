"""
Move Masters Django HTTP adapter.
Thin framework glue over core/http_api handlers.
"""

from adapters.django_api.wiring import (
    DEMO_JOB_ID,
    build_demo_job,
    build_dependencies,
    reset_dependencies,
)

__all__ = [
    "DEMO_JOB_ID",
    "build_demo_job",
    "build_dependencies",
    "reset_dependencies",
]
