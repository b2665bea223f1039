"""
Move Masters HTTP API - Dependencies
======================================
Injected collaborators for handler wiring.
"""

from __future__ import annotations

from dataclasses import dataclass

from engines.relocation.services import JobDesk


@dataclass(frozen=True)
class HttpApiDependencies:
    job_desk: JobDesk

    def __post_init__(self):
        if not isinstance(self.job_desk, JobDesk):
            raise ValueError("job_desk must be JobDesk.")
