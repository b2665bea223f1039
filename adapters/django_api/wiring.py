"""
Move Masters Django Adapter Wiring
====================================
Constructs HttpApiDependencies for local/staging live runs.

This module is adapter-only glue:
- one process-wide JobDesk over a single in-memory job
- tariff/payout configuration read from settings.MOVEMASTERS
- no persistence (state is lost on restart)
"""

from __future__ import annotations

import threading

from django.conf import settings

from core.config.rules import InMemoryConfigStore
from core.http_api.dependencies import HttpApiDependencies
from core.time.clock import SystemClock
from engines.relocation.models import Address, InventoryItem, Job
from engines.relocation.services import JobDesk
from engines.relocation.tariff import ChargeLedger


DEMO_JOB_ID = "ORD-99321"

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: HttpApiDependencies | None = None


def build_demo_job() -> Job:
    """The freshly dispatched job the live adapter starts from."""
    return Job.create(
        job_id=DEMO_JOB_ID,
        origin=Address(
            name="Jonathan Wick",
            street="123 Manhattan Skyline Dr",
            city_state_zip="New York, NY 10001",
            phone="(212) 555-0198",
        ),
        destination=Address(
            name="Jonathan Wick",
            street="456 Continental Ave",
            city_state_zip="Jersey City, NJ 07302",
            phone="(212) 555-0198",
        ),
        ledger=ChargeLedger(
            weight_base_lbs=2000,
            weight_base_rate="0.50",
            cubic_estimate_cu_ft=450,
            cubic_base_cu_ft=450,
            cubic_base_rate="6.50",
            hourly_part1_start="08:00 AM",
            hourly_part1_end="12:00 PM",
            hourly_men=3,
            hourly_trucks=1,
            hourly_rate=150,
            packing_materials_total=120,
            fuel_surcharge=85,
            stairs_origin=25,
            stairs_dest=25,
            partial_payments=(500,),
        ),
        inventory=(
            InventoryItem("1", "Vintage Armchair", "Pre-existing scratch on leg"),
            InventoryItem("2", '75" OLED TV', "Mint"),
            InventoryItem("3", "Dining Table", "Minor scratches"),
        ),
    )


def _create_dependencies() -> HttpApiDependencies:
    config = InMemoryConfigStore.from_settings(getattr(settings, "MOVEMASTERS", {}))
    desk = JobDesk(build_demo_job(), clock=SystemClock(), config=config)
    return HttpApiDependencies(job_desk=desk)


def build_dependencies() -> HttpApiDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES


def reset_dependencies() -> None:
    """Drop the wired desk so the next request starts from the demo job."""
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = None
