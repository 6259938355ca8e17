"""
Booking service wiring.
Builds the repository, availability engine and reservation writer from an
explicit configuration mapping, once per application.
"""

from dataclasses import dataclass

from flask import current_app

from .availability import AvailabilityEngine
from .memory_repository import MemoryReservationRepository
from .repository import ReservationRepository
from .reservation_writer import ReservationWriter
from .sqlite_repository import SQLiteReservationRepository

REPOSITORY_BACKENDS = ('sqlite', 'memory')


@dataclass
class BookingServices:
    """The booking core as configured for one application."""

    repository: ReservationRepository
    engine: AvailabilityEngine
    writer: ReservationWriter


def build_repository(backend: str) -> ReservationRepository:
    """
    Create the repository variant named by REPOSITORY_BACKEND.

    Raises:
        ValueError: For an unknown backend name
    """
    if backend == 'sqlite':
        return SQLiteReservationRepository()
    if backend == 'memory':
        return MemoryReservationRepository()
    raise ValueError(f'Unknown REPOSITORY_BACKEND {backend!r}, expected one of {REPOSITORY_BACKENDS}')


def build_services(config, repository: ReservationRepository = None) -> BookingServices:
    """
    Assemble the booking core.

    Args:
        config: Mapping with REPOSITORY_BACKEND and RESERVATION_RESTRICTION_ID
        repository: Use this repository instead of building one

    Returns:
        BookingServices
    """
    if repository is None:
        repository = build_repository(config.get('REPOSITORY_BACKEND', 'sqlite'))
    engine = AvailabilityEngine(repository)
    writer = ReservationWriter(
        repository,
        engine,
        restriction_id=config.get('RESERVATION_RESTRICTION_ID', 1)
    )
    return BookingServices(repository=repository, engine=engine, writer=writer)


def init_app(app, repository: ReservationRepository = None):
    """Attach the booking services to app.extensions['booking']."""
    app.extensions['booking'] = build_services(app.config, repository)


def get_services() -> BookingServices:
    """Booking services of the current application."""
    return current_app.extensions['booking']
