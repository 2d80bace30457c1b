import logging
from pathlib import Path
from typing import List, Optional

import uvicorn
from fastapi import APIRouter, BackgroundTasks, Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session

from . import schemas
from .auth import get_current_admin
from .config import Settings, configure_logging
from .database import get_db, init_db, make_engine, make_session_factory
from .email_service import EmailNotifier
from .exceptions import BookingError, Unauthorized
from .services import BookingService
from .slots import DEFAULT_CATALOG, SlotCatalog

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"
PAGES_DIR = Path(__file__).parent / "pages"

router = APIRouter()


def get_booking_service(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> BookingService:
    """Booking service bound to this request's session and background tasks"""
    state = request.app.state
    return BookingService(
        db,
        catalog=state.catalog,
        notifier=state.notifier,
        dispatch=background_tasks.add_task,
    )


@router.get("/")
async def root():
    """Public booking page"""
    return FileResponse(STATIC_DIR / "index.html")


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/availability", response_model=List[schemas.SlotAvailability])
def get_availability(
    date: Optional[str] = Query(None),
    service: BookingService = Depends(get_booking_service),
):
    """Availability of every slot for a date"""
    return service.check_availability(date)


@router.post("/book", response_model=schemas.BookResponse)
def book_slot(
    booking: schemas.BookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    """Reserve a slot; the owner is emailed after the response is sent"""
    booking_id = service.create_booking(booking.date, booking.slot, **booking.customer_fields())
    return schemas.BookResponse(id=booking_id)


# Admin-only endpoints
@router.get("/admin")
@router.get("/admin.html")
async def admin_page(admin: str = Depends(get_current_admin)):
    """Admin page"""
    return FileResponse(PAGES_DIR / "admin.html")


@router.get("/admin/bookings", response_model=List[schemas.BookingResponse])
def get_admin_bookings(
    request: Request,
    date: Optional[str] = Query(None),
    include_all: bool = Query(False, alias="all"),
    admin: str = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Bookings for a date (all statuses), or upcoming active bookings"""
    catalog = request.app.state.catalog
    bookings = service.list_bookings(date=date, include_all=include_all)
    return [schemas.BookingResponse.from_booking(b, catalog) for b in bookings]


@router.post("/admin/cancel", response_model=schemas.SuccessResponse)
def cancel_booking(
    body: schemas.BookingIdRequest,
    admin: str = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Cancel a booking, freeing its slot"""
    service.cancel_booking(body.id)
    return schemas.SuccessResponse()


@router.post("/admin/complete", response_model=schemas.SuccessResponse)
def complete_booking(
    body: schemas.BookingIdRequest,
    admin: str = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Mark a booking as completed"""
    service.complete_booking(body.id)
    return schemas.SuccessResponse()


async def booking_error_handler(request: Request, exc: BookingError):
    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": 'Basic realm="admin"'}
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


def create_app(
    settings: Optional[Settings] = None,
    notifier=None,
    catalog: SlotCatalog = DEFAULT_CATALOG,
) -> FastAPI:
    """Build the application; tables are created if they don't exist"""
    settings = settings or Settings.from_env()

    engine = make_engine(settings.database_url)
    init_db(engine)

    app = FastAPI(title="Repair Booking", version="1.0.0")

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.catalog = catalog
    app.state.notifier = notifier if notifier is not None else EmailNotifier(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(router)

    # Static files
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    return app


def run():
    """Console entry point"""
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    logger.info(f"Server running at http://{settings.host}:{settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
