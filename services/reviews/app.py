from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import func
from sqlalchemy.orm import Session
import uvicorn

from realstay.config import get_settings
from realstay.database import Base, engine, get_db
from realstay.logging_middleware import add_audit_middleware
from realstay.models import Review
from realstay.rate_limit import apply_rate_limiter, limiter
from realstay.schemas import HotelReviewStats, ReviewCreate, ReviewRead, ServicePing, SignatureCheckRead
from realstay.verification import verify_stored_review

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Reviews Service", version="0.3.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, "reviews")
    if settings.metrics_enabled:
        Instrumentator().instrument(fastapi_app).expose(fastapi_app)
    return fastapi_app


app = create_app()


@app.get("/health", response_model=ServicePing, tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "reviews"}


def _get_review_or_404(db: Session, review_id: str) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    return review


@app.post("/reviews", response_model=ReviewRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def submit_review(
    request: Request,
    review_in: ReviewCreate,
    db: Session = Depends(get_db),
) -> Review:
    # The comment is kept byte-for-byte; the signature covers it.
    review = Review(
        user_id=review_in.user_id,
        hotel_id=review_in.hotel_id,
        rating=review_in.rating,
        comment=review_in.comment,
        **review_in.signed().as_columns(),
    )
    db.add(review)
    db.commit()
    db.refresh(review)
    return review


@app.get("/reviews/hotel/{hotel_id}", response_model=List[ReviewRead])
@limiter.limit("60/minute")
def hotel_reviews(request: Request, hotel_id: str, db: Session = Depends(get_db)) -> List[Review]:
    return db.query(Review).filter(Review.hotel_id == hotel_id).order_by(Review.created_at.desc()).all()


@app.get("/reviews/hotel/{hotel_id}/stats", response_model=HotelReviewStats)
@limiter.limit("60/minute")
def hotel_review_stats(request: Request, hotel_id: str, db: Session = Depends(get_db)) -> dict:
    stats = db.query(
        func.avg(Review.rating).label("average_rating"),
        func.count(Review.id).label("total_reviews"),
    ).filter(Review.hotel_id == hotel_id).first()

    return {
        "hotel_id": hotel_id,
        "average_rating": round(float(stats.average_rating), 2) if stats.average_rating else 0.0,
        "total_reviews": stats.total_reviews,
    }


@app.get("/reviews/{review_id}", response_model=ReviewRead)
@limiter.limit("60/minute")
def get_review(request: Request, review_id: str, db: Session = Depends(get_db)) -> Review:
    return _get_review_or_404(db, review_id)


@app.get(
    "/reviews/{review_id}/signature",
    response_model=SignatureCheckRead,
    response_model_exclude_none=True,
)
@limiter.limit("120/minute")
def review_signature(request: Request, review_id: str, db: Session = Depends(get_db)) -> SignatureCheckRead:
    """Verify a stored review's signature from its stored fields."""
    review = _get_review_or_404(db, review_id)
    signature_status, result = verify_stored_review(review, settings.newline_fallback_enabled)
    return SignatureCheckRead(
        review_id=review.id,
        status=signature_status,
        recovered_address=result.recovered_address if result else None,
        error=result.error if result else None,
    )


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=settings.reviews_service_port)


if __name__ == "__main__":
    run()
