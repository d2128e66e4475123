import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, Response
from prometheus_fastapi_instrumentator import Instrumentator
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
import uvicorn

from realstay.config import get_settings
from realstay.cors import NoContentPreflightCORSMiddleware
from realstay.logging_middleware import add_audit_middleware
from realstay.rate_limit import apply_rate_limiter, limiter
from realstay.schemas import ServicePing, VerifyRequest
from realstay.verification import verify_review_signature

settings = get_settings()
logger = logging.getLogger(__name__)

MISSING_FIELDS_ERROR = "Missing fields: message, signature, wallet_address required"


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Review Signature Verifier", version="0.1.0")
    fastapi_app.add_middleware(
        NoContentPreflightCORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=settings.cors_allow_headers,
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, "verifier")
    if settings.metrics_enabled:
        Instrumentator().instrument(fastapi_app).expose(fastapi_app)
    return fastapi_app


app = create_app()


@app.get("/health", response_model=ServicePing, tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "verifier"}


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={**extra, "error": message})


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


@app.options("/verify-review-signature", include_in_schema=False)
def verify_review_signature_preflight() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.api_route(
    "/verify-review-signature",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
def verify_review_signature_wrong_method() -> JSONResponse:
    return _error(status.HTTP_405_METHOD_NOT_ALLOWED, "Method not allowed")


@app.post("/verify-review-signature", tags=["signatures"])
@limiter.limit("600/minute")
async def verify_review_signature_endpoint(request: Request) -> JSONResponse:
    """Check a review's wallet signature against its claimed address.

    200 ``{valid, recoveredAddress?}`` when a comparison was made,
    200 ``{valid: false, error}`` when the signature is unrecoverable,
    400 ``{error}`` for missing or invalid fields, 500 ``{error}`` otherwise.
    """
    try:
        body = await request.json()
    except ValueError:
        return _error(status.HTTP_400_BAD_REQUEST, "Request body must be a JSON object")

    if not isinstance(body, dict) or not all(body.get(key) for key in ("message", "signature", "wallet_address")):
        return _error(status.HTTP_400_BAD_REQUEST, MISSING_FIELDS_ERROR)

    try:
        verify_request = VerifyRequest.model_validate(body)
    except ValidationError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, f"Invalid request: {_describe(exc)}")

    try:
        result = await run_in_threadpool(
            verify_review_signature,
            verify_request.message,
            verify_request.signature,
            verify_request.wallet_address,
            settings.newline_fallback_enabled,
        )
    except Exception as exc:
        logger.exception("Unexpected failure verifying signature for %s", verify_request.wallet_address)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Unknown error")

    return JSONResponse(status_code=status.HTTP_200_OK, content=result.to_payload())


def run() -> None:
    uvicorn.run(app, host="0.0.0.0", port=settings.verifier_service_port)


if __name__ == "__main__":
    run()
