import logging
import uuid

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette import status

from baker_recipes.app.api.routes import api_router
from baker_recipes.app.core.config import get_settings
from baker_recipes.app.services.recipes_service import RecipeValidationError

logger = logging.getLogger(__name__)


async def validation_exception_handler(request, exc: RequestValidationError):
    request_id = str(uuid.uuid4())
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", []) if part is not None)
        msg = err.get("msg", "Invalid value")
        details.append({"field": loc or None, "message": msg})
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "validation_error",
            "message": "Invalid request payload.",
            "details": details,
            "request_id": request_id,
        },
    )


async def recipe_validation_exception_handler(request, exc: RecipeValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error_code": "invalid_recipe",
            "message": "Recipe failed validation.",
            "details": [issue.model_dump(mode="json") for issue in exc.issues],
        },
    )


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Baker Recipes", version="0.1.0")
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RecipeValidationError, recipe_validation_exception_handler)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
