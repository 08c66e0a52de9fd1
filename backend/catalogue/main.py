from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database
from typing import Optional
import logging, re, datetime

import uvicorn

from catalogue.config import Settings, load_settings
from catalogue.database import PRODUCTS, USERS, connect, is_valid_id, is_finite_json, strip_ids, to_public
from catalogue.models import LoginRequest, RegisterRequest, TokenClaims, User
from catalogue.security import create_access_token, hash_password, verify_password, verify_token

logger = logging.getLogger("backend")

bearer_scheme = HTTPBearer(auto_error=False)

# plain decimal literals only, no underscores, hex or "nan"
PRICE_PATTERN = re.compile(r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|Infinity)")


# 🧩 DEPENDENCIES
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Database:
    return request.app.state.db


def require_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> TokenClaims:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Unauthorized")

    result = verify_token(credentials.credentials, settings.jwt_secret_key)
    if not result.ok:
        logger.info("🚫 Rejected %s token", result.error)
        raise HTTPException(status_code=403, detail="Invalid token")

    request.state.user = result.claims
    return result.claims


async def invalid_body_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": "Invalid request body"})


def internal_error(what: str, e: Exception) -> HTTPException:
    logger.error("❌ %s failed: %s", what, e, exc_info=e)
    return HTTPException(status_code=500, detail="Internal Server Error")


# 🚀 FASTAPI SETUP
def create_app(settings: Settings, db: Optional[Database] = None) -> FastAPI:
    app = FastAPI()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, invalid_body_handler)

    app.state.settings = settings
    app.state.db = db if db is not None else connect(settings)

    @app.get("/", response_class=PlainTextResponse)
    def home():
        return "Hello world"

    # 👤 REGISTER
    @app.post("/user", status_code=201)
    def register(payload: Optional[RegisterRequest] = None, db: Database = Depends(get_db)):
        if payload is None or not payload.name or not payload.email or not payload.password:
            raise HTTPException(status_code=400, detail="Missing fields")

        try:
            user = User(
                name=payload.name,
                email=payload.email,
                password=hash_password(payload.password),
                createdAt=datetime.datetime.now(datetime.timezone.utc),
            )
            doc = user.model_dump()
            db[USERS].insert_one(doc)
        except Exception as e:
            raise internal_error("Registration", e)

        logger.info("👤 Registered %s", payload.email)
        return to_public(doc)

    # 🔐 LOGIN
    @app.post("/login")
    def login(
        payload: Optional[LoginRequest] = None,
        db: Database = Depends(get_db),
        settings: Settings = Depends(get_settings),
    ):
        if payload is None or not payload.email or not payload.password:
            raise HTTPException(status_code=400, detail="Missing login details")

        try:
            user = db[USERS].find_one({"email": payload.email})
            valid = user is not None and verify_password(payload.password, user["password"])
        except Exception as e:
            raise internal_error("Login", e)

        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        if not valid:
            raise HTTPException(status_code=401, detail="Incorrect email or password")

        token = create_access_token(user["email"], settings.jwt_secret_key)
        return {"message": "Login Successful", "token": token}

    # 📦 CREATE PRODUCT (protected)
    @app.post("/products", status_code=201)
    def create_product(
        payload: Optional[dict] = Body(default=None),
        claims: TokenClaims = Depends(require_token),
        db: Database = Depends(get_db),
    ):
        if not payload or not payload.get("name") or payload.get("price") is None:
            raise HTTPException(status_code=400, detail="Product details are required")
        if not is_finite_json(payload):
            raise HTTPException(status_code=400, detail="Invalid request body")

        product = strip_ids(payload)
        try:
            db[PRODUCTS].insert_one(product)
        except Exception as e:
            raise internal_error("Product create", e)

        logger.info("📦 %s created product %s", claims.email, product["_id"])
        return to_public(product)

    # 📦 LIST PRODUCTS
    @app.get("/products")
    def list_products(db: Database = Depends(get_db)):
        try:
            return [to_public(d) for d in db[PRODUCTS].find()]
        except Exception as e:
            raise internal_error("Product list", e)

    # 📊 COUNT PRODUCTS OVER PRICE
    @app.get("/products/count/{price}")
    def count_over_price(price: str, db: Database = Depends(get_db)):
        if not PRICE_PATTERN.fullmatch(price.strip()):
            raise HTTPException(status_code=400, detail="Invalid price parameter")
        threshold = float(price)

        try:
            counts = list(db[PRODUCTS].aggregate([
                {"$match": {"price": {"$gt": threshold}}},
                {"$count": "productCount"},
            ]))
        except Exception as e:
            raise internal_error("Product count", e)

        # the server emits no document at all when nothing matches
        return [c for c in counts if c.get("productCount")]

    # 📦 GET PRODUCT
    @app.get("/products/{id}")
    def get_product(id: str, db: Database = Depends(get_db)):
        if not is_valid_id(id):
            raise HTTPException(status_code=400, detail="Invalid ID")

        try:
            product = db[PRODUCTS].find_one({"_id": ObjectId(id)})
        except Exception as e:
            raise internal_error("Product get", e)

        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return to_public(product)

    # ✏️ UPDATE PRODUCT
    @app.patch("/products/{id}")
    def update_product(id: str, payload: Optional[dict] = Body(default=None), db: Database = Depends(get_db)):
        if not is_valid_id(id):
            raise HTTPException(status_code=400, detail="Invalid ID")

        changes = strip_ids(payload or {})
        if not is_finite_json(changes):
            raise HTTPException(status_code=400, detail="Invalid request body")
        try:
            if changes:
                product = db[PRODUCTS].find_one_and_update(
                    {"_id": ObjectId(id)},
                    {"$set": changes},
                    return_document=ReturnDocument.AFTER,
                )
            else:
                product = db[PRODUCTS].find_one({"_id": ObjectId(id)})
        except Exception as e:
            raise internal_error("Product update", e)

        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return to_public(product)

    # ❌ DELETE PRODUCT
    @app.delete("/products/{id}")
    def delete_product(id: str, db: Database = Depends(get_db)):
        if not is_valid_id(id):
            raise HTTPException(status_code=400, detail="Invalid ID")

        try:
            product = db[PRODUCTS].find_one_and_delete({"_id": ObjectId(id)})
        except Exception as e:
            raise internal_error("Product delete", e)

        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return {"message": "Product deleted successfully"}

    return app


# SERVER START
def run():
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings)
    logger.info("🚀 Server running on port %s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
