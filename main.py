import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

import config
from database import (
    SUPPLIES,
    USERS,
    VOLUNTEERS,
    connect,
    create_document,
    delete_result,
    describe,
    get_db,
    get_documents,
    insert_result,
    optional_db,
    parse_object_id,
    serialize_document,
    update_result,
)
from leaderboard import leaderboard
from schemas import (
    DeleteResponse,
    InsertResponse,
    LeaderboardEntry,
    LoginPayload,
    MeResponse,
    MessageResponse,
    RegisterPayload,
    StatusResponse,
    Supply,
    SupplyPost,
    TokenResponse,
    UpdateResponse,
    User,
    Volunteer,
)
from security import create_access_token, current_user, hash_password, verify_password

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config.configure_logging()
    client = None
    app.state.db = None
    try:
        client, app.state.db = connect(config.DATABASE_URL, config.DATABASE_NAME, config.DATABASE_TIMEOUT_MS)
    except PyMongoError:
        logger.exception("Could not connect to MongoDB at startup")
    yield
    if client is not None:
        client.close()
        logger.info("MongoDB connection closed")


app = FastAPI(title="Disaster Care Hub API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=503, content={"detail": "Database unavailable"})


@app.get("/", response_model=StatusResponse)
def read_root():
    return {"message": "Server is running smoothly", "timestamp": datetime.now(timezone.utc)}


@app.get("/test")
def test_database(db: Optional[Database] = Depends(optional_db)):
    return describe(db)


# Auth routes
@app.post("/api/v1/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterPayload, db: Database = Depends(get_db)):
    user = User(
        email=payload.email,
        password=hash_password(payload.password),
        name=payload.name,
        role=payload.role,
        image=payload.image,
    )
    try:
        create_document(db, USERS, user)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists")
    logger.info("Registered %s user %s", payload.role, payload.email)
    return {"success": True, "message": "User registered successfully"}


@app.post("/api/v1/login", response_model=TokenResponse)
def login(payload: LoginPayload, db: Database = Depends(get_db)):
    user = db[USERS].find_one({"email": payload.email})
    if not user or not verify_password(payload.password, user.get("password", "")):
        logger.info("Failed login for %s", payload.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    token = create_access_token(user["email"])
    return {"success": True, "message": "Login successful", "token": token}


@app.get("/api/v1/me", response_model=MeResponse)
def me(user=Depends(current_user)):
    return {
        "id": str(user.get("_id")),
        "email": user.get("email"),
        "name": user.get("name"),
        "role": user.get("role"),
        "image": user.get("image"),
    }


# Users
@app.get("/api/v1/users")
def list_users(db: Database = Depends(get_db)):
    return get_documents(db, USERS)


@app.get("/api/v1/users/{email}")
def get_user(email: str, db: Database = Depends(get_db)):
    user = db[USERS].find_one({"email": email})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return serialize_document(user)


# Volunteers
@app.post("/create-volunteer", response_model=InsertResponse, status_code=status.HTTP_201_CREATED)
def create_volunteer(payload: Volunteer, db: Database = Depends(get_db)):
    try:
        result = create_document(db, VOLUNTEERS, payload)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exist!")
    logger.info("Volunteer %s created", payload.email)
    return insert_result(result)


# Supplies
@app.post("/create-supply", response_model=InsertResponse, status_code=status.HTTP_201_CREATED)
def create_supply(payload: Supply, db: Database = Depends(get_db)):
    result = create_document(db, SUPPLIES, payload)
    logger.info("Supply %s created by %s", result.inserted_id, payload.donatedBy)
    return insert_result(result)


@app.get("/supplies")
def list_supplies(limit: Optional[int] = Query(None, ge=0), db: Database = Depends(get_db)):
    return get_documents(db, SUPPLIES, limit=limit)


def _find_supply(supply_id: str, db: Database) -> dict:
    supply = db[SUPPLIES].find_one({"_id": parse_object_id(supply_id, "supply id")})
    if not supply:
        raise HTTPException(status_code=404, detail="Supply not found")
    return serialize_document(supply)


@app.get("/supply/{supply_id}")
def get_supply(supply_id: str, db: Database = Depends(get_db)):
    return _find_supply(supply_id, db)


@app.get("/supplies/{supply_id}")
def get_supply_alias(supply_id: str, db: Database = Depends(get_db)):
    return _find_supply(supply_id, db)


@app.patch("/supply/{supply_id}", response_model=UpdateResponse)
def add_supply_post(supply_id: str, post: SupplyPost, db: Database = Depends(get_db)):
    oid = parse_object_id(supply_id, "supply id")
    now = datetime.now(timezone.utc)
    new_post = post.model_dump(exclude_none=True)
    new_post["postedAt"] = now
    result = db[SUPPLIES].update_one(
        {"_id": oid},
        {"$push": {"post": new_post}, "$set": {"updated_at": now}, "$setOnInsert": {"created_at": now}},
        upsert=True,
    )
    logger.info("Post appended to supply %s", supply_id)
    return update_result(result)


@app.get("/leaderboard", response_model=List[LeaderboardEntry], response_model_exclude_none=True)
def get_leaderboard(db: Database = Depends(get_db)):
    return leaderboard(db)


@app.delete("/delete-supply/{supply_id}", response_model=DeleteResponse)
def delete_supply(supply_id: str, db: Database = Depends(get_db)):
    result = db[SUPPLIES].delete_one({"_id": parse_object_id(supply_id, "supply id")})
    if result.deleted_count:
        logger.info("Supply %s deleted", supply_id)
    return delete_result(result)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
