import json
import os
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware

from .middleware.auth import AuthMiddleware
from .database.connection import connect_to_mongo, close_mongo_connection, get_database
from .services.ws_manager import ws_manager
from .services.attempt_service import attempt_manager, AttemptNotFoundError
from .routers import auth, quiz, question, participant, attempt, leaderboard


# --------------------------------------------------------
# LIFESPAN
# --------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()

    yield

    # Countdowns and screens go before the database they write to
    await attempt_manager.shutdown()
    await ws_manager.close_all()
    await close_mongo_connection()


app = FastAPI(title="Quiz Kiosk", lifespan=lifespan)


# --------------------------------------------------------
# CORS (kiosk frontend)
# --------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------------------------------------------------------
# AUTH MIDDLEWARE
# --------------------------------------------------------
auth_middleware = AuthMiddleware()

@app.middleware("http")
async def auth_middleware_wrapper(request: Request, call_next):
    return await auth_middleware(request, call_next)


# --------------------------------------------------------
# SECURITY HEADERS
# --------------------------------------------------------
@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    response = await call_next(request)

    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["X-Frame-Options"] = "SAMEORIGIN"

    return response


# --------------------------------------------------------
# ROUTERS
# --------------------------------------------------------
app.include_router(auth.router)
app.include_router(quiz.router)
app.include_router(question.router)
app.include_router(participant.router)
app.include_router(attempt.router)
app.include_router(leaderboard.router)


# --------------------------------------------------------
# HEALTH CHECK
# --------------------------------------------------------
@app.get("/health")
async def health_check():
    mongodb_status = "disconnected"
    try:
        database = get_database()
        if database is not None:
            await database.command("ping")
            mongodb_status = "connected"
    except Exception as e:
        mongodb_status = f"error: {str(e)}"

    return {
        "status": "ok",
        "time": datetime.now().isoformat(),
        "database": {"mongodb": mongodb_status},
        "websockets": ws_manager.get_all_stats(),
        "liveAttempts": len(attempt_manager.attempts),
    }


# --------------------------------------------------------
# 🏆 LEADERBOARD WEBSOCKET (kiosk screens)
# --------------------------------------------------------
@app.websocket("/ws/leaderboard")
async def websocket_leaderboard(websocket: WebSocket):
    """
    Live leaderboard. Query params:
      - quizId: quiz filter ("all" by default)
      - participantName: participant to highlight
    Client messages: "ping" or {"type": "filter", "quizId": "..."}
    """
    query_params = dict(websocket.query_params)
    await ws_manager.connect_leaderboard(
        websocket,
        quiz_id=query_params.get("quizId"),
        participant_name=query_params.get("participantName"),
    )

    try:
        while True:
            data = await websocket.receive_text()

            if data == "ping":
                await websocket.send_text("pong")
            elif data.startswith("{"):
                try:
                    msg = json.loads(data)
                except json.JSONDecodeError:
                    continue
                if msg.get("type") == "filter":
                    await ws_manager.set_filter(websocket, msg.get("quizId"))
    except WebSocketDisconnect:
        pass
    finally:
        ws_manager.disconnect_leaderboard(websocket)


# --------------------------------------------------------
# ⏱️ ATTEMPT WEBSOCKET (countdown ticks)
# --------------------------------------------------------
@app.websocket("/ws/attempts/{attempt_id}")
async def websocket_attempt(websocket: WebSocket, attempt_id: str):
    """
    Streams countdown ticks and the final result of one attempt.
    Closing the socket does not cancel the attempt.
    """
    await websocket.accept()

    try:
        session = attempt_manager.get(attempt_id)
    except AttemptNotFoundError:
        await websocket.send_json({"type": "error", "message": "Attempt not found"})
        await websocket.close(code=4404)
        return

    async def forward(channel: str, change: dict):
        await websocket.send_json(jsonable_encoder(change))

    unsubscribe = attempt_manager.subscribe(attempt_id, forward)
    try:
        await websocket.send_json(jsonable_encoder({"type": "state", "attempt": session.to_public_dict()}))
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("quiz_kiosk.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "3001")))
