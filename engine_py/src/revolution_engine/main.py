"""FastAPI main application for the Revolution game backend"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from .config import ServerConfig
from .errors import PLAYER_NOT_FOUND, ROOM_EXISTS, ROOM_NOT_FOUND, VERSION_CONFLICT, GameError
from .events import (
    ActionRequest,
    AddBotsRequest,
    CreateGameRequest,
    HandoffRequest,
    JoinRequest,
    StartRequest,
)
from .serialization import get_public_room_info
from .service import GameService

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ROOM_NOT_FOUND: 404,
    PLAYER_NOT_FOUND: 404,
    VERSION_CONFLICT: 409,
    ROOM_EXISTS: 409,
}


def create_app(service: Optional[GameService] = None, config: Optional[ServerConfig] = None) -> FastAPI:
    config = config or ServerConfig.from_env()
    service = service or GameService(bot_step_limit=config.bot_step_limit)

    app = FastAPI(
        title="Revolution Card Game API",
        version="1.0.0",
        default_response_class=ORJSONResponse,
    )
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GameError)
    async def game_error_handler(request: Request, exc: GameError):
        status = ERROR_STATUS.get(exc.code, 400)
        logger.info(f"{request.method} {request.url.path} -> {status} {exc.code}")
        return ORJSONResponse(status_code=status, content={"code": exc.code, "message": exc.message})

    @app.get("/")
    def root():
        return {"message": "Revolution Card Game API", "version": "1.0.0"}

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    @app.post("/games", status_code=201)
    def create(body: CreateGameRequest):
        state = service.create_game(body.settings, body.code)
        return get_public_room_info(state)

    @app.get("/games/{code}")
    def room_info(code: str):
        return get_public_room_info(service.get_state(code))

    @app.post("/games/{code}/join")
    def join(code: str, body: JoinRequest):
        state, seat_id = service.join(code, body.person_id, body.name)
        return {"seat_id": seat_id, "state": service.view(state.code, body.person_id)}

    @app.post("/games/{code}/bots")
    def add_bots(code: str, body: AddBotsRequest):
        return get_public_room_info(service.add_bot(code, body.count))

    @app.post("/games/{code}/start")
    def start(code: str, body: Optional[StartRequest] = None):
        service.start(code, body.seed if body else None)
        return service.view(code)

    @app.post("/games/{code}/next-round")
    def next_round(code: str, body: Optional[StartRequest] = None):
        service.next_round(code, body.seed if body else None)
        return service.view(code)

    @app.get("/games/{code}/state")
    def state(code: str, person_id: Optional[str] = None):
        return service.view(code, person_id)

    @app.post("/games/{code}/actions")
    def action(code: str, body: ActionRequest):
        if body.type == "play":
            service.play(code, body.person_id, body.cards)
        elif body.type == "pass":
            service.pass_turn(code, body.person_id)
        else:
            service.trade(code, body.person_id, body.cards)
        return service.view(code, body.person_id)

    @app.post("/games/{code}/tick")
    def tick(code: str):
        service.run_bots(code)
        return service.view(code)

    @app.post("/games/{code}/handoff")
    def handoff(code: str, body: HandoffRequest):
        service.handoff(code, body.person_id)
        return service.view(code)

    return app


_config = ServerConfig.from_env()
logging.basicConfig(level=_config.log_level.upper())

app = create_app(config=_config)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=_config.host, port=_config.port)
