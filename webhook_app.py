#Description: FastAPI inbound layer: webhook receiver and recent signals/trades endpoints.
import json
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from models.schemas import SignalOut, TradeOut, WebhookOutcome
from utils.context import AppContext, get_app_context
from utils.errors import AuthError, EncodingError, PersistenceError
from utils.logging import logger


def create_app(ctx: AppContext | None = None) -> FastAPI:
    app = FastAPI(title="TradingView webhook relay", version="1.0.0")
    app.state.ctx = ctx

    def context() -> AppContext:
        if app.state.ctx is None:
            app.state.ctx = get_app_context()
        return app.state.ctx

    @app.get("/health")
    async def health() -> dict[str, Any]:
        c = context()
        return {
            "status": "ok",
            "mode": c.settings.MODE,
            "kraken": c.venue is not None,
            "telegram": c.notifier is not None,
            "database": c.store is not None,
        }

    @app.post("/webhooks", response_model=WebhookOutcome)
    async def webhook(request: Request) -> WebhookOutcome:
        raw = await request.body()
        try:
            payload = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Malformed webhook body: {e}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="malformed JSON body")
        try:
            return await run_in_threadpool(context().orchestrator.handle, payload)
        except EncodingError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except AuthError:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid token")

    @app.get("/api/signals", response_model=list[SignalOut])
    def recent_signals() -> list[SignalOut]:
        c = context()
        if c.store is None:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="database unavailable")
        try:
            return c.store.get_recent_signals(c.settings.RECENT_LIMIT)
        except PersistenceError as e:
            logger.exception(f"Failed to load signals: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="failed to load signals")

    @app.get("/api/trades", response_model=list[TradeOut])
    def recent_trades() -> list[TradeOut]:
        c = context()
        if c.store is None:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="database unavailable")
        try:
            return c.store.get_recent_trades(c.settings.RECENT_LIMIT)
        except PersistenceError as e:
            logger.exception(f"Failed to load trades: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="failed to load trades")

    return app


app = create_app()


if __name__ == "__main__":
    ctx = get_app_context()
    app.state.ctx = ctx
    logger.info(f"Starting server on {ctx.settings.HOST}:{ctx.settings.PORT} (mode={ctx.settings.MODE})")
    uvicorn.run(app, host=ctx.settings.HOST, port=ctx.settings.PORT)
