#Description: App context built once at startup; wires settings into the store, adapters and orchestrator.

from dataclasses import dataclass
from threading import Lock

from adapters.kraken_spot import KrakenSpotAdapter
from adapters.telegram import TelegramNotifier
from models.db import create_db_engine
from services.execution import OrderOrchestrator
from services.store import SignalStore
from utils.config import Settings, settings as default_settings
from utils.logging import logger

@dataclass
class AppContext:
    settings: Settings
    store: SignalStore | None
    venue: KrakenSpotAdapter | None
    notifier: TelegramNotifier | None
    orchestrator: OrderOrchestrator

    def close(self):
        for c in (self.venue, self.notifier, self.store):
            if c is not None:
                c.close()

def build_app_context(cfg: Settings) -> AppContext:
    try:
        store = SignalStore(create_db_engine(cfg.DATABASE_URL))
    except Exception as e:
        logger.exception(f"Database unavailable, signals and trades will not be stored: {e}")
        store = None

    venue = None
    if cfg.kraken_enabled:
        venue = KrakenSpotAdapter(cfg.KRAKEN_API_KEY, cfg.KRAKEN_API_SECRET, base_url=cfg.KRAKEN_BASE_URL,
                                  timeout=cfg.KRAKEN_TIMEOUT_SECONDS)
        logger.info(f"Kraken client initialized (mode={cfg.MODE})")
    else:
        logger.warning("KRAKEN_API_KEY or KRAKEN_API_SECRET not set. Kraken integration disabled.")

    notifier = None
    if cfg.telegram_enabled:
        notifier = TelegramNotifier(cfg.TELEGRAM_BOT_TOKEN, base_url=cfg.TELEGRAM_BASE_URL,
                                    timeout=cfg.TELEGRAM_TIMEOUT_SECONDS)
    else:
        logger.warning("TELEGRAM_BOT_TOKEN or TELEGRAM_CHAT_ID not set. Notifications disabled.")

    if not cfg.WEBHOOK_TOKEN:
        logger.warning("WEBHOOK_TOKEN not set. Every webhook will be rejected.")

    orchestrator = OrderOrchestrator(cfg.WEBHOOK_TOKEN, venue=venue, store=store, notifier=notifier,
                                     chat_id=cfg.TELEGRAM_CHAT_ID, live=cfg.is_live)
    return AppContext(settings=cfg, store=store, venue=venue, notifier=notifier, orchestrator=orchestrator)

_ctx: AppContext | None = None
_lock = Lock()

def get_app_context() -> AppContext:
    global _ctx
    with _lock:
        if _ctx is None:
            _ctx = build_app_context(default_settings)
    return _ctx
