import logging

from finance_tracker.charts import ChartRenderer
from finance_tracker.controller import FinanceApp, Notifier
from finance_tracker.storage import FileStorage
from finance_tracker.store import FinanceStore

logger = logging.getLogger(__name__)


def configure_logging(level):
    logging.basicConfig(
        level=str(level or "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(config, listener=None, storage=None):
    """Wire storage, store, renderer and notifier from a loaded config."""
    storage = storage or FileStorage(config["data_dir"])
    store = FinanceStore(
        storage,
        storage_key=config["storage_key"],
        categories=config["categories"],
    )
    store.load_data()
    logger.debug("Store ready with %d transaction(s)", len(store.transactions))

    chart_cfg = config["chart"]
    renderer = ChartRenderer(
        width=chart_cfg["width"],
        height=chart_cfg["height"],
        pixel_ratio=chart_cfg["device_pixel_ratio"],
    )
    notifier = Notifier(duration=config["notification_seconds"], listener=listener)
    return FinanceApp(store, renderer, notifier)
