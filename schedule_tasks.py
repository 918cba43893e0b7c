import os
import atexit
import time

from pathlib import Path
from dotenv import load_dotenv

env_path = Path(__file__).parent / ".env"
load_dotenv(dotenv_path=env_path, override=True)

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pytz import timezone

from app import create_app
from app.config import configs as config
from app.extensions import db, redis_client
from app.lib.logger import log_critical_infrastructure, logger
import const


def create_scheduler_app():
    config_name = os.environ.get("FLASK_CONFIG", "develop")
    config_app = config.get(config_name, config["develop"])
    app = create_app(config_app)
    logger.info("Start Schedule Tasks...")
    return app


def process_abandoned_carts_task(app, now=None):
    """One abandonment scan, skipped while another process holds the redis lock."""
    logger.info("Start process_abandoned_carts_task...")
    with app.app_context():
        lock = redis_client.lock(
            const.CART_ABANDONMENT_LOCK_KEY, timeout=const.CART_ABANDONMENT_LOCK_TIMEOUT
        )
        try:
            if not lock.acquire(blocking=False):
                logger.info("Cart abandonment scan running in another process, skipped")
                return None
        except Exception as e:
            log_critical_infrastructure(
                f"Cannot reach redis for the cart abandonment lock: {e}", "REDIS"
            )
            return None

        try:
            cart_abandonment = app.extensions["cart_abandonment"]
            return cart_abandonment.process_abandoned_carts(now=now)
        except Exception as e:
            logger.error(f"Error in process_abandoned_carts_task: {str(e)}")
            db.session.rollback()
            return None
        finally:
            db.session.remove()
            try:
                lock.release()
            except Exception as e:
                logger.warning(f"Cart abandonment lock release failed: {e}")


def start_scheduler(app):
    scheduler = BackgroundScheduler(timezone=timezone("UTC"))

    interval_minutes = app.config.get(
        "CART_ABANDONMENT_INTERVAL_MINUTES", const.CART_ABANDONMENT_INTERVAL_MINUTES
    )
    scheduler.add_job(
        func=lambda: process_abandoned_carts_task(app),
        trigger=IntervalTrigger(minutes=interval_minutes),
        id="process_abandoned_carts",
        max_instances=1,
        coalesce=True,
    )

    atexit.register(lambda: scheduler.shutdown(wait=False))
    scheduler.start()

    logger.info(f"Scheduler started, abandonment scan every {interval_minutes} minutes")
    return scheduler


if __name__ == "__main__":
    app = create_scheduler_app()
    scheduler = start_scheduler(app)

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutting down scheduler...")
        scheduler.shutdown()
