"""
Celery worker entry point
Handles background calendar synchronization
"""
import logging
from celery.signals import worker_ready, worker_shutdown

from app.config.celery_config import celery_app
from app.utils.my_logging import setup_logging

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    """Handle worker startup"""
    logger.info("Celery worker ready")
    logger.info(f"Registered tasks: {[name for name in celery_app.tasks.keys() if name.startswith('app.')]}")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    """Handle worker shutdown"""
    logger.info("Celery worker shutting down")


if __name__ == "__main__":
    # Run worker directly (add -B for the nightly calendar sync schedule)
    celery_app.start([
        'worker',
        '--loglevel=info',
        '--queues=calendar',
        '--concurrency=2',
        '--max-tasks-per-child=1000'
    ])
