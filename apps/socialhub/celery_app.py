"""Worker/beat entrypoint: `celery -A socialhub.celery_app worker -B`."""

import logging

from socialhub.core.celery import create_celery_app
from socialhub.core.logging import setup_logging

setup_logging()

app = create_celery_app()

logging.getLogger(__name__).info("Celery app initialized")
