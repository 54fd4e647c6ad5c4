"""Celery task package.

Tasks are imported explicitly here so Celery's autodiscovery can find them via
`app.autodiscover_tasks(["socialhub"])` without the API process needing to
import task modules.
"""

from . import stories as stories  # noqa: F401
