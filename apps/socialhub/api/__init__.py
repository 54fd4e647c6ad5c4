"""API router registration helpers.

Routers are imported lazily inside `register_routes` so importing a submodule
(e.g. in tests) does not pull in every route module and its providers.
"""

from fastapi import FastAPI


def register_routes(app: FastAPI) -> None:
    """Attach all API routers (lazy imports)."""
    from socialhub.api.groups import router as groups_router
    from socialhub.api.messages import router as messages_router
    from socialhub.api.notifications import router as notifications_router
    from socialhub.api.realtime import router as realtime_router
    from socialhub.api.stories import router as stories_router
    from socialhub.api.system import router as system_router
    from socialhub.api.users import router as users_router

    routers = [
        system_router,
        users_router,
        messages_router,
        groups_router,
        notifications_router,
        stories_router,
        realtime_router,
    ]
    for router in routers:
        app.include_router(router)
