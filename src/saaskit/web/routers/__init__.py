from saaskit.web.routers.account import router as account_router
from saaskit.web.routers.auth import router as auth_router
from saaskit.web.routers.pages import router as pages_router
from saaskit.web.routers.profile import router as profile_router
from saaskit.web.routers.subscription import router as subscription_router

__all__ = [
    "account_router",
    "auth_router",
    "pages_router",
    "profile_router",
    "subscription_router",
]
