# pricebook/routers/__init__.py

from .auth.session_router import router as auth_router

from .products.product_router import router as product_router

from .users.admin_router import router as user_router


__all__ = [
"auth_router",
"product_router",
"user_router",
]
