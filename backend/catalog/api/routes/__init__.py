from catalog.api.routes.authors import router as authors_router
from catalog.api.routes.books import router as books_router
from catalog.api.routes.editors import router as editors_router
from catalog.api.routes.registration import router as registration_router
from catalog.api.routes.security import router as security_router

# 对外导出路由
__all__ = ["authors_router", "books_router", "editors_router", "registration_router", "security_router"]
