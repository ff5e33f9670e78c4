from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog.api.middleware import LogoutMiddleware
from catalog.api.routes import authors, books, editors, registration
from catalog.api.routes import security as security_routes
from catalog.core.config import settings
from catalog.core.database import init_db
from catalog.core.logging import configure_logging


configure_logging(settings.log_level)

# 应用入口：初始化 FastAPI 实例
app = FastAPI(title="Book Catalog", root_path=settings.root_path or "")

api_prefix = (settings.api_prefix or "").rstrip("/")

# 登出由中间件拦截：清除登录 Cookie 并跳转登录页
app.add_middleware(
    LogoutMiddleware,
    logout_path=f"{api_prefix}/logout",
    target_path=f"{api_prefix}/login",
)

# 配置 CORS，允许前端访问后端 API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册后台与登录相关路由
app.include_router(authors.router, prefix=f"{api_prefix}/admin/author", tags=["authors"])
app.include_router(editors.router, prefix=f"{api_prefix}/admin/editor", tags=["editors"])
app.include_router(books.router, prefix=f"{api_prefix}/admin/book", tags=["books"])
app.include_router(registration.router, prefix=f"{api_prefix}/admin/user", tags=["users"])
app.include_router(security_routes.router, prefix=api_prefix, tags=["security"])


# 启动事件：执行数据库迁移
@app.on_event("startup")
def on_startup() -> None:
    if settings.run_migrations_on_startup:
        init_db()
