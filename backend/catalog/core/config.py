from __future__ import annotations

import os
from pydantic_settings import BaseSettings


# 应用配置：统一管理环境变量与默认值
class Settings(BaseSettings):
    # 运行环境标识（dev / test / prod）
    app_env: str = "dev"
    # FastAPI 根路径（反向代理或子路径部署时使用）
    root_path: str = ""
    # 路由前缀（默认挂在根路径，保持 /admin/... 与 /login 原样）
    api_prefix: str = ""
    # 运行时数据根目录（SQLite 数据库等）
    data_dir: str = "data"
    # SQLite 数据库文件路径（默认本地文件）
    sqlite_path: str = "data/catalog.db"
    # 可选数据库连接串（优先用于 PostgreSQL 等外部数据库）
    database_url: str | None = None
    # 启动时自动执行未应用的迁移
    run_migrations_on_startup: bool = True

    # 日志级别
    log_level: str = "INFO"

    # 允许跨域访问的前端地址列表（逗号分隔）
    cors_origins: str = "http://localhost:3000"

    # JWT 签名密钥（HS*）
    jwt_secret: str = "change-me"
    # JWT 签名算法
    jwt_algorithm: str = "HS256"
    # JWT issuer
    jwt_issuer: str = "book-catalog"
    # 访问令牌有效期（秒）
    jwt_ttl_seconds: int = 3600
    # 保存访问令牌的 Cookie 名
    auth_cookie_name: str = "catalog_auth"
    # 登录失败时回显用户名的 Cookie 名
    last_username_cookie_name: str = "last_username"

    # bcrypt 成本因子；存量哈希成本不同则登录时升级
    bcrypt_rounds: int = 12

    # 列表分页大小
    page_size: int = 10

    # 授权决策策略：affirmative 或 unanimous
    access_decision_strategy: str = "affirmative"
    # 所有策略都弃权时是否放行
    allow_if_all_abstain: bool = False

    # Pydantic Settings 行为配置
    class Config:
        env_file = (
            os.getenv("APP_ENV_FILE") or "config/.env",
            "backend/config/.env",
            ".env",
        )
        case_sensitive = False
        extra = "ignore" if os.getenv("APP_ENV", "dev").lower() == "dev" else "forbid"

    # 解析 CORS 允许域名列表（供中间件直接使用）
    @property
    def cors_origin_list(self) -> list[str]:
        return [item.strip() for item in self.cors_origins.split(",") if item.strip()]

    @property
    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.sqlite_path}"

    # 确保运行时数据目录存在（启动时创建必要目录）
    def ensure_dirs(self) -> None:
        for path in (self.data_dir, os.path.dirname(self.sqlite_path)):
            if path:
                os.makedirs(path, exist_ok=True)


# 全局配置实例
settings = Settings()
