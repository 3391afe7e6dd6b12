from app.routers.admin.router import router  # noqa: F401
