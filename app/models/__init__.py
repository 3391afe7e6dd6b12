from app.models.article import Article  # noqa: F401
