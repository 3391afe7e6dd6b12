# app/models/article.py
from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, String, Text, UniqueConstraint, func

from app.db.base import Base

ARTICLE_STATUSES = ("draft", "published", "archived")


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(200), nullable=False)
    title = Column(String(300), nullable=False)
    subtitle = Column(String(300), nullable=True)
    excerpt = Column(Text, nullable=True)

    # Portable markup is what editors work on; the HTML is a cached rendering of it
    raw_markup = Column(Text, nullable=False, default="")
    rendered_markup = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="draft", index=True)

    # SEO / social
    lang = Column(String(20), nullable=True)
    seo_title = Column(String(300), nullable=True)
    seo_description = Column(Text, nullable=True)
    canonical_url = Column(String(1024), nullable=True)
    robots_index = Column(String(20), nullable=True)
    robots_follow = Column(String(20), nullable=True)
    og_image = Column(String(1024), nullable=True)
    og_title = Column(String(300), nullable=True)
    og_description = Column(Text, nullable=True)
    twitter_card = Column(String(40), nullable=True)
    twitter_site = Column(String(120), nullable=True)
    twitter_creator = Column(String(120), nullable=True)

    # Cover
    cover_image = Column(String(1024), nullable=True)
    cover_blurhash = Column(String(120), nullable=True)
    cover_dominant_color = Column(String(20), nullable=True)

    # Editorial
    tags = Column(JSON, nullable=True)
    reading_time = Column(Integer, nullable=True)
    word_count = Column(Integer, nullable=True)
    reviewed_by = Column(String(200), nullable=True)
    reviewer_credentials = Column(String(300), nullable=True)
    fact_checked = Column(Boolean, nullable=True)
    related_articles = Column(JSON, nullable=True)
    tldr = Column(Text, nullable=True)
    key_takeaways = Column(JSON, nullable=True)

    # Open-ended extension metadata (breadcrumbs, faq, citations, permalink, ...)
    meta = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    published_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (UniqueConstraint("slug", name="articles_slug_key"),)
