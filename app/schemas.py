"""Pydantic schemas for request/response validation."""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict

ArticleStatus = Literal["draft", "published", "archived"]


class ArticleFields(BaseModel):
    """Every writable article field; all optional so updates can be partial."""
    slug: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    status: Optional[ArticleStatus] = None
    lang: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    canonical_url: Optional[str] = None
    robots_index: Optional[str] = None
    robots_follow: Optional[str] = None
    og_image: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    twitter_card: Optional[str] = None
    twitter_site: Optional[str] = None
    twitter_creator: Optional[str] = None
    cover_image: Optional[str] = None
    cover_blurhash: Optional[str] = None
    cover_dominant_color: Optional[str] = None
    tags: Optional[List[str]] = None
    reading_time: Optional[int] = None
    word_count: Optional[int] = None
    reviewed_by: Optional[str] = None
    reviewer_credentials: Optional[str] = None
    fact_checked: Optional[bool] = None
    related_articles: Optional[List[Any]] = None
    tldr: Optional[str] = None
    key_takeaways: Optional[List[str]] = None
    published_at: Optional[datetime] = None
    meta: Optional[Dict[str, Any]] = None


class ArticleCreate(ArticleFields):
    """Schema for creating an article (slug and content are checked by the sync service)."""


class ArticleUpdate(ArticleFields):
    """Schema for a partial update; only fields present in the body are applied."""


class ArticleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    title: str
    subtitle: Optional[str] = None
    excerpt: Optional[str] = None
    content: str = ""
    rendered_markup: Optional[str] = None
    status: str
    lang: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    canonical_url: Optional[str] = None
    robots_index: Optional[str] = None
    robots_follow: Optional[str] = None
    og_image: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    twitter_card: Optional[str] = None
    twitter_site: Optional[str] = None
    twitter_creator: Optional[str] = None
    cover_image: Optional[str] = None
    cover_blurhash: Optional[str] = None
    cover_dominant_color: Optional[str] = None
    tags: Optional[List[str]] = None
    reading_time: Optional[int] = None
    word_count: Optional[int] = None
    reviewed_by: Optional[str] = None
    reviewer_credentials: Optional[str] = None
    fact_checked: Optional[bool] = None
    related_articles: Optional[List[Any]] = None
    tldr: Optional[str] = None
    key_takeaways: Optional[List[str]] = None
    meta: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None


class ArticlePreview(BaseModel):
    id: str
    slug: str
    permalink: str
    title: str
    excerpt: str = ""
    category_slug: str = ""
    category_title: str = ""
    author_name: str = ""
    cover_image: str = ""
    published_at: str = ""


class PreviewListResponse(BaseModel):
    source: Literal["database", "files"]
    articles: List[ArticlePreview]


class RichTextPayload(BaseModel):
    html: Optional[str] = None


class PortablePayload(BaseModel):
    markup: Optional[str] = None
