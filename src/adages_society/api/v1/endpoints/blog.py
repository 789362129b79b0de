# src/adages_society/api/v1/endpoints/blog.py
"""Blog post endpoints and the RSS feed."""

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel

from adages_society.api.v1.dependencies import AdminUserDep, OptionalUserDep, SessionDep
from adages_society.core.roles import is_admin
from adages_society.models import BlogPost, BlogPostVersion
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.blog import (
    BlogPostCreate,
    BlogPostResponse,
    BlogPostUpdate,
    BlogPostVersionResponse,
)
from adages_society.schemas.common import ApiResponse
from adages_society.services import blog as blog_service
from adages_society.services.feeds import RSS_ITEM_LIMIT, render_rss

router = APIRouter(prefix="/blog-posts", tags=["blog"])
rss_router = APIRouter(tags=["blog"])


class BlogPostPage(BaseModel):
    items: list[BlogPostResponse]
    total: int
    limit: int
    offset: int


def _is_admin(user) -> bool:
    return user is not None and is_admin(user.role)


@router.get("", response_model=ApiResponse[BlogPostPage])
async def list_blog_posts(
    db: SessionDep,
    current_user: OptionalUserDep,
    search: str | None = Query(None),
    tag: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> ApiResponse[BlogPostPage]:
    """List posts; drafts and hidden posts are listed for admins only."""
    rows, total = blog_service.list_posts(
        db,
        include_unpublished=_is_admin(current_user),
        search=search,
        tag=tag,
        limit=limit,
        offset=offset,
    )
    page = BlogPostPage(
        items=blog_service.to_responses(db, rows), total=total, limit=limit, offset=offset
    )
    return ApiResponse(data=page)


@router.get("/slug/{slug}", response_model=ApiResponse[BlogPostResponse])
async def get_blog_post_by_slug(
    slug: str, db: SessionDep, current_user: OptionalUserDep
) -> ApiResponse[BlogPostResponse]:
    post = blog_service.get_visible_post(
        db, slug=slug, include_unpublished=_is_admin(current_user)
    )
    return ApiResponse(data=blog_service.to_responses(db, [post])[0])


@router.get("/{post_id}", response_model=ApiResponse[BlogPostResponse])
async def get_blog_post(
    post_id: int, db: SessionDep, current_user: OptionalUserDep
) -> ApiResponse[BlogPostResponse]:
    post = blog_service.get_visible_post(
        db, post_id=post_id, include_unpublished=_is_admin(current_user)
    )
    return ApiResponse(data=blog_service.to_responses(db, [post])[0])


@router.post(
    "", response_model=ApiResponse[BlogPostResponse], status_code=status.HTTP_201_CREATED
)
async def create_blog_post(
    payload: BlogPostCreate, admin: AdminUserDep, db: SessionDep
) -> ApiResponse[BlogPostResponse]:
    post = blog_service.create_post(db, payload, admin.id)
    return ApiResponse(data=blog_service.to_responses(db, [post])[0], message="Post created")


@router.put("/{post_id}", response_model=ApiResponse[BlogPostResponse])
async def update_blog_post(
    post_id: int, payload: BlogPostUpdate, admin: AdminUserDep, db: SessionDep
) -> ApiResponse[BlogPostResponse]:
    post = get_live_or_404(db, BlogPost, post_id, detail="Blog post not found")
    post = blog_service.update_post(db, post, payload, admin.id)
    return ApiResponse(data=blog_service.to_responses(db, [post])[0], message="Post updated")


@router.delete("/{post_id}", response_model=ApiResponse[None])
async def delete_blog_post(post_id: int, admin: AdminUserDep, db: SessionDep) -> ApiResponse[None]:
    post = get_live_or_404(db, BlogPost, post_id, detail="Blog post not found")
    blog_service.delete_post(db, post, admin.id)
    return ApiResponse(message="Post deleted")


@router.get("/{post_id}/versions", response_model=ApiResponse[list[BlogPostVersionResponse]])
async def list_blog_post_versions(
    post_id: int, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[list[BlogPostVersionResponse]]:
    get_live_or_404(db, BlogPost, post_id, detail="Blog post not found")
    versions = (
        db.query(BlogPostVersion)
        .filter(BlogPostVersion.post_id == post_id)
        .order_by(BlogPostVersion.version_number.desc())
        .all()
    )
    return ApiResponse(data=[BlogPostVersionResponse.model_validate(v) for v in versions])


@rss_router.get("/rss.xml")
async def rss_feed(db: SessionDep) -> Response:
    """RSS 2.0 feed of the latest published posts."""
    posts = (
        db.query(BlogPost)
        .filter(
            BlogPost.published.is_(True),
            BlogPost.deleted_at.is_(None),
            BlogPost.hidden_at.is_(None),
            BlogPost.published_at.is_not(None),
        )
        .order_by(BlogPost.published_at.desc())
        .limit(RSS_ITEM_LIMIT)
        .all()
    )
    return Response(
        content=render_rss(posts),
        media_type="application/rss+xml; charset=utf-8",
        headers={"Cache-Control": "public, s-maxage=3600, stale-while-revalidate=7200"},
    )
