"""Post endpoints: listing/search, CRUD, likes and comments."""
import logging
import math
import re
from typing import List, Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

import config
from database import create_document, get_db, serialize, to_object_id, utcnow
from schemas import Comment, CommentCreateRequest, Like, Post, PostCreateRequest
from security import get_current_user, get_optional_user
from text_utils import extract_excerpt, sanitize_markdown, unique_slug

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/posts", tags=["posts"])

SORT_OPTIONS = {
    "newest": [("published_at", DESCENDING)],
    "oldest": [("published_at", ASCENDING)],
    "popular": [("likes_count", DESCENDING), ("published_at", DESCENDING)],
}

AUTHOR_FIELDS = ("name", "avatar_url")
AUTHOR_DETAIL_FIELDS = ("name", "avatar_url", "bio")


def _paginate(page: int, limit: int, total: int, with_nav: bool = False) -> dict:
    pages = math.ceil(total / limit) if limit else 0
    pagination = {"page": page, "limit": limit, "total": total, "pages": pages}
    if with_nav:
        pagination["has_next"] = page < pages
        pagination["has_prev"] = page > 1
    return pagination


def _populate_authors(docs: List[dict], fields=AUTHOR_FIELDS) -> List[dict]:
    """Replace each doc's author ObjectId with a small author object."""
    author_ids = list({doc["author"] for doc in docs if doc.get("author") is not None})
    projection = {field: 1 for field in fields}
    authors = {
        user["_id"]: user
        for user in get_db()["users"].find({"_id": {"$in": author_ids}}, projection)
    }
    out = []
    for doc in docs:
        doc = serialize(doc)
        user = authors.get(ObjectId(doc["author"])) if doc.get("author") else None
        if user:
            doc["author"] = {"id": str(user["_id"]), **{field: user.get(field) for field in fields}}
        else:
            doc["author"] = {"id": doc.get("author"), **{field: None for field in fields}}
        out.append(doc)
    return out


def _get_post_or_404(post_id: str) -> dict:
    oid = to_object_id(post_id)
    post = get_db()["posts"].find_one({"_id": oid}) if oid else None
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


def _get_owned_post(post_id: str, user: dict, detail: str = "Not authorized") -> dict:
    post = _get_post_or_404(post_id)
    if post["author"] != user["_id"]:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return post


@router.get("")
@router.get("/", include_in_schema=False)
async def list_posts(
    page: int = Query(1),
    limit: int = Query(config.POSTS_PER_PAGE),
    search: Optional[str] = None,
    tags: Optional[List[str]] = Query(None),
    author: Optional[str] = None,
    sort: str = "newest",
    current_user: Optional[dict] = Depends(get_optional_user),
):
    page = max(1, page)
    limit = min(config.MAX_PAGE_SIZE, max(1, limit))

    query = {"is_published": True}
    if search and search.strip():
        pattern = {"$regex": re.escape(search.strip()), "$options": "i"}
        query["$or"] = [{"title": pattern}, {"body": pattern}, {"tags": pattern}]
    if tags:
        query["tags"] = {"$in": [tag.strip().lower() for tag in tags if tag.strip()]}
    if author:
        author_id = to_object_id(author)
        if author_id is None:
            return {"posts": [], "pagination": _paginate(page, limit, 0, with_nav=True)}
        query["author"] = author_id

    db = get_db()
    cursor = (
        db["posts"].find(query, {"body": 0})
        .sort(SORT_OPTIONS.get(sort, SORT_OPTIONS["newest"]))
        .skip((page - 1) * limit)
        .limit(limit)
    )
    posts = _populate_authors(list(cursor))
    total = db["posts"].count_documents(query)

    return {"posts": posts, "pagination": _paginate(page, limit, total, with_nav=True)}


@router.get("/user/me")
async def my_posts(
    page: int = Query(1),
    limit: int = Query(config.POSTS_PER_PAGE),
    current_user: dict = Depends(get_current_user),
):
    page = max(1, page)
    limit = min(config.MAX_PAGE_SIZE, max(1, limit))
    query = {"author": current_user["_id"]}

    db = get_db()
    cursor = (
        db["posts"].find(query, {"body": 0})
        .sort("updated_at", DESCENDING)
        .skip((page - 1) * limit)
        .limit(limit)
    )
    total = db["posts"].count_documents(query)
    return {"posts": serialize(list(cursor)), "pagination": _paginate(page, limit, total)}


@router.get("/edit/{post_id}")
async def get_post_for_edit(post_id: str, current_user: dict = Depends(get_current_user)):
    post = _get_owned_post(post_id, current_user, detail="Not authorized to edit this post")
    return _populate_authors([post], AUTHOR_DETAIL_FIELDS)[0]


@router.get("/{slug}")
async def get_post(slug: str, current_user: Optional[dict] = Depends(get_optional_user)):
    db = get_db()
    post = db["posts"].find_one({"slug": slug.lower(), "is_published": True})
    if not post:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")

    is_liked = False
    if current_user:
        is_liked = db["likes"].find_one({"user": current_user["_id"], "post": post["_id"]}) is not None

    result = _populate_authors([post], AUTHOR_DETAIL_FIELDS)[0]
    result["is_liked"] = is_liked
    return result


@router.post("", status_code=status.HTTP_201_CREATED)
@router.post("/", status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_post(payload: PostCreateRequest, current_user: dict = Depends(get_current_user)):
    db = get_db()
    body = sanitize_markdown(payload.body)
    is_published = bool(payload.is_published)
    post = Post(
        title=payload.title,
        slug=unique_slug(db, payload.title),
        excerpt=payload.excerpt or extract_excerpt(body),
        body=body,
        tags=payload.tags,
        author=current_user["_id"],
        featured_image=payload.featured_image,
        is_published=is_published,
        published_at=utcnow() if is_published else None,
    )
    post_id = create_document("posts", post)
    logger.info("Post %s created by %s (slug=%s)", post_id, current_user["_id"], post.slug)

    doc = db["posts"].find_one({"_id": ObjectId(post_id)})
    return _populate_authors([doc])[0]


@router.put("/{post_id}")
async def update_post(post_id: str, payload: PostCreateRequest, current_user: dict = Depends(get_current_user)):
    db = get_db()
    post = _get_owned_post(post_id, current_user)

    body = sanitize_markdown(payload.body)
    changes = {
        "title": payload.title,
        "body": body,
        "excerpt": payload.excerpt or extract_excerpt(body),
        "tags": payload.tags,
        "featured_image": payload.featured_image,
        "updated_at": utcnow(),
    }
    if payload.title != post["title"]:
        changes["slug"] = unique_slug(db, payload.title, exclude_id=post["_id"])
    if payload.is_published is not None:
        changes["is_published"] = payload.is_published
        if payload.is_published and not post.get("published_at"):
            changes["published_at"] = utcnow()

    updated = db["posts"].find_one_and_update(
        {"_id": post["_id"]},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    return _populate_authors([updated])[0]


@router.delete("/{post_id}")
async def delete_post(post_id: str, current_user: dict = Depends(get_current_user)):
    db = get_db()
    post = _get_owned_post(post_id, current_user)

    comments = db["comments"].delete_many({"post": post["_id"]})
    likes = db["likes"].delete_many({"post": post["_id"]})
    db["posts"].delete_one({"_id": post["_id"]})
    logger.info(
        "Post %s deleted with %d comments and %d likes",
        post["_id"], comments.deleted_count, likes.deleted_count,
    )
    return {"message": "Post deleted successfully"}


@router.post("/{post_id}/like")
async def toggle_like(post_id: str, current_user: dict = Depends(get_current_user)):
    db = get_db()
    post = _get_post_or_404(post_id)
    key = {"user": current_user["_id"], "post": post["_id"]}

    removed = db["likes"].delete_one(key)
    if removed.deleted_count:
        updated = db["posts"].find_one_and_update(
            {"_id": post["_id"], "likes_count": {"$gt": 0}},
            {"$inc": {"likes_count": -1}},
            return_document=ReturnDocument.AFTER,
        )
        likes_count = updated["likes_count"] if updated else 0
        return {"message": "Post unliked", "is_liked": False, "likes_count": likes_count}

    try:
        create_document("likes", Like(**key))
    except DuplicateKeyError:
        # A concurrent request already liked it; leave the counter alone
        current = db["posts"].find_one({"_id": post["_id"]}, {"likes_count": 1})
        return {"message": "Post liked", "is_liked": True, "likes_count": current["likes_count"]}

    updated = db["posts"].find_one_and_update(
        {"_id": post["_id"]},
        {"$inc": {"likes_count": 1}},
        return_document=ReturnDocument.AFTER,
    )
    return {"message": "Post liked", "is_liked": True, "likes_count": updated["likes_count"]}


@router.get("/{post_id}/comments")
async def list_comments(
    post_id: str,
    page: int = Query(1),
    limit: int = Query(config.COMMENTS_PER_PAGE),
):
    page = max(1, page)
    limit = min(config.MAX_PAGE_SIZE, max(1, limit))
    oid = to_object_id(post_id)
    if oid is None:
        return {"comments": [], "pagination": _paginate(page, limit, 0)}

    db = get_db()
    query = {"post": oid}
    cursor = (
        db["comments"].find(query)
        .sort("created_at", DESCENDING)
        .skip((page - 1) * limit)
        .limit(limit)
    )
    comments = _populate_authors(list(cursor))
    total = db["comments"].count_documents(query)
    return {"comments": comments, "pagination": _paginate(page, limit, total)}


@router.post("/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(post_id: str, payload: CommentCreateRequest, current_user: dict = Depends(get_current_user)):
    db = get_db()
    post = _get_post_or_404(post_id)

    comment_id = create_document("comments", Comment(
        content=payload.content,
        author=current_user["_id"],
        post=post["_id"],
    ))
    db["posts"].update_one({"_id": post["_id"]}, {"$inc": {"comments_count": 1}})

    doc = db["comments"].find_one({"_id": ObjectId(comment_id)})
    return _populate_authors([doc])[0]
