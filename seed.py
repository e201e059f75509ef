"""
Seed the database with a demo user, a few published posts and comments.

Usage: python seed.py   (needs DATABASE_URL)
"""
import logging
from datetime import timedelta

import database
from database import create_document, get_db, utcnow
from schemas import Comment, Post, User
from security import hash_password
from text_utils import extract_excerpt, unique_slug

logger = logging.getLogger("seed")

SEED_EMAIL = "seed@writory.dev"
SEED_PASSWORD = "SeedPass123!"

SAMPLE_POSTS = [
    {
        "title": "Welcome to Writory",
        "body": (
            "# Welcome to Writory\n\n"
            "Welcome to **Writory**, a minimal Medium-style blogging platform.\n\n"
            "## Features\n\n"
            "- **Clean Writing Experience**: focus on your content\n"
            "- **Markdown Support**: write in markdown and see it rendered\n"
            "- **Social Features**: like and comment on posts from other writers\n"
            "- **Search & Discovery**: find posts by title, content, or tags\n\n"
            "Happy writing!"
        ),
        "tags": ["welcome", "getting-started", "writory"],
        "age_hours": 0,
        "comment": "Great introduction to the platform! Looking forward to writing here.",
    },
    {
        "title": "The Art of Minimalist Design",
        "body": (
            "# The Art of Minimalist Design\n\n"
            "Minimalism in design is not about having less for the sake of less. "
            "It's about having just enough to communicate effectively.\n\n"
            "## Core Principles\n\n"
            "1. Purpose over decoration\n"
            "2. White space is your friend\n"
            "3. Typography matters\n\n"
            "*Simplicity is the ultimate sophistication.*"
        ),
        "tags": ["design", "minimalism", "ux", "web-design"],
        "age_hours": 24,
        "comment": "I love the minimalist approach. Less really is more in design.",
    },
    {
        "title": "Building Modern Web Applications",
        "body": (
            "# Building Modern Web Applications\n\n"
            "The landscape of web development has evolved dramatically over the past decade.\n\n"
            "## Best Practices\n\n"
            "1. **Security First**: always validate input and sanitize output\n"
            "2. **Performance**: measure before optimizing\n"
            "3. **Testing**: write tests for the parts that matter"
        ),
        "tags": ["web-development", "python", "programming"],
        "age_hours": 48,
        "comment": "This is a comprehensive overview of modern web development. Thanks for sharing!",
    },
]


def seed() -> None:
    db = get_db()
    for name in ("users", "posts", "comments", "likes", "refresh_tokens"):
        db[name].delete_many({})
    logger.info("Cleared existing data")
    database.ensure_indexes()

    user_id = create_document("users", User(
        email=SEED_EMAIL,
        password_hash=hash_password(SEED_PASSWORD),
        name="Seed User",
        bio="A test user created by the seed script",
        is_email_verified=True,
    ))
    logger.info("Created seed user: %s / %s", SEED_EMAIL, SEED_PASSWORD)

    author = db["users"].find_one({"email": SEED_EMAIL})["_id"]
    for sample in SAMPLE_POSTS:
        post_id = create_document("posts", Post(
            title=sample["title"],
            slug=unique_slug(db, sample["title"]),
            excerpt=extract_excerpt(sample["body"]),
            body=sample["body"],
            tags=sample["tags"],
            author=author,
            is_published=True,
            published_at=utcnow() - timedelta(hours=sample["age_hours"]),
            comments_count=1,
        ))
        create_document("comments", Comment(
            content=sample["comment"],
            author=author,
            post=database.to_object_id(post_id),
        ))

    logger.info("Seeded user %s with %d published posts", user_id, len(SAMPLE_POSTS))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    seed()
