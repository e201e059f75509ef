"""
Tests for the seed script.
"""
import seed


def test_seed_creates_demo_content(client, db):
    seed.seed()

    assert db["users"].count_documents({}) == 1
    seeded = db["users"].find_one()
    assert seeded["email"] == seed.SEED_EMAIL == "seed@writory.dev"
    assert seeded["is_email_verified"] is True
    assert db["posts"].count_documents({"is_published": True}) == 3
    for post in db["posts"].find():
        assert post["comments_count"] == db["comments"].count_documents({"post": post["_id"]})

    response = client.post("/api/auth/signin", json={"email": seed.SEED_EMAIL, "password": seed.SEED_PASSWORD})
    assert response.status_code == 200

    titles = [p["title"] for p in client.get("/api/posts").json()["posts"]]
    assert titles == ["Welcome to Writory", "The Art of Minimalist Design", "Building Modern Web Applications"]
