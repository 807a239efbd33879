# bingeboard/tests/test_reviews.py
import pytest
from httpx import AsyncClient

from bingeboard.core.exceptions import ValidationError
from bingeboard.db.crud.reviews import MAX_CONTENT, validate_review


def _review(rating=4.5, content="Great show", show_id="1396", spoiler=False):
    return {"showId": show_id, "rating": rating, "content": content, "containsSpoiler": spoiler}


@pytest.mark.parametrize(
    "rating, content, message",
    [
        (0, "Nice", "Please select a rating"),
        (4, "   ", "Review text is required"),
        (5.5, "Too good", "Rating must be at most 5"),
        (3, "x" * (MAX_CONTENT + 1), "Review text must be at most 2000 characters"),
    ],
)
def test_validate_review_rejects(rating, content, message):
    with pytest.raises(ValidationError) as exc:
        validate_review(rating, content)
    assert exc.value.message == message


def test_validate_review_accepts_bounds():
    assert validate_review(5, "  fine  ") == "fine"
    assert validate_review(0.5, "x" * MAX_CONTENT) == "x" * MAX_CONTENT


@pytest.mark.asyncio
async def test_create_review_and_list(client: AsyncClient, register):
    headers = await register("alice")

    r = await client.post("/api/reviews", json=_review(), headers=headers)
    assert r.status_code == 201
    created = r.json()
    assert created["username"] == "alice"
    assert created["rating"] == 4.5
    assert created["likes"] == [] and created["dislikes"] == []

    r = await client.get("/api/reviews/show/1396")
    assert [rv["id"] for rv in r.json()] == [created["id"]]

    r = await client.get("/api/user/reviews", headers=headers)
    assert len(r.json()) == 1
    r = await client.get("/api/users/alice/reviews")
    assert len(r.json()) == 1


@pytest.mark.asyncio
async def test_zero_rating_rejected(client: AsyncClient, register):
    headers = await register("alice")
    r = await client.post("/api/reviews", json=_review(rating=0), headers=headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Please select a rating"


@pytest.mark.asyncio
async def test_review_requires_login(client: AsyncClient):
    r = await client.post("/api/reviews", json=_review())
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_like_dislike_toggle_is_exclusive(client: AsyncClient, register):
    author = await register("alice")
    voter = await register("bob")
    review_id = (await client.post("/api/reviews", json=_review(), headers=author)).json()["id"]

    r = await client.put(f"/api/reviews/{review_id}", json={"action": "like"}, headers=voter)
    assert r.status_code == 200
    assert r.json()["likeCount"] == 1
    assert r.json()["dislikeCount"] == 0

    # switching sides moves the vote
    r = await client.put(f"/api/reviews/{review_id}", json={"action": "dislike"}, headers=voter)
    assert r.json()["likeCount"] == 0
    assert r.json()["dislikeCount"] == 1

    # the same vote again withdraws it
    r = await client.put(f"/api/reviews/{review_id}", json={"action": "dislike"}, headers=voter)
    assert r.json()["likeCount"] == 0
    assert r.json()["dislikeCount"] == 0

    r = await client.get("/api/activities", params={"filter": "reviews"}, headers=voter)
    assert [a["action"] for a in r.json()] == ["review_dislike", "review_like"]


@pytest.mark.asyncio
async def test_vote_on_missing_review(client: AsyncClient, register):
    headers = await register("alice")
    r = await client.put("/api/reviews/42", json={"action": "like"}, headers=headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_most_liked_and_average(client: AsyncClient, register):
    alice = await register("alice")
    bob = await register("bob")
    first = (await client.post("/api/reviews", json=_review(rating=4), headers=alice)).json()["id"]
    second = (await client.post("/api/reviews", json=_review(rating=3), headers=bob)).json()["id"]
    await client.put(f"/api/reviews/{first}", json={"action": "like"}, headers=bob)
    await client.put(f"/api/reviews/{first}", json={"action": "like"}, headers=alice)

    r = await client.get("/api/reviews/most-liked")
    assert [rv["id"] for rv in r.json()] == [first, second]

    r = await client.get("/api/average-rating", params={"showId": "1396"})
    assert r.json() == {"showId": "1396", "average": 3.5, "count": 2}

    r = await client.get("/api/average-rating", params={"showId": "1"})
    assert r.json() == {"showId": "1", "average": None, "count": 0}


def test_validate_review_rejects_non_finite():
    for rating in (float("nan"), float("inf")):
        with pytest.raises(ValidationError) as exc:
            validate_review(rating, "hmm")
        assert exc.value.message == "Please select a rating"


@pytest.mark.asyncio
async def test_nan_rating_in_body_rejected(client: AsyncClient, register):
    headers = await register("alice")
    r = await client.post(
        "/api/reviews",
        content='{"showId": "1396", "rating": NaN, "content": "hmm"}',
        headers={**headers, "Content-Type": "application/json"},
    )
    assert r.status_code == 422

    r = await client.get("/api/reviews/show/1396")
    assert r.json() == []
