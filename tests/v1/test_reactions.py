# tests/v1/test_reactions.py
"""Tests for like and bookmark endpoints."""

from fastapi import status

from klasmwen.models import Bookmark, Like, Notification, NotificationType


def test_like_toggles(client, db_session, student, test_post, other_student, other_headers) -> None:
    """Test that liking twice removes the like."""
    liked = client.post(f"/api/v1/posts/{test_post.id}/like", headers=other_headers)
    assert liked.status_code == status.HTTP_200_OK
    assert liked.json() == {"message": "Post liked successfully", "liked": True}
    assert client.get(f"/api/v1/posts/{test_post.id}").json()["likeCount"] == 1

    unliked = client.post(f"/api/v1/posts/{test_post.id}/like", headers=other_headers)
    assert unliked.json() == {"message": "Post unliked successfully", "liked": False}
    assert db_session.get(Like, (other_student.id, test_post.id)) is None


def test_like_notifies_author_once(
    client, db_session, student, test_post, other_headers
) -> None:
    client.post(f"/api/v1/posts/{test_post.id}/like", headers=other_headers)
    notifications = db_session.query(Notification).filter_by(user_id=student.id).all()
    assert [n.type for n in notifications] == [NotificationType.LIKE]


def test_liking_own_post_is_silent(client, db_session, test_post, student_headers) -> None:
    client.post(f"/api/v1/posts/{test_post.id}/like", headers=student_headers)
    assert db_session.query(Notification).count() == 0


def test_like_hidden_post(client, student, make_post, other_headers) -> None:
    post = make_post(student, hidden=True)
    response = client.post(f"/api/v1/posts/{post.id}/like", headers=other_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_liked_posts_follow_like_order(
    client, db_session, student, other_student, make_post, tick, headers_for
) -> None:
    posts = [make_post(other_student, title=f"Study guide {i}") for i in range(4)]
    for index in (1, 3, 0, 2):
        db_session.add(Like(user_id=student.id, post_id=posts[index].id, created_at=tick()))
    db_session.flush()
    headers = headers_for(student)

    first = client.get("/api/v1/users/me/likes", params={"limit": 3}, headers=headers).json()
    assert [p["id"] for p in first["data"]] == [posts[2].id, posts[0].id, posts[3].id]
    assert first["pagination"]["hasMore"] is True

    rest = client.get(
        "/api/v1/users/me/likes",
        params={"limit": 3, "cursor": first["pagination"]["nextCursor"]},
        headers=headers,
    ).json()
    assert [p["id"] for p in rest["data"]] == [posts[1].id]
    assert rest["pagination"]["hasMore"] is False


def test_bookmark_lifecycle(client, db_session, student, test_post, other_student, other_headers) -> None:
    created = client.post(f"/api/v1/bookmarks/{test_post.id}", headers=other_headers)
    assert created.status_code == status.HTTP_201_CREATED
    assert db_session.get(Bookmark, (other_student.id, test_post.id)) is not None

    listing = client.get("/api/v1/bookmarks", headers=other_headers).json()
    assert [p["id"] for p in listing["data"]] == [test_post.id]

    removed = client.delete(f"/api/v1/bookmarks/{test_post.id}", headers=other_headers)
    assert removed.status_code == status.HTTP_200_OK
    assert client.get("/api/v1/bookmarks", headers=other_headers).json()["data"] == []


def test_duplicate_bookmark_conflicts(client, test_post, other_headers) -> None:
    client.post(f"/api/v1/bookmarks/{test_post.id}", headers=other_headers)
    response = client.post(f"/api/v1/bookmarks/{test_post.id}", headers=other_headers)
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json() == {"message": "Post already bookmarked"}


def test_remove_missing_bookmark(client, test_post, other_headers) -> None:
    response = client.delete(f"/api/v1/bookmarks/{test_post.id}", headers=other_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_bookmarks_skip_hidden_posts(
    client, db_session, student, other_student, make_post, other_headers
) -> None:
    visible = make_post(student)
    hidden = make_post(student)
    client.post(f"/api/v1/bookmarks/{visible.id}", headers=other_headers)
    client.post(f"/api/v1/bookmarks/{hidden.id}", headers=other_headers)
    hidden.hidden = True
    db_session.flush()

    listing = client.get("/api/v1/bookmarks", headers=other_headers).json()
    assert [p["id"] for p in listing["data"]] == [visible.id]


def test_deleting_post_removes_reactions(
    client, db_session, student, other_student, test_post, student_headers, other_headers
) -> None:
    client.post(f"/api/v1/posts/{test_post.id}/like", headers=other_headers)
    client.post(f"/api/v1/bookmarks/{test_post.id}", headers=other_headers)

    client.delete(f"/api/v1/posts/{test_post.id}", headers=student_headers)
    db_session.expire_all()
    assert db_session.query(Like).count() == 0
    assert db_session.query(Bookmark).count() == 0
    assert db_session.query(Notification).count() == 0
