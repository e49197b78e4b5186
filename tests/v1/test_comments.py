# tests/v1/test_comments.py
"""Tests for threaded comment endpoints."""

from fastapi import status

from klasmwen.models import Comment, Notification, NotificationType
from klasmwen.services.pagination import encode_cursor


def _comment(client, post_id, headers, content="Nice summary!", parent_id=None):
    payload = {"content": content}
    if parent_id is not None:
        payload["parentId"] = parent_id
    response = client.post(f"/api/v1/posts/{post_id}/comments", json=payload, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()


def test_create_root_comment(client, test_post, other_student, other_headers) -> None:
    """Test commenting directly on a post."""
    body = _comment(client, test_post.id, other_headers)
    assert body["parentId"] is None
    assert body["postId"] == test_post.id
    assert body["author"]["id"] == other_student.id
    assert body["mentionedUser"] is None


def test_reply_to_root_points_at_root(client, test_post, student_headers, other_headers) -> None:
    root = _comment(client, test_post.id, other_headers)
    reply = _comment(client, test_post.id, student_headers, "Thanks!", parent_id=root["id"])
    assert reply["parentId"] == root["id"]
    assert reply["mentionedUser"] is None


def test_reply_to_reply_is_flattened(
    client, test_post, student, other_student, student_headers, other_headers, make_user, headers_for
) -> None:
    """Replying to a reply attaches to the root and mentions the reply's author."""
    third = make_user()
    root = _comment(client, test_post.id, other_headers, "Which chapter is this?")
    reply = _comment(client, test_post.id, student_headers, "Chapter four.", parent_id=root["id"])
    deep = _comment(
        client, test_post.id, headers_for(third), "Also in the appendix.", parent_id=reply["id"]
    )

    assert deep["parentId"] == root["id"]
    assert deep["mentionedUser"] == {"id": student.id, "username": student.username}


def test_reply_to_comment_on_other_post_is_rejected(
    client, student, test_post, make_post, make_comment, other_student, other_headers
) -> None:
    elsewhere = make_post(student, title="Unrelated thread")
    parent = make_comment(other_student, elsewhere)
    response = client.post(
        f"/api/v1/posts/{test_post.id}/comments",
        json={"content": "Wrong thread", "parentId": parent.id},
        headers=other_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"message": "Parent comment does not belong to this post."}


def test_reply_to_missing_parent(client, test_post, other_headers) -> None:
    response = client.post(
        f"/api/v1/posts/{test_post.id}/comments",
        json={"content": "Hello?", "parentId": 987654},
        headers=other_headers,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_comment_on_hidden_post(client, student, make_post, other_headers) -> None:
    post = make_post(student, hidden=True)
    response = client.post(
        f"/api/v1/posts/{post.id}/comments",
        json={"content": "Can anyone see this?"},
        headers=other_headers,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_empty_comment_is_rejected(client, test_post, other_headers) -> None:
    response = client.post(
        f"/api/v1/posts/{test_post.id}/comments",
        json={"content": ""},
        headers=other_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["path"] == "content"


def test_root_listing_counts_replies_and_total(
    client, student, other_student, test_post, make_comment
) -> None:
    first = make_comment(other_student, test_post)
    second = make_comment(student, test_post)
    make_comment(student, test_post, parent_id=first.id)
    make_comment(other_student, test_post, parent_id=first.id)
    make_comment(student, test_post, parent_id=first.id, hidden=True)
    make_comment(student, test_post, hidden=True)

    response = client.get(f"/api/v1/posts/{test_post.id}/comments")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert [c["id"] for c in body["data"]] == [second.id, first.id]
    assert [c["replyCount"] for c in body["data"]] == [0, 2]
    assert body["pagination"]["totalComments"] == 4
    assert body["pagination"]["hasMore"] is False


def test_root_listing_pages(client, student, test_post, make_comment) -> None:
    roots = [make_comment(student, test_post, content=f"Point {i}") for i in range(3)]
    first = client.get(f"/api/v1/posts/{test_post.id}/comments", params={"limit": 2}).json()
    assert [c["id"] for c in first["data"]] == [roots[2].id, roots[1].id]
    assert first["pagination"]["nextCursor"] == encode_cursor(roots[1].id)

    rest = client.get(
        f"/api/v1/posts/{test_post.id}/comments",
        params={"limit": 2, "cursor": first["pagination"]["nextCursor"]},
    ).json()
    assert [c["id"] for c in rest["data"]] == [roots[0].id]
    assert rest["pagination"]["totalComments"] == 3


def test_replies_are_oldest_first(client, student, other_student, test_post, make_comment) -> None:
    root = make_comment(student, test_post)
    replies = [
        make_comment(other_student, test_post, parent_id=root.id, content=f"Reply {i}")
        for i in range(3)
    ]
    response = client.get(f"/api/v1/comments/{root.id}/replies", params={"limit": 2})
    body = response.json()
    assert [r["id"] for r in body["data"]] == [replies[0].id, replies[1].id]
    assert body["pagination"]["hasMore"] is True


def test_replies_of_missing_comment(client) -> None:
    response = client.get("/api/v1/comments/424242/replies")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "Comment not found"}


def test_replies_of_hidden_root_stay_hidden(
    client, student, other_student, test_post, make_comment
) -> None:
    root = make_comment(student, test_post, hidden=True)
    make_comment(other_student, test_post, parent_id=root.id)
    make_comment(other_student, test_post, parent_id=root.id)

    response = client.get(f"/api/v1/comments/{root.id}/replies")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "Comment not found"}

    listing = client.get(f"/api/v1/posts/{test_post.id}/comments").json()
    assert listing["data"] == []
    assert listing["pagination"]["totalComments"] == 0
    assert client.get(f"/api/v1/posts/{test_post.id}").json()["commentCount"] == 0
    assert client.get(f"/api/v1/users/{other_student.id}/comments").json()["data"] == []


def test_replies_under_hidden_post(client, student, make_post, make_comment) -> None:
    post = make_post(student, hidden=True)
    root = make_comment(student, post)
    make_comment(student, post, parent_id=root.id)

    response = client.get(f"/api/v1/comments/{root.id}/replies")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "Post not found"}


def test_replies_are_listed_under_root_only(
    client, student, other_student, test_post, make_comment
) -> None:
    root = make_comment(student, test_post)
    reply = make_comment(other_student, test_post, parent_id=root.id)

    response = client.get(f"/api/v1/comments/{reply.id}/replies")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"] == [
        {"path": "commentId", "message": "Replies are listed under their root comment"}
    ]


def test_deleting_root_removes_replies(
    client, db_session, student, other_student, test_post, make_comment, student_headers
) -> None:
    root = make_comment(student, test_post)
    reply = make_comment(other_student, test_post, parent_id=root.id)
    root_id, reply_id = root.id, reply.id

    response = client.delete(f"/api/v1/comments/{root_id}", headers=student_headers)
    assert response.status_code == status.HTTP_200_OK
    db_session.expire_all()
    assert db_session.get(Comment, root_id) is None
    assert db_session.get(Comment, reply_id) is None


def test_only_author_or_staff_delete_comment(
    client, student, test_post, make_comment, other_headers, moderator_headers
) -> None:
    comment = make_comment(student, test_post)
    denied = client.delete(f"/api/v1/comments/{comment.id}", headers=other_headers)
    assert denied.status_code == status.HTTP_403_FORBIDDEN
    allowed = client.delete(f"/api/v1/comments/{comment.id}", headers=moderator_headers)
    assert allowed.status_code == status.HTTP_200_OK


def test_comment_notifies_post_author(
    client, db_session, student, other_student, test_post, other_headers
) -> None:
    _comment(client, test_post.id, other_headers)
    notifications = db_session.query(Notification).filter_by(user_id=student.id).all()
    assert [(n.type, n.actor_id) for n in notifications] == [
        (NotificationType.COMMENT, other_student.id)
    ]


def test_reply_notifies_parent_author(
    client, db_session, student, other_student, test_post, make_comment, student_headers
) -> None:
    root = make_comment(other_student, test_post)
    _comment(client, test_post.id, student_headers, "Agreed.", parent_id=root.id)
    notifications = db_session.query(Notification).filter_by(user_id=other_student.id).all()
    assert [n.type for n in notifications] == [NotificationType.REPLY]


def test_commenting_on_own_post_does_not_notify(
    client, db_session, student, test_post, student_headers
) -> None:
    _comment(client, test_post.id, student_headers)
    assert db_session.query(Notification).count() == 0


def test_user_comments_listing(client, student, other_student, test_post, make_comment) -> None:
    root = make_comment(other_student, test_post)
    reply = make_comment(other_student, test_post, parent_id=root.id)
    response = client.get(f"/api/v1/users/{other_student.id}/comments")
    body = response.json()
    assert [c["id"] for c in body["data"]] == [reply.id, root.id]
    assert [c["isReply"] for c in body["data"]] == [True, False]
    assert body["data"][0]["post"] == {"id": test_post.id, "title": test_post.title}
