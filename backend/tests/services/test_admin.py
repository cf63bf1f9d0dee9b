"""Admin routes — moderation, removal, dashboard and user management.

Tests cover:
    - Every admin route refuses non-admins (403) and anonymous callers (401)
    - Approve/reject notify the author; approving an answer also tells the
      question author; re-applying the current status or "pending" is 400
    - Moderation queues and status filters
    - Dashboard counts per status
    - User list with content counts, activation toggle, deletion, role assignment
    - Self-protection: no self deactivation, deletion or demotion
"""

from sqlalchemy import func, select

from doconnect.core.domain_types import ContentStatus
from doconnect.models.answer import Answer
from doconnect.models.notification import Notification
from doconnect.models.question import Question
from doconnect.models.user import User
from doconnect.models.vote import Vote
from tests.services.fakes import RecordingSocket

URL = "/api/v1/admin"


async def _notifications_for(session_factory, user_id: int) -> list[Notification]:
    async with session_factory() as db:
        result = await db.execute(
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.id),
        )
        return list(result.scalars().all())


# ─── Access ──────────────────────────────────────────────────────

async def test_non_admin_forbidden(client, alice):
    resp = await client.get(f"{URL}/dashboard/stats", headers=alice.headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Admin role required"


async def test_anonymous_unauthorized(client):
    assert (await client.get(f"{URL}/users")).status_code == 401


# ─── Question moderation ─────────────────────────────────────────

async def test_approve_question_notifies_author(
    client, alice, admin, hub, make_question, session_factory,
):
    qid = await make_question(alice, status=ContentStatus.PENDING)
    socket = RecordingSocket()
    hub.register(alice.user_id, socket)

    resp = await client.put(
        f"{URL}/questions/{qid}/status", json={"status": "approved"}, headers=admin.headers,
    )

    assert resp.status_code == 200
    assert resp.json() == {"message": "Question approved successfully", "status": "approved"}
    notes = await _notifications_for(session_factory, alice.user_id)
    assert [(n.type, n.title) for n in notes] == [("question_approved", "Question Approved")]
    assert socket.sent[0]["data"]["type"] == "question_approved"

    listing = await client.get("/api/v1/questions")
    assert [q["id"] for q in listing.json()["questions"]] == [qid]


async def test_reject_approved_question(client, alice, admin, make_question, session_factory):
    qid = await make_question(alice)
    resp = await client.put(
        f"{URL}/questions/{qid}/status", json={"status": "rejected"}, headers=admin.headers,
    )
    assert resp.status_code == 200
    notes = await _notifications_for(session_factory, alice.user_id)
    assert notes[0].type == "question_rejected"


async def test_same_status_twice_rejected(client, alice, admin, make_question):
    qid = await make_question(alice)
    resp = await client.put(
        f"{URL}/questions/{qid}/status", json={"status": "approved"}, headers=admin.headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Question is already approved"


async def test_pending_is_not_a_moderation_target(client, alice, admin, make_question):
    qid = await make_question(alice)
    resp = await client.put(
        f"{URL}/questions/{qid}/status", json={"status": "pending"}, headers=admin.headers,
    )
    assert resp.status_code == 400


async def test_unknown_status_is_validation_error(client, alice, admin, make_question):
    qid = await make_question(alice)
    resp = await client.put(
        f"{URL}/questions/{qid}/status", json={"status": "deleted"}, headers=admin.headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_moderate_missing_question(client, admin):
    resp = await client.put(
        f"{URL}/questions/999/status", json={"status": "approved"}, headers=admin.headers,
    )
    assert resp.status_code == 404


async def test_pending_queue_and_status_filter(client, alice, admin, make_question):
    pending = await make_question(alice, status=ContentStatus.PENDING)
    rejected = await make_question(alice, status=ContentStatus.REJECTED)
    await make_question(alice)

    queue = await client.get(f"{URL}/questions/pending", headers=admin.headers)
    filtered = await client.get(
        f"{URL}/questions", params={"status": "rejected"}, headers=admin.headers,
    )
    everything = await client.get(f"{URL}/questions", headers=admin.headers)

    assert [q["id"] for q in queue.json()["questions"]] == [pending]
    assert [q["id"] for q in filtered.json()["questions"]] == [rejected]
    assert everything.json()["total_count"] == 3


async def test_admin_delete_question(client, alice, bob, admin, make_question, make_answer, session_factory):
    qid = await make_question(alice)
    await make_answer(bob, qid)

    resp = await client.delete(f"{URL}/questions/{qid}", headers=admin.headers)

    assert resp.status_code == 204
    async with session_factory() as db:
        assert (await db.execute(select(func.count(Answer.id)))).scalar_one() == 0
    assert (await client.delete(f"{URL}/questions/{qid}", headers=admin.headers)).status_code == 404


# ─── Answer moderation ───────────────────────────────────────────

async def test_approve_answer_notifies_both_authors(
    client, alice, bob, admin, make_question, make_answer, session_factory,
):
    qid = await make_question(alice)
    aid = await make_answer(bob, qid, status=ContentStatus.PENDING)

    resp = await client.put(
        f"{URL}/answers/{aid}/status", json={"status": "approved"}, headers=admin.headers,
    )

    assert resp.status_code == 200
    assert resp.json()["message"] == "Answer approved successfully"
    bob_notes = await _notifications_for(session_factory, bob.user_id)
    alice_notes = await _notifications_for(session_factory, alice.user_id)
    assert [n.type for n in bob_notes] == ["answer_approved"]
    assert [(n.type, n.title) for n in alice_notes] == [("question_answer", "New Answer")]
    assert alice_notes[0].related_answer_id == aid


async def test_approving_own_answer_on_own_question_single_notice(
    client, alice, admin, make_question, make_answer, session_factory,
):
    qid = await make_question(alice)
    aid = await make_answer(alice, qid, status=ContentStatus.PENDING)

    await client.put(
        f"{URL}/answers/{aid}/status", json={"status": "approved"}, headers=admin.headers,
    )

    notes = await _notifications_for(session_factory, alice.user_id)
    assert [n.type for n in notes] == ["answer_approved"]


async def test_reject_answer_only_notifies_answer_author(
    client, alice, bob, admin, make_question, make_answer, session_factory,
):
    qid = await make_question(alice)
    aid = await make_answer(bob, qid, status=ContentStatus.PENDING)

    await client.put(
        f"{URL}/answers/{aid}/status", json={"status": "rejected"}, headers=admin.headers,
    )

    assert [n.type for n in await _notifications_for(session_factory, bob.user_id)] == [
        "answer_rejected",
    ]
    assert await _notifications_for(session_factory, alice.user_id) == []


async def test_answer_queue_includes_question_title(
    client, alice, bob, admin, make_question, make_answer,
):
    qid = await make_question(alice, title="Question about answer queues")
    pending = await make_answer(bob, qid, status=ContentStatus.PENDING)
    await make_answer(bob, qid)

    resp = await client.get(f"{URL}/answers/pending", headers=admin.headers)

    answers = resp.json()["answers"]
    assert [a["id"] for a in answers] == [pending]
    assert answers[0]["question_title"] == "Question about answer queues"


async def test_admin_delete_answer(client, alice, bob, admin, make_question, make_answer):
    qid = await make_question(alice)
    aid = await make_answer(bob, qid)
    assert (await client.delete(f"{URL}/answers/{aid}", headers=admin.headers)).status_code == 204
    assert (await client.delete(f"{URL}/answers/{aid}", headers=admin.headers)).status_code == 404


# ─── Dashboard ───────────────────────────────────────────────────

async def test_dashboard_stats(client, alice, bob, admin, make_question, make_answer):
    qid = await make_question(alice)
    await make_question(alice, status=ContentStatus.PENDING)
    await make_question(bob, status=ContentStatus.REJECTED)
    await make_answer(bob, qid)
    await make_answer(bob, qid, status=ContentStatus.PENDING)

    resp = await client.get(f"{URL}/dashboard/stats", headers=admin.headers)

    assert resp.json() == {
        "total_users": 3,
        "total_questions": 3,
        "total_answers": 2,
        "total_images": 0,
        "pending_questions": 1,
        "approved_questions": 1,
        "rejected_questions": 1,
        "pending_answers": 1,
        "approved_answers": 1,
        "rejected_answers": 0,
    }


# ─── Users ───────────────────────────────────────────────────────

async def test_list_users_with_counts_and_filter(
    client, alice, bob, admin, make_account, make_question, make_answer,
):
    await make_account("dora", is_active=False)
    qid = await make_question(alice)
    await make_answer(bob, qid)
    await make_answer(bob, qid)

    everyone = (await client.get(f"{URL}/users", headers=admin.headers)).json()
    inactive = (await client.get(
        f"{URL}/users", params={"is_active": "false"}, headers=admin.headers,
    )).json()

    by_name = {u["user_name"]: u for u in everyone["users"]}
    assert everyone["total_count"] == 4
    assert by_name["alice"]["question_count"] == 1
    assert by_name["bob"]["answer_count"] == 2
    assert by_name["root"]["roles"] == ["Admin"]
    assert [u["user_name"] for u in inactive["users"]] == ["dora"]


async def test_toggle_user_status(client, alice, admin):
    off = await client.put(f"{URL}/users/{alice.user_id}/toggle-status", headers=admin.headers)
    assert off.json() == {"message": "User deactivated successfully", "is_active": False}
    assert (await client.get("/api/v1/auth/me", headers=alice.headers)).status_code == 401

    on = await client.put(f"{URL}/users/{alice.user_id}/toggle-status", headers=admin.headers)
    assert on.json()["is_active"] is True
    assert (await client.get("/api/v1/auth/me", headers=alice.headers)).status_code == 200


async def test_cannot_deactivate_self(client, admin):
    resp = await client.put(f"{URL}/users/{admin.user_id}/toggle-status", headers=admin.headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "You cannot deactivate your own account"


async def test_deactivated_admin_notified_no_more(
    client, alice, admin, make_account, session_factory,
):
    other_admin = await make_account("warden", roles=("Admin",))
    await client.put(f"{URL}/users/{other_admin.user_id}/toggle-status", headers=admin.headers)

    await client.post(
        "/api/v1/questions",
        data={
            "title": "A question after deactivation",
            "content": "Only active admins should hear about this one.",
            "topic": "meta",
        },
        headers=alice.headers,
    )

    assert len(await _notifications_for(session_factory, admin.user_id)) == 1
    assert await _notifications_for(session_factory, other_admin.user_id) == []


async def test_delete_user_removes_content_and_votes(
    client, alice, bob, admin, make_question, make_answer, session_factory,
):
    alice_q = await make_question(alice)
    bob_q = await make_question(bob)
    await make_answer(bob, alice_q)
    await client.post("/api/v1/voting", json={"question_id": bob_q, "type": 1}, headers=alice.headers)

    resp = await client.delete(f"{URL}/users/{bob.user_id}", headers=admin.headers)

    assert resp.status_code == 204
    async with session_factory() as db:
        assert await db.get(User, bob.user_id) is None
        assert await db.get(Question, bob_q) is None
        assert await db.get(Question, alice_q) is not None
        assert (await db.execute(select(func.count(Answer.id)))).scalar_one() == 0
        assert (await db.execute(select(func.count(Vote.id)))).scalar_one() == 0
        remaining = (await db.execute(
            select(func.count(Notification.id)).where(Notification.user_id == bob.user_id),
        )).scalar_one()
        assert remaining == 0


async def test_deleting_voter_refreshes_counters(
    client, alice, bob, admin, make_question, session_factory,
):
    qid = await make_question(alice)
    await client.post("/api/v1/voting", json={"question_id": qid, "type": 1}, headers=bob.headers)

    await client.delete(f"{URL}/users/{bob.user_id}", headers=admin.headers)

    async with session_factory() as db:
        question = await db.get(Question, qid)
        assert question.up_votes == 0


async def test_cannot_delete_self_or_admin(client, admin, make_account):
    other_admin = await make_account("warden", roles=("Admin",))

    own = await client.delete(f"{URL}/users/{admin.user_id}", headers=admin.headers)
    peer = await client.delete(f"{URL}/users/{other_admin.user_id}", headers=admin.headers)

    assert own.status_code == 400
    assert peer.status_code == 400
    assert peer.json()["error"]["message"] == "Admin accounts cannot be deleted"


async def test_delete_missing_user(client, admin):
    assert (await client.delete(f"{URL}/users/999", headers=admin.headers)).status_code == 404


async def test_assign_roles(client, alice, admin):
    resp = await client.post(
        f"{URL}/users/{alice.user_id}/roles",
        json={"roles": ["Admin", "User"]},
        headers=admin.headers,
    )

    assert resp.status_code == 200
    assert resp.json()["roles"] == ["Admin", "User"]
    assert (await client.get(f"{URL}/users", headers=alice.headers)).status_code == 200


async def test_assign_unknown_role(client, alice, admin):
    resp = await client.post(
        f"{URL}/users/{alice.user_id}/roles", json={"roles": ["Wizard"]}, headers=admin.headers,
    )
    assert resp.status_code == 400
    assert "Wizard" in resp.json()["error"]["message"]


async def test_assign_roles_cannot_demote_self(client, admin):
    resp = await client.post(
        f"{URL}/users/{admin.user_id}/roles", json={"roles": ["User"]}, headers=admin.headers,
    )
    assert resp.status_code == 400


async def test_assign_roles_requires_at_least_one(client, alice, admin):
    resp = await client.post(
        f"{URL}/users/{alice.user_id}/roles", json={"roles": []}, headers=admin.headers,
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
