"""Voting routes — toggle semantics, counters, stats and owner notices.

Tests cover:
    - First vote inserts, same type removes, other type flips
    - up_votes/down_votes on the target follow every change
    - Owner notified only for a new vote on someone else's content
    - Exactly one target; missing target 404; non-approved target 400
    - Stats endpoint works anonymously and reports the caller's vote
"""

from sqlalchemy import select

from doconnect.core.domain_types import ContentStatus
from doconnect.models.answer import Answer
from doconnect.models.notification import Notification
from doconnect.models.question import Question
from tests.services.fakes import RecordingSocket

URL = "/api/v1/voting"


async def _vote(client, account, **body):
    return await client.post(URL, json=body, headers=account.headers)


async def test_vote_toggle_cycle(client, alice, bob, make_question, session_factory):
    qid = await make_question(alice)

    first = await _vote(client, bob, question_id=qid, type=1)
    assert first.status_code == 200
    assert first.json() == {"up_votes": 1, "down_votes": 0, "net_votes": 1, "user_vote": 1}

    flipped = await _vote(client, bob, question_id=qid, type=-1)
    assert flipped.json() == {"up_votes": 0, "down_votes": 1, "net_votes": -1, "user_vote": -1}

    removed = await _vote(client, bob, question_id=qid, type=-1)
    assert removed.json() == {"up_votes": 0, "down_votes": 0, "net_votes": 0, "user_vote": None}

    async with session_factory() as db:
        question = await db.get(Question, qid)
        assert (question.up_votes, question.down_votes) == (0, 0)


async def test_counters_track_several_voters(
    client, alice, bob, make_account, make_question, session_factory,
):
    carol = await make_account("carol")
    qid = await make_question(alice)

    await _vote(client, bob, question_id=qid, type=1)
    await _vote(client, carol, question_id=qid, type=-1)

    async with session_factory() as db:
        question = await db.get(Question, qid)
        assert (question.up_votes, question.down_votes) == (1, 1)


async def test_answer_vote_notifies_owner_once(
    client, alice, bob, hub, make_question, make_answer, session_factory,
):
    qid = await make_question(alice)
    aid = await make_answer(bob, qid)
    socket = RecordingSocket()
    hub.register(bob.user_id, socket)

    await _vote(client, alice, answer_id=aid, type=1)
    await _vote(client, alice, answer_id=aid, type=-1)

    async with session_factory() as db:
        notes = (await db.execute(
            select(Notification).where(Notification.user_id == bob.user_id),
        )).scalars().all()
        answer = await db.get(Answer, aid)
    assert [n.type for n in notes] == ["answer_vote"]
    assert notes[0].title == "New Vote"
    assert notes[0].related_answer_id == aid
    assert notes[0].related_question_id == qid
    assert (answer.up_votes, answer.down_votes) == (0, 1)
    assert len(socket.sent) == 1


async def test_voting_on_own_content_is_silent(
    client, alice, make_question, session_factory,
):
    qid = await make_question(alice)
    resp = await _vote(client, alice, question_id=qid, type=1)

    assert resp.status_code == 200
    async with session_factory() as db:
        assert (await db.execute(select(Notification))).scalars().all() == []


async def test_vote_needs_exactly_one_target(client, alice, bob, make_question, make_answer):
    qid = await make_question(alice)
    aid = await make_answer(alice, qid)

    neither = await _vote(client, bob, type=1)
    both = await _vote(client, bob, question_id=qid, answer_id=aid, type=1)

    assert neither.status_code == both.status_code == 400


async def test_vote_type_must_be_plus_or_minus_one(client, alice, bob, make_question):
    qid = await make_question(alice)
    resp = await _vote(client, bob, question_id=qid, type=2)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_vote_missing_target(client, bob):
    assert (await _vote(client, bob, question_id=999, type=1)).status_code == 404
    assert (await _vote(client, bob, answer_id=999, type=1)).status_code == 404


async def test_vote_on_pending_content_rejected(client, alice, bob, make_question):
    qid = await make_question(alice, status=ContentStatus.PENDING)
    resp = await _vote(client, bob, question_id=qid, type=1)
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Only approved content can be voted on"


async def test_vote_requires_auth(client, alice, make_question):
    qid = await make_question(alice)
    resp = await client.post(URL, json={"question_id": qid, "type": 1})
    assert resp.status_code == 401


async def test_stats_anonymous_and_personal(client, alice, bob, make_question):
    qid = await make_question(alice)
    await _vote(client, bob, question_id=qid, type=1)

    anonymous = await client.get(f"{URL}/stats", params={"question_id": qid})
    personal = await client.get(
        f"{URL}/stats", params={"question_id": qid}, headers=bob.headers,
    )

    assert anonymous.json()["user_vote"] is None
    assert anonymous.json()["up_votes"] == 1
    assert personal.json()["user_vote"] == 1


async def test_stats_missing_target(client):
    assert (await client.get(f"{URL}/stats", params={"answer_id": 5})).status_code == 404
    assert (await client.get(f"{URL}/stats")).status_code == 400
