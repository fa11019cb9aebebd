from __future__ import annotations

from types import SimpleNamespace

import pytest
from pydantic import ValidationError
from sqlalchemy.orm import Session

from src.challenges import advanced, master
from src.domain.records import UserMetrics
from src.metrics import (
    BlogSnapshot,
    classify_users,
    compute_post_metrics,
    compute_report,
    compute_tag_usage,
    compute_user_metrics,
    load_snapshot,
    most_active_user,
    rank_by_engagement,
    shared_tags,
)
from src.seeding import ChallengeFixture

EXPECTED_POSTS = 2
EXPECTED_COMMENTS_MADE = 2
EXPECTED_COMMENTS_RECEIVED = 3
EXPECTED_AVG = 1.5
EXPECTED_ACTIVITY = 4
EXPECTED_ENGAGEMENT = 6


def _user(id: int, name: str) -> SimpleNamespace:
    return SimpleNamespace(id=id, name=name, email=f"{name.lower()}@example.com")


def _post(id: int, user_id: int) -> SimpleNamespace:
    return SimpleNamespace(id=id, user_id=user_id, title=f"Post {id}")


def _comment(id: int, post_id: int, user_id: int) -> SimpleNamespace:
    return SimpleNamespace(id=id, post_id=post_id, user_id=user_id)


def _link(post_id: int, tag_id: int) -> SimpleNamespace:
    return SimpleNamespace(post_id=post_id, tag_id=tag_id)


@pytest.fixture()
def snapshot() -> BlogSnapshot:
    """Same shape as the challenge fixture, as plain objects."""
    users = (_user(1, "John"), _user(2, "Jane"), _user(3, "Bob"))
    posts = (_post(1, 1), _post(2, 1), _post(3, 2), _post(4, 2), _post(5, 3))
    comments = (
        _comment(1, 1, 2),
        _comment(2, 1, 3),
        _comment(3, 2, 2),
        _comment(4, 3, 1),
        _comment(5, 4, 1),
    )
    tags = tuple(
        SimpleNamespace(id=i, name=name)
        for i, name in enumerate(["Ruby", "Rails", "JavaScript", "React", "SQL"], start=1)
    )
    links = tuple(
        _link(post_id, tag_id)
        for post_id, tag_id in [(1, 1), (1, 2), (2, 1), (2, 2), (3, 3), (4, 3), (4, 4), (5, 5)]
    )
    return BlogSnapshot(users=users, posts=posts, comments=comments, tags=tags, post_tags=links)


def test_user_metrics_worked_example(snapshot: BlogSnapshot) -> None:
    metrics = compute_user_metrics(snapshot.users, snapshot.posts, snapshot.comments)
    john = metrics[0]

    assert john.posts_count == EXPECTED_POSTS
    assert john.comments_made == EXPECTED_COMMENTS_MADE
    assert john.comments_received == EXPECTED_COMMENTS_RECEIVED
    assert john.avg_comments_per_post == pytest.approx(EXPECTED_AVG)
    assert john.activity_score == EXPECTED_ACTIVITY
    assert john.engagement_score == EXPECTED_ENGAGEMENT


def test_user_metrics_follow_input_order(snapshot: BlogSnapshot) -> None:
    reversed_users = tuple(reversed(snapshot.users))
    metrics = compute_user_metrics(reversed_users, snapshot.posts, snapshot.comments)
    assert [m.user_id for m in metrics] == [3, 2, 1]


def test_user_metrics_are_deterministic(snapshot: BlogSnapshot) -> None:
    first = compute_user_metrics(snapshot.users, snapshot.posts, snapshot.comments)
    second = compute_user_metrics(snapshot.users, snapshot.posts, snapshot.comments)
    assert first == second


def test_user_without_posts_has_zero_average() -> None:
    user = _user(1, "Lurker")
    other = _user(2, "Writer")
    metrics = compute_user_metrics([user, other], [_post(1, 2)], [_comment(1, 1, 1)])

    assert metrics[0].posts_count == 0
    assert metrics[0].avg_comments_per_post == 0.0
    assert metrics[0].comments_made == 1
    assert metrics[1].comments_received == 1


def test_self_comments_count_as_received() -> None:
    metrics = compute_user_metrics([_user(1, "Solo")], [_post(1, 1)], [_comment(1, 1, 1)])
    assert metrics[0].comments_received == 1
    assert metrics[0].comments_made == 1


def _with_idle_user(snapshot: BlogSnapshot) -> BlogSnapshot:
    return BlogSnapshot(
        users=snapshot.users + (_user(4, "Idle"),),
        posts=snapshot.posts,
        comments=snapshot.comments,
        tags=snapshot.tags,
        post_tags=snapshot.post_tags,
    )


def _assert_received_matches_post_metrics(snapshot: BlogSnapshot) -> None:
    users = compute_user_metrics(snapshot.users, snapshot.posts, snapshot.comments)
    posts = compute_post_metrics(snapshot.posts, snapshot.comments, snapshot.post_tags)
    author_of = {post.id: post.user_id for post in snapshot.posts}

    for metrics in users:
        expected = sum(
            pm.comment_count for pm in posts if author_of[pm.post_id] == metrics.user_id
        )
        assert metrics.comments_received == expected, metrics.name


def test_comments_received_sums_the_users_own_posts(snapshot: BlogSnapshot) -> None:
    _assert_received_matches_post_metrics(_with_idle_user(snapshot))


def test_comments_received_sums_own_posts_on_fixture(
    session: Session, challenge_data: ChallengeFixture
) -> None:
    _assert_received_matches_post_metrics(load_snapshot(session))


def test_scores_follow_their_formulas_for_every_user(snapshot: BlogSnapshot) -> None:
    snapshot = _with_idle_user(snapshot)
    metrics = compute_user_metrics(snapshot.users, snapshot.posts, snapshot.comments)

    for m in metrics:
        assert m.activity_score == m.posts_count + m.comments_made
        assert m.engagement_score == m.posts_count * 2 + m.comments_made

    idle = metrics[-1]
    assert (idle.posts_count, idle.comments_made, idle.comments_received) == (0, 0, 0)
    assert idle.engagement_score == 0
    assert idle.activity_score == 0
    assert idle.avg_comments_per_post == 0.0


def test_records_keep_non_integer_ids() -> None:
    users = [SimpleNamespace(id="u-1", name="Ann", email="ann@example.com")]
    posts = [SimpleNamespace(id="p-1", user_id="u-1", title="Hello")]
    comments = [SimpleNamespace(id="c-1", post_id="p-1", user_id="u-1")]

    user_metrics = compute_user_metrics(users, posts, comments)
    post_metrics = compute_post_metrics(posts, comments, [_link("p-1", "t-1")])
    usage = compute_tag_usage([SimpleNamespace(id="t-1", name="Go")], [_link("p-1", "t-1")])

    assert user_metrics[0].user_id == "u-1"
    assert user_metrics[0].comments_received == 1
    assert post_metrics[0].post_id == "p-1"
    assert usage[0].tag_id == "t-1"


def test_empty_inputs_produce_empty_results() -> None:
    assert compute_user_metrics([], [], []) == []
    assert compute_post_metrics([], [], []) == []
    assert compute_tag_usage([], []) == []
    assert most_active_user([]) is None


def test_post_metrics_ratio(snapshot: BlogSnapshot) -> None:
    metrics = compute_post_metrics(snapshot.posts, snapshot.comments, snapshot.post_tags)
    by_id = {m.post_id: m for m in metrics}

    assert by_id[1].comment_count == 2
    assert by_id[1].tag_count == 2
    assert by_id[1].comment_tag_ratio == pytest.approx(1.0)
    assert by_id[4].comment_tag_ratio == pytest.approx(0.5)
    assert by_id[5].comment_tag_ratio == 0.0


def test_post_metrics_untagged_post_ratio_is_zero() -> None:
    metrics = compute_post_metrics([_post(1, 1)], [_comment(1, 1, 2)], [])
    assert metrics[0].tag_count == 0
    assert metrics[0].comment_tag_ratio == 0.0


def test_post_metrics_counts_distinct_tags() -> None:
    metrics = compute_post_metrics([_post(1, 1)], [], [_link(1, 7), _link(1, 7)])
    assert metrics[0].tag_count == 1


def test_tag_usage_and_shared_flag(snapshot: BlogSnapshot) -> None:
    usage = {u.name: u for u in compute_tag_usage(snapshot.tags, snapshot.post_tags)}

    assert usage["Ruby"].usage_count == 2
    assert usage["Ruby"].shared is True
    assert usage["React"].usage_count == 1
    assert usage["React"].shared is False
    assert [u.name for u in shared_tags(snapshot.tags, snapshot.post_tags)] == [
        "Ruby",
        "Rails",
        "JavaScript",
    ]


def test_unused_tag_has_zero_usage() -> None:
    usage = compute_tag_usage([SimpleNamespace(id=1, name="Vue")], [])
    assert usage[0].usage_count == 0
    assert usage[0].shared is False


def test_classify_users_ties_land_in_neither_bucket(snapshot: BlogSnapshot) -> None:
    metrics = compute_user_metrics(snapshot.users, snapshot.posts, snapshot.comments)
    split = classify_users(metrics)
    assert split.creators == []
    assert split.commenters == []
    assert split.as_dict() == {"creator": [], "commenter": []}


def test_classify_users_buckets() -> None:
    users = [_user(1, "Writer"), _user(2, "Talker")]
    posts = [_post(1, 1), _post(2, 1)]
    comments = [_comment(1, 1, 2)]

    split = classify_users(compute_user_metrics(users, posts, comments))

    assert [m.name for m in split.creators] == ["Writer"]
    assert [m.name for m in split.commenters] == ["Talker"]


def test_most_active_user_tie_goes_to_first(snapshot: BlogSnapshot) -> None:
    metrics = compute_user_metrics(snapshot.users, snapshot.posts, snapshot.comments)
    winner = most_active_user(metrics)
    assert winner is not None
    assert winner.name == "John"

    reordered = [metrics[1], metrics[0], metrics[2]]
    assert most_active_user(reordered).name == "Jane"


def test_rank_by_engagement_is_stable(snapshot: BlogSnapshot) -> None:
    metrics = compute_user_metrics(snapshot.users, snapshot.posts, snapshot.comments)
    ranked = rank_by_engagement(metrics)
    assert [m.name for m in ranked] == ["John", "Jane", "Bob"]


def test_user_metrics_record_is_frozen() -> None:
    record = UserMetrics(user_id=1, name="John", email="john@example.com")
    with pytest.raises(ValidationError):
        record.posts_count = 5


def test_compute_report_bundles_every_family(snapshot: BlogSnapshot) -> None:
    report = compute_report(snapshot)
    assert len(report.users) == 3
    assert len(report.posts) == 5
    assert len(report.tags) == 5
    assert report.most_active is not None
    assert report.most_active.name == "John"


def test_in_memory_metrics_match_sql_solutions(
    session: Session, challenge_data: ChallengeFixture
) -> None:
    report = compute_report(load_snapshot(session))

    assert report.users == master.user_statistics(session)
    assert report.posts == advanced.posts_with_comment_tag_ratio(session)
    assert {u.name for u in report.tags if u.shared} == {
        t.name for t in advanced.tags_used_by_multiple_posts(session)
    }
    assert report.audience == master.creators_and_commenters(session)
    most_active = advanced.most_active_user(session)
    assert report.most_active.user_id == most_active.User.id
    assert report.most_active.activity_score == most_active.activity_score
