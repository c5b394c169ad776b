from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from crmhub.services.analytics import dashboard_metrics, percentage, posting_stats

NOW = datetime(2024, 5, 6, 12, 0, tzinfo=timezone.utc)


def deal(stage, value):
    return SimpleNamespace(stage=stage, value=value)


def task(completed):
    return SimpleNamespace(completed=completed)


def post(profile_id, status="draft", approval="pending", when=NOW):
    return SimpleNamespace(profile_id=profile_id, status=status, approval_status=approval, scheduled_date_time=when)


def test_empty_dashboard_is_all_zero():
    assert dashboard_metrics([], [], [], []) == {
        "total_leads": 0,
        "active_deals": 0,
        "total_revenue": 0,
        "conversion_rate": 0,
        "task_completion_rate": 0,
        "active_employees": 0,
    }


def test_conversion_rate_is_zero_without_leads():
    metrics = dashboard_metrics([], [deal("closed", 500)], [], [])
    assert metrics["conversion_rate"] == 0
    assert metrics["total_revenue"] == 500


def test_dashboard_counts():
    leads = [object()] * 3
    deals = [deal("closed", 1000), deal("closed", 250), deal("negotiation", 9999), deal("lead", 1)]
    tasks = [task(True), task(False), task(False)]

    metrics = dashboard_metrics(leads, deals, tasks, [object(), object()])

    assert metrics["total_leads"] == 3
    assert metrics["active_deals"] == 2
    assert metrics["total_revenue"] == 1250
    assert metrics["conversion_rate"] == 67
    assert metrics["task_completion_rate"] == 33
    assert metrics["active_employees"] == 2


def test_percentage_rounds_half_up():
    assert percentage(1, 8) == 13  # 12.5
    assert percentage(1, 200) == 1  # 0.5
    assert percentage(1, 3) == 33
    assert percentage(0, 0) == 0


def test_posting_stats():
    posts = [
        post(1, status="scheduled", when=NOW + timedelta(days=1)),
        post(1, status="scheduled", when=NOW + timedelta(days=8), approval="approved"),
        post(2, status="scheduled", when=NOW - timedelta(hours=1)),
        post(2, status="draft", when=NOW + timedelta(days=2), approval="rejected"),
    ]

    stats = posting_stats(posts, {1: "linkedin", 2: "youtube"}, now=NOW)

    assert stats["by_platform"] == [
        {"platform": "linkedin", "count": 2},
        {"platform": "youtube", "count": 2},
    ]
    assert stats["upcoming"] == 1
    assert stats["pending"] == 2


def test_posting_stats_accepts_naive_datetimes():
    naive = (NOW + timedelta(days=3)).replace(tzinfo=None)
    stats = posting_stats([post(1, status="scheduled", when=naive)], {1: "reddit"}, now=NOW)
    assert stats["upcoming"] == 1
