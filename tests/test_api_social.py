from datetime import datetime, timedelta, timezone

import pytest

SOON = (datetime.now(timezone.utc) + timedelta(days=2)).isoformat()


def connect_profile(client, platform="linkedin", **extra):
    payload = {
        "platform": platform,
        "username": "crmhub",
        "profile_url": f"https://{platform}.example.com/crmhub",
        **extra,
    }
    response = client.post("/api/social-profiles", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def schedule_post(client, profile_id, **extra):
    payload = {"profile_id": profile_id, "caption": "Launch day", "scheduled_date_time": SOON, **extra}
    response = client.post("/api/posting-schedule", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def team(make_user, login):
    """A manager with one team member, plus an employee outside the team"""
    manager = make_user(role="manager")
    member = make_user(manager=manager)
    outsider = make_user()
    return {
        "manager": (manager, login(manager)),
        "member": (member, login(member)),
        "outsider": (outsider, login(outsider)),
    }


# ---------- social profiles ----------

def test_platform_specific_fields_are_cleared(login, make_user):
    client = login(make_user())
    profile = connect_profile(
        client,
        platform="linkedin",
        channel_name="Should vanish",
        subscribers_count=10,
        subreddit_moderation="r/python",
    )
    assert profile["channel_name"] is None
    assert profile["subscribers_count"] is None
    assert profile["subreddit_moderation"] is None

    youtube = connect_profile(client, platform="youtube", channel_name="CRM Hub", channel_url="https://youtube.example.com/c/crmhub")
    assert youtube["channel_name"] == "CRM Hub"

    switched = client.patch(f"/api/social-profiles/{youtube['id']}", json={"platform": "reddit", "subreddit_moderation": "r/crm"})
    assert switched.status_code == 200
    assert switched.json()["channel_name"] is None
    assert switched.json()["subreddit_moderation"] == "r/crm"


def test_profile_url_must_be_a_url(login, make_user):
    client = login(make_user())
    response = client.post(
        "/api/social-profiles",
        json={"platform": "twitter", "username": "crmhub", "profile_url": "not a url"},
    )
    assert response.status_code == 400


def test_employees_manage_only_their_profiles(team):
    _, member = team["member"]
    _, outsider = team["outsider"]
    _, manager = team["manager"]
    profile = connect_profile(member)

    assert outsider.get(f"/api/social-profiles/{profile['id']}").status_code == 403
    assert outsider.patch(f"/api/social-profiles/{profile['id']}", json={"bio": "mine now"}).status_code == 403
    assert outsider.get("/api/social-profiles").json() == []

    assert manager.patch(f"/api/social-profiles/{profile['id']}", json={"bio": "Team account"}).status_code == 200
    assert len(manager.get("/api/social-profiles").json()) == 1


def test_employee_cannot_connect_profile_for_someone_else(team):
    member_user, _ = team["member"]
    _, outsider = team["outsider"]
    response = outsider.post(
        "/api/social-profiles",
        json={"platform": "twitter", "username": "x", "profile_url": "https://x.example.com/x", "user_id": member_user.id},
    )
    assert response.status_code == 403


def test_employee_cannot_schedule_on_someone_elses_profile(team):
    _, member = team["member"]
    _, outsider = team["outsider"]
    _, manager = team["manager"]
    member_profile = connect_profile(member)
    outsider_profile = connect_profile(outsider, platform="twitter")

    refused = outsider.post(
        "/api/posting-schedule",
        json={"profile_id": member_profile["id"], "caption": "Not mine", "scheduled_date_time": SOON},
    )
    assert refused.status_code == 403

    own = schedule_post(outsider, outsider_profile["id"])
    moved = outsider.patch(f"/api/posting-schedule/{own['id']}", json={"profile_id": member_profile["id"]})
    assert moved.status_code == 403

    bulk = outsider.post("/api/posting-schedule/bulk-update", json={"ids": [own["id"]], "data": {"profile_id": member_profile["id"]}})
    assert bulk.status_code == 403
    assert outsider.get(f"/api/posting-schedule/{own['id']}").json()["profile_id"] == outsider_profile["id"]

    # Managers may schedule on any profile
    schedule_post(manager, member_profile["id"])


# ---------- posting schedule ----------

def test_employee_cannot_delete_another_employees_post(team):
    member_user, member = team["member"]
    _, outsider = team["outsider"]
    profile = connect_profile(member)
    post = schedule_post(member, profile["id"], assigned_to=member_user.id)

    assert outsider.delete(f"/api/posting-schedule/{post['id']}").status_code == 403
    assert member.get(f"/api/posting-schedule/{post['id']}").status_code == 200


def test_manager_reads_team_members_post(team):
    member_user, member = team["member"]
    _, manager = team["manager"]
    _, outsider = team["outsider"]
    profile = connect_profile(member)
    post = schedule_post(member, profile["id"], assigned_to=member_user.id)

    assert manager.get(f"/api/posting-schedule/{post['id']}").status_code == 200
    assert outsider.get(f"/api/posting-schedule/{post['id']}").status_code == 403
    assert manager.get("/api/posting-schedule/999999").status_code == 404


def test_list_is_filtered_by_visibility(team, login, make_user):
    _, member = team["member"]
    _, outsider = team["outsider"]
    _, manager = team["manager"]
    admin = login(make_user(role="admin"))

    member_profile = connect_profile(member)
    outsider_profile = connect_profile(outsider, platform="twitter")
    schedule_post(member, member_profile["id"])
    schedule_post(outsider, outsider_profile["id"], status="scheduled")

    assert len(member.get("/api/posting-schedule").json()) == 1
    assert len(outsider.get("/api/posting-schedule").json()) == 1
    assert len(manager.get("/api/posting-schedule").json()) == 1
    assert len(admin.get("/api/posting-schedule").json()) == 2
    assert len(admin.get("/api/posting-schedule", params={"status": "scheduled"}).json()) == 1


def test_only_approvers_change_approval_status(team):
    _, member = team["member"]
    _, manager = team["manager"]
    profile = connect_profile(member)
    post = schedule_post(member, profile["id"])

    refused = member.patch(f"/api/posting-schedule/{post['id']}", json={"approval_status": "approved"})
    assert refused.status_code == 403

    approved = manager.patch(f"/api/posting-schedule/{post['id']}", json={"approval_status": "approved"})
    assert approved.status_code == 200
    assert approved.json()["approval_status"] == "approved"

    # Resending the current value is not an approval
    edit = member.patch(f"/api/posting-schedule/{post['id']}", json={"caption": "Edited", "approval_status": "approved"})
    assert edit.status_code == 200


def test_clone_points_at_original(team):
    _, member = team["member"]
    _, outsider = team["outsider"]
    profile = connect_profile(member)
    original = schedule_post(member, profile["id"], status="scheduled")

    first = member.post(f"/api/posting-schedule/{original['id']}/clone")
    assert first.status_code == 201
    assert first.json()["clone_of"] == original["id"]
    assert first.json()["status"] == "draft"
    assert first.json()["approval_status"] == "pending"

    second = member.post(f"/api/posting-schedule/{first.json()['id']}/clone")
    assert second.json()["clone_of"] == original["id"]

    assert outsider.post(f"/api/posting-schedule/{original['id']}/clone").status_code == 403


def test_bulk_operations_are_all_or_nothing(team):
    _, member = team["member"]
    _, outsider = team["outsider"]
    member_profile = connect_profile(member)
    outsider_profile = connect_profile(outsider, platform="twitter")
    mine = [schedule_post(member, member_profile["id"])["id"] for _ in range(2)]
    theirs = schedule_post(outsider, outsider_profile["id"])["id"]

    refused = member.post("/api/posting-schedule/bulk-update", json={"ids": mine + [theirs], "data": {"status": "scheduled"}})
    assert refused.status_code == 403
    assert all(post["status"] == "draft" for post in member.get("/api/posting-schedule").json())

    missing = member.post("/api/posting-schedule/bulk-delete", json={"ids": mine + [999999]})
    assert missing.status_code == 404
    assert len(member.get("/api/posting-schedule").json()) == 2

    updated = member.post("/api/posting-schedule/bulk-update", json={"ids": mine, "data": {"status": "scheduled"}})
    assert updated.status_code == 200
    assert updated.json() == {"count": 2, "ids": sorted(mine)}

    deleted = member.post("/api/posting-schedule/bulk-delete", json={"ids": mine})
    assert deleted.json()["count"] == 2
    assert member.get("/api/posting-schedule").json() == []


def test_posting_stats_are_scoped(team):
    _, member = team["member"]
    _, outsider = team["outsider"]
    member_profile = connect_profile(member, platform="instagram")
    outsider_profile = connect_profile(outsider, platform="twitter")
    schedule_post(member, member_profile["id"], status="scheduled")
    schedule_post(outsider, outsider_profile["id"])

    stats = member.get("/api/posting-schedule/stats").json()
    assert stats == {"by_platform": [{"platform": "instagram", "count": 1}], "upcoming": 1, "pending": 1}


def test_post_actions_hint(team):
    _, member = team["member"]
    _, manager = team["manager"]
    profile = connect_profile(member)
    post = schedule_post(member, profile["id"])

    assert member.get(f"/api/posting-schedule/{post['id']}/actions").json()["actions"] == ["clone", "delete", "update", "view"]
    assert "approve" in manager.get(f"/api/posting-schedule/{post['id']}/actions").json()["actions"]
