"""Tests for habit schedule endpoints."""


def test_schedule_weekly_rule(client, api_base):
    r = client.post(
        f"{api_base}/habits/schedule",
        json={
            "rule": {"type": "weekly", "days": ["monday", "wednesday", "friday"]},
            "start_date": "2024-01-01",
            "end_date": "2024-01-07",
        },
    )
    assert r.status_code == 200
    data = r.json()
    assert data["due_dates"] == ["2024-01-01", "2024-01-03", "2024-01-05"]
    assert data["count"] == 3
    assert data["days"] is None


def test_schedule_habit_with_reasons(client, api_base):
    r = client.post(
        f"{api_base}/habits/schedule",
        json={
            "habit": {"id": "h1", "frequency": "daily"},
            "start_date": "2024-01-01",
            "end_date": "2024-01-07",
            "include_reasons": True,
        },
    )
    assert r.status_code == 200
    data = r.json()
    assert data["count"] == 7
    assert len(data["days"]) == 7
    assert data["days"][0] == {
        "day": "2024-01-01",
        "weekday": "monday",
        "due": True,
        "reason": "Daily rule",
    }


def test_schedule_start_after_end_is_empty(client, api_base):
    r = client.post(
        f"{api_base}/habits/schedule",
        json={
            "rule": {"type": "daily"},
            "start_date": "2024-01-07",
            "end_date": "2024-01-01",
        },
    )
    assert r.status_code == 200
    assert r.json()["due_dates"] == []


def test_schedule_requires_exactly_one_source(client, api_base):
    body = {"start_date": "2024-01-01", "end_date": "2024-01-07"}
    r = client.post(f"{api_base}/habits/schedule", json=body)
    assert r.status_code == 400

    body.update(rule={"type": "daily"}, pattern={"rules": [{"type": "daily"}]})
    r = client.post(f"{api_base}/habits/schedule", json=body)
    assert r.status_code == 400


def test_schedule_rejects_long_ranges(client, api_base):
    r = client.post(
        f"{api_base}/habits/schedule",
        json={
            "rule": {"type": "daily"},
            "start_date": "2024-01-01",
            "end_date": "2030-01-01",
        },
    )
    assert r.status_code == 400


def test_is_due_with_exception(client, api_base):
    r = client.post(
        f"{api_base}/habits/is-due",
        json={
            "pattern": {
                "rules": [{"type": "daily"}],
                "exceptions": ["saturday"],
            },
            "date": "2024-01-06",
        },
    )
    assert r.status_code == 200
    assert r.json() == {
        "date": "2024-01-06",
        "due": False,
        "reason": "Exception: saturday",
    }


def test_is_due_malformed_rule_is_never_due(client, api_base):
    r = client.post(
        f"{api_base}/habits/is-due",
        json={"rule": {"type": "interval", "intervalDays": "often"}, "date": "2024-01-06"},
    )
    assert r.status_code == 200
    assert r.json()["due"] is False


def test_describe(client, api_base):
    r = client.post(
        f"{api_base}/habits/describe",
        json={"type": "weekly", "days": [1, 5], "exceptions": []},
    )
    assert r.status_code == 200
    assert r.json() == {"description": "Every Monday, Friday"}


def test_challenge_schedule_covers_challenge_window(leaderboard_client, api_base):
    r = leaderboard_client.post(
        f"{api_base}/habits/challenges/c1/schedule",
        json={"habit": {"id": "h1", "frequency": "weekly"}},
    )
    assert r.status_code == 200
    data = r.json()
    # c1 starts on Monday 2024-01-01 and runs 30 days
    assert data["due_dates"] == [
        "2024-01-01",
        "2024-01-08",
        "2024-01-15",
        "2024-01-22",
        "2024-01-29",
    ]
    assert data["count"] == 5


def test_challenge_schedule_unknown_challenge(leaderboard_client, api_base):
    r = leaderboard_client.post(
        f"{api_base}/habits/challenges/missing/schedule",
        json={"habit": {"id": "h1", "frequency": "daily"}},
    )
    assert r.status_code == 404
