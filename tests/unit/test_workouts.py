from __future__ import annotations

from typing import List

import pytest

from wt_cli.core import constants as msg
from wt_cli.core.api import APIError
from wt_cli.core.models import ValidationError
from wt_cli.core.sync import OfflineError
from wt_cli.core.workouts import Notification


def _messages(client) -> List[str]:
    return [n.message for n in client.notifications]


def test_load_online_merges_server_and_plans(make_client, pending_store, workout_form) -> None:
    pending = pending_store.enqueue(workout_form)
    client = make_client(online=True)

    workouts = client.load()

    assert [w.id for w in workouts] == [pending.id, "srv-100"]
    assert client.active_plan is not None and client.active_plan.id == "plan-1"


def test_load_offline_shows_only_pending(make_client, fake_api, pending_store, workout_form) -> None:
    pending = pending_store.enqueue(workout_form)
    client = make_client(online=False)

    workouts = client.load()

    assert [w.id for w in workouts] == [pending.id]
    assert workouts[0].synced is False
    assert fake_api.network_calls() == []


def test_load_survives_unparseable_training_plan(make_client, fake_api) -> None:
    fake_api.plans.append({"_id": "plan-x", "name": "Draft", "startDate": "2026-01-01", "status": "draft"})
    client = make_client(online=True)

    workouts = client.load()

    assert [w.id for w in workouts] == ["srv-100"]
    assert client.plans == []


def test_notification_rejects_unknown_severity() -> None:
    assert Notification("Saved").severity == "success"
    with pytest.raises(ValueError, match="Unknown severity 'info'"):
        Notification("Saved", "info")


def test_create_online_refreshes(make_client, fake_api, workout_form) -> None:
    client = make_client(online=True)
    client.load()

    assert client.save_workout(workout_form) is True

    assert len(client.workouts) == 2
    assert all(w.synced for w in client.workouts)
    assert _messages(client) == [msg.MSG_ADDED]


def test_offline_create_appears_once_unsynced(make_client, fake_api, workout_form) -> None:
    client = make_client(online=False)
    client.load()

    client.save_workout(workout_form)
    client.load()

    unsynced = [w for w in client.workouts if not w.synced]
    assert len(unsynced) == 1
    assert unsynced[0].type == "push"
    assert fake_api.network_calls() == []
    assert client.notifications[0].message == msg.MSG_SAVED_OFFLINE
    assert client.notifications[0].severity == "warning"


def test_create_rejects_invalid_form(make_client, workout_form) -> None:
    client = make_client(online=False)
    with pytest.raises(ValidationError):
        client.save_workout({**workout_form, "exercises": []})
    assert client.engine.pending() == []


def test_edit_unsynced_workout_offline(make_client, fake_api, workout_form) -> None:
    client = make_client(online=False)
    client.save_workout(workout_form)
    workout = client.workouts[0]

    assert client.save_workout({**workout_form, "type": "legs"}, editing=workout) is True

    assert client.workouts[0].type == "legs"
    assert client.workouts[0].synced is False
    assert client.engine.pending()[0].data["type"] == "legs"
    assert _messages(client)[-1] == msg.MSG_OFFLINE_UPDATED
    assert fake_api.network_calls() == []


def test_edit_unsynced_workout_missing_from_queue(make_client, pending_store, workout_form) -> None:
    client = make_client(online=False)
    client.save_workout(workout_form)
    workout = client.workouts[0]
    pending_store.remove(workout.id)

    assert client.save_workout(workout_form, editing=workout) is False
    assert client.notifications[-1].severity == "error"
    assert client.notifications[-1].message == msg.MSG_OFFLINE_UPDATE_FAILED


def test_edit_synced_workout_offline_is_rejected(make_client, fake_api, workout_form) -> None:
    client = make_client(online=True)
    client.load()
    synced = client.find("srv-100")
    assert synced is not None
    client.engine.monitor.set_online(False)
    fake_api.calls.clear()

    assert client.save_workout(workout_form, editing=synced) is False

    assert client.notifications[-1].message == msg.MSG_EDIT_OFFLINE
    assert client.notifications[-1].severity == "warning"
    assert fake_api.network_calls() == []


def test_edit_synced_workout_online(make_client, fake_api, workout_form) -> None:
    client = make_client(online=True)
    client.load()
    synced = client.find("srv-100")

    assert client.save_workout({**workout_form, "type": "legs"}, editing=synced) is True

    update = next(call for call in fake_api.calls if call[0] == "update_workout")
    assert update[1] == "srv-100"
    assert update[2]["synced"] is True
    assert client.find("srv-100").type == "legs"
    assert _messages(client) == [msg.MSG_UPDATED]


def test_edit_synced_workout_api_error_propagates(make_client, fake_api, workout_form) -> None:
    client = make_client(online=True)
    client.load()
    synced = client.find("srv-100")

    def broken_update(workout_id, payload):  # type: ignore[no-untyped-def]
        raise APIError("API request failed for PUT /api/workouts: Workout not found", status_code=404)

    fake_api.update_workout = broken_update
    with pytest.raises(APIError):
        client.save_workout(workout_form, editing=synced)
    assert client.notifications[-1].severity == "error"


def test_delete_pending_is_local_and_persistent(make_client, fake_api, workout_form) -> None:
    client = make_client(online=True)
    client.load()
    fake_api.reachable = False
    client.engine.monitor.set_online(False)
    client.save_workout(workout_form)
    pending_id = next(w.id for w in client.workouts if not w.synced)
    fake_api.calls.clear()

    client.delete_workout(pending_id)

    assert client.find(pending_id) is None
    assert fake_api.network_calls() == []
    assert _messages(client)[-1] == msg.MSG_OFFLINE_DELETED

    reloaded = make_client(online=True)
    reloaded.load()
    assert reloaded.find(pending_id) is None


def test_delete_synced_offline_is_rejected(make_client, fake_api) -> None:
    client = make_client(online=True)
    client.load()
    client.engine.monitor.set_online(False)
    fake_api.calls.clear()

    with pytest.raises(OfflineError):
        client.delete_workout("srv-100")

    assert client.find("srv-100") is not None
    assert fake_api.network_calls() == []
    assert client.notifications[-1].message == msg.MSG_DELETE_OFFLINE


def test_delete_synced_online(make_client, fake_api) -> None:
    client = make_client(online=True)
    client.load()

    client.delete_workout("srv-100")

    assert ("delete_workout", "srv-100") in fake_api.calls
    assert client.find("srv-100") is None
    assert _messages(client) == [msg.MSG_DELETED]


def test_manual_sync_offline_warns_without_network(make_client, fake_api, pending_store, workout_form) -> None:
    pending_store.enqueue(workout_form)
    client = make_client(online=False)

    assert client.manual_sync() is None

    assert client.notifications[-1].message == msg.MSG_NO_CONNECTION
    assert client.notifications[-1].severity == "warning"
    assert fake_api.network_calls() == []


def test_manual_sync_empty_queue_is_noop(make_client, fake_api) -> None:
    client = make_client(online=True)
    fake_api.calls.clear()

    assert client.manual_sync() is None

    assert client.notifications == []
    assert fake_api.network_calls() == []


def test_manual_sync_success_refreshes_list(make_client, fake_api, pending_store, workout_form) -> None:
    pending_store.enqueue(workout_form)
    client = make_client(online=True)
    client.load()
    assert any(not w.synced for w in client.workouts)

    report = client.manual_sync()

    assert report is not None and report.ok
    assert all(w.synced for w in client.workouts)
    assert len(client.workouts) == 2
    assert _messages(client)[-1] == msg.MSG_SYNC_OK


def test_manual_sync_failure_keeps_entries(make_client, fake_api, pending_store, workout_form) -> None:
    entry = pending_store.enqueue(workout_form)
    fake_api.fail_dates.add(workout_form["date"])
    client = make_client(online=True)

    report = client.manual_sync()

    assert report is not None and entry.id in report.failed
    assert client.notifications[-1].message == msg.MSG_SYNC_FAILED
    assert [item.id for item in pending_store.list()] == [entry.id]


def test_reconnect_drains_and_refreshes(make_client, fake_api, workout_form) -> None:
    sleeps: List[float] = []
    client = make_client(online=False, sleep=sleeps.append)
    client.load()
    client.save_workout(workout_form)
    assert [w.synced for w in client.workouts] == [False]

    fake_api.reachable = True
    client.engine.monitor.check()

    assert sleeps == [1.0]
    assert client.engine.pending() == []
    assert [w.synced for w in client.workouts] == [True, True]


def test_filter_current_includes_planless_pending(make_client, pending_store, workout_form) -> None:
    pending_store.enqueue(workout_form)
    client = make_client(online=True)
    client.load()

    current = client.filter_workouts("current")

    assert {w.id for w in current} == {w.id for w in client.workouts}


def test_filter_current_without_active_plan_is_empty(make_client, fake_api) -> None:
    fake_api.plans = [plan for plan in fake_api.plans if plan["status"] != "active"]
    client = make_client(online=True)
    client.load()
    assert client.filter_workouts("current") == []


def test_filter_history_defaults_to_completed_plan(make_client, fake_api, server_workout) -> None:
    fake_api.workouts.append({**server_workout, "_id": "srv-old", "planId": "plan-0"})
    client = make_client(online=True)
    client.load()

    assert client.history_plan_id() == "plan-0"
    assert [w.id for w in client.filter_workouts("history")] == ["srv-old"]
    assert [w.id for w in client.filter_workouts("history", plan_id="plan-1")] == ["srv-100"]


def test_filter_unknown_view_raises(make_client) -> None:
    with pytest.raises(ValueError, match="Unknown view"):
        make_client(online=False).filter_workouts("weekly")


def test_close_stops_refresh_on_sync(make_client, fake_api, pending_store, workout_form) -> None:
    client = make_client(online=True)
    client.close()
    pending_store.enqueue(workout_form)
    fake_api.calls.clear()

    client.engine.sync_pending()

    assert not any(call[0] == "get_workouts" for call in fake_api.calls)
