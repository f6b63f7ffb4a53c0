from __future__ import annotations

from datetime import datetime, timezone

from ojtdb.apps.audit import services as audit_services


def test_log_event_writes_record(db_session):
    event = audit_services.log_event(
        db_session,
        actor_name="Jordan",
        entity_type="training_plan",
        entity_id="plan-1",
        action="status_update",
        before={"status": "draft"},
        after={"status": "completed", "completed_at": datetime(2026, 1, 5, tzinfo=timezone.utc)},
        correlation_id="plan-1",
        metadata={"module": "plans"},
    )

    db_session.commit()
    assert event is not None
    assert event.entity_type == "training_plan"
    assert event.after["completed_at"] == "2026-01-05T00:00:00+00:00"
    assert event.metadata_json == {"module": "plans"}


def test_list_audit_events_filters_by_correlation(db_session):
    for entity_id, correlation_id in (("plan-1", "plan-1"), ("day-1", "plan-1"), ("plan-2", "plan-2")):
        audit_services.log_event(
            db_session,
            actor_name=None,
            entity_type="training_plan",
            entity_id=entity_id,
            action="create",
            correlation_id=correlation_id,
        )
    db_session.commit()

    events = audit_services.list_audit_events(db_session, correlation_id="plan-1")
    assert {e.entity_id for e in events} == {"plan-1", "day-1"}
    assert len(audit_services.list_audit_events(db_session, entity_id="plan-2")) == 1
