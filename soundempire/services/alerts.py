"""Alert construction and the most-recent-first alert log."""
from __future__ import annotations

import uuid

from soundempire.schemas.career import Alert, AlertKind, CareerClock, CareerState


def new_id() -> str:
    return uuid.uuid4().hex


def make_alert(clock: CareerClock, message: str, kind: AlertKind = AlertKind.info) -> Alert:
    return Alert(id=new_id(), kind=kind, message=message, week=clock.week, year=clock.year)


def push_alerts(state: CareerState, alerts: list[Alert]) -> None:
    """Prepend `alerts` (kept in their own order) to the log."""
    if alerts:
        state.alerts = list(alerts) + state.alerts
