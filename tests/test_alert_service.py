"""Manual alerts and ownership of alert actions."""
import pytest
from sqlalchemy import select

from contapyme.core.exceptions import NotFoundError, PermissionDeniedError
from contapyme.models.alert_models import Alert, AlertKind, AlertPriority
from contapyme.models.schemas import AlertCreate, AlertListFilter
from contapyme.services.alert_service import AlertService


@pytest.fixture
def alerts(db_session, business):
    return AlertService(db_session, business.id)


def test_create_manual_alert(db_session, alerts, business):
    alert = alerts.create(AlertCreate(title="Pagar patente", message="Vence el 31 de julio"))

    stored = db_session.scalars(select(Alert)).one()
    assert stored.id == alert.id
    assert stored.business_id == business.id
    assert stored.kind == AlertKind.MANUAL
    assert stored.priority == AlertPriority.MEDIUM
    assert stored.is_read is False
    items, unread = alerts.list_alerts(AlertListFilter())
    assert [a.id for a in items] == [alert.id]
    assert unread == 1


def test_create_keeps_priority_and_details(alerts):
    alert = alerts.create(
        AlertCreate(title="F29", message="Declarar IVA", priority=AlertPriority.URGENT, details={"month": 3})
    )
    assert alert.priority == AlertPriority.URGENT
    assert alert.details == {"month": 3}


def test_delete_removes_alert(db_session, alerts):
    alert = alerts.create(AlertCreate(title="Temporal", message="Borrar"))

    alerts.delete(alert.id)

    assert db_session.scalars(select(Alert)).all() == []


def test_delete_foreign_alert_is_denied(db_session, business, other_business):
    theirs = AlertService(db_session, other_business.id).create(AlertCreate(title="Ajena", message="No tocar"))

    with pytest.raises(PermissionDeniedError):
        AlertService(db_session, business.id).delete(theirs.id)

    assert db_session.get(Alert, theirs.id) is not None


def test_delete_missing_alert(alerts):
    with pytest.raises(NotFoundError):
        alerts.delete(999)
