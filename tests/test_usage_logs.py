"""Tests for usage logs and allocation reconciliation."""

from datetime import date
from decimal import Decimal

import pydantic
import pytest
from sqlalchemy import update

from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.models.inventory import MaterialUsage, ProjectMaterial, ProjectMaterialStatus
from app.schemas.inventory import MaterialUsageCreate, MaterialUsageUpdate
from app.services.usage_logs import usage_logs


def _log(db_session, user, project, material, quantity: str, **fields) -> dict:
    return usage_logs.create(
        db_session,
        user.id,
        user.company_id,
        MaterialUsageCreate(project_id=project.id, material_id=material.id, quantity=Decimal(quantity), **fields),
    )


def _allocation(db_session) -> ProjectMaterial:
    db_session.expire_all()
    return db_session.query(ProjectMaterial).one()


def test_log_usage_moves_used_and_status(db_session, engineer_user, project, material, allocation):
    result = _log(db_session, engineer_user, project, material, "20", remarks="Living room ceiling")

    assert result["warning"] is None
    assert result["usage_log"].quantity == Decimal("20")
    assert result["usage_log"].usage_date is not None
    pm = _allocation(db_session)
    assert pm.used == Decimal("20")
    assert pm.remaining == Decimal("30")
    assert pm.status == ProjectMaterialStatus.active


def test_usage_reaching_assignment_completes(db_session, engineer_user, project, material, allocation):
    _log(db_session, engineer_user, project, material, "20")
    _log(db_session, engineer_user, project, material, "30")
    pm = _allocation(db_session)
    assert pm.used == Decimal("50")
    assert pm.status == ProjectMaterialStatus.completed


def test_over_allocation_is_allowed_with_warning(db_session, engineer_user, project, material, allocation):
    _log(db_session, engineer_user, project, material, "45")
    result = _log(db_session, engineer_user, project, material, "15")

    assert result["warning"] == "Usage exceeds assigned quantity. Assigned: 50, Used: 60"
    pm = _allocation(db_session)
    assert pm.used == Decimal("60")
    assert pm.status == ProjectMaterialStatus.completed


def test_unassigned_material_rejected(db_session, engineer_user, project, material):
    with pytest.raises(ValidationError, match="not assigned to this project"):
        _log(db_session, engineer_user, project, material, "5")
    assert db_session.query(MaterialUsage).count() == 0


def test_foreign_project_not_found(db_session, engineer_user, other_project, material):
    with pytest.raises(NotFoundError):
        _log(db_session, engineer_user, other_project, material, "5")


def test_update_applies_difference(db_session, engineer_user, project, material, allocation):
    first = _log(db_session, engineer_user, project, material, "20")
    _log(db_session, engineer_user, project, material, "10")

    result = usage_logs.update(
        db_session,
        first["usage_log"].id,
        engineer_user.id,
        engineer_user.company_id,
        engineer_user.role.value,
        MaterialUsageUpdate(quantity=Decimal("35"), remarks="Recounted"),
    )
    assert result["usage_log"].quantity == Decimal("35")
    assert result["usage_log"].remarks == "Recounted"
    pm = _allocation(db_session)
    assert pm.used == Decimal("45")
    assert pm.status == ProjectMaterialStatus.active


def test_update_without_quantity_change_keeps_used(db_session, engineer_user, project, material, allocation):
    first = _log(db_session, engineer_user, project, material, "20")
    usage_logs.update(
        db_session,
        first["usage_log"].id,
        engineer_user.id,
        engineer_user.company_id,
        engineer_user.role.value,
        MaterialUsageUpdate(remarks="Only a note"),
    )
    assert _allocation(db_session).used == Decimal("20")


def test_update_by_other_engineer_forbidden(db_session, company, engineer_user, project, material, allocation):
    from app.models.user import User, UserRole

    colleague = User(
        name="Kiran Site",
        username="kiran.site",
        password_hash="x",
        role=UserRole.site_engineer,
        company_id=company.id,
    )
    db_session.add(colleague)
    db_session.commit()
    first = _log(db_session, engineer_user, project, material, "20")

    with pytest.raises(AuthorizationError):
        usage_logs.update(
            db_session,
            first["usage_log"].id,
            colleague.id,
            company.id,
            colleague.role.value,
            MaterialUsageUpdate(quantity=Decimal("1")),
        )
    assert _allocation(db_session).used == Decimal("20")


def test_admin_may_update_any_log(db_session, admin_user, engineer_user, project, material, allocation):
    first = _log(db_session, engineer_user, project, material, "20")
    usage_logs.update(
        db_session,
        first["usage_log"].id,
        admin_user.id,
        admin_user.company_id,
        admin_user.role.value,
        MaterialUsageUpdate(quantity=Decimal("5")),
    )
    pm = _allocation(db_session)
    assert pm.used == Decimal("5")
    assert pm.status == ProjectMaterialStatus.active


def test_delete_reverts_used(db_session, company, engineer_user, project, material, allocation):
    first = _log(db_session, engineer_user, project, material, "20")
    _log(db_session, engineer_user, project, material, "10")

    usage_logs.delete(db_session, first["usage_log"].id, company.id)

    pm = _allocation(db_session)
    assert pm.used == Decimal("10")
    assert db_session.query(MaterialUsage).count() == 1


def test_delete_last_log_returns_to_not_used(db_session, company, engineer_user, project, material, allocation):
    first = _log(db_session, engineer_user, project, material, "20")
    usage_logs.delete(db_session, first["usage_log"].id, company.id)
    pm = _allocation(db_session)
    assert pm.used == Decimal("0")
    assert pm.status == ProjectMaterialStatus.not_used


def test_delete_floors_at_zero(db_session, company, engineer_user, project, material, allocation):
    first = _log(db_session, engineer_user, project, material, "20")
    pm = _allocation(db_session)
    pm.used = Decimal("5")
    db_session.commit()

    usage_logs.delete(db_session, first["usage_log"].id, company.id)

    pm = _allocation(db_session)
    assert pm.used == Decimal("0")
    assert pm.status == ProjectMaterialStatus.not_used


def test_delete_other_company_not_found(db_session, other_company, engineer_user, project, material, allocation):
    first = _log(db_session, engineer_user, project, material, "20")
    with pytest.raises(NotFoundError):
        usage_logs.delete(db_session, first["usage_log"].id, other_company.id)
    assert _allocation(db_session).used == Decimal("20")


def test_list_requires_project(db_session, company):
    with pytest.raises(ValidationError, match="Project ID is required"):
        usage_logs.list(db_session, company.id, None, 50, 0)


def test_list_newest_first(db_session, company, engineer_user, project, material, allocation):
    older = _log(db_session, engineer_user, project, material, "2", usage_date=date(2026, 1, 5))
    newer = _log(db_session, engineer_user, project, material, "3", usage_date=date(2026, 2, 5))
    rows = usage_logs.list(db_session, company.id, project.id, 50, 0)
    assert [row.id for row in rows] == [newer["usage_log"].id, older["usage_log"].id]


def test_update_diff_uses_committed_quantity(db_session, admin_user, engineer_user, project, material, allocation):
    usage = _log(db_session, engineer_user, project, material, "10")["usage_log"]
    assert db_session.get(MaterialUsage, usage.id).quantity == Decimal("10")

    # Another writer moved the row to 15 after this session loaded it.
    db_session.execute(
        update(MaterialUsage)
        .where(MaterialUsage.id == usage.id)
        .values(quantity=Decimal("15"))
        .execution_options(synchronize_session=False)
    )
    db_session.execute(
        update(ProjectMaterial)
        .where(ProjectMaterial.id == allocation.id)
        .values(used=ProjectMaterial.used + Decimal("5"))
        .execution_options(synchronize_session=False)
    )

    usage_logs.update(
        db_session,
        usage.id,
        admin_user.id,
        admin_user.company_id,
        "Admin",
        MaterialUsageUpdate(quantity=Decimal("20")),
    )

    pm = _allocation(db_session)
    assert db_session.get(MaterialUsage, usage.id).quantity == Decimal("20")
    assert pm.used == Decimal("20")


def test_delete_reverts_committed_quantity(db_session, engineer_user, project, material, allocation):
    usage = _log(db_session, engineer_user, project, material, "10")["usage_log"]
    assert db_session.get(MaterialUsage, usage.id).quantity == Decimal("10")
    db_session.execute(
        update(MaterialUsage)
        .where(MaterialUsage.id == usage.id)
        .values(quantity=Decimal("4"))
        .execution_options(synchronize_session=False)
    )
    db_session.execute(
        update(ProjectMaterial)
        .where(ProjectMaterial.id == allocation.id)
        .values(used=Decimal("14"))
        .execution_options(synchronize_session=False)
    )

    usage_logs.delete(db_session, usage.id, engineer_user.company_id)

    pm = _allocation(db_session)
    assert pm.used == Decimal("10")
    assert pm.status == ProjectMaterialStatus.active


@pytest.mark.parametrize("quantity", ["0.0004", "12.3456"])
def test_quantity_beyond_column_scale_rejected(quantity):
    with pytest.raises(pydantic.ValidationError):
        MaterialUsageCreate(project_id=1, material_id=1, quantity=Decimal(quantity))


def test_sub_scale_usage_is_400_over_http(client, engineer_user, project, material, allocation, auth_headers):
    response = client.post(
        "/api/usage-logs",
        json={"project_id": project.id, "material_id": material.id, "quantity": "0.0004"},
        headers=auth_headers(engineer_user),
    )
    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "quantity"
