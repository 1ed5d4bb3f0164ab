"""Tests for labour, contract and project finance services."""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from app.errors import NotFoundError, ValidationError
from app.schemas.contract import ContractCreate, ContractUpdate
from app.schemas.financial import ExpenseCreate, ExpenseUpdate, FinancialProjectCreate
from app.schemas.labour import LabourCreate, LabourPaymentCreate, LabourUpdate
from app.services.contracts import contracts
from app.services.financial import financial
from app.services.labour import labours


class TestLabours:
    def test_payments_and_total_paid(self, db_session, company, project):
        labour = labours.create(
            db_session, company.id, LabourCreate(name="Suresh", phone="9876543210", project_id=project.id)
        )
        labours.add_payment(db_session, company.id, labour.id, LabourPaymentCreate(amount=Decimal("1200")))
        labours.add_payment(
            db_session,
            company.id,
            labour.id,
            LabourPaymentCreate(amount=Decimal("800"), paid_on=date(2025, 1, 10), remarks="Advance"),
        )

        db_session.refresh(labour)
        assert labour.total_paid == Decimal("2000")
        payments = labours.list_payments(db_session, company.id, labour.id)
        assert [p.amount for p in payments] == [Decimal("1200"), Decimal("800")]

    def test_statistics(self, db_session, company, project):
        today = datetime.now(UTC).date()
        first = labours.create(
            db_session, company.id, LabourCreate(name="Suresh", phone="9876543210", project_id=project.id)
        )
        labours.create(db_session, company.id, LabourCreate(name="Manoj", phone="9123456780"))
        labours.add_payment(
            db_session, company.id, first.id, LabourPaymentCreate(amount=Decimal("1000"), paid_on=today)
        )
        labours.add_payment(
            db_session, company.id, first.id, LabourPaymentCreate(amount=Decimal("500"), paid_on=date(2020, 1, 1))
        )

        stats = labours.statistics(db_session, company.id)
        assert stats["total_labourers"] == 2
        assert stats["total_paid"] == Decimal("1500")
        assert stats["total_paid_this_month"] == Decimal("1000")
        assert stats["total_payments"] == 2
        assert stats["payments_this_month"] == 1
        assert stats["average_payment_per_labourer"] == Decimal("750.00")
        counts = {row["project_id"]: row["count"] for row in stats["labourers_by_project"]}
        assert counts == {None: 1, project.id: 1}

    def test_foreign_project_rejected(self, db_session, company, other_project):
        with pytest.raises(NotFoundError):
            labours.create(
                db_session, company.id, LabourCreate(name="Suresh", phone="9876543210", project_id=other_project.id)
            )

    def test_update_and_delete(self, db_session, company, project):
        labour = labours.create(db_session, company.id, LabourCreate(name="Suresh", phone="9876543210"))
        updated = labours.update(db_session, company.id, labour.id, LabourUpdate(project_id=project.id))
        assert updated.project_id == project.id
        assert [row.id for row in labours.list(db_session, company.id, project.id, 50, 0)] == [labour.id]

        labours.delete(db_session, company.id, labour.id)
        with pytest.raises(NotFoundError):
            labours.get(db_session, company.id, labour.id)

    def test_delete_payment_checks_owner(self, db_session, company):
        a = labours.create(db_session, company.id, LabourCreate(name="A", phone="1"))
        b = labours.create(db_session, company.id, LabourCreate(name="B", phone="2"))
        payment = labours.add_payment(db_session, company.id, a.id, LabourPaymentCreate(amount=Decimal("10")))
        with pytest.raises(NotFoundError):
            labours.delete_payment(db_session, company.id, b.id, payment.id)
        labours.delete_payment(db_session, company.id, a.id, payment.id)
        assert labours.list_payments(db_session, company.id, a.id) == []


class TestContracts:
    def _create(self, db_session, company, project, **overrides):
        data = {
            "project_id": project.id,
            "contractor_name": "Sharma Electricals",
            "contact_number": "9988776655",
            "contract_amount": Decimal("85000"),
        }
        data.update(overrides)
        return contracts.create(db_session, company.id, ContractCreate(**data))

    def test_create_defaults_to_pending(self, db_session, company, project):
        contract = self._create(db_session, company, project)
        assert contract.work_status == "Pending"
        assert contracts.list(db_session, company.id, project.id, 50, 0)[0].id == contract.id

    def test_dates_validated(self, db_session, company, project):
        with pytest.raises(ValidationError):
            self._create(db_session, company, project, start_date=date(2026, 5, 1), end_date=date(2026, 4, 1))

        contract = self._create(db_session, company, project, start_date=date(2026, 5, 1))
        with pytest.raises(ValidationError):
            contracts.update(db_session, company.id, contract.id, ContractUpdate(end_date=date(2026, 4, 1)))

    def test_other_company_cannot_read(self, db_session, company, other_company, project):
        contract = self._create(db_session, company, project)
        with pytest.raises(NotFoundError):
            contracts.get(db_session, other_company.id, contract.id)
        assert contracts.list(db_session, other_company.id, None, 50, 0) == []


class TestFinancial:
    def test_expenses_roll_into_project_view(self, db_session, company, project):
        financial.add_expense(db_session, company.id, project.id, ExpenseCreate(category="Labour", amount=Decimal("1000")))
        expense = financial.add_expense(
            db_session, company.id, project.id, ExpenseCreate(category="Transport", amount=Decimal("250"))
        )
        financial.update_expense(db_session, company.id, expense.id, ExpenseUpdate(amount=Decimal("500")))

        db_session.expire_all()
        view = financial.get_project(db_session, company.id, project.id)
        assert view["total_spent"] == Decimal("1500")
        assert view["remaining"] == Decimal("498500")
        assert len(view["expenses"]) == 2

    def test_summary(self, db_session, company, project):
        small = financial.create_project(
            db_session,
            company.id,
            FinancialProjectCreate(
                project_code="PRJ-500",
                name="Cafe counter",
                client_name="Brew Co",
                budget=Decimal("1000"),
                quotation_amount=Decimal("1200"),
                due_date=date(2026, 12, 1),
            ),
        )
        financial.add_expense(db_session, company.id, small["id"], ExpenseCreate(category="Wood", amount=Decimal("1500")))
        financial.add_expense(db_session, company.id, project.id, ExpenseCreate(category="Paint", amount=Decimal("500")))

        db_session.expire_all()
        summary = financial.summary(db_session, company.id)
        assert summary["total_projects"] == 2
        assert summary["total_budget"] == Decimal("501000")
        assert summary["total_spent"] == Decimal("2000")
        assert summary["total_remaining"] == Decimal("499000")
        assert summary["projects_over_budget"] == 1
        assert summary["utilization_percentage"] == pytest.approx(0.4, abs=0.01)

    def test_delete_expense_other_company(self, db_session, company, other_company, project):
        expense = financial.add_expense(
            db_session, company.id, project.id, ExpenseCreate(category="Labour", amount=Decimal("10"))
        )
        with pytest.raises(NotFoundError):
            financial.delete_expense(db_session, other_company.id, expense.id)
        financial.delete_expense(db_session, company.id, expense.id)
