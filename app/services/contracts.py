"""Contractor agreements attached to projects."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.models.contract import Contract
from app.models.projects import Project
from app.schemas.contract import ContractCreate, ContractUpdate
from app.services.common import apply_pagination, coerce_int
from app.services.projects import ensure_project
from app.services.response import ListResponseMixin


def _validate_dates(start_date, end_date) -> None:
    if start_date and end_date and end_date < start_date:
        raise ValidationError("End date must be after start date")


def _get(db: Session, company_id: int, contract_id) -> Contract:
    contract = db.get(Contract, coerce_int(contract_id))
    if not contract or contract.project.company_id != company_id:
        raise NotFoundError("Contract not found")
    return contract


class Contracts(ListResponseMixin):
    @staticmethod
    def create(db: Session, company_id: int, payload: ContractCreate) -> Contract:
        ensure_project(db, payload.project_id, company_id)
        _validate_dates(payload.start_date, payload.end_date)
        contract = Contract(**payload.model_dump())
        db.add(contract)
        db.commit()
        db.refresh(contract)
        return contract

    @staticmethod
    def get(db: Session, company_id: int, contract_id) -> Contract:
        return _get(db, company_id, contract_id)

    @staticmethod
    def list(db: Session, company_id: int, project_id, limit: int, offset: int) -> list[Contract]:
        query = db.query(Contract).join(Project, Contract.project_id == Project.id).filter(
            Project.company_id == company_id
        )
        if project_id is not None:
            project = ensure_project(db, project_id, company_id)
            query = query.filter(Contract.project_id == project.id)
        query = query.order_by(Contract.created_at.desc(), Contract.id.desc())
        return apply_pagination(query, limit, offset).all()

    @staticmethod
    def update(db: Session, company_id: int, contract_id, payload: ContractUpdate) -> Contract:
        contract = _get(db, company_id, contract_id)
        data = payload.model_dump(exclude_unset=True)
        if data.get("project_id") is not None:
            ensure_project(db, data["project_id"], company_id)
        _validate_dates(data.get("start_date", contract.start_date), data.get("end_date", contract.end_date))
        for field, value in data.items():
            setattr(contract, field, value)
        db.commit()
        db.refresh(contract)
        return contract

    @staticmethod
    def delete(db: Session, company_id: int, contract_id) -> None:
        contract = _get(db, company_id, contract_id)
        db.delete(contract)
        db.commit()


contracts = Contracts()
