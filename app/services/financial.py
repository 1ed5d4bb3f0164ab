from decimal import Decimal

from sqlalchemy.orm import Session, selectinload

from app.errors import NotFoundError
from app.logging import get_logger
from app.models.projects import Project, ProjectExpense
from app.schemas.financial import ExpenseCreate, ExpenseUpdate, FinancialProjectCreate
from app.schemas.projects import ProjectCreate
from app.services.common import coerce_int
from app.services.projects import ensure_project, projects

logger = get_logger(__name__)

ZERO = Decimal("0")


def _project_view(project: Project) -> dict:
    total_spent = sum((expense.amount for expense in project.expenses), ZERO)
    remaining = project.budget - total_spent if project.budget is not None else None
    return {
        "id": project.id,
        "project_code": project.project_code,
        "name": project.name,
        "client_name": project.client_name,
        "status": project.status,
        "budget": project.budget,
        "quotation_amount": project.quotation_amount,
        "due_date": project.due_date,
        "total_spent": total_spent,
        "remaining": remaining,
        "expenses": list(project.expenses),
    }


def _get_expense(db: Session, company_id: int, expense_id) -> ProjectExpense:
    expense = db.get(ProjectExpense, coerce_int(expense_id))
    if not expense or expense.project.company_id != company_id:
        raise NotFoundError("Expense not found")
    return expense


class Financial:
    @staticmethod
    def list_projects(db: Session, company_id: int) -> list[dict]:
        rows = (
            db.query(Project)
            .options(selectinload(Project.expenses))
            .filter(Project.company_id == company_id)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .all()
        )
        return [_project_view(project) for project in rows]

    @staticmethod
    def get_project(db: Session, company_id: int, project_id) -> dict:
        return _project_view(ensure_project(db, project_id, company_id))

    @staticmethod
    def create_project(db: Session, company_id: int, payload: FinancialProjectCreate) -> dict:
        project = projects.create(db, company_id, ProjectCreate(**payload.model_dump()))
        return _project_view(project)

    @staticmethod
    def add_expense(db: Session, company_id: int, project_id, payload: ExpenseCreate) -> ProjectExpense:
        project = ensure_project(db, project_id, company_id)
        expense = ProjectExpense(project_id=project.id, category=payload.category, amount=payload.amount)
        db.add(expense)
        db.commit()
        db.refresh(expense)
        logger.info("expense_added id=%s project_id=%s amount=%s", expense.id, project.id, expense.amount)
        return expense

    @staticmethod
    def update_expense(db: Session, company_id: int, expense_id, payload: ExpenseUpdate) -> ProjectExpense:
        expense = _get_expense(db, company_id, expense_id)
        for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(expense, field, value)
        db.commit()
        db.refresh(expense)
        return expense

    @staticmethod
    def delete_expense(db: Session, company_id: int, expense_id) -> None:
        expense = _get_expense(db, company_id, expense_id)
        db.delete(expense)
        db.commit()

    @staticmethod
    def summary(db: Session, company_id: int) -> dict:
        views = Financial.list_projects(db, company_id)
        total_budget = sum((view["budget"] or ZERO for view in views), ZERO)
        total_spent = sum((view["total_spent"] for view in views), ZERO)
        over_budget = sum(
            1 for view in views if view["budget"] is not None and view["total_spent"] > view["budget"]
        )
        utilization = float(round(total_spent / total_budget * 100, 2)) if total_budget > 0 else 0.0
        return {
            "total_budget": total_budget,
            "total_spent": total_spent,
            "total_remaining": total_budget - total_spent,
            "total_projects": len(views),
            "projects_over_budget": over_budget,
            "utilization_percentage": utilization,
        }


financial = Financial()
