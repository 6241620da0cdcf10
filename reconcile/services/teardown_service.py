"""
Ordered teardown of dependent record subgraphs.

A plan is a plain list of steps run top to bottom, children before parents.
The order is not derived from foreign keys: whenever a table joins the chat
graph, CHAT_TEARDOWN_PLAN has to be re-checked by hand.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from sqlalchemy import delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, SQLModel, select

from reconcile.core.exceptions import TeardownStepError
from reconcile.core.logging_config import LogCategory, log_error, log_info
from reconcile.models import ChatRoom, Membership, Message, Notification, Reaction
from reconcile.schemas.teardown import TeardownReport, TeardownStepResult


@dataclass(frozen=True, eq=False)
class TeardownStep:
    model: type[SQLModel]
    where: Optional[Callable[[], ColumnElement]] = None

    @property
    def table(self) -> str:
        return self.model.__tablename__


CHAT_TEARDOWN_PLAN: List[TeardownStep] = [
    TeardownStep(Notification),
    TeardownStep(Reaction),
    TeardownStep(Message),
    TeardownStep(Membership),
    TeardownStep(ChatRoom),
]


class TeardownService:
    """
    Executes a teardown plan strictly in order.

    Every step is committed on its own, so steps that finished before a
    failure stay deleted. A failing step stops the run; nothing is retried.
    """

    def __init__(self, session: Session):
        self.session = session

    def counts(self, plan: Sequence[TeardownStep] = CHAT_TEARDOWN_PLAN) -> List[TeardownStepResult]:
        """Current row count of each table in the plan (``deleted`` holds the count)."""
        results = []
        for step in plan:
            statement = select(func.count()).select_from(step.model)
            if step.where is not None:
                statement = statement.where(step.where())
            results.append(TeardownStepResult(table=step.table, deleted=self.session.exec(statement).one()))
        return results

    def run(self, plan: Sequence[TeardownStep] = CHAT_TEARDOWN_PLAN) -> TeardownReport:
        """
        Delete every row matched by each step, in plan order.

        Raises:
            TeardownStepError: when a step fails; carries the completed steps
        """
        completed: List[TeardownStepResult] = []
        for step in plan:
            statement = delete(step.model)
            if step.where is not None:
                statement = statement.where(step.where())
            try:
                result = self.session.exec(statement)
                self.session.commit()
            except SQLAlchemyError as exc:
                self.session.rollback()
                log_error(exc, table=step.table, completed=[s.table for s in completed])
                raise TeardownStepError(step.table, exc, completed) from exc

            deleted = max(result.rowcount or 0, 0)
            completed.append(TeardownStepResult(table=step.table, deleted=deleted))
            log_info(f"Deleted {deleted} rows", category=LogCategory.TEARDOWN, table=step.table)

        return TeardownReport(steps=completed)
