"""Record classes and sample rows shared by the test modules."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class SheetState(str, Enum):
    OPEN = "Open"
    CLOSED = "Closed"


@dataclass
class Label:
    Name: str
    Weight: int = 0


@dataclass
class Person:
    Id: int
    Name: str
    Nickname: Optional[str] = None
    Skills: List[Label] = field(default_factory=list)


@dataclass
class Timesheet:
    Id: int
    EmployeeId: int
    Comment: Optional[str] = None
    StartTime: Optional[datetime] = None
    Hours: float = 0.0
    Approved: bool = False
    State: SheetState = SheetState.OPEN
    Deleted: bool = False
    Employee: Optional[Person] = None
    Tags: List[Label] = field(default_factory=list)
    Keywords: List[str] = field(default_factory=list)


class Invoice(BaseModel):
    Id: int
    Total: float
    Customer: Optional[str] = None
    Lines: List[str] = []


BOB = Person(Id=1, Name="Bob", Skills=[Label("python", 3)])
ANN = Person(Id=2, Name="Ann", Nickname="Annie")


def sample_timesheets() -> List[Timesheet]:
    return [
        Timesheet(
            Id=1,
            EmployeeId=1,
            Comment="ran late",
            StartTime=datetime(2015, 3, 14, 9, 26, 53),
            Hours=8.0,
            Approved=True,
            State=SheetState.CLOSED,
            Employee=BOB,
            Tags=[Label("urgent", 2)],
            Keywords=["billable"],
        ),
        Timesheet(
            Id=2,
            EmployeeId=2,
            Comment="don't bill",
            StartTime=datetime(2015, 3, 15, 8, 0, 0),
            Hours=4.0,
            Employee=ANN,
            Tags=[Label("internal", 1)],
        ),
        Timesheet(
            Id=3,
            EmployeeId=1,
            Hours=2.5,
            Deleted=True,
            Employee=BOB,
        ),
        Timesheet(
            Id=4,
            EmployeeId=2,
            Comment="weekend",
            StartTime=datetime(2015, 3, 21, 10, 0, 0),
            Hours=6.0,
            Approved=True,
            Tags=[Label("urgent", 5), Label("overtime", 3)],
            Keywords=["billable", "weekend"],
        ),
        Timesheet(
            Id=5,
            EmployeeId=3,
            Comment="training",
            StartTime=datetime(2015, 2, 1, 9, 0, 0),
            Hours=1.5,
        ),
    ]
