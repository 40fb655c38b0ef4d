from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles held by users of an organization."""

    SUPER_ADMIN = "super-admin"
    HR = "hr"
    HOD = "hod"
    STAFF = "staff"
    INTERN = "intern"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class LeaveType(str, Enum):
    PL = "PL"
    CL = "CL"
    SL = "SL"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"
    ADOPTION = "ADOPTION"
    SABBATICAL = "SABBATICAL"
    WFH = "WFH"
    BEREAVEMENT = "BEREAVEMENT"
    PARENTAL = "PARENTAL"
    COMP_OFF = "COMP_OFF"
    LWP = "LWP"
    VACATION = "VACATION"

    @property
    def label(self) -> str:
        return LEAVE_TYPE_NAMES[self]


LEAVE_TYPE_NAMES = {
    LeaveType.PL: "Privilege Leave",
    LeaveType.CL: "Casual Leave",
    LeaveType.SL: "Sick Leave",
    LeaveType.MATERNITY: "Maternity Leave",
    LeaveType.PATERNITY: "Paternity Leave",
    LeaveType.ADOPTION: "Adoption Leave",
    LeaveType.SABBATICAL: "Sabbatical",
    LeaveType.WFH: "Work From Home",
    LeaveType.BEREAVEMENT: "Bereavement Leave",
    LeaveType.PARENTAL: "Parental Leave",
    LeaveType.COMP_OFF: "Compensatory Off",
    LeaveType.LWP: "Leave Without Pay",
    LeaveType.VACATION: "Vacation",
}

# Leave types only offered to one gender.
GENDER_RESTRICTED_LEAVE_TYPES = {
    LeaveType.MATERNITY: frozenset({Gender.FEMALE}),
    LeaveType.PATERNITY: frozenset({Gender.MALE}),
}


class RequestKind(str, Enum):
    LEAVE = "leave"
    ATTENDANCE_EDIT = "attendance_edit"
    RESIGNATION = "resignation"


class RequestStatus(str, Enum):
    """Review states shared by every request kind."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self != RequestStatus.PENDING


class LedgerDirection(str, Enum):
    DEBIT = "debit"
    CREDIT = "credit"


class DayStatus(str, Enum):
    PRESENT = "present"
    INCOMPLETE = "incomplete"
    ABSENT = "absent"


class ResignationType(str, Enum):
    VOLUNTARY = "voluntary"
    RETIREMENT = "retirement"
    TERMINATION = "termination"


class NoticePeriod(str, Enum):
    DAYS_30 = "30 days"
    DAYS_60 = "60 days"
    DAYS_90 = "90 days"
    IMMEDIATE = "immediate"

    @property
    def days(self) -> int:
        return {
            NoticePeriod.DAYS_30: 30,
            NoticePeriod.DAYS_60: 60,
            NoticePeriod.DAYS_90: 90,
            NoticePeriod.IMMEDIATE: 0,
        }[self]


class ResignationStatus(str, Enum):
    """Exit pipeline states persisted on the resignation."""

    PENDING = "pending"
    APPROVED = "approved"
    IN_CLEARANCE = "in-clearance"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def review_status(self) -> RequestStatus:
        if self == ResignationStatus.PENDING:
            return RequestStatus.PENDING
        if self == ResignationStatus.REJECTED:
            return RequestStatus.REJECTED
        if self == ResignationStatus.CANCELLED:
            return RequestStatus.CANCELLED
        return RequestStatus.APPROVED

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_RESIGNATION_STATUSES

    @classmethod
    def from_review(cls, status: RequestStatus) -> "ResignationStatus":
        return {
            RequestStatus.PENDING: cls.PENDING,
            RequestStatus.APPROVED: cls.APPROVED,
            RequestStatus.REJECTED: cls.REJECTED,
            RequestStatus.CANCELLED: cls.CANCELLED,
        }[status]


ACTIVE_RESIGNATION_STATUSES = frozenset(
    {ResignationStatus.PENDING, ResignationStatus.APPROVED, ResignationStatus.IN_CLEARANCE}
)


class ClearanceItemStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ClearanceStatus(str, Enum):
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"
    COMPLETED = "completed"


class SettlementStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
