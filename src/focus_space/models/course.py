"""Course data models."""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")

WEEKDAY_NAMES = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

# Sunday = 0, matching the stored weekday numbers
_DAY_LABELS = ["日", "一", "二", "三", "四", "五", "六"]


class CourseCategory(str, Enum):
    """Kind of course offering."""

    PERSONAL = "personal"  # One-on-one training, any free slot
    GROUP = "group"  # Fixed schedule class
    SPECIAL = "special"  # Workshops, seasonal programs


class CourseDifficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


def normalize_time(value: str) -> str | None:
    """Normalize "9:05" to "09:05". Returns None for malformed input."""
    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        return None
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def sunday_weekday(day: date) -> int:
    """Weekday number with Sunday = 0 and Saturday = 6."""
    return (day.weekday() + 1) % 7


def parse_date(value: date | datetime | str | None) -> date | None:
    """Parse an ISO date (or datetime) into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) > 10:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)


def parse_weekdays(values: list) -> list[int]:
    """Convert weekday names or numbers into sorted unique ints.

    Numbers are kept as given so Course.validate() can report out-of-range
    days. Unknown names raise ValueError.
    """
    result: set[int] = set()
    for value in values or []:
        if isinstance(value, str):
            text = value.strip()
            day = WEEKDAY_NAMES.get(text.lower())
            if day is None and text.lstrip("-").isdigit():
                day = int(text)
        elif isinstance(value, int) and not isinstance(value, bool):
            day = value
        else:
            day = None
        if day is None:
            raise ValueError(f"Unknown weekday: {value!r}")
        result.add(day)
    return sorted(result)


@dataclass
class TimeSlot:
    """A daily time window in "HH:MM" format."""

    start_time: str
    end_time: str

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    def is_valid(self) -> bool:
        start = normalize_time(self.start_time)
        end = normalize_time(self.end_time)
        if start is None or end is None:
            return False
        return time_to_minutes(end) > time_to_minutes(start)

    def overlaps(self, other: "TimeSlot") -> bool:
        return self.start_minutes < other.end_minutes and other.start_minutes < self.end_minutes

    def to_dict(self) -> dict:
        return {"start_time": self.start_time, "end_time": self.end_time}

    @classmethod
    def from_dict(cls, data: dict) -> "TimeSlot":
        start = data.get("start_time") or data.get("startTime") or ""
        end = data.get("end_time") or data.get("endTime") or ""
        return cls(
            start_time=normalize_time(start) or start,
            end_time=normalize_time(end) or end,
        )


@dataclass
class Course:
    """A scheduled class or personal-training offering."""

    title: str
    description: str
    start_date: date
    end_date: date
    weekdays: list[int]
    time_slots: list[TimeSlot]
    category: CourseCategory = CourseCategory.PERSONAL
    difficulty: CourseDifficulty = CourseDifficulty.BEGINNER
    duration: int = 60  # Minutes per session
    price: float = 0
    max_participants: int | None = None
    instructor: str = ""
    image_url: str = ""
    features: list[str] = field(default_factory=list)
    requirements: str = ""
    allow_late_enrollment: bool = False
    is_active: bool = True
    display_order: int = 0
    created_by: str = ""
    updated_by: str = ""
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        if self.max_participants is None:
            self.max_participants = 1 if self.category == CourseCategory.PERSONAL else 10

    def validate(self) -> dict[str, str]:
        """Return a field -> message map of validation problems."""
        errors: dict[str, str] = {}

        if not self.title or not self.title.strip():
            errors["title"] = "課程名稱為必填"
        elif len(self.title) > 100:
            errors["title"] = "課程名稱不能超過100個字元"

        if not self.description or not self.description.strip():
            errors["description"] = "課程描述為必填"
        elif len(self.description) > 2000:
            errors["description"] = "課程描述不能超過2000個字元"

        if not 15 <= self.duration <= 480:
            errors["duration"] = "課程時長需介於15分鐘到8小時之間"

        if self.price < 0:
            errors["price"] = "價格不能為負數"

        if not 1 <= (self.max_participants or 0) <= 50:
            errors["max_participants"] = "參與人數需介於1到50人之間"

        if self.instructor and len(self.instructor) > 50:
            errors["instructor"] = "教練名稱不能超過50個字元"

        if self.requirements and len(self.requirements) > 1000:
            errors["requirements"] = "上課要求不能超過1000個字元"

        if self.start_date is None:
            errors["start_date"] = "請設定課程開始日期"
        if self.end_date is None:
            errors["end_date"] = "請設定課程結束日期"
        if self.start_date and self.end_date and self.end_date < self.start_date:
            errors["end_date"] = "結束日期必須晚於或等於開始日期"

        if not self.weekdays or any(not 0 <= d <= 6 for d in self.weekdays):
            errors["weekdays"] = "請選擇有效的上課星期（0-6）"

        if not self.time_slots:
            errors["time_slots"] = "請設定上課時間"
        elif not all(slot.is_valid() for slot in self.time_slots):
            errors["time_slots"] = "結束時間必須晚於開始時間 (HH:mm)"

        return errors

    def has_started(self, today: date) -> bool:
        return self.start_date <= today

    def is_bookable(self, today: date | None = None) -> bool:
        """Check whether new bookings are accepted.

        Personal courses are always bookable while active. Group and special
        courses accept bookings before they start, or while running when late
        enrollment is allowed.
        """
        if not self.is_active:
            return False

        if self.category == CourseCategory.PERSONAL:
            return True

        today = today or date.today()
        if self.start_date > today:
            return True

        return self.allow_late_enrollment and self.end_date > today

    def runs_on(self, day: date) -> bool:
        """Check whether the course has a session on the given day."""
        if not self.start_date <= day <= self.end_date:
            return False
        return sunday_weekday(day) in self.weekdays

    def schedule_description(self) -> str:
        """Human-readable schedule, e.g. "星期一、星期三 09:00-10:00"."""
        weekday_text = "、".join(f"星期{_DAY_LABELS[d]}" for d in self.weekdays)
        time_text = "、".join(f"{s.start_time}-{s.end_time}" for s in self.time_slots)
        return f"{weekday_text} {time_text}"

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
            "duration": self.duration,
            "price": self.price,
            "max_participants": self.max_participants,
            "instructor": self.instructor,
            "image_url": self.image_url,
            "features": list(self.features),
            "requirements": self.requirements,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "weekdays": list(self.weekdays),
            "time_slots": [slot.to_dict() for slot in self.time_slots],
            "allow_late_enrollment": self.allow_late_enrollment,
            "is_active": self.is_active,
            "display_order": self.display_order,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
        }

    def to_json(self) -> dict:
        """Dictionary for API responses (storage fields plus identity)."""
        return {
            "id": self.id,
            **self.to_dict(),
            "schedule": self.schedule_description(),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        id: int | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> "Course":
        """Create from dictionary."""
        return cls(
            id=id,
            title=data["title"],
            description=data["description"],
            category=CourseCategory(data.get("category", "personal")),
            difficulty=CourseDifficulty(data.get("difficulty", "beginner")),
            duration=int(data.get("duration", 60)),
            price=float(data.get("price", 0)),
            max_participants=data.get("max_participants"),
            instructor=data.get("instructor") or "",
            image_url=data.get("image_url") or "",
            features=list(data.get("features") or []),
            requirements=data.get("requirements") or "",
            start_date=parse_date(data.get("start_date")),
            end_date=parse_date(data.get("end_date")),
            weekdays=parse_weekdays(data.get("weekdays") or []),
            time_slots=[TimeSlot.from_dict(s) for s in data.get("time_slots") or []],
            allow_late_enrollment=bool(data.get("allow_late_enrollment", False)),
            is_active=bool(data.get("is_active", True)),
            display_order=int(data.get("display_order", 0)),
            created_by=data.get("created_by") or "",
            updated_by=data.get("updated_by") or "",
            created_at=created_at,
            updated_at=updated_at,
        )
