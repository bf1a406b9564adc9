"""Testimonial data model."""

from dataclasses import dataclass, field
from datetime import datetime

# Keywords for the public category filter, matched against tags,
# content and achievements.
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "weight-loss": ("減重", "減脂", "瘦身", "減肥", "體重", "脂肪", "瘦"),
    "muscle-gain": ("增肌", "塑形", "肌肉", "線條", "體態", "身材"),
    "health": ("健康", "復健", "疼痛", "改善", "治療", "康復"),
    "fitness": ("體能", "耐力", "運動", "訓練", "體力"),
}

MAX_TAGS = 10
MAX_ACHIEVEMENTS = 20


@dataclass
class Testimonial:
    """A customer review shown on the public site once published."""

    member_name: str
    content: str
    rating: float  # 1.0 - 5.0 in 0.1 steps
    age: int | None = None
    occupation: str = ""
    image_url: str = ""
    before_image_url: str = ""
    after_image_url: str = ""
    is_published: bool = False
    tags: list[str] = field(default_factory=list)
    training_period: str = ""
    achievements: list[str] = field(default_factory=list)
    published_at: datetime | None = None
    sort_order: int = 0
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        self._sync_published_at()

    def _sync_published_at(self, now: datetime | None = None) -> None:
        if self.is_published and self.published_at is None:
            self.published_at = now or datetime.now()
        elif not self.is_published:
            self.published_at = None

    def set_published(self, published: bool, now: datetime | None = None) -> None:
        """Change the publish flag, stamping or clearing published_at."""
        self.is_published = published
        self._sync_published_at(now)

    def publish(self) -> None:
        self.set_published(True)

    def unpublish(self) -> None:
        self.set_published(False)

    def validate(self) -> dict[str, str]:
        """Return a field -> message map of validation problems."""
        errors: dict[str, str] = {}

        name = (self.member_name or "").strip()
        if not name:
            errors["member_name"] = "會員姓名為必填"
        elif len(name) > 50:
            errors["member_name"] = "姓名不能超過50個字元"

        if self.age is not None and not 10 <= self.age <= 100:
            errors["age"] = "年齡需介於10到100歲之間"

        if self.occupation and len(self.occupation) > 100:
            errors["occupation"] = "職業不能超過100個字元"

        content = (self.content or "").strip()
        if not content:
            errors["content"] = "見證內容為必填"
        elif len(content) < 10:
            errors["content"] = "見證內容至少需要10個字元"
        elif len(content) > 2000:
            errors["content"] = "見證內容不能超過2000個字元"

        if self.rating is None:
            errors["rating"] = "請提供評分"
        elif not 1 <= self.rating <= 5:
            errors["rating"] = "評分需介於1到5分之間"
        elif abs(self.rating * 10 - round(self.rating * 10)) > 1e-6:
            errors["rating"] = "評分必須是0.1的倍數（例如：1.0, 2.5, 4.8）"

        if len(self.tags) > MAX_TAGS:
            errors["tags"] = "標籤數量不能超過10個"

        if len(self.achievements) > MAX_ACHIEVEMENTS:
            errors["achievements"] = "成就數量不能超過20個"

        if self.training_period and len(self.training_period) > 50:
            errors["training_period"] = "訓練期間描述不能超過50個字元"

        return errors

    def star_display(self) -> str:
        full = int(round(self.rating))
        return "★" * full + "☆" * (5 - full)

    def short_content(self, max_length: int = 100) -> str:
        if len(self.content) <= max_length:
            return self.content
        return self.content[:max_length] + "..."

    def has_before_after_photos(self) -> bool:
        return bool(self.before_image_url and self.after_image_url)

    def matches_category(self, category: str) -> bool:
        """Keyword match for the public category filter. Unknown categories match."""
        keywords = CATEGORY_KEYWORDS.get(category)
        if keywords is None:
            return True

        text = " ".join(
            [tag.lower().strip() for tag in self.tags]
            + [self.content.lower()]
            + [a.lower() for a in self.achievements]
        )
        return any(keyword in text for keyword in keywords)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "member_name": self.member_name,
            "age": self.age,
            "occupation": self.occupation,
            "content": self.content,
            "rating": self.rating,
            "image_url": self.image_url,
            "before_image_url": self.before_image_url,
            "after_image_url": self.after_image_url,
            "is_published": self.is_published,
            "tags": list(self.tags),
            "training_period": self.training_period,
            "achievements": list(self.achievements),
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "sort_order": self.sort_order,
        }

    def to_json(self) -> dict:
        return {
            "id": self.id,
            **self.to_dict(),
            "tags_string": ", ".join(self.tags),
            "achievements_string": ", ".join(self.achievements),
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
    ) -> "Testimonial":
        """Create from dictionary."""
        published_at = data.get("published_at")
        return cls(
            id=id,
            member_name=data.get("member_name") or "",
            age=data.get("age"),
            occupation=data.get("occupation") or "",
            content=data.get("content") or "",
            rating=float(data["rating"]) if data.get("rating") is not None else None,
            image_url=data.get("image_url") or "",
            before_image_url=data.get("before_image_url") or "",
            after_image_url=data.get("after_image_url") or "",
            is_published=bool(data.get("is_published", False)),
            tags=list(data.get("tags") or []),
            training_period=data.get("training_period") or "",
            achievements=list(data.get("achievements") or []),
            published_at=datetime.fromisoformat(published_at) if published_at else None,
            sort_order=int(data.get("sort_order", 0)),
            created_at=created_at,
            updated_at=updated_at,
        )
