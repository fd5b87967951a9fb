"""Meeting records as supplied by storage and the Zoom sync."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

DEFAULT_COLOR_CLASSES = "bg-gray-100 text-gray-900 border-l-4 border-gray-400"


class Category(Enum):
    """Closed set of meeting categories (presentation only)."""

    BOARD = "Board"
    TRAINING = "Training"
    SOCIAL = "Social"
    PROJECT = "Project"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "Category":
        normalized = (value or "").strip().lower()
        if normalized == "board":
            return cls.BOARD
        elif normalized == "training":
            return cls.TRAINING
        elif normalized == "social":
            return cls.SOCIAL
        # Storage default for missing or unknown categories
        return cls.PROJECT

    @property
    def color_classes(self) -> str:
        """CSS classes for a calendar block of this category."""
        if self is Category.BOARD:
            return "bg-purple-100 text-purple-900 border-l-4 border-purple-500 hover:bg-purple-200"
        elif self is Category.TRAINING:
            return "bg-green-100 text-green-900 border-l-4 border-green-500 hover:bg-green-200"
        elif self is Category.SOCIAL:
            return "bg-orange-100 text-orange-900 border-l-4 border-orange-500 hover:bg-orange-200"
        elif self is Category.PROJECT:
            return "bg-blue-100 text-blue-900 border-l-4 border-blue-500 hover:bg-blue-200"
        return DEFAULT_COLOR_CLASSES

    @property
    def badge_classes(self) -> str:
        """CSS classes for the category pill on a meeting card."""
        if self is Category.BOARD:
            return "bg-purple-100 text-purple-800 border-purple-200"
        elif self is Category.TRAINING:
            return "bg-green-100 text-green-800 border-green-200"
        elif self is Category.SOCIAL:
            return "bg-orange-100 text-orange-800 border-orange-200"
        elif self is Category.PROJECT:
            return "bg-blue-100 text-blue-800 border-blue-200"
        return "bg-gray-100 text-gray-800"


CATEGORIES = list(Category)


@dataclass(frozen=True)
class Meeting:
    """A booked meeting.

    ``date`` and ``start_time`` are civil values in the app timezone; nothing
    in the calendar engine re-derives them from an instant.
    """

    id: str
    date: str
    start_time: str
    duration_minutes: int
    category: Category = Category.PROJECT
    title: str = ""
    description: str = ""
    host: str = ""
    email: Optional[str] = None
    zoom_link: str = ""
    zoom_password: Optional[str] = None
    zoom_meeting_id: Optional[str] = None

    def with_changes(self, **changes: Any) -> "Meeting":
        return replace(self, **changes)

    def invitation_text(self) -> str:
        """Plain-text invitation copied from the meeting card."""
        return "\n".join(
            [
                f"Topic: {self.title}",
                f"Date: {self.date}",
                f"Time: {self.start_time} ({self.duration_minutes} min)",
                f"Zoom link: {self.zoom_link}",
            ]
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Meeting":
        """Create a meeting from a storage row."""
        zoom_meeting_id = data.get("zoom_meeting_id")
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            start_time=str(data["start_time"]),
            duration_minutes=int(data.get("duration_minutes") or 60),
            category=Category.from_string(data.get("category")),
            title=data.get("title") or "",
            description=data.get("description") or "",
            host=data.get("host") or "",
            email=data.get("email") or None,
            zoom_link=data.get("zoom_link") or "",
            zoom_password=data.get("zoom_password") or None,
            zoom_meeting_id=str(zoom_meeting_id) if zoom_meeting_id else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Storage row for this meeting."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "host": self.host,
            "email": self.email,
            "date": self.date,
            "start_time": self.start_time,
            "duration_minutes": self.duration_minutes,
            "zoom_link": self.zoom_link,
            "zoom_password": self.zoom_password,
            "category": self.category.value,
            "zoom_meeting_id": self.zoom_meeting_id,
        }
