"""Create the schema and seed the reference catalogues: report reasons, tags and avatars."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from klasmwen.core.logging import configure_logging
from klasmwen.db.session import SessionLocal, create_tables
from klasmwen.models import Avatar, ReportReason, Tag

logger = logging.getLogger(__name__)

REPORT_REASONS: list[tuple[str, str]] = [
    ("Spam", "Unsolicited promotional content, repetitive messages or irrelevant advertisements"),
    ("Harassment", "Abuse, intimidation or malicious behavior targeting an individual or group"),
    ("Hate Speech", "Content attacking people based on protected characteristics"),
    ("Misinformation", "False or misleading information presented as fact"),
    ("Inappropriate Content", "Explicit material, graphic violence or content unsuitable for a school platform"),
    ("Off-Topic", "Content unrelated to the course or academic discussion"),
    ("Plagiarism", "Someone else's work presented without attribution"),
    ("Personal Information", "Private details shared without consent"),
    ("Other", "Anything else that breaks the community guidelines"),
]

TAGS: list[str] = [
    "algebra",
    "geometry",
    "biology",
    "chemistry",
    "physics",
    "world history",
    "haiti history",
    "haitian lit",
    "writing",
    "computer science",
    "art history",
    "music theory",
]

_DICEBEAR = "https://api.dicebear.com/9.x"
DEFAULT_AVATARS: list[str] = [f"{_DICEBEAR}/identicon/svg?seed=klasmwen-{i}" for i in range(1, 6)]
AVATARS: list[str] = [f"{_DICEBEAR}/adventurer/svg?seed=klasmwen-{i}" for i in range(1, 21)]


def seed_report_reasons(db: Session) -> int:
    """Insert missing report reasons; returns how many were added."""
    existing = set(db.scalars(select(ReportReason.label)).all())
    added = 0
    for label, description in REPORT_REASONS:
        if label in existing:
            continue
        db.add(ReportReason(label=label, description=description, active=True))
        added += 1
    db.commit()
    return added


def seed_tags(db: Session) -> int:
    existing = set(db.scalars(select(Tag.name)).all())
    missing = [name for name in TAGS if name not in existing]
    db.add_all(Tag(name=name) for name in missing)
    db.commit()
    return len(missing)


def seed_avatars(db: Session) -> int:
    """Insert missing catalogue avatars, defaults included; returns how many were added."""
    existing = set(db.scalars(select(Avatar.url)).all())
    wanted = [(url, True) for url in DEFAULT_AVATARS] + [(url, False) for url in AVATARS]
    missing = [Avatar(url=url, is_default=is_default) for url, is_default in wanted if url not in existing]
    db.add_all(missing)
    db.commit()
    return len(missing)


def init_db() -> None:
    """Initialize the database by creating all tables and seeding reference data."""
    create_tables()
    with SessionLocal() as db:
        reasons = seed_report_reasons(db)
        tags = seed_tags(db)
        avatars = seed_avatars(db)
    logger.info(
        "Database initialized; added %d report reasons, %d tags and %d avatars",
        reasons,
        tags,
        avatars,
    )


if __name__ == "__main__":
    configure_logging()
    init_db()
