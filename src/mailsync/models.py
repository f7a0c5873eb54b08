"""Domain types shared by the sync engine and the service client.

Flag and folder vocabularies are Literal aliases (they are sent over the wire
verbatim). Threads and thread items are Pydantic models so that service
responses are validated as they are parsed.

Usage:
    from mailsync.models import Thread, ThreadItem

    thread = Thread.model_validate(response["thread"])
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

FlagStatus = Literal["notFlagged", "flagged", "complete"]
FlagColor = Literal["red", "orange", "yellow", "green", "blue", "purple"]
MailFolder = Literal["inbox", "sentitems", "drafts", "deleteditems", "junkemail", "archive"]
ThreadItemKind = Literal["email", "comment", "note", "divider"]

# Destination folders for the fixed-destination move aliases
ARCHIVE_FOLDER: MailFolder = "archive"
JUNK_FOLDER: MailFolder = "junkemail"
TRASH_FOLDER: MailFolder = "deleteditems"

DEFAULT_FLAG_COLOR: FlagColor = "red"

# Denormalized mail fields that only email-kind thread items may carry
MAIL_ONLY_FIELDS = (
    "email_id",
    "from_email",
    "from_name",
    "subject",
    "body_preview",
    "is_read",
    "has_attachments",
)


class Thread(BaseModel):
    """A user-curated grouping of mail items and notes."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    title: str | None = None
    item_count: int = 0
    email_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_activity: datetime | None = None
    items: list["ThreadItem"] = Field(default_factory=list)

    def email_ids(self) -> list[str]:
        """Mail identifiers of the active email items, in item order."""
        return [
            item.email_id
            for item in self.items
            if item.kind == "email" and item.email_id and item.removed_at is None
        ]


class ThreadItem(BaseModel):
    """One entry of a custom thread.

    Email items carry denormalized mail fields so a thread can be rendered
    without joining against the mail list. Any other kind must leave those
    fields unset.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    thread_id: str
    kind: ThreadItemKind = Field(alias="item_type")
    item_date: datetime | None = None
    content: str | None = None
    removed_at: datetime | None = None

    email_id: str | None = None
    from_email: str | None = None
    from_name: str | None = None
    subject: str | None = None
    body_preview: str | None = None
    is_read: bool | None = None
    has_attachments: bool | None = None

    @model_validator(mode="after")
    def check_mail_fields(self) -> "ThreadItem":
        """Reject mail-only fields on non-email items."""
        if self.kind != "email":
            populated = [name for name in MAIL_ONLY_FIELDS if getattr(self, name) is not None]
            if populated:
                raise ValueError(
                    f"{self.kind} item {self.id} must not carry mail fields: "
                    + ", ".join(populated)
                )
        return self


Thread.model_rebuild()
