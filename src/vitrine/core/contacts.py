"""Contact email list editing.

An exhibit stores its contact addresses as a plain list. Editing surfaces
want one row per address, so ContactEmailList presents the list as entries
and rebuilds the whole list from submitted entries. Entries are never
persisted on their own.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from vitrine.core.exceptions import FieldError
from vitrine.db.schemas.exhibit import ContactEmailEntry
from vitrine.security.sanitization import validate_email

CONTACT_EMAILS_FIELD = "contact_emails"


@dataclass
class ContactEmailList:
    """Derived view over an exhibit's contact addresses."""

    emails: list[str] = field(default_factory=list)

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[ContactEmailEntry] | Mapping[str, ContactEmailEntry],
    ) -> "ContactEmailList":
        """Build the list from submitted rows, dropping blank ones.

        Rows may arrive as a list or as an index-keyed mapping
        ({"0": {...}, "1": {...}}); mapping order is preserved.
        """
        rows = entries.values() if isinstance(entries, Mapping) else entries
        emails = [row.email.strip() for row in rows if row.email and row.email.strip()]
        return cls(emails=emails)

    def entries(self) -> list[ContactEmailEntry]:
        """One editable row per address."""
        return [ContactEmailEntry(email=e) for e in self.emails]

    def validate(self) -> list[FieldError]:
        """Check every address, reporting each invalid one."""
        return [
            FieldError(field=CONTACT_EMAILS_FIELD, message=f"{email} is not valid")
            for email in self.emails
            if not validate_email(email)
        ]
