"""SQLAlchemy ORM models for JobTrail.

All models are exported from this module for convenient imports:
    from jobtrail.models import Application, Contact, ...

Models are organized by domain:
- application.py: Application, TimelineEvent
- contact.py: Contact
- document.py: ApplicationDocument
"""

from jobtrail.models.application import Application, TimelineEvent
from jobtrail.models.base import Base, IdMixin, TimestampMixin, UTCDateTime
from jobtrail.models.contact import Contact
from jobtrail.models.document import ApplicationDocument

__all__ = [
    # Base classes
    "Base",
    "IdMixin",
    "TimestampMixin",
    "UTCDateTime",
    # Root
    "Application",
    # Children
    "Contact",
    "TimelineEvent",
    "ApplicationDocument",
]
