# Models package; importing it registers every table on Base.metadata

from .account import Account
from .user import User
from .customer import Customer
from .lead import Lead
from .product import Product
from .quote import Quote, QuoteLine, QuoteSequence
from .appointment import Appointment
from .visit import (
    MediaAttachment,
    SurveyModule,
    Transcription,
    VisitObservation,
    VisitSession,
)
from .boiler import BoilerSpecification
from .audit_log import AuditLog

__all__ = [
    "Account",
    "User",
    "Customer",
    "Lead",
    "Product",
    "Quote",
    "QuoteLine",
    "QuoteSequence",
    "Appointment",
    "VisitSession",
    "SurveyModule",
    "Transcription",
    "VisitObservation",
    "MediaAttachment",
    "BoilerSpecification",
    "AuditLog",
]
