from .users import Token, UserCreate, UserUpdate, UserOut, CompanySettingsUpdate, CompanySettingsOut
from .regies import RegieCreate, RegieUpdate, RegieOut
from .products import ProductCreate, ProductUpdate, ProductOut
from .interventions import ClientInfo, InterventionCreate, InterventionUpdate, InterventionOut
from .reports import PhotoItem, ChecklistItem, MaterialUsed, ReportSubmit, ReportReject, ReportOut, ValidationResult
from .emails import EmailOut, EmailPlan
from .billing import (
    LineItem, InvoiceCreate, InvoiceStatusUpdate, InvoiceOut,
    QuoteDraftRequest, QuoteCreate, QuoteStatusUpdate, QuoteOut,
)
from .webhooks import (
    ExtractedEmailData, EmailIngestionPayload, Attendee, CalendarEventPayload,
    InvoiceValidatePayload, TranscribePayload,
)
