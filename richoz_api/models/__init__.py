from .base import Base
from .users import User, CompanySettings
from .regies import Regie
from .products import Product
from .interventions import Intervention
from .reports import Report
from .emails import EmailInbox
from .billing import Invoice, Quote
from .audit import AuditLog
