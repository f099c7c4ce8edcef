# Models package - import all models here so Alembic can discover them.

from beauty_crm.models.user import User  # noqa: F401
from beauty_crm.models.prospect import Prospect  # noqa: F401
from beauty_crm.models.merchant import MerchantDiscovery  # noqa: F401
from beauty_crm.models.account import Account, Contact  # noqa: F401
from beauty_crm.models.opportunity import Opportunity  # noqa: F401
from beauty_crm.models.lead import Lead  # noqa: F401
from beauty_crm.models.audit import AuditEvent  # noqa: F401
