from app.models.company import Company  # noqa: F401
from app.models.contract import Contract  # noqa: F401
from app.models.engineer import Engineer  # noqa: F401
from app.models.inventory import (  # noqa: F401
    Material,
    MaterialUsage,
    ProjectMaterial,
    ProjectMaterialStatus,
)
from app.models.labour import Labour, LabourPayment  # noqa: F401
from app.models.material_request import (  # noqa: F401
    MaterialRequest,
    MaterialRequestStatus,
    MaterialRequestType,
)
from app.models.notification import Notification, NotificationType  # noqa: F401
from app.models.projects import (  # noqa: F401
    Project,
    ProjectAssignment,
    ProjectExpense,
    ProjectFile,
    ProjectStatus,
)
from app.models.user import User, UserRole  # noqa: F401
