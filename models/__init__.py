# -------------------------
# Property Models
# -------------------------
from .organization import OrganizationCreate, OrganizationUpdate
from .building import BuildingCreate, BuildingUpdate
from .unit import UnitCreate, UnitUpdate
from .tenant import TenantCreate, TenantUpdate

# -------------------------
# Lease & Billing Models
# -------------------------
from .lease import LeaseCreate, LeaseUpdate, LeaseTerminate
from .invoice import InvoiceCreate, InvoiceUpdate, InvoiceStatusUpdate
from .payment import (
    PaymentCreate,
    PaymentUpdate,
    PaymentRefund,
    ReconcileRequest,
    BulkReconcileRequest,
    PaymentIntentCreate,
)
from .subscription import SubscriptionCreate, SubscriptionUpdate, SubscriptionCancel

# -------------------------
# Operations Models
# -------------------------
from .work_order import WorkOrderCreate, WorkOrderUpdate, WorkOrderAssign
from .complaint import ComplaintCreate, ComplaintUpdate, ComplaintConvert
from .visitor_log import VisitorLogCreate, VisitorExit
from .vehicle import VehicleCreate, VehicleUpdate
from .parking_space import ParkingSpaceCreate, ParkingSpaceUpdate, ParkingSpaceAssign
from .parking_violation import ViolationCreate, ViolationResolve, ViolationAppeal

# -------------------------
# Auth / Settings
# -------------------------
from .auth import LoginRequest, TokenResponse, UserCreate
from .settings import SettingsUpdate

__all__ = [
    "OrganizationCreate", "OrganizationUpdate",
    "BuildingCreate", "BuildingUpdate",
    "UnitCreate", "UnitUpdate",
    "TenantCreate", "TenantUpdate",
    "LeaseCreate", "LeaseUpdate", "LeaseTerminate",
    "InvoiceCreate", "InvoiceUpdate", "InvoiceStatusUpdate",
    "PaymentCreate", "PaymentUpdate", "PaymentRefund",
    "ReconcileRequest", "BulkReconcileRequest", "PaymentIntentCreate",
    "SubscriptionCreate", "SubscriptionUpdate", "SubscriptionCancel",
    "WorkOrderCreate", "WorkOrderUpdate", "WorkOrderAssign",
    "ComplaintCreate", "ComplaintUpdate", "ComplaintConvert",
    "VisitorLogCreate", "VisitorExit",
    "VehicleCreate", "VehicleUpdate",
    "ParkingSpaceCreate", "ParkingSpaceUpdate", "ParkingSpaceAssign",
    "ViolationCreate", "ViolationResolve", "ViolationAppeal",
    "LoginRequest", "TokenResponse", "UserCreate",
    "SettingsUpdate",
]
