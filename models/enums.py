from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# ORGANIZATIONS / BUILDINGS / UNITS
# -----------------------------------------------------
class OrganizationStatus(BaseStrEnum):
    active = "active"
    inactive = "inactive"
    suspended = "suspended"


class BuildingType(BaseStrEnum):
    residential = "residential"
    commercial = "commercial"
    mixed = "mixed"


class BuildingStatus(BaseStrEnum):
    active = "active"
    under_construction = "under-construction"
    inactive = "inactive"


class UnitType(BaseStrEnum):
    apartment = "apartment"
    office = "office"
    shop = "shop"
    warehouse = "warehouse"
    parking = "parking"


class UnitStatus(BaseStrEnum):
    available = "available"
    occupied = "occupied"
    maintenance = "maintenance"
    reserved = "reserved"


# -----------------------------------------------------
# TENANTS
# -----------------------------------------------------
class TenantLanguage(BaseStrEnum):
    """Preferred language for tenant communication."""

    amharic = "am"
    english = "en"
    oromo = "om"
    tigrinya = "ti"


class TenantStatus(BaseStrEnum):
    active = "active"
    inactive = "inactive"
    suspended = "suspended"


# -----------------------------------------------------
# LEASES
# -----------------------------------------------------
class LeaseStatus(BaseStrEnum):
    active = "active"
    expired = "expired"
    terminated = "terminated"
    pending = "pending"


class BillingCycle(BaseStrEnum):
    monthly = "monthly"
    quarterly = "quarterly"
    annually = "annually"


class ChargeFrequency(BaseStrEnum):
    monthly = "monthly"
    quarterly = "quarterly"
    annually = "annually"
    one_time = "one-time"


class RentSource(BaseStrEnum):
    """Where a lease's rent figure came from."""

    manual = "manual"
    unit_flat = "unit_flat"
    unit_rate = "unit_rate"
    unit_rent = "unit_rent"


# -----------------------------------------------------
# INVOICES
# -----------------------------------------------------
class InvoiceStatus(BaseStrEnum):
    draft = "draft"
    sent = "sent"
    paid = "paid"
    overdue = "overdue"
    cancelled = "cancelled"


class InvoiceItemType(BaseStrEnum):
    rent = "rent"
    charge = "charge"
    penalty = "penalty"
    deposit = "deposit"
    other = "other"


# -----------------------------------------------------
# PAYMENTS
# -----------------------------------------------------
class PaymentMethod(BaseStrEnum):
    cash = "cash"
    bank_transfer = "bank_transfer"
    telebirr = "telebirr"
    cbe_birr = "cbe_birr"
    chapa = "chapa"
    hellocash = "hellocash"
    other = "other"


class PaymentStatus(BaseStrEnum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"


class ReconciliationStatus(BaseStrEnum):
    pending = "pending"
    reconciled = "reconciled"
    disputed = "disputed"


class PaymentProvider(BaseStrEnum):
    """Providers that can call the payment webhook."""

    telebirr = "telebirr"
    cbe_birr = "cbe_birr"
    chapa = "chapa"
    hellocash = "hellocash"
    bank_transfer = "bank_transfer"


# -----------------------------------------------------
# WORK ORDERS / COMPLAINTS
# -----------------------------------------------------
class WorkOrderCategory(BaseStrEnum):
    plumbing = "plumbing"
    electrical = "electrical"
    hvac = "hvac"
    cleaning = "cleaning"
    security = "security"
    other = "other"


class Priority(BaseStrEnum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class WorkOrderStatus(BaseStrEnum):
    open = "open"
    assigned = "assigned"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class ComplaintType(BaseStrEnum):
    complaint = "complaint"
    maintenance_request = "maintenance_request"


class ComplaintCategory(BaseStrEnum):
    maintenance = "maintenance"
    noise = "noise"
    security = "security"
    cleanliness = "cleanliness"
    other = "other"


class MaintenanceCategory(BaseStrEnum):
    plumbing = "plumbing"
    electrical = "electrical"
    hvac = "hvac"
    appliance = "appliance"
    structural = "structural"
    other = "other"


class Urgency(BaseStrEnum):
    low = "low"
    medium = "medium"
    high = "high"
    emergency = "emergency"


class ComplaintStatus(BaseStrEnum):
    open = "open"
    assigned = "assigned"
    in_progress = "in_progress"
    resolved = "resolved"
    closed = "closed"


# -----------------------------------------------------
# SECURITY DESK
# -----------------------------------------------------
class VisitPurpose(BaseStrEnum):
    visit = "visit"
    delivery = "delivery"
    service = "service"
    other = "other"


class VehicleStatus(BaseStrEnum):
    active = "active"
    inactive = "inactive"


class ParkingSpaceType(BaseStrEnum):
    tenant = "tenant"
    visitor = "visitor"
    reserved = "reserved"


class ParkingSpaceStatus(BaseStrEnum):
    available = "available"
    occupied = "occupied"
    reserved = "reserved"
    maintenance = "maintenance"


class ViolationType(BaseStrEnum):
    unauthorized_parking = "unauthorized_parking"
    expired_permit = "expired_permit"
    wrong_space = "wrong_space"
    overtime_parking = "overtime_parking"
    no_permit = "no_permit"


class ViolationSeverity(BaseStrEnum):
    warning = "warning"
    fine = "fine"
    tow = "tow"


class ViolationStatus(BaseStrEnum):
    reported = "reported"
    resolved = "resolved"
    appealed = "appealed"


# -----------------------------------------------------
# SUBSCRIPTIONS
# -----------------------------------------------------
class SubscriptionTier(BaseStrEnum):
    starter = "starter"
    growth = "growth"
    enterprise = "enterprise"


class SubscriptionStatus(BaseStrEnum):
    active = "active"
    trial = "trial"
    expired = "expired"
    cancelled = "cancelled"
    suspended = "suspended"


class DiscountType(BaseStrEnum):
    percentage = "percentage"
    fixed = "fixed"
