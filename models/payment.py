# models/payment.py

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field
from models.enums import PaymentMethod, PaymentStatus, ReconciliationStatus, PaymentProvider


class PaymentCreate(BaseModel):
    tenant_id: str
    invoice_id: Optional[str] = None
    amount: float
    currency: Optional[str] = None
    payment_method: PaymentMethod
    payment_date: Optional[datetime] = None
    reference_number: Optional[str] = None
    status: PaymentStatus = PaymentStatus.completed
    notes: Optional[str] = None


class PaymentUpdate(BaseModel):
    amount: Optional[float] = None
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[datetime] = None
    reference_number: Optional[str] = None
    status: Optional[PaymentStatus] = None
    notes: Optional[str] = None


class PaymentRefund(BaseModel):
    reason: Optional[str] = None


# -----------------------------------------------------
# Reconciliation
# -----------------------------------------------------
class ReconcileRequest(BaseModel):
    reconciliation_status: ReconciliationStatus = ReconciliationStatus.reconciled
    reconciliation_notes: Optional[str] = None
    bank_statement_reference: Optional[str] = None


class BulkReconcileRequest(BaseModel):
    payment_ids: List[str]
    bank_statement_reference: Optional[str] = None
    reconciliation_notes: Optional[str] = None


# -----------------------------------------------------
# Provider checkout (settled by webhooks)
# -----------------------------------------------------
class PaymentIntentCreate(BaseModel):
    tenant_id: str
    invoice_id: Optional[str] = None
    amount: float = Field(..., gt=0)
    provider: PaymentProvider
    reference: Optional[str] = Field(None, description="Provider transaction reference; generated when omitted")
