from __future__ import annotations

from ..extensions import db
from gadgetdesk.time_utils import to_utc_z, to_iso_date


class SaleRecord(db.Model):
    """
    One sale of one inventory item.

    The record keeps its own copy of product name, variant and cost taken at
    sale time. Editing or deleting the inventory row afterwards never changes
    cost_snapshot or profit, so historical profit stays stable.

    reference_key is the unit serial/IMEI (kind=UNIT) or accessory SKU
    (kind=AKSESORIS). It is a plain value, not a foreign key.
    """
    __tablename__ = "sale_records"
    __table_args__ = (
        db.Index("ix_sale_records_date_created", "sale_date", "created_at"),
        db.Index("ix_sale_records_kind_key", "kind", "reference_key"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    invoice_id = db.Column(db.String(64), nullable=False, index=True)
    sale_date = db.Column(db.Date, nullable=False)

    # UNIT | AKSESORIS
    kind = db.Column(db.String(16), nullable=False)
    reference_key = db.Column(db.String(64), nullable=False)

    # Snapshot of the inventory item at sale time
    product_name = db.Column(db.String(255), nullable=False)
    color = db.Column(db.String(64), nullable=True)
    storage = db.Column(db.String(64), nullable=True)
    warranty = db.Column(db.String(128), nullable=True)
    cost_snapshot = db.Column(db.Integer, nullable=False)

    sell_price = db.Column(db.Integer, nullable=False)
    profit = db.Column(db.Integer, nullable=False)

    buyer_name = db.Column(db.String(255), nullable=True)
    buyer_address = db.Column(db.Text, nullable=True)
    buyer_phone = db.Column(db.String(32), nullable=True)

    salesperson = db.Column(db.String(255), nullable=False, default="UNKNOWN")
    referral = db.Column(db.String(255), nullable=True)

    # False when the inventory step of a best-effort sale did not go through
    inventory_synced = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<SaleRecord id={self.id} invoice={self.invoice_id!r} kind={self.kind} key={self.reference_key!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "invoice_id": self.invoice_id,
            "sale_date": to_iso_date(self.sale_date),
            "kind": self.kind,
            "reference_key": self.reference_key,
            "product_name": self.product_name,
            "color": self.color,
            "storage": self.storage,
            "warranty": self.warranty,
            "cost_snapshot": self.cost_snapshot,
            "sell_price": self.sell_price,
            "profit": self.profit,
            "buyer_name": self.buyer_name,
            "buyer_address": self.buyer_address,
            "buyer_phone": self.buyer_phone,
            "salesperson": self.salesperson,
            "referral": self.referral,
            "inventory_synced": self.inventory_synced,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
