from __future__ import annotations

from ..extensions import db
from gadgetdesk.time_utils import to_utc_z, to_iso_date


class InventoryUnit(db.Model):
    """
    Serialized stock: one row per physical handset/tablet.

    A unit is sold at most once. status moves READY -> SOLD when a sale is
    recorded against its serial/IMEI and SOLD -> READY when that sale is deleted.

    LOOKUP PATTERN:
    - Sale key lookup: serial_number == key OR imei == key
    """
    __tablename__ = "inventory_units"
    __table_args__ = (
        db.Index("ix_inventory_units_status_intake", "status", "intake_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    product_name = db.Column(db.String(255), nullable=False)
    serial_number = db.Column(db.String(64), nullable=True, unique=True, index=True)
    imei = db.Column(db.String(32), nullable=True, unique=True, index=True)

    # Variant attributes
    storage = db.Column(db.String(64), nullable=True)
    color = db.Column(db.String(64), nullable=True)
    warranty = db.Column(db.String(128), nullable=True)
    origin = db.Column(db.String(128), nullable=True)

    # Whole currency units
    cost = db.Column(db.Integer, nullable=False, default=0)

    intake_date = db.Column(db.Date, nullable=True, index=True)
    status = db.Column(db.String(16), nullable=False, default="READY", index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<InventoryUnit id={self.id} sn={self.serial_number!r} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_name": self.product_name,
            "serial_number": self.serial_number,
            "imei": self.imei,
            "storage": self.storage,
            "color": self.color,
            "warranty": self.warranty,
            "origin": self.origin,
            "cost": self.cost,
            "intake_date": to_iso_date(self.intake_date),
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class InventoryAccessory(db.Model):
    """
    Fungible stock counted by quantity (cases, chargers, screen guards).

    There is no stored status: an accessory is READY while quantity > 0.
    """
    __tablename__ = "inventory_accessories"
    __table_args__ = (
        db.Index("ix_inventory_accessories_intake", "intake_date", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    sku = db.Column(db.String(64), nullable=False, unique=True, index=True)
    product_name = db.Column(db.String(255), nullable=False)

    storage = db.Column(db.String(64), nullable=True)
    color = db.Column(db.String(64), nullable=True)
    warranty = db.Column(db.String(128), nullable=True)
    origin = db.Column(db.String(128), nullable=True)

    cost = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    intake_date = db.Column(db.Date, nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @property
    def status(self) -> str:
        return "READY" if (self.quantity or 0) > 0 else "SOLD"

    def __repr__(self) -> str:
        return f"<InventoryAccessory id={self.id} sku={self.sku!r} qty={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku,
            "product_name": self.product_name,
            "storage": self.storage,
            "color": self.color,
            "warranty": self.warranty,
            "origin": self.origin,
            "cost": self.cost,
            "quantity": self.quantity,
            "status": self.status,
            "intake_date": to_iso_date(self.intake_date),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
