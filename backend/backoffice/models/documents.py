from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso


class StoreDocument(db.Model):
    """
    One persisted JSON document per store name ("products", "orders", ...).

    The engine reads and writes whole collections; rows are replaced on every
    save, so there is no per-record schema to migrate.
    """
    __tablename__ = "store_documents"

    name = db.Column(db.String(64), primary_key=True)
    payload = db.Column(db.JSON, nullable=True)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<StoreDocument name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "payload": self.payload,
            "updated_at": to_iso(self.updated_at),
        }
