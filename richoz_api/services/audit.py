from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from .. import models


def record(
    db: Session,
    action: str,
    table_name: str,
    record_id: str,
    user: Optional[models.User] = None,
    old_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
) -> models.AuditLog:
    """
    Ajoute une ligne d'audit à la session courante.
    Pas de commit ici : l'audit part dans la même transaction que la modification.
    """
    entry = models.AuditLog(
        action=action,
        table_name=table_name,
        record_id=record_id,
        user_id=user.id if user else None,
        user_email=user.email if user else None,
        old_values=old_values,
        new_values=new_values,
    )
    db.add(entry)
    return entry
