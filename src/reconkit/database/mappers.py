"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the matcher only ever sees
``ExistingEntity`` snapshots whatever the table layout of a kind is.
"""

from reconkit.domain import entities as domain
from reconkit.domain.entity_kinds import EntityKindConfig
from reconkit.database.models import Transaction as ORMTransaction


def entity_to_domain(orm_entity, config: EntityKindConfig) -> domain.ExistingEntity:
    """Convert any entity-kind model row to an ExistingEntity snapshot.

    Only the fields the kind declares are copied; anything else on the
    model (timestamps, relationships) stays behind.
    """
    fields = {
        spec.name: getattr(orm_entity, spec.name)
        for spec in config.fields
        if spec.name != "name"
    }
    return domain.ExistingEntity(
        id=orm_entity.id,
        kind=config.name,
        name=orm_entity.name,
        fields=fields,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        date=orm_transaction.date,
        description=orm_transaction.description,
        amount_cents=orm_transaction.amount_cents,
        bank_account_id=orm_transaction.bank_account_id,
        category_id=orm_transaction.category_id,
        contact_id=orm_transaction.contact_id,
        source=orm_transaction.source,
        parent_id=orm_transaction.parent_id,
        is_split=orm_transaction.is_split,
        stripe_payment_id=orm_transaction.stripe_payment_id,
        archived=orm_transaction.archived,
        created_at=orm_transaction.created_at,
    )
