"""PostgreSQL implementation of MerchantRepository."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.clock import utc_now
from src.domain.entities import (
    BankAccountStatus,
    BusinessType,
    KycDocument,
    KycStatus,
    Merchant,
    MerchantSearchCriteria,
    MerchantStatistics,
    MerchantStatus,
    NotificationPreferences,
    SettlementFrequency,
)
from src.domain.exceptions import MerchantAlreadyExistsException
from src.domain.interfaces import MerchantRepository
from src.infrastructure.database.models import MerchantModel

# Entity fields whose column attribute has a different name
_COLUMN_NAMES = {"metadata": "metadata_"}

_READ_ONLY_FIELDS = frozenset({"id", "created_at"})


class PostgresMerchantRepository(MerchantRepository):
    """
    PostgreSQL implementation of the Merchant repository.

    Uses SQLAlchemy async session for database operations. Writes are
    flushed but not committed; the session owner commits.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_by_id(self, merchant_id: UUID) -> Optional[Merchant]:
        model = await self._get_model(merchant_id)
        return self._to_entity(model) if model is not None else None

    async def find_by_email(self, email: str) -> Optional[Merchant]:
        stmt = (
            select(MerchantModel)
            .where(func.lower(MerchantModel.email) == email.strip().lower())
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model is not None else None

    async def find_by_verification_token(self, token: str) -> Optional[Merchant]:
        stmt = (
            select(MerchantModel)
            .where(MerchantModel.email_verification_token == token)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalars().first()
        return self._to_entity(model) if model is not None else None

    async def create(self, merchant: Merchant) -> Merchant:
        """
        Persist a new merchant.

        Raises:
            MerchantAlreadyExistsException: If the email is already taken
        """
        model = MerchantModel(id=str(merchant.id))
        for name, value in self._to_columns(_entity_fields(merchant)).items():
            setattr(model, name, value)
        model.created_at = merchant.created_at
        model.updated_at = merchant.updated_at

        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError:
            await self._session.rollback()
            raise MerchantAlreadyExistsException(merchant.email)

        return self._to_entity(model)

    async def update(
        self,
        merchant_id: UUID,
        fields: Dict[str, Any],
    ) -> Optional[Merchant]:
        model = await self._get_model(merchant_id)
        if model is None:
            return None

        for name, value in self._to_columns(fields).items():
            setattr(model, name, value)
        model.updated_at = utc_now()

        await self._session.flush()
        return self._to_entity(model)

    async def update_status(
        self,
        merchant_id: UUID,
        status: MerchantStatus,
        fields: Optional[Dict[str, Any]] = None,
        expected: Optional[MerchantStatus] = None,
    ) -> Optional[Merchant]:
        fields = {**(fields or {}), "status": status}
        if expected is None:
            return await self.update(merchant_id, fields)
        return await self._compare_and_set(
            merchant_id, MerchantModel.status == expected.value, fields
        )

    async def update_kyc_status(
        self,
        merchant_id: UUID,
        status: KycStatus,
        fields: Optional[Dict[str, Any]] = None,
        expected: Optional[KycStatus] = None,
    ) -> Optional[Merchant]:
        fields = {**(fields or {}), "kyc_status": status}
        if expected is None:
            return await self.update(merchant_id, fields)
        return await self._compare_and_set(
            merchant_id, MerchantModel.kyc_status == expected.value, fields
        )

    async def update_bank_account_status(
        self,
        merchant_id: UUID,
        status: BankAccountStatus,
    ) -> Optional[Merchant]:
        fields: Dict[str, Any] = {"bank_account_status": status}
        if status == BankAccountStatus.VERIFIED:
            fields["bank_verified_at"] = utc_now()
        return await self.update(merchant_id, fields)

    async def increment_api_quota(self, merchant_id: UUID) -> bool:
        """Consume one unit of quota with a single conditional UPDATE."""
        stmt = (
            update(MerchantModel)
            .where(MerchantModel.id == str(merchant_id))
            .where(MerchantModel.api_quota_used < MerchantModel.api_quota_limit)
            .values(api_quota_used=MerchantModel.api_quota_used + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def reset_api_quotas(self, next_reset_at: datetime) -> int:
        """
        Zero usage and move every merchant to the next quota window.

        ``updated_at`` only changes on rows that had consumed quota.
        """
        await self._session.execute(
            update(MerchantModel)
            .where(MerchantModel.api_quota_used != 0)
            .values(api_quota_used=0, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(
            update(MerchantModel)
            .values(api_quota_reset_at=next_reset_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def find_expired_verification_tokens(self, now: datetime) -> List[Merchant]:
        stmt = (
            select(MerchantModel)
            .where(MerchantModel.email_verified.is_(False))
            .where(MerchantModel.email_verification_token.is_not(None))
            .where(MerchantModel.email_verification_expires_at < now)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().all()]

    async def search(
        self,
        criteria: MerchantSearchCriteria,
    ) -> Tuple[List[Merchant], int]:
        conditions = []

        if criteria.search:
            pattern = f"%{_escape_like(criteria.search)}%"
            conditions.append(
                or_(
                    MerchantModel.name.ilike(pattern, escape="\\"),
                    MerchantModel.business_name.ilike(pattern, escape="\\"),
                    MerchantModel.email.ilike(pattern, escape="\\"),
                )
            )
        if criteria.status is not None:
            conditions.append(MerchantModel.status == criteria.status.value)
        if criteria.kyc_status is not None:
            conditions.append(MerchantModel.kyc_status == criteria.kyc_status.value)
        if criteria.business_type is not None:
            conditions.append(MerchantModel.business_type == criteria.business_type.value)
        if criteria.country:
            conditions.append(MerchantModel.country == criteria.country)

        count_stmt = select(func.count()).select_from(MerchantModel).where(*conditions)
        total = (await self._session.execute(count_stmt)).scalar_one()

        sort_column = getattr(MerchantModel, criteria.sort_by)
        order = sort_column.asc() if criteria.sort_order == "ASC" else sort_column.desc()

        stmt = (
            select(MerchantModel)
            .where(*conditions)
            .order_by(order, MerchantModel.id)
            .limit(criteria.limit)
            .offset(criteria.offset)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        merchants = [self._to_entity(model) for model in result.scalars().all()]

        return merchants, total

    async def get_statistics(self) -> MerchantStatistics:
        status_counts = await self._count_by(MerchantModel.status)
        kyc_counts = await self._count_by(MerchantModel.kyc_status)

        return MerchantStatistics(
            total=sum(status_counts.values()),
            active=status_counts.get(MerchantStatus.ACTIVE.value, 0),
            pending=status_counts.get(MerchantStatus.PENDING.value, 0),
            suspended=status_counts.get(MerchantStatus.SUSPENDED.value, 0),
            closed=status_counts.get(MerchantStatus.CLOSED.value, 0),
            kyc_pending=kyc_counts.get(KycStatus.PENDING.value, 0),
            kyc_approved=kyc_counts.get(KycStatus.APPROVED.value, 0),
            kyc_rejected=kyc_counts.get(KycStatus.REJECTED.value, 0),
        )

    async def _count_by(self, column) -> Dict[str, int]:
        stmt = select(column, func.count()).group_by(column)
        result = await self._session.execute(stmt)
        return {value: count for value, count in result.all()}

    async def _compare_and_set(
        self,
        merchant_id: UUID,
        guard,
        fields: Dict[str, Any],
    ) -> Optional[Merchant]:
        """Single UPDATE that only applies while ``guard`` holds for the row."""
        stmt = (
            update(MerchantModel)
            .where(MerchantModel.id == str(merchant_id))
            .where(guard)
            .values(**self._to_columns(fields), updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount != 1:
            return None
        return await self.find_by_id(merchant_id)

    async def _get_model(
self, merchant_id: UUID) -> Optional[MerchantModel]:
        stmt = (
            select(MerchantModel)
            .where(MerchantModel.id == str(merchant_id))
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_columns(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Convert entity field values into column values."""
        columns = {}
        for name, value in fields.items():
            if name in _READ_ONLY_FIELDS:
                continue
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, NotificationPreferences):
                value = value.to_dict()
            elif name == "kyc_documents":
                value = [doc.to_dict() for doc in value or []]
            elif name == "supported_currencies":
                value = list(value or [])
            elif name == "metadata":
                value = dict(value or {})
            columns[_COLUMN_NAMES.get(name, name)] = value
        return columns

    def _to_entity(self, model: MerchantModel) -> Merchant:
        """Convert database model to domain entity."""
        return Merchant(
            id=UUID(model.id),
            name=model.name,
            email=model.email,
            password_hash=model.password_hash,
            phone=model.phone,
            website=model.website,
            business_name=model.business_name,
            business_type=BusinessType(model.business_type) if model.business_type else None,
            business_registration_number=model.business_registration_number,
            tax_id=model.tax_id,
            business_description=model.business_description,
            business_category=model.business_category,
            address_line1=model.address_line1,
            address_line2=model.address_line2,
            city=model.city,
            state=model.state,
            postal_code=model.postal_code,
            country=model.country,
            status=MerchantStatus(model.status),
            kyc_status=KycStatus(model.kyc_status),
            kyc_submitted_at=model.kyc_submitted_at,
            kyc_verified_at=model.kyc_verified_at,
            kyc_rejection_reason=model.kyc_rejection_reason,
            kyc_documents=[KycDocument.from_dict(doc) for doc in model.kyc_documents or []],
            email_verified=model.email_verified,
            email_verification_token=model.email_verification_token,
            email_verification_expires_at=model.email_verification_expires_at,
            email_verified_at=model.email_verified_at,
            bank_account_number=model.bank_account_number,
            bank_routing_number=model.bank_routing_number,
            bank_account_holder_name=model.bank_account_holder_name,
            bank_name=model.bank_name,
            bank_swift_code=model.bank_swift_code,
            bank_iban=model.bank_iban,
            bank_account_status=BankAccountStatus(model.bank_account_status),
            bank_verified_at=model.bank_verified_at,
            supported_currencies=list(model.supported_currencies or []),
            default_currency=model.default_currency,
            settlement_frequency=SettlementFrequency(model.settlement_frequency),
            minimum_settlement_amount=Decimal(str(model.minimum_settlement_amount or 0)),
            auto_settlement_enabled=model.auto_settlement_enabled,
            notification_preferences=NotificationPreferences.from_dict(
                model.notification_preferences
            ),
            api_quota_limit=model.api_quota_limit,
            api_quota_used=model.api_quota_used,
            api_quota_reset_at=model.api_quota_reset_at,
            metadata=dict(model.metadata_ or {}),
            suspension_reason=model.suspension_reason,
            closed_at=model.closed_at,
            closed_reason=model.closed_reason,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


def _entity_fields(merchant: Merchant) -> Dict[str, Any]:
    """Every persisted field of a merchant, keyed by entity attribute name."""
    return {
        name: getattr(merchant, name)
        for name in Merchant.__dataclass_fields__
        if name not in _READ_ONLY_FIELDS and name != "updated_at"
    }


def _escape_like(value: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
