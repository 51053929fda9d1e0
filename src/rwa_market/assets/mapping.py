"""Raw store records to the normalized asset model."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from rwa_market.models import ActivityEvent, AssetOwner, BidOffer, DomainAsset, PricePoint
from rwa_market.models.records import (
    ActivityRecord,
    AssetRecord,
    BidRecord,
    PriceHistoryRecord,
    UserRecord,
)
from rwa_market.resilience import MappingError

R = TypeVar("R", bound=BaseModel)

OwnerLookup = Callable[[str], AssetOwner | None]


def shorten_wallet(address: str) -> str:
    """``0x7a3B12...9f2E`` style display form; other ids pass through."""
    if address.startswith("0x") and len(address) > 12:
        return f"{address[:6]}...{address[-4:]}"
    return address


def placeholder_owner(raw_id: str) -> AssetOwner:
    """Projection for a user id the store has no row for."""
    return AssetOwner(id=raw_id, name=shorten_wallet(raw_id), wallet=raw_id)


def owner_from_user(user: UserRecord) -> AssetOwner:
    return AssetOwner(id=user.id, name=user.name, avatar=user.avatar, wallet=user.wallet)


def parse_record(model: type[R], raw: Any) -> R:
    """Validate one raw row, raising ``MappingError`` on any defect."""
    record_id = raw.get("id") if isinstance(raw, dict) else None
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise MappingError(
            str(record_id) if record_id is not None else None,
            f"invalid {model.__name__}: {exc.error_count()} error(s)",
        ) from exc


def parse_records(model: type[R], rows: list[Any]) -> tuple[list[R], list[MappingError]]:
    """Validate a list, keeping good rows and collecting the bad ones."""
    parsed: list[R] = []
    errors: list[MappingError] = []
    for raw in rows or []:
        try:
            parsed.append(parse_record(model, raw))
        except MappingError as exc:
            errors.append(exc)
    return parsed, errors


def build_asset(
    raw_asset: Any,
    *,
    owner: Any,
    creator: Any,
    bids: list[Any],
    activities: list[Any],
    price_history: list[Any],
    known_owner: OwnerLookup,
) -> DomainAsset:
    """Join one raw asset with its looked-up records.

    ``owner`` and ``creator`` are raw user rows or None. Bidders resolve
    against the owner and creator first, then ``known_owner``, then a
    placeholder. Any defect in the asset row or its children raises
    ``MappingError``; the caller drops the asset.
    """
    asset = parse_record(AssetRecord, raw_asset)
    try:
        owner_proj = owner_from_user(parse_record(UserRecord, owner)) if owner else placeholder_owner(asset.owner_id)
        creator_proj = (
            owner_from_user(parse_record(UserRecord, creator)) if creator else placeholder_owner(asset.creator_id)
        )
        resolved = {owner_proj.id: owner_proj, creator_proj.id: creator_proj}

        def bidder(bidder_id: str) -> AssetOwner:
            return resolved.get(bidder_id) or known_owner(bidder_id) or placeholder_owner(bidder_id)

        bid_records = [parse_record(BidRecord, b) for b in bids or []]
        activity_records = [parse_record(ActivityRecord, a) for a in activities or []]
        history_records = [parse_record(PriceHistoryRecord, p) for p in price_history or []]

        return DomainAsset(
            id=asset.id,
            name=asset.name,
            description=asset.description or "",
            image=asset.image or "",
            category=asset.category,
            price=asset.price,
            price_usd=asset.price_usd,
            owner=owner_proj,
            creator=creator_proj,
            token_id=asset.token_id or "",
            contract_address=asset.contract_address or "",
            blockchain=asset.blockchain,
            token_standard=asset.token_standard,
            status=asset.status,
            sale_type=asset.sale_type,
            royalty=asset.royalty,
            supply=asset.supply,
            views=asset.views,
            favorites=asset.favorites,
            listed_at=asset.listed_at,
            price_history=[PricePoint(month=p.month, price=p.price) for p in history_records],
            bids=[
                BidOffer(
                    id=b.id,
                    bidder=bidder(b.bidder_id),
                    amount=b.amount,
                    amount_usd=b.amount_usd,
                    timestamp=b.created_at or "",
                )
                for b in bid_records
            ],
            activity=[
                ActivityEvent(
                    id=a.id,
                    type=a.type,
                    from_=a.from_address or "",
                    to=a.to_address or "",
                    price=a.price,
                    timestamp=a.created_at or "",
                )
                for a in activity_records
            ],
        )
    except MappingError as exc:
        raise MappingError(asset.id, exc.reason) from exc
    except (ValidationError, ValueError, TypeError, KeyError) as exc:
        raise MappingError(asset.id, str(exc)) from exc
