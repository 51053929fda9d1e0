"""Bundled reference dataset served whenever the store cannot be used."""

from __future__ import annotations

from rwa_market.models import (
    ActivityEvent,
    AssetOwner,
    BidOffer,
    DomainAsset,
    PlatformStats,
    PricePoint,
)

# ETH/USD rate the sample bid values were priced at.
SAMPLE_USD_RATE = 2450.0

OWNERS: tuple[AssetOwner, ...] = (
    AssetOwner(id="u1", name="Elena Voss", avatar="https://images.unsplash.com/photo-1494790108377-be9c29b29330?w=100&h=100&fit=crop", wallet="0x7a3B...9f2E"),
    AssetOwner(id="u2", name="Marcus Chen", avatar="https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=100&h=100&fit=crop", wallet="0x4eD1...3a8C"),
    AssetOwner(id="u3", name="Aria Nakamura", avatar="https://images.unsplash.com/photo-1438761681033-6461ffad8d80?w=100&h=100&fit=crop", wallet="0x9bF2...7d1A"),
    AssetOwner(id="u4", name="James Okafor", avatar="https://images.unsplash.com/photo-1500648767791-00dcc994a43e?w=100&h=100&fit=crop", wallet="0x2cA8...5e9B"),
    AssetOwner(id="u5", name="Sofia Laurent", avatar="https://images.unsplash.com/photo-1534528741775-53994a69daeb?w=100&h=100&fit=crop", wallet="0x6fE3...1b4D"),
    AssetOwner(id="u6", name="Kai Patel", avatar="https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=100&h=100&fit=crop", wallet="0x8dB5...2c7F"),
)

STATS = PlatformStats(total_volume=14523, assets_listed=2847, active_users=12340)

_MONTHS = ("Aug", "Sep", "Oct", "Nov", "Dec", "Jan")
# Fixed multipliers so the sample chart is stable across restarts.
_HISTORY_SHAPE = (0.82, 0.91, 0.87, 1.04, 0.97, 1.0)


def _price_history(base: float) -> list[PricePoint]:
    return [PricePoint(month=m, price=round(base * k, 4)) for m, k in zip(_MONTHS, _HISTORY_SHAPE)]


def _bids(base: float) -> list[BidOffer]:
    return [
        BidOffer(id=bid_id, bidder=OWNERS[owner], amount=round(base * k, 4),
                 amount_usd=round(base * k * SAMPLE_USD_RATE, 2), timestamp=ts)
        for bid_id, owner, k, ts in (("b1", 1, 0.95, "2h ago"), ("b2", 3, 0.9, "5h ago"), ("b3", 5, 0.85, "1d ago"))
    ]


def _activity() -> list[ActivityEvent]:
    return [
        ActivityEvent(id="a1", type="Listed", from_="Owner", to="Marketplace", price=2.5, timestamp="1d ago"),
        ActivityEvent(id="a2", type="Transfer", from_="0x7a3B...9f2E", to="0x4eD1...3a8C", timestamp="3d ago"),
        ActivityEvent(id="a3", type="Sold", from_="0x9bF2...7d1A", to="0x7a3B...9f2E", price=1.8, timestamp="1w ago"),
        ActivityEvent(id="a4", type="Minted", from_="NullAddress", to="0x9bF2...7d1A", timestamp="2w ago"),
    ]


# id, name, description, image id, category, price, usd, owner, creator,
# token id, contract, chain, standard, status, sale, royalty, supply, views,
# favorites, listed
_ROWS = (
    ("1", "Skyline Penthouse #42",
     "Fractional ownership token representing a 1/100 share of a luxury penthouse in Manhattan, NYC. "
     "This token grants voting rights on property management decisions and proportional rental income distribution.",
     "photo-1600596542815-ffad4c1539a9", "Real Estate", 12.5, 30625, 0, 0, "42",
     "0x1a2b3c4d5e6f7890abcdef1234567890abcdef12", "Ethereum", "ERC-1155", "Buy Now", "fixed", 5, 100, 1243, 89, "2025-12-15"),
    ("2", "Digital Aurora #7",
     "A mesmerizing generative art piece capturing the dance of northern lights through algorithmic computation. "
     "One of 10 unique editions minted on Ethereum.",
     "photo-1549490349-8643362247b5", "Art", 3.2, 7840, 1, 2, "7",
     "0x2b3c4d5e6f7890ab1234567890abcdef12345678", "Ethereum", "ERC-721", "Auction", "auction", 10, 1, 892, 156, "2026-01-03"),
    ("3", "Vintage Rolex Daytona Token",
     "Tokenized certificate of authenticity for a 1963 Rolex Daytona Paul Newman. "
     "The physical watch is stored in a bonded vault in Zurich.",
     "photo-1587836374828-4dbafa94cf0e", "Collectibles", 45.0, 110250, 2, 4, "1963",
     "0x3c4d5e6f7890ab1234567890abcdef1234567890", "Polygon", "ERC-721", "Buy Now", "fixed", 2.5, 1, 2341, 312, "2025-11-28"),
    ("4", "BioGen Patent Portfolio",
     "Fractional IP rights to a portfolio of 3 biotech patents covering novel CRISPR delivery mechanisms. "
     "Revenue-sharing token with quarterly distributions.",
     "photo-1532187863486-abf9dbad1b69", "Intellectual Property", 8.75, 21437, 3, 3, "301",
     "0x4d5e6f7890ab1234567890abcdef123456789012", "Ethereum", "ERC-1155", "New", "fixed", 7.5, 500, 567, 43, "2026-02-10"),
    ("5", "Gold Bar 1kg, Vault #19",
     "Tokenized 1kg gold bar stored in the Singapore FreePort vault. Each token represents 1 gram of 99.99% pure gold. "
     "Redeemable for physical delivery.",
     "photo-1610375461246-83df859d849d", "Commodities", 2.1, 5145, 4, 5, "1000",
     "0x5e6f7890ab1234567890abcdef12345678901234", "Polygon", "ERC-1155", "Buy Now", "fixed", 1, 1000, 3456, 201, "2025-10-20"),
    ("6", "Neo-Tokyo Drift #33",
     "A cyberpunk digital artwork from the acclaimed Neo-Tokyo collection. "
     "Features hand-drawn elements combined with AI-assisted rendering.",
     "photo-1618005182384-a83a8bd57fbe", "Art", 1.8, 4410, 5, 1, "33",
     "0x6f7890ab1234567890abcdef1234567890123456", "Ethereum", "ERC-721", "Auction", "auction", 10, 1, 1567, 234, "2026-01-20"),
    ("7", "Beachfront Villa Costa Rica",
     "Tokenized deed for a 4-bedroom beachfront villa in Guanacaste. "
     "Token holders receive proportional rental income and usage rights.",
     "photo-1613490493576-7fde63acd811", "Real Estate", 28.0, 68600, 0, 2, "88",
     "0x7890ab1234567890abcdef12345678901234abcd", "Polygon", "ERC-1155", "Buy Now", "fixed", 3, 50, 4521, 387, "2025-09-14"),
    ("8", "Rare Stamp: Inverted Jenny",
     "Digital certificate of ownership for a 1918 Inverted Jenny postage stamp. "
     "Physical stamp insured and stored in a climate-controlled vault.",
     "photo-1577563908411-5077b6dc7624", "Collectibles", 15.3, 37485, 3, 0, "1918",
     "0x890ab1234567890abcdef1234567890123456789", "Ethereum", "ERC-721", "Auction", "auction", 5, 1, 987, 145, "2026-02-01"),
    ("9", "Crude Oil Barrel Token",
     "Each token represents 1 barrel of WTI crude oil stored at the Cushing, Oklahoma facility. "
     "Real-time price tracking with Oracle integration.",
     "photo-1611273426858-450d8e3c9fce", "Commodities", 0.035, 85.75, 5, 4, "5000",
     "0x90ab1234567890abcdef12345678901234567890", "Polygon", "ERC-1155", "Buy Now", "fixed", 0.5, 10000, 6789, 445, "2025-08-05"),
    ("10", "Music Royalty: Echoes",
     'Own a share of streaming royalties from the platinum single "Echoes" by Nova. '
     "Token holders receive monthly distributions from all platforms.",
     "photo-1511379938547-c1f69419868d", "Intellectual Property", 0.75, 1837, 1, 5, "777",
     "0xab1234567890abcdef123456789012345678abcd", "Ethereum", "ERC-1155", "New", "fixed", 15, 2000, 2134, 567, "2026-02-18"),
    ("11", "Abstract Dimension #12",
     "Part of the Abstract Dimension series exploring the boundaries between physical and digital art. "
     "Created using mixed media and tokenized as a 1/1.",
     "photo-1541961017774-22349e4a1262", "Art", 5.4, 13230, 2, 1, "12",
     "0xb1234567890abcdef12345678901234567890abc", "Ethereum", "ERC-721", "Buy Now", "fixed", 10, 1, 1876, 298, "2025-12-22"),
    ("12", "Tokyo Apartment Complex",
     "Fractional ownership of a 20-unit apartment complex in Shibuya, Tokyo. "
     "Monthly rental yields distributed proportionally to token holders.",
     "photo-1480714378408-67cf0d13bc1b", "Real Estate", 6.8, 16660, 4, 3, "200",
     "0xc234567890abcdef1234567890123456789012ab", "Polygon", "ERC-1155", "New", "fixed", 4, 200, 3211, 189, "2026-02-15"),
    ("13", "Diamond 2.5ct, GIA Certified",
     "Tokenized GIA-certified 2.5 carat diamond. D color, VVS1 clarity. "
     "Stored in Brinks vault with full insurance coverage.",
     "photo-1573408301185-9146fe634ad0", "Commodities", 18.9, 46305, 0, 2, "250",
     "0xd34567890abcdef12345678901234567890123ab", "Ethereum", "ERC-721", "Buy Now", "fixed", 2, 1, 1432, 210, "2026-01-08"),
    ("14", "First Edition Charizard PSA 10",
     "Tokenized ownership of a PSA 10 graded 1st Edition Base Set Charizard Pokemon card. "
     "One of the rarest cards in existence.",
     "photo-1613771404784-3a5686aa2be3", "Collectibles", 95.0, 232750, 1, 3, "4",
     "0xe4567890abcdef123456789012345678901234ab", "Ethereum", "ERC-721", "Auction", "auction", 5, 1, 8976, 1203, "2026-01-30"),
)


def _build_assets() -> tuple[DomainAsset, ...]:
    assets = []
    for (asset_id, name, description, image, category, price, usd, owner, creator, token_id,
         contract, chain, standard, status, sale, royalty, supply, views, favorites, listed) in _ROWS:
        assets.append(DomainAsset(
            id=asset_id,
            name=name,
            description=description,
            image=f"https://images.unsplash.com/{image}?w=600&h=400&fit=crop",
            category=category,
            price=price,
            price_usd=usd,
            owner=OWNERS[owner],
            creator=OWNERS[creator],
            token_id=token_id,
            contract_address=contract,
            blockchain=chain,
            token_standard=standard,
            status=status,
            sale_type=sale,
            royalty=royalty,
            supply=supply,
            views=views,
            favorites=favorites,
            listed_at=listed,
            price_history=_price_history(price),
            bids=_bids(price),
            activity=_activity(),
        ))
    return tuple(assets)


ASSETS: tuple[DomainAsset, ...] = _build_assets()


class FallbackDataProvider:
    """Read-only access to the reference dataset.

    Every accessor hands out deep copies; callers may mutate what they get
    without touching the shared reference data.
    """

    def __init__(
        self,
        assets: tuple[DomainAsset, ...] = ASSETS,
        owners: tuple[AssetOwner, ...] = OWNERS,
        stats: PlatformStats = STATS,
    ) -> None:
        self._assets = assets
        self._owners = {o.id: o for o in owners}
        self._stats = stats

    def assets(self) -> list[DomainAsset]:
        return [a.model_copy(deep=True) for a in self._assets]

    def asset(self, asset_id: str) -> DomainAsset | None:
        for a in self._assets:
            if a.id == asset_id:
                return a.model_copy(deep=True)
        return None

    def owner(self, user_id: str) -> AssetOwner | None:
        owner = self._owners.get(user_id)
        return owner.model_copy() if owner is not None else None

    def stats(self) -> PlatformStats:
        return self._stats.model_copy()
