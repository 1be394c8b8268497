from tradein.cart.engine import CartEngine, check_eligibility, compute_totals
from tradein.cart.migrations import CartMigrator
from tradein.cart.models import CartItem, Eligibility, QuoteTotals
from tradein.cart.pricing import QuoteConfig, load_quote_config, price_of
from tradein.cart.storage import MemoryStorage, SqlAlchemyStorage

__all__ = [
    "CartEngine",
    "CartItem",
    "CartMigrator",
    "Eligibility",
    "MemoryStorage",
    "QuoteConfig",
    "QuoteTotals",
    "SqlAlchemyStorage",
    "check_eligibility",
    "compute_totals",
    "load_quote_config",
    "price_of",
]
