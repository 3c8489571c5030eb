from __future__ import annotations

import logging

from app.connections.mongo import init_mongo, close_mongo
from app.models.merchant import Merchant
from app.utils.config import Settings, settings


logger = logging.getLogger(__name__)


def ensure_default_merchant(config: Settings = settings) -> Merchant:
    """Create the merchant every new user gets an allowance at, if missing."""
    merchant = Merchant.objects(id=config.default_merchant_id).first()
    if not merchant:
        merchant = Merchant(
            id=config.default_merchant_id,
            name=config.default_merchant_name,
            logo_url=config.default_merchant_logo_url,
            merchant_uid=config.default_merchant_id,
        )
        merchant.save(force_insert=True)
        logger.info("Seeded default merchant %s", merchant.id)
    return merchant


def seed() -> None:
    init_mongo()
    try:
        ensure_default_merchant()
        print("Seed completed.")
    finally:
        close_mongo()


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper())
    seed()
