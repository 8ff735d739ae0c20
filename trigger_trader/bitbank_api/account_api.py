"""
Account balance operations for bitbank API
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Callable, Dict, List

from trigger_trader.exceptions import ProtocolError
from trigger_trader.models import Asset

logger = logging.getLogger(__name__)


def parse_assets(data: Dict) -> List[Asset]:
    """
    Parse the `data` object of GET /user/assets

    Args:
        data: {"assets": [{"asset": "btc", "free_amount": "0.5", ...}, ...]}

    Returns:
        List of Asset with Decimal free amounts
    """
    raw_assets = data.get("assets") if isinstance(data, dict) else None
    if not isinstance(raw_assets, list):
        raise ProtocolError("Assets response missing 'assets' list")

    assets = []
    for item in raw_assets:
        try:
            assets.append(Asset(symbol=str(item["asset"]), free_amount=Decimal(str(item["free_amount"]))))
        except (KeyError, TypeError, InvalidOperation) as e:
            raise ProtocolError(f"Malformed asset entry {item!r}: {e}")
    return assets


async def get_assets(request_func: Callable) -> Dict[str, Decimal]:
    """
    Get free balances for every asset on the account

    Args:
        request_func: Authenticated request function

    Returns:
        Mapping asset symbol -> free amount
    """
    data = await request_func("GET", "/user/assets")
    balances = {asset.symbol: asset.free_amount for asset in parse_assets(data)}
    logger.debug(f"Fetched {len(balances)} asset balances")
    return balances
