from decimal import Decimal
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from trigger_trader.models import Credentials


class Settings(BaseSettings):
    # bitbank API credentials
    access_key: str = ""
    api_secret_key: str = ""
    access_window_time: int = 5000  # ms tolerated between request time and server receipt

    # Traded pair is f"{asset}_{quote_asset}"
    asset: str = "btc"
    quote_asset: str = "jpy"

    # Trigger parameters
    min_amount_for_sell: Decimal = Decimal("1.0")
    trigger_rate: Decimal = Decimal("0.5")
    buy_budget_ratio: Decimal = Decimal("0.7")  # share of free quote balance spent on a buy

    # Notification
    webhook_url: Optional[str] = None

    # Endpoints
    api_endpoint: str = "https://api.bitbank.cc/v1"
    stream_endpoint: str = "wss://stream.bitbank.cc/socket.io/?EIO=4&transport=websocket"
    request_timeout: float = 10.0

    # Order execution / main loop timing (seconds)
    order_poll_interval: float = 0.2
    order_poll_timeout: Optional[float] = None  # None polls until filled
    cycle_cooldown: float = 30.0

    log_level: str = "INFO"

    @field_validator("access_window_time")
    @classmethod
    def check_window(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("access_window_time must be positive")
        return v

    @field_validator("trigger_rate")
    @classmethod
    def check_trigger_rate(cls, v: Decimal) -> Decimal:
        if not Decimal("0") <= v <= Decimal("1"):
            raise ValueError("trigger_rate must be within [0, 1]")
        return v

    @field_validator("buy_budget_ratio")
    @classmethod
    def check_budget_ratio(cls, v: Decimal) -> Decimal:
        if not Decimal("0") < v <= Decimal("1"):
            raise ValueError("buy_budget_ratio must be within (0, 1]")
        return v

    @field_validator("asset", "quote_asset")
    @classmethod
    def lower_symbol(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("webhook_url")
    @classmethod
    def blank_url_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def pair(self) -> str:
        return f"{self.asset}_{self.quote_asset}"

    def credentials(self) -> Credentials:
        """Build API credentials, failing fast when keys are missing"""
        if not self.access_key or not self.api_secret_key:
            raise ValueError("ACCESS_KEY and API_SECRET_KEY must be set")
        return Credentials(
            access_key=self.access_key,
            secret_key=self.api_secret_key,
            time_window_ms=self.access_window_time,
        )

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
