"""Central configuration for the catalyst trading simulator."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class SimulationConfig:
    """Central configuration for the simulator. All parameters in one place."""

    # ==================== ACCOUNT ====================
    account_id: str = "paper-catalyst-v1"
    starting_balance: float = 100_000.0

    # ==================== PRICING ====================
    risk_free_rate: float = 0.05

    # ==================== ALERTS ====================
    price_alert_move_pct: float = 5.0   # position P&L% move that triggers a price alert
    pnl_alert_step: float = 1_000.0     # aggregate P&L boundary spacing (dollars)
    trade_confirmations: bool = True

    # ==================== STORAGE ====================
    storage_backend: str = "local"              # "local" or "gcs"
    gcs_bucket_name: Optional[str] = None       # Required when storage_backend="gcs"
    gcs_prefix: str = ""                        # e.g. "prod" or "paper"
    state_path: str = "ledger_state.json"
