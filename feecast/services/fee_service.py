# feecast/services/fee_service.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from feecast import logs
from feecast.chain.types import WEI_PER_GWEI, BlockSource, wei_to_gwei
from feecast.config.model_config import ModelConfig
from feecast.observability.instrumentation import Instrumentation, NoOpInstrumentation
from feecast.observability.metrics import PREDICT
from feecast.training.engines.dataset_build_engine import features_from_block
from feecast.training.model_store import ModelStore
from feecast.training.predictor import predict
from feecast.utils.errors import NoBaseFeeError, UpstreamError

MIN_PRIORITY_GWEI = 0.1

# tip assumed when the node has no eth_maxPriorityFeePerGas
DEFAULT_PROVIDER_TIP_WEI = 1 * WEI_PER_GWEI


@dataclass(frozen=True)
class FeeRecommendation:
    base_fee_gwei: float
    max_priority_fee_per_gas_gwei: float
    max_fee_per_gas_gwei: float
    prev_base_fee_gwei: float
    gas_used_ratio: float
    model_ready: bool
    predicted: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseFeeGwei": round(self.base_fee_gwei, 3),
            "maxPriorityFeePerGasGwei": round(self.max_priority_fee_per_gas_gwei, 3),
            "maxFeePerGasGwei": round(self.max_fee_per_gas_gwei, 3),
            "features": {
                "prevBaseFeeGwei": self.prev_base_fee_gwei,
                "gasUsedRatio": round(self.gas_used_ratio, 4),
            },
            "modelReady": self.model_ready,
            "predicted": self.predicted,
        }


class FeeService:
    """
    Prediction side of the system.

    - reads the current model from the ModelStore (never trains)
    - derives features from a freshly fetched latest block
    - falls back to the latest base fee when no prediction is available
    """

    def __init__(
        self,
        source: BlockSource,
        store: ModelStore,
        cfg: ModelConfig,
        inst: Optional[Instrumentation] = None,
    ):
        self.source = source
        self.store = store
        self.cfg = cfg
        self.inst = inst if inst is not None else NoOpInstrumentation()

    async def latest_features(self) -> Tuple[float, ...]:
        latest = await self.source.get_latest()
        features = features_from_block(latest) if latest is not None else None
        if features is None:
            raise NoBaseFeeError("No baseFeePerGas available yet")
        return features

    def predict_next(self, features: Tuple[float, ...]) -> Optional[float]:
        with self.inst.sample(PREDICT):
            return predict(self.store.get(), features)

    async def recommend(self, priority_gwei: Optional[float] = None) -> FeeRecommendation:
        features = await self.latest_features()
        prev_base_fee, gas_used_ratio = features

        predicted = self.predict_next(features)
        base_fee = predicted if predicted is not None else prev_base_fee

        priority = priority_gwei if priority_gwei is not None else self.cfg.default_priority_gwei
        max_priority = max(MIN_PRIORITY_GWEI, priority)
        max_fee = base_fee * self.cfg.max_fee_multiplier + max_priority

        return FeeRecommendation(
            base_fee_gwei=base_fee,
            max_priority_fee_per_gas_gwei=max_priority,
            max_fee_per_gas_gwei=max_fee,
            prev_base_fee_gwei=prev_base_fee,
            gas_used_ratio=gas_used_ratio,
            model_ready=self.store.ready,
            predicted=predicted is not None,
        )

    async def current_base_fee_gwei(self) -> Optional[float]:
        latest = await self.source.get_latest()
        if latest is None or not latest.base_fee_per_gas:
            return None
        return latest.base_fee_gwei

    async def network_meta(self) -> Dict[str, Any]:
        meta: Dict[str, Any] = {"blockNumber": await self.source.current_height()}
        chain_id = getattr(self.source, "chain_id", None)
        if chain_id is not None:
            meta["chainId"] = await chain_id()
        return meta

    async def provider_fee_fallback_gwei(self) -> Dict[str, float]:
        """
        Fee data as a wallet provider would derive it, in gwei:

        - priority : node-suggested tip (1 gwei when the node has none)
        - base     : maxFeePerGas = 2 · latest base fee + priority

        Keys are left out when the value is unknown or zero.
        """
        latest = await self.source.get_latest()
        base_fee_wei = latest.base_fee_per_gas if latest is not None else None
        if not base_fee_wei:
            return {}

        tip_wei = await self._node_priority_fee_wei()
        if tip_wei is None:
            tip_wei = DEFAULT_PROVIDER_TIP_WEI

        out: Dict[str, float] = {"base": wei_to_gwei(2 * base_fee_wei + tip_wei)}
        if tip_wei:
            out["priority"] = wei_to_gwei(tip_wei)
        return out

    async def _node_priority_fee_wei(self) -> Optional[int]:
        fetch = getattr(self.source, "max_priority_fee_per_gas", None)
        if fetch is None:
            return None
        try:
            return await fetch()
        except UpstreamError as e:
            logs.warning(f"[FeeService] eth_maxPriorityFeePerGas unavailable: {e}")
            return None
