from __future__ import annotations

import base64
from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel
from solders.pubkey import Pubkey

from titan_swap_client.errors import NoRoutesAvailable
from titan_swap_client.pubkeys import parse_bytes, parse_pubkey

WirePubkey = Annotated[
    Pubkey,
    BeforeValidator(parse_pubkey),
    PlainSerializer(str, return_type=str, when_used="json"),
]
WireBytes = Annotated[
    bytes,
    BeforeValidator(parse_bytes),
    PlainSerializer(lambda b: base64.b64encode(b).decode(), return_type=str, when_used="json"),
]


class SwapMode(str, Enum):
    EXACT_IN = "ExactIn"
    EXACT_OUT = "ExactOut"


class QuoteRequest(BaseModel):
    """
    Parameters for GET /api/v1/quote/swap.
    Addresses are validated as Solana pubkeys and kept as base58 strings; amounts are in the mint's smallest unit.
    """

    model_config = ConfigDict(frozen=True)

    input_mint: str
    output_mint: str
    amount: int = Field(gt=0)
    user_pubkey: str
    max_accounts: int | None = Field(default=None, ge=0)
    swap_mode: SwapMode | None = None
    slippage_bps: int = Field(default=0, ge=0, le=65_535)
    only_direct_routes: bool | None = None
    excluded_dexes: str | None = None  # comma-separated venue labels
    size_constraints: int | None = Field(default=None, ge=0)
    accounts_limit_writable: int | None = Field(default=None, ge=0)
    providers: str | None = None  # comma-separated provider ids

    @field_validator("input_mint", "output_mint", "user_pubkey", mode="before")
    @classmethod
    def _normalize_pubkey(cls, v):
        return str(parse_pubkey(v))

    @field_validator("excluded_dexes", "providers", mode="before")
    @classmethod
    def _join_names(cls, v):
        if isinstance(v, (list, tuple, set, frozenset)):
            v = ",".join(str(x).strip() for x in v if str(x).strip())
        if v == "":
            return None
        return v

    def to_query_params(self) -> list[tuple[str, str]]:
        params = [
            ("inputMint", self.input_mint),
            ("outputMint", self.output_mint),
            ("amount", str(self.amount)),
            ("userPublicKey", self.user_pubkey),
        ]
        if self.max_accounts is not None:
            params.append(("accountsLimitTotal", str(self.max_accounts)))
        if self.swap_mode is not None:
            params.append(("swapMode", self.swap_mode.value))
        if self.slippage_bps > 0:
            params.append(("slippageBps", str(self.slippage_bps)))
        if self.only_direct_routes is not None:
            params.append(("onlyDirectRoutes", "true" if self.only_direct_routes else "false"))
        if self.excluded_dexes is not None:
            params.append(("excludeDexes", self.excluded_dexes))
        if self.size_constraints is not None:
            params.append(("sizeConstraint", str(self.size_constraints)))
        if self.accounts_limit_writable is not None:
            params.append(("accountsLimitWritable", str(self.accounts_limit_writable)))
        if self.providers is not None:
            params.append(("providers", self.providers))
        return params


# --- Wire models: what the quote endpoint returns ---


class _WireModel(BaseModel):
    # Unknown keys are ignored; the upstream schema is versioned independently of this client
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        extra="ignore",
        frozen=True,
    )


class AccountMetaData(_WireModel):
    pubkey: WirePubkey = Field(alias="p")
    is_signer: bool = Field(alias="s")
    is_writable: bool = Field(alias="w")


class InstructionData(_WireModel):
    program_id: WirePubkey = Field(alias="p")
    accounts: tuple[AccountMetaData, ...] = Field(default_factory=tuple, alias="a")
    data: WireBytes = Field(default=b"", alias="d")


class PlatformFeeData(_WireModel):
    amount: int
    fee_bps: int


class RoutePlanStepData(_WireModel):
    amm_key: WirePubkey
    label: str = ""
    input_mint: WirePubkey
    output_mint: WirePubkey
    in_amount: int
    out_amount: int
    alloc_ppb: int = 0
    fee_mint: WirePubkey | None = None
    fee_amount: int | None = None
    context_slot: int | None = None


class SwapRoute(_WireModel):
    in_amount: int
    out_amount: int
    slippage_bps: int | None = None
    platform_fee: PlatformFeeData | None = None
    steps: tuple[RoutePlanStepData, ...] = Field(default_factory=tuple)
    instructions: tuple[InstructionData, ...] = Field(default_factory=tuple)
    address_lookup_tables: tuple[WirePubkey, ...] = Field(default_factory=tuple)
    context_slot: int | None = None
    time_taken_ns: int | None = None
    expires_at_ms: int | None = None
    expires_after_slot: int | None = None
    compute_units: int | None = None
    compute_units_safe: int | None = None
    transaction: WireBytes | None = None
    reference_id: str | None = None
    error: str | None = None
    error_code: str | None = None


class SwapQuotes(_WireModel):
    id: str | None = None
    input_mint: WirePubkey | None = None
    output_mint: WirePubkey | None = None
    swap_mode: SwapMode | None = None
    amount: int | None = None
    quotes: dict[str, SwapRoute]


def first_route(payload: Any) -> tuple[str | None, SwapRoute]:
    """
    Pick the route to use from a quote response body.
    The service answers with an envelope keyed by provider ({"quotes": {...}}); a bare route object is accepted too.
    Returns (provider, route).
    """
    if isinstance(payload, dict) and "quotes" in payload:
        envelope = SwapQuotes.model_validate(payload)
        for provider, route in envelope.quotes.items():
            return provider, route
        raise NoRoutesAvailable()
    return None, SwapRoute.model_validate(payload)


# --- Public response models ---


class _ResponseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, arbitrary_types_allowed=True, frozen=True
    )


class SwapInfo(_ResponseModel):
    amm_key: WirePubkey
    label: str
    input_mint: WirePubkey
    output_mint: WirePubkey
    in_amount: int
    out_amount: int
    alloc_ppb: int = 0
    fee_mint: WirePubkey = Field(default_factory=Pubkey.default)
    fee_amount: int = 0
    context_slot: int = 0

    @classmethod
    def from_step(cls, step: RoutePlanStepData, default_context_slot: int) -> SwapInfo:
        return cls(
            amm_key=step.amm_key,
            label=step.label,
            input_mint=step.input_mint,
            output_mint=step.output_mint,
            in_amount=step.in_amount,
            out_amount=step.out_amount,
            alloc_ppb=step.alloc_ppb,
            fee_mint=step.fee_mint if step.fee_mint is not None else Pubkey.default(),
            fee_amount=step.fee_amount or 0,
            context_slot=step.context_slot if step.context_slot is not None else default_context_slot,
        )


class RoutePlanStep(_ResponseModel):
    swap_info: SwapInfo
    percent: int = 100


class PlatformFee(_ResponseModel):
    amount: int
    fee_bps: int


class QuoteResponse(_ResponseModel):
    input_mint: WirePubkey
    in_amount: int
    output_mint: WirePubkey
    out_amount: int
    swap_mode: SwapMode = SwapMode.EXACT_IN
    slippage_bps: int
    platform_fee: PlatformFee | None = None
    route_plan: tuple[RoutePlanStep, ...] = Field(default_factory=tuple)
    context_slot: int | None = None
    time_taken: float | None = None  # seconds
    provider: str | None = None
    error: str | None = None
    error_code: str | None = None
    # Route as returned by the service; swap instructions are derived from it
    raw_route: SwapRoute = Field(exclude=True, repr=False)

    @classmethod
    def from_route(
        cls, request: QuoteRequest, route: SwapRoute, provider: str | None = None
    ) -> QuoteResponse:
        context_slot = route.context_slot or 0
        fee = route.platform_fee
        return cls(
            input_mint=request.input_mint,
            in_amount=route.in_amount,
            output_mint=request.output_mint,
            out_amount=route.out_amount,
            swap_mode=request.swap_mode or SwapMode.EXACT_IN,
            slippage_bps=route.slippage_bps if route.slippage_bps is not None else request.slippage_bps,
            platform_fee=PlatformFee(amount=fee.amount, fee_bps=fee.fee_bps) if fee else None,
            route_plan=tuple(
                RoutePlanStep(swap_info=SwapInfo.from_step(step, context_slot)) for step in route.steps
            ),
            context_slot=route.context_slot,
            time_taken=route.time_taken_ns / 1e9 if route.time_taken_ns is not None else None,
            provider=provider,
            error=route.error,
            error_code=route.error_code,
            raw_route=route,
        )
