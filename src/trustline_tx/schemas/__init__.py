from .bases import (
    CanonicalModel,
    WalletType,
    DecimalsObject,
    DecimalsOptions,
    Amount,
    DelegationFeesObject,
    render_raw,
)
from .paths import PathKind, PathOptions, PathRequest, PathResult, ClosePathResult, PaymentOptions
from .transactions import (
    TxOptions,
    TxInfos,
    MetaTransaction,
    RawTxFields,
    PendingCall,
    FeeOffer,
    SelfPaid,
    Delegated,
    FeeDecision,
    TxObject,
    PaymentTxObject,
    CloseTxObject,
)
from .shield import (
    VK_TYPES,
    MintOperation,
    TransferOperation,
    BurnOperation,
    ShieldOperation,
    ShieldTxObject,
)

__all__ = [
    "CanonicalModel",
    "WalletType",
    "DecimalsObject",
    "DecimalsOptions",
    "Amount",
    "DelegationFeesObject",
    "render_raw",
    "PathKind",
    "PathOptions",
    "PathRequest",
    "PathResult",
    "ClosePathResult",
    "PaymentOptions",
    "TxOptions",
    "TxInfos",
    "MetaTransaction",
    "RawTxFields",
    "PendingCall",
    "FeeOffer",
    "SelfPaid",
    "Delegated",
    "FeeDecision",
    "TxObject",
    "PaymentTxObject",
    "CloseTxObject",
    "VK_TYPES",
    "MintOperation",
    "TransferOperation",
    "BurnOperation",
    "ShieldOperation",
    "ShieldTxObject",
]
