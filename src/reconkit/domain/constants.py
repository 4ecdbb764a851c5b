"""Engine-wide constants."""

# Rounding drift allowed between a payout's net and the observed bank deposit.
PAYOUT_TOLERANCE_CENTS = 2

# Entity writes per atomic commit.
MAX_BATCH_SIZE = 50

# One payout is written in a single batch: one row per charge plus the fee line,
# and the store accepts at most 450 writes per batch.
MAX_PAYOUT_CHARGES = 449

ALLOWED_CHARGE_STATUSES = frozenset({"succeeded", "paid"})

# Skip reasons shown next to each previewed row.
REASON_MISSING_REQUIRED = "missing required field"
REASON_DUPLICATE_IN_FILE = "duplicate within file"
REASON_ALREADY_EXISTS = "already exists"
REASON_NO_CHANGES = "no changes"
