from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from threading import Lock, RLock
import time


# ==================== Configuration ====================

MINOR_UNITS_PER_UNIT = 100

# Accepted coins in minor units: 0.10, 0.50, 1.00, 2.00, 5.00, 10.00
ACCEPTED_DENOMINATIONS: Tuple[int, ...] = (10, 50, 100, 200, 500, 1000)

# Float loaded into the machine at startup (denomination -> count)
DEFAULT_COIN_FLOAT: Dict[int, int] = {
    10: 50,
    50: 20,
    100: 20,
    200: 10,
    500: 5,
    1000: 2,
}

DEFAULT_ADMIN_PASSWORD = "admin123"

BEVERAGE_SHELF_LIFE = timedelta(days=180)
DEFAULT_BEVERAGE_VOLUME_ML = 330
DEFAULT_SNACK_WEIGHT_G = 100

AmountLike = Union[Decimal, str, int]


def to_minor_units(amount: AmountLike) -> int:
    """Convert a display amount such as Decimal('2.50') to integer minor units"""
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {amount!r}") from None

    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")

    scaled = value * MINOR_UNITS_PER_UNIT
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {amount} is finer than the currency's smallest unit")
    return int(scaled)


def format_amount(minor_units: int) -> str:
    """Render minor units for display, e.g. 250 -> '$2.50'"""
    return f"${Decimal(minor_units) / MINOR_UNITS_PER_UNIT:.2f}"


# ==================== Exceptions ====================

class VendingError(Exception):
    pass


class InvalidDenominationError(VendingError, ValueError):
    def __init__(self, value):
        self.value = value
        super().__init__(f"Unsupported denomination: {value}")


class InsufficientStockError(VendingError):
    def __init__(self, denomination: int, requested: int, available: int):
        self.denomination = denomination
        self.requested = requested
        self.available = available
        super().__init__(
            f"Cannot withdraw {requested} x {format_amount(denomination)}: "
            f"only {available} in stock"
        )


# ==================== Enums ====================

class ProductCategory(Enum):
    """Product categories"""
    BEVERAGE = "Beverages"
    SNACK = "Snacks"


class TransactionState(Enum):
    """States a purchase or refund passes through"""
    IDLE = "IDLE"
    AWAITING_PAYMENT = "AWAITING_PAYMENT"
    FEASIBILITY_CHECK = "FEASIBILITY_CHECK"
    COMMITTING = "COMMITTING"
    COMPLETED = "COMPLETED"
    ABORTED = "ABORTED"


class TransactionKind(Enum):
    PURCHASE = "PURCHASE"
    REFUND = "REFUND"


class TransactionStatus(Enum):
    """Outcome reported to the caller"""
    ACCEPTED = "ACCEPTED"
    COMPLETED = "COMPLETED"
    REFUNDED = "REFUNDED"
    INVALID_DENOMINATION = "INVALID_DENOMINATION"
    NO_FUNDS = "NO_FUNDS"
    NOTHING_TO_REFUND = "NOTHING_TO_REFUND"
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    ITEM_UNAVAILABLE = "ITEM_UNAVAILABLE"
    ITEM_EXPIRED = "ITEM_EXPIRED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    CANNOT_MAKE_CHANGE = "CANNOT_MAKE_CHANGE"
    DISPENSE_FAILURE = "DISPENSE_FAILURE"
    CHANGE_DISPENSE_FAILURE = "CHANGE_DISPENSE_FAILURE"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"


# ==================== Products and Slots ====================

@dataclass(frozen=True)
class Product:
    """
    A sellable item. Perishable products carry an expiry date; products
    without one never expire.
    """
    name: str
    price: int
    category: ProductCategory
    expiry_date: Optional[datetime] = None
    volume_ml: Optional[int] = None
    weight_g: Optional[int] = None

    def __post_init__(self):
        if self.price <= 0:
            raise ValueError("Price must be positive")

    @property
    def is_perishable(self) -> bool:
        return self.expiry_date is not None

    def is_expired(self, now: datetime) -> bool:
        if self.expiry_date is None:
            return False
        return now > self.expiry_date

    def is_available(self, now: datetime) -> bool:
        return not self.is_expired(now)

    def description(self) -> str:
        if self.volume_ml is not None:
            return f"{self.name} ({self.volume_ml}ml) - {format_amount(self.price)}"
        if self.weight_g is not None:
            return f"{self.name} ({self.weight_g}g) - {format_amount(self.price)}"
        return f"{self.name} - {format_amount(self.price)}"


def beverage(name: str, price: AmountLike, volume_ml: int = DEFAULT_BEVERAGE_VOLUME_ML,
             expiry_date: Optional[datetime] = None,
             now: Optional[datetime] = None) -> Product:
    """Create a perishable beverage; expires after the default shelf life unless given a date"""
    if expiry_date is None:
        expiry_date = (now or datetime.now()) + BEVERAGE_SHELF_LIFE
    return Product(name, to_minor_units(price), ProductCategory.BEVERAGE,
                   expiry_date=expiry_date, volume_ml=volume_ml)


def snack(name: str, price: AmountLike, weight_g: int = DEFAULT_SNACK_WEIGHT_G) -> Product:
    """Create a non-perishable snack"""
    return Product(name, to_minor_units(price), ProductCategory.SNACK, weight_g=weight_g)


class Slot:
    """A numbered slot holding stock of a single product"""

    def __init__(self, slot_number: int, product: Product, quantity: int):
        if quantity < 0:
            raise ValueError("Quantity cannot be negative")
        self._slot_number = slot_number
        self._product = product
        self._quantity = quantity
        self._lock = Lock()

    def get_number(self) -> int:
        return self._slot_number

    def get_product(self) -> Product:
        return self._product

    def get_quantity(self) -> int:
        with self._lock:
            return self._quantity

    def is_empty(self) -> bool:
        with self._lock:
            return self._quantity == 0

    def is_available(self, now: datetime) -> bool:
        """Check if the product can be sold right now"""
        with self._lock:
            return self._quantity > 0 and self._product.is_available(now)

    def try_dispense(self, now: datetime) -> bool:
        """Release one item; re-checks stock and expiry under the slot lock"""
        with self._lock:
            if self._quantity > 0 and not self._product.is_expired(now):
                self._quantity -= 1
                return True
            return False

    def refill(self, amount: int) -> int:
        if amount <= 0:
            raise ValueError("Refill amount must be positive")
        with self._lock:
            self._quantity += amount
            return self._quantity

    def __repr__(self) -> str:
        return f"Slot({self._slot_number}, {self._product.name}, Qty: {self._quantity})"


class Catalog:
    """Ordered collection of numbered slots"""

    def __init__(self, slots: Optional[Iterable[Slot]] = None):
        self._slots: Dict[int, Slot] = {}
        self._lock = Lock()
        for slot in slots or []:
            self.add_slot(slot)

    def add_slot(self, slot: Slot) -> None:
        with self._lock:
            if slot.get_number() in self._slots:
                raise ValueError(f"Slot {slot.get_number()} already exists")
            self._slots[slot.get_number()] = slot

    def add_product(self, product: Product, quantity: int) -> Slot:
        """Place a product in a new slot numbered after the highest existing one"""
        with self._lock:
            slot_number = max(self._slots, default=0) + 1
            slot = Slot(slot_number, product, quantity)
            self._slots[slot_number] = slot
            return slot

    def get_slot(self, slot_number: int) -> Optional[Slot]:
        with self._lock:
            return self._slots.get(slot_number)

    def get_all_slots(self) -> List[Slot]:
        with self._lock:
            return [self._slots[n] for n in sorted(self._slots)]

    def group_by_category(self) -> Dict[ProductCategory, List[Slot]]:
        groups: Dict[ProductCategory, List[Slot]] = {}
        for slot in self.get_all_slots():
            groups.setdefault(slot.get_product().category, []).append(slot)
        return groups

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)


def default_catalog(now: Optional[datetime] = None) -> Catalog:
    """Catalog the terminal is stocked with at startup"""
    now = now or datetime.now()
    return Catalog([
        Slot(1, beverage("Cola", "2.50", 330, expiry_date=now + timedelta(days=180)), 10),
        Slot(2, beverage("Water", "1.00", 500, expiry_date=now + timedelta(days=365)), 15),
        Slot(3, snack("Chips", "3.00", 150), 8),
        Slot(4, snack("Chocolate", "2.00", 50), 12),
    ])


# ==================== Coin Ledger ====================

@dataclass(frozen=True)
class CoinLedgerView:
    """Immutable copy of the ledger's coin counts, highest denomination first"""
    counts: Tuple[Tuple[int, int], ...]

    def count(self, denomination: int) -> int:
        for denom, count in self.counts:
            if denom == denomination:
                return count
        return 0

    def denominations(self) -> Tuple[int, ...]:
        return tuple(denom for denom, _ in self.counts)

    def total_value(self) -> int:
        return sum(denom * count for denom, count in self.counts)

    def as_dict(self) -> Dict[int, int]:
        return dict(self.counts)


class CoinLedger:
    """
    Ground truth for money in the machine: coin counts per denomination and
    the balance deposited by the current customer.

    Deposited coins join the stock immediately, so they are available as
    change within the same transaction.
    """

    def __init__(self, denominations: Iterable[int] = ACCEPTED_DENOMINATIONS,
                 initial_counts: Optional[Mapping[int, int]] = None):
        self._denominations = tuple(sorted(set(denominations), reverse=True))
        if not self._denominations or any(d <= 0 for d in self._denominations):
            raise ValueError("Denominations must be positive")

        self._coins: Dict[int, int] = {d: 0 for d in self._denominations}
        self._deposited_balance = 0
        self._lock = RLock()

        for denomination, count in (initial_counts or {}).items():
            self.refill(denomination, count)

    def get_denominations(self) -> Tuple[int, ...]:
        return self._denominations

    def is_accepted(self, value: int) -> bool:
        return value in self._coins

    def deposit(self, denomination: int) -> int:
        """Accept one coin and return the new deposited balance"""
        with self._lock:
            if denomination not in self._coins:
                raise InvalidDenominationError(denomination)
            self._coins[denomination] += 1
            self._deposited_balance += denomination
            return self._deposited_balance

    def current_balance(self) -> int:
        with self._lock:
            return self._deposited_balance

    def clear_balance(self) -> None:
        with self._lock:
            self._deposited_balance = 0

    def snapshot(self) -> CoinLedgerView:
        with self._lock:
            return CoinLedgerView(tuple((d, self._coins[d]) for d in self._denominations))

    def commit_withdrawal(self, breakdown: Mapping[int, int]) -> None:
        """Remove every coin in the breakdown, or nothing at all"""
        with self._lock:
            for denomination, count in breakdown.items():
                if count < 0:
                    raise ValueError(f"Negative coin count for {format_amount(denomination)}")
                available = self._coins.get(denomination, 0)
                if count > available:
                    raise InsufficientStockError(denomination, count, available)

            for denomination, count in breakdown.items():
                if count:
                    self._coins[denomination] -= count

    def refill(self, denomination: int, count: int) -> None:
        """Load float coins; the deposited balance is not affected"""
        if count < 0:
            raise ValueError("Coin count cannot be negative")
        with self._lock:
            if denomination not in self._coins:
                raise InvalidDenominationError(denomination)
            self._coins[denomination] += count

    def count(self, denomination: int) -> int:
        with self._lock:
            return self._coins.get(denomination, 0)

    def total_value(self) -> int:
        with self._lock:
            return sum(d * c for d, c in self._coins.items())

    def __repr__(self) -> str:
        return (f"CoinLedger(total={format_amount(self.total_value())}, "
                f"deposited={format_amount(self.current_balance())})")


# ==================== Change Calculator ====================

def compute_change(amount: int, view: CoinLedgerView,
                   denominations: Optional[Iterable[int]] = None) -> Optional[Dict[int, int]]:
    """
    Break an amount into coins available in the view, greedily.

    Takes as many of the largest denomination as fit and stock allows, then
    moves down. Returns the breakdown (highest denomination first) when the
    remainder reaches exactly zero, otherwise None. No backtracking: with a
    limited stock the greedy pass can miss a combination that exists.

    Args:
        amount: Target in minor units
        view: Read-only coin counts to draw from
        denominations: Coins to consider; defaults to those in the view

    Returns:
        Denomination -> count, or None if the amount cannot be matched
    """
    if amount < 0:
        raise ValueError("Change amount cannot be negative")
    if amount == 0:
        return {}

    if denominations is None:
        denominations = view.denominations()

    change: Dict[int, int] = {}
    remaining = amount

    for denom in sorted(denominations, reverse=True):
        if remaining == 0:
            break

        use = min(remaining // denom, view.count(denom))
        if use > 0:
            change[denom] = use
            remaining -= denom * use

    if remaining != 0:
        return None
    return change


def can_make_change(amount: int, view: CoinLedgerView) -> bool:
    """Feasibility check; never touches the ledger the view came from"""
    return compute_change(amount, view) is not None


def breakdown_value(breakdown: Mapping[int, int]) -> int:
    return sum(denom * count for denom, count in breakdown.items())


# ==================== Terminal Context ====================

@dataclass
class TransactionRecord:
    """A resolved purchase or refund"""
    transaction_id: str
    kind: TransactionKind
    slot_number: Optional[int]
    product_name: Optional[str]
    price: int
    amount_paid: int
    change: Dict[int, int]
    status: TransactionStatus
    timestamp: datetime

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_id}, {self.kind.value}, {self.status.value})"


@dataclass
class ReconciliationFault:
    """Item left the machine but its change could not be paid out"""
    transaction_id: str
    product_name: str
    change_owed: int
    breakdown: Dict[int, int]
    reason: str
    timestamp: datetime


@dataclass
class TerminalConfig:
    denominations: Tuple[int, ...] = ACCEPTED_DENOMINATIONS
    coin_float: Dict[int, int] = field(default_factory=lambda: dict(DEFAULT_COIN_FLOAT))
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    coin_processing_delay: float = 0.0
    purchase_processing_delay: float = 0.0
    stock_default_catalog: bool = True


@dataclass
class TerminalContext:
    """Everything one terminal operates on, built once at startup"""
    catalog: Catalog
    ledger: CoinLedger
    admin_password: str = DEFAULT_ADMIN_PASSWORD
    clock: Callable[[], datetime] = datetime.now
    coin_processing_delay: float = 0.0
    purchase_processing_delay: float = 0.0
    transactions: List[TransactionRecord] = field(default_factory=list)
    faults: List[ReconciliationFault] = field(default_factory=list)
    in_service: bool = True
    # Held for the whole check -> dispense -> commit sequence
    transaction_lock: RLock = field(default_factory=RLock, repr=False)
    _transaction_counter: int = field(default=0, repr=False)

    def now(self) -> datetime:
        return self.clock()

    def next_transaction_id(self) -> str:
        with self.transaction_lock:
            self._transaction_counter += 1
            return f"TXN-{self._transaction_counter:08d}"


def build_terminal(config: Optional[TerminalConfig] = None,
                   clock: Callable[[], datetime] = datetime.now) -> TerminalContext:
    config = config or TerminalConfig()
    ledger = CoinLedger(config.denominations, config.coin_float)
    catalog = default_catalog(clock()) if config.stock_default_catalog else Catalog()
    return TerminalContext(
        catalog=catalog,
        ledger=ledger,
        admin_password=config.admin_password,
        clock=clock,
        coin_processing_delay=config.coin_processing_delay,
        purchase_processing_delay=config.purchase_processing_delay,
    )


# ==================== Purchase Coordinator ====================

@dataclass
class DepositResult:
    accepted: bool
    balance: int
    status: TransactionStatus
    message: str


@dataclass
class TransactionResult:
    """Outcome of a purchase or refund request"""
    status: TransactionStatus
    message: str
    balance: int
    product: Optional[Product] = None
    change: Dict[int, int] = field(default_factory=dict)
    amount_needed: int = 0
    transaction_id: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (TransactionStatus.COMPLETED, TransactionStatus.REFUNDED)


class PurchaseCoordinator:
    """
    Runs deposits, purchases and refunds against a terminal context.

    A purchase moves IDLE -> AWAITING_PAYMENT -> FEASIBILITY_CHECK ->
    COMMITTING -> COMPLETED. Any rejection before COMMITTING leaves the
    ledger and the deposited balance exactly as they were. The change
    breakdown is computed from a snapshot and committed only after the
    item has been dispensed; the whole sequence runs under one lock.
    """

    def __init__(self, context: TerminalContext):
        self._context = context
        self._state = TransactionState.IDLE
        self._history: List[TransactionState] = [TransactionState.IDLE]
        self._lock = context.transaction_lock

    def get_state(self) -> TransactionState:
        with self._lock:
            return self._state

    def get_history(self) -> List[TransactionState]:
        """States entered by the most recent purchase or refund"""
        with self._lock:
            return list(self._history)

    def current_balance(self) -> int:
        return self._context.ledger.current_balance()

    def insert_coin(self, amount: AmountLike) -> DepositResult:
        """Deposit a single coin given in display units, e.g. Decimal('0.50')"""
        ledger = self._context.ledger

        with self._lock:
            if not self._context.in_service:
                return DepositResult(False, ledger.current_balance(),
                                     TransactionStatus.OUT_OF_SERVICE,
                                     "Machine is out of service")
            try:
                value = to_minor_units(amount)
                if not ledger.is_accepted(value):
                    raise InvalidDenominationError(amount)
                self._pause(self._context.coin_processing_delay)
                balance = ledger.deposit(value)
            except ValueError:
                print(f"[Machine] Coin rejected: {amount}")
                return DepositResult(False, ledger.current_balance(),
                                     TransactionStatus.INVALID_DENOMINATION,
                                     "Coin not accepted. Unsupported denomination.")

            print(f"[Machine] Accepted {format_amount(value)}, balance {format_amount(balance)}")
            return DepositResult(True, balance, TransactionStatus.ACCEPTED,
                                 f"Coin {format_amount(value)} accepted")

    def purchase(self, slot_number: int) -> TransactionResult:
        """Sell the product in a slot against the deposited balance"""
        context = self._context
        ledger = context.ledger

        with self._lock:
            self._begin()

            if not context.in_service:
                return self._abort(TransactionStatus.OUT_OF_SERVICE, "Machine is out of service")

            balance = ledger.current_balance()
            if balance == 0:
                return self._abort(TransactionStatus.NO_FUNDS, "Insert coins first")

            self._set_state(TransactionState.AWAITING_PAYMENT)

            slot = context.catalog.get_slot(slot_number)
            if slot is None:
                return self._abort(TransactionStatus.ITEM_NOT_FOUND,
                                   f"No product in slot {slot_number}")

            now = context.now()
            product = slot.get_product()
            if product.is_expired(now):
                return self._abort(TransactionStatus.ITEM_EXPIRED,
                                   f"{product.name} is expired and cannot be sold",
                                   product=product)

            if not slot.is_available(now):
                return self._abort(TransactionStatus.ITEM_UNAVAILABLE,
                                   f"{product.name} is out of stock", product=product)

            if balance < product.price:
                needed = product.price - balance
                return self._abort(TransactionStatus.INSUFFICIENT_FUNDS,
                                   f"Insufficient funds. Insert {format_amount(needed)} more",
                                   product=product, amount_needed=needed)

            self._set_state(TransactionState.FEASIBILITY_CHECK)

            change_due = balance - product.price
            breakdown = compute_change(change_due, ledger.snapshot())
            if breakdown is None:
                return self._abort(TransactionStatus.CANNOT_MAKE_CHANGE,
                                   f"Cannot give {format_amount(change_due)} change. "
                                   f"Choose another product or insert the exact amount",
                                   product=product)

            self._set_state(TransactionState.COMMITTING)
            self._pause(context.purchase_processing_delay)

            if not slot.try_dispense(context.now()):
                return self._abort(TransactionStatus.DISPENSE_FAILURE,
                                   f"Failed to dispense {product.name}", product=product)

            transaction_id = self._context.next_transaction_id()

            if breakdown:
                try:
                    ledger.commit_withdrawal(breakdown)
                except InsufficientStockError as e:
                    return self._escalate(transaction_id, slot_number, product,
                                          balance, change_due, breakdown, str(e))

            ledger.clear_balance()
            self._record(transaction_id, TransactionKind.PURCHASE, slot_number, product,
                         balance, breakdown, TransactionStatus.COMPLETED)
            self._set_state(TransactionState.COMPLETED)

            print(f"[Machine] {transaction_id}: sold {product.name}, "
                  f"change {format_amount(change_due)}")
            return TransactionResult(TransactionStatus.COMPLETED,
                                     f"You bought: {product.description()}",
                                     balance=0, product=product, change=breakdown,
                                     transaction_id=transaction_id)

    def refund(self) -> TransactionResult:
        """Return the deposited balance as coins"""
        context = self._context
        ledger = context.ledger

        with self._lock:
            self._begin()

            if not context.in_service:
                return self._abort(TransactionStatus.OUT_OF_SERVICE, "Machine is out of service")

            balance = ledger.current_balance()
            if balance == 0:
                return self._abort(TransactionStatus.NOTHING_TO_REFUND, "No money to return")

            self._set_state(TransactionState.FEASIBILITY_CHECK)

            breakdown = compute_change(balance, ledger.snapshot())
            if breakdown is None:
                return self._abort(TransactionStatus.CANNOT_MAKE_CHANGE,
                                   "Cannot return money at the moment")

            self._set_state(TransactionState.COMMITTING)
            try:
                ledger.commit_withdrawal(breakdown)
            except InsufficientStockError:
                # Nothing has left the machine yet, so this is an ordinary abort
                return self._abort(TransactionStatus.CANNOT_MAKE_CHANGE,
                                   "Cannot return money at the moment")

            ledger.clear_balance()
            transaction_id = self._context.next_transaction_id()
            self._record(transaction_id, TransactionKind.REFUND, None, None,
                         balance, breakdown, TransactionStatus.REFUNDED)
            self._set_state(TransactionState.COMPLETED)

            print(f"[Machine] {transaction_id}: refunded {format_amount(balance)}")
            return TransactionResult(TransactionStatus.REFUNDED, "Returning your money",
                                     balance=0, change=breakdown,
                                     transaction_id=transaction_id)

    def _begin(self) -> None:
        self._state = TransactionState.IDLE
        self._history = [TransactionState.IDLE]

    def _set_state(self, state: TransactionState) -> None:
        self._state = state
        self._history.append(state)

    def _abort(self, status: TransactionStatus, message: str, **details) -> TransactionResult:
        self._set_state(TransactionState.ABORTED)
        print(f"[Machine] {message}")
        return TransactionResult(status, message, balance=self._context.ledger.current_balance(),
                                 **details)

    def _escalate(self, transaction_id: str, slot_number: int, product: Product,
                  amount_paid: int, change_due: int, breakdown: Dict[int, int],
                  reason: str) -> TransactionResult:
        """Item is already out; record the owed change and stop taking money"""
        context = self._context
        fault = ReconciliationFault(
            transaction_id=transaction_id,
            product_name=product.name,
            change_owed=change_due,
            breakdown=dict(breakdown),
            reason=reason,
            timestamp=context.now(),
        )
        context.faults.append(fault)
        context.ledger.clear_balance()
        context.in_service = False

        self._record(transaction_id, TransactionKind.PURCHASE, slot_number, product,
                     amount_paid, {}, TransactionStatus.CHANGE_DISPENSE_FAILURE)
        self._set_state(TransactionState.ABORTED)

        print(f"[ALERT] {transaction_id}: {product.name} dispensed but "
              f"{format_amount(change_due)} change could not be paid ({reason}). "
              f"Operator reconciliation required")
        return TransactionResult(TransactionStatus.CHANGE_DISPENSE_FAILURE,
                                 f"You bought: {product.description()}. Could not return "
                                 f"change, please contact the operator",
                                 balance=0, product=product, transaction_id=transaction_id)

    def _record(self, transaction_id: str, kind: TransactionKind, slot_number: Optional[int],
                product: Optional[Product], amount_paid: int, change: Dict[int, int],
                status: TransactionStatus) -> None:
        self._context.transactions.append(TransactionRecord(
            transaction_id=transaction_id,
            kind=kind,
            slot_number=slot_number,
            product_name=product.name if product else None,
            price=product.price if product else 0,
            amount_paid=amount_paid,
            change=dict(change),
            status=status,
            timestamp=self._context.now(),
        ))

    @staticmethod
    def _pause(seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


# ==================== Admin Console ====================

@dataclass
class EarningsReport:
    lines: List[Tuple[int, int, int]]  # (denomination, count, value)
    total: int


@dataclass
class MachineStatistics:
    total_items: int
    product_count: int
    empty_slots: int
    expired_products: int
    completed_sales: int
    revenue: int
    open_faults: int


class AdminConsole:
    """Password-gated maintenance operations on the catalog and ledger"""

    def __init__(self, context: TerminalContext):
        self._context = context
        self._authenticated = False

    def authenticate(self, password: str) -> bool:
        self._authenticated = password == self._context.admin_password
        if not self._authenticated:
            print("[Admin] Wrong password")
        return self._authenticated

    def logout(self) -> None:
        self._authenticated = False

    def is_authenticated(self) -> bool:
        return self._authenticated

    def _require_auth(self) -> None:
        if not self._authenticated:
            raise PermissionError("Admin authentication required")

    def restock(self, slot_number: int, amount: int) -> bool:
        self._require_auth()
        slot = self._context.catalog.get_slot(slot_number)
        if slot is None:
            print(f"[Admin] Slot {slot_number} not found")
            return False
        if amount <= 0:
            print(f"[Admin] Invalid restock amount: {amount}")
            return False

        quantity = slot.refill(amount)
        print(f"[Admin] Slot {slot_number} restocked. New quantity: {quantity}")
        return True

    def add_product(self, product: Product, quantity: int) -> int:
        self._require_auth()
        if quantity < 0:
            raise ValueError("Quantity cannot be negative")
        slot = self._context.catalog.add_product(product, quantity)
        print(f"[Admin] Added {product.name} to slot {slot.get_number()}")
        return slot.get_number()

    def refill_coins(self, denomination: AmountLike, count: int) -> None:
        self._require_auth()
        value = to_minor_units(denomination)
        self._context.ledger.refill(value, count)
        print(f"[Admin] Added {format_amount(value)} x {count}")

    def collect_earnings(self) -> EarningsReport:
        """Report the cash held per denomination; coins stay in the machine"""
        self._require_auth()
        view = self._context.ledger.snapshot()
        lines = [(denom, count, denom * count) for denom, count in view.counts]
        return EarningsReport(lines=lines, total=view.total_value())

    def statistics(self) -> MachineStatistics:
        self._require_auth()
        context = self._context
        now = context.now()
        slots = context.catalog.get_all_slots()
        sales = [t for t in context.transactions
                 if t.kind == TransactionKind.PURCHASE
                 and t.status in (TransactionStatus.COMPLETED,
                                  TransactionStatus.CHANGE_DISPENSE_FAILURE)]
        return MachineStatistics(
            total_items=sum(s.get_quantity() for s in slots),
            product_count=len(slots),
            empty_slots=sum(1 for s in slots if s.is_empty()),
            expired_products=sum(1 for s in slots if s.get_product().is_expired(now)),
            completed_sales=len(sales),
            revenue=sum(t.price for t in sales),
            open_faults=len(context.faults),
        )

    def reconcile(self) -> List[ReconciliationFault]:
        """Acknowledge recorded faults and put the terminal back in service"""
        self._require_auth()
        resolved = list(self._context.faults)
        self._context.faults.clear()
        self._context.in_service = True
        print(f"[Admin] Reconciled {len(resolved)} fault(s). Machine back in service")
        return resolved


# ==================== Terminal UI ====================

class TerminalUI:
    """Text menu driving the coordinator; holds no payment state of its own"""

    def __init__(self, context: TerminalContext, input_func: Callable[[str], str] = input):
        self._context = context
        self._coordinator = PurchaseCoordinator(context)
        self._admin = AdminConsole(context)
        self._input = input_func

    def get_coordinator(self) -> PurchaseCoordinator:
        return self._coordinator

    def run(self) -> None:
        print("Welcome to the vending machine!")
        print("=" * 40)

        actions = {
            "1": self.display_products,
            "2": self._handle_insert_coin,
            "3": self._handle_purchase,
            "4": self._handle_refund,
            "5": self._admin_mode,
        }

        while True:
            self._display_main_menu()
            try:
                choice = self._input("Choose an action: ").strip()
            except EOFError:
                choice = "0"

            if choice == "0":
                print("Goodbye!")
                return

            action = actions.get(choice)
            if action is None:
                print("Invalid choice. Try again.")
                continue
            try:
                action()
            except EOFError:
                print("\nGoodbye!")
                return

    def _display_main_menu(self) -> None:
        print(f"\nCurrent balance: {format_amount(self._coordinator.current_balance())}")
        if not self._context.in_service:
            print("*** OUT OF SERVICE - operator attention required ***")
        print("\n--- MAIN MENU ---")
        print("1. Show products")
        print("2. Insert coin")
        print("3. Buy product")
        print("4. Return money")
        print("5. Admin mode")
        print("0. Exit")

    def display_products(self) -> None:
        now = self._context.now()
        print("\n--- PRODUCTS ---")
        for category, slots in self._context.catalog.group_by_category().items():
            print(f"\n{category.value}:")
            for slot in slots:
                product = slot.get_product()
                quantity = slot.get_quantity()
                status = f"({quantity} left)" if quantity > 0 else "(Out of stock)"
                expired = " [EXPIRED]" if product.is_expired(now) else ""
                print(f"  {slot.get_number()}. {product.description()} {status}{expired}")

    def _handle_insert_coin(self) -> None:
        accepted = ", ".join(format_amount(d) for d in reversed(self._context.ledger.get_denominations()))
        print("\n--- INSERT COIN ---")
        print(f"Accepted coins: {accepted}")
        raw = self._input("Coin value: ")
        result = self._coordinator.insert_coin(raw)
        print(result.message)
        if result.accepted:
            print(f"Current balance: {format_amount(result.balance)}")

    def _handle_purchase(self) -> None:
        if self._coordinator.current_balance() == 0:
            print("Insert coins first!")
            return

        self.display_products()
        slot_number = self._read_int("\nProduct number: ")
        if slot_number is None:
            print("Invalid product number.")
            return

        result = self._coordinator.purchase(slot_number)
        print(result.message)
        if result.ok:
            self._render_change("Your change:", result.change)
            print("Thank you for your purchase!")

    def _handle_refund(self) -> None:
        result = self._coordinator.refund()
        print(result.message)
        if result.ok:
            self._render_change("", result.change)

    def _render_change(self, title: str, change: Mapping[int, int]) -> None:
        if not change:
            return
        if title:
            print(title)
        for denom, count in change.items():
            print(f"  {format_amount(denom)} x {count}")

    def _read_int(self, prompt: str) -> Optional[int]:
        try:
            return int(self._input(prompt).strip())
        except ValueError:
            return None

    # Admin mode

    def _admin_mode(self) -> None:
        if not self._admin.authenticate(self._input("Admin password: ")):
            return

        actions = {
            "1": self._admin_restock,
            "2": self._admin_add_product,
            "3": self._admin_collect_earnings,
            "4": self._admin_statistics,
            "5": self._admin_refill_coins,
            "6": self._admin_reconcile,
        }

        try:
            while True:
                print("\n--- ADMIN MODE ---")
                print("1. Restock product")
                print("2. Add new product")
                print("3. Collect earnings")
                print("4. Machine statistics")
                print("5. Refill coins")
                print("6. Reconcile faults")
                print("0. Leave admin mode")
                choice = self._input("Choose an action: ").strip()
                if choice == "0":
                    return
                action = actions.get(choice)
                if action is None:
                    print("Invalid choice.")
                else:
                    action()
        finally:
            self._admin.logout()

    def _admin_restock(self) -> None:
        self.display_products()
        slot_number = self._read_int("Slot to restock: ")
        amount = self._read_int("Quantity to add: ")
        if slot_number is None or amount is None:
            print("Invalid number.")
            return
        self._admin.restock(slot_number, amount)

    def _admin_add_product(self) -> None:
        print("Add new product:")
        print("1. Beverage")
        print("2. Snack")
        kind = self._input("Type: ").strip()
        name = self._input("Name: ").strip()
        try:
            price = to_minor_units(self._input("Price: "))
        except ValueError:
            price = 0
        if price <= 0:
            print("Invalid price.")
            return
        quantity = self._read_int("Quantity: ")
        if quantity is None or quantity < 0:
            print("Invalid quantity.")
            return

        if kind == "1":
            volume = self._read_int("Volume (ml): ")
            product = Product(name, price, ProductCategory.BEVERAGE,
                              expiry_date=self._context.now() + BEVERAGE_SHELF_LIFE,
                              volume_ml=volume if volume and volume > 0 else DEFAULT_BEVERAGE_VOLUME_ML)
        elif kind == "2":
            product = Product(name, price, ProductCategory.SNACK, weight_g=DEFAULT_SNACK_WEIGHT_G)
        else:
            print("Unknown product type.")
            return

        try:
            slot_number = self._admin.add_product(product, quantity)
        except ValueError as e:
            print(f"Cannot add product: {e}")
            return
        print(f"Product added to slot {slot_number}")

    def _admin_collect_earnings(self) -> None:
        report = self._admin.collect_earnings()
        print("Collected funds:")
        for denom, count, value in report.lines:
            print(f"  {format_amount(denom)} x {count} = {format_amount(value)}")
        print(f"Total: {format_amount(report.total)}")

    def _admin_statistics(self) -> None:
        stats = self._admin.statistics()
        print("\n--- MACHINE STATISTICS ---")
        print(f"Total items: {stats.total_items}")
        print(f"Products in assortment: {stats.product_count}")
        print(f"Empty slots: {stats.empty_slots}")
        print(f"Expired products: {stats.expired_products}")
        print(f"Sales: {stats.completed_sales}")
        print(f"Revenue: {format_amount(stats.revenue)}")
        print(f"Open faults: {stats.open_faults}")

    def _admin_refill_coins(self) -> None:
        raw = self._input("Coin value: ")
        count = self._read_int("Count: ")
        if count is None:
            print("Invalid count.")
            return
        try:
            self._admin.refill_coins(raw, count)
        except ValueError as e:
            print(f"Cannot refill: {e}")

    def _admin_reconcile(self) -> None:
        for fault in self._admin.reconcile():
            print(f"  {fault.transaction_id}: {fault.product_name}, "
                  f"owed {format_amount(fault.change_owed)} ({fault.reason})")


def main():
    """Start an interactive terminal stocked with the default catalog"""
    ui = TerminalUI(build_terminal(TerminalConfig(coin_processing_delay=0.3,
                                                  purchase_processing_delay=0.7)))
    try:
        ui.run()
    except KeyboardInterrupt:
        print("\nGoodbye!")


if __name__ == "__main__":
    main()


# Change-Making Algorithm:
# Greedy, largest coin first, bounded by what is in stock:
#   denominations = [10.00, 5.00, 2.00, 1.00, 0.50, 0.10]
#   for each denomination (largest first):
#       take min(remaining // coin, coins in stock)
# Example: change for $3.70 with a full float
#   1 x $2.00 (remaining $1.70)
#   1 x $1.00 (remaining $0.70)
#   1 x $0.50 (remaining $0.20)
#   2 x $0.10 (remaining $0.00)
#
# With a depleted float the greedy pass can refuse an amount that some other
# combination would cover: $6.00 from {$5.00 x 1, $2.00 x 3} takes the $5.00
# first and is left with $1.00 it cannot pay. The purchase is then refused
# rather than solved another way.
#
# Money is kept in integer cents end to end; Decimal is only used to parse
# and print amounts.
