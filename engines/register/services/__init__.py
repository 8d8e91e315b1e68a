"""
Till Register Engine — Register Service
==========================================
The command/query surface the presentation layer talks to.

Every call becomes a Command and goes through the CommandBus:
the permission policy checks the logged-in employee, the engine
runs, and a domain error comes back as a REJECTED CommandResult.
Nothing on this surface raises for a business rule.

Usage:
    register = RegisterService(settings, products=DEMO_PRODUCTS)
    register.login("johndoe", "password123")
    register.add_item("apple")
    result = register.checkout("cash")
    receipt = result.execution_result
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, Optional

from core.commands.base import Command, derive_source_engine
from core.commands.bus import CommandBus, CommandResult
from core.commands.dispatcher import CommandDispatcher
from core.commands.errors import ValidationError
from core.config.settings import RegisterSettings, load_settings
from core.events.dispatcher import EventDispatcher
from core.permissions.evaluator import permission_policy
from core.security.password import BcryptCredentialVerifier, CredentialVerifier
from core.time.clock import Clock, SystemClock
from engines.cash.commands import (
    CASH_BALANCE_GET_REQUEST,
    CASH_DRAWER_REMOVE_REQUEST,
    CASH_MOVEMENTS_LIST_REQUEST,
    RemoveCashRequest,
)
from engines.cash.services import CashDrawer
from engines.catalog.commands import (
    CATALOG_BUNDLE_ADD_REQUEST,
    CATALOG_INVENTORY_REPORT_REQUEST,
    CATALOG_PRODUCT_ADD_REQUEST,
    CATALOG_PRODUCTS_LIST_REQUEST,
    CATALOG_STOCK_ADJUST_REQUEST,
    AddBundleRequest,
    AddProductRequest,
    AdjustStockRequest,
)
from engines.catalog.models import Product
from engines.catalog.services import Catalog
from engines.ledger.commands import (
    LEDGER_RECEIPT_COMPLETE_REQUEST,
    LEDGER_RECEIPT_DUPLICATE_REQUEST,
    LEDGER_RECEIPT_REFUND_REQUEST,
    LEDGER_RECEIPT_VOID_REQUEST,
    LEDGER_RECEIPTS_LIST_REQUEST,
    LEDGER_SALES_SUMMARY_REQUEST,
    CheckoutRequest,
    DuplicateReceiptRequest,
    RefundReceiptRequest,
    VoidReceiptRequest,
)
from engines.ledger.services import TransactionLedger
from engines.order.commands import (
    ORDER_CART_CLEAR_REQUEST,
    ORDER_CART_GET_REQUEST,
    ORDER_CHECKOUT_BEGIN_REQUEST,
    ORDER_CHECKOUT_CANCEL_REQUEST,
    ORDER_CUSTOM_AMOUNT_ADD_REQUEST,
    ORDER_DISCOUNT_SET_REQUEST,
    ORDER_EMPLOYEE_ORDER_SET_REQUEST,
    ORDER_EXTRA_CHARGES_SET_REQUEST,
    ORDER_GRATUITY_SET_ENABLED_REQUEST,
    ORDER_GRATUITY_SET_RATE_REQUEST,
    ORDER_ITEM_ADD_REQUEST,
    ORDER_ITEM_REMOVE_REQUEST,
    ORDER_PRICING_GET_REQUEST,
    ORDER_TAX_SET_ENABLED_REQUEST,
    ORDER_TAX_SET_RATE_REQUEST,
    AddCustomAmountRequest,
    AddItemRequest,
    RemoveItemRequest,
    SetDiscountRequest,
    SetOrderValueRequest,
)
from engines.order.services import OrderAggregate
from engines.pricing.models import ClientSettings, PricingConfig
from engines.settings.commands import (
    SETTINGS_CLIENT_UPDATE_REQUEST,
    UpdateClientSettingsRequest,
)
from engines.settings.events import (
    SETTINGS_CLIENT_UPDATED_V1,
    build_client_settings_updated_payload,
)
from engines.staff.commands import (
    STAFF_CLOCK_IN_REQUEST,
    STAFF_CLOCK_OUT_REQUEST,
    STAFF_EMPLOYEE_ADD_REQUEST,
    STAFF_EMPLOYEE_LIST_REQUEST,
    STAFF_EMPLOYEE_SET_STATUS_REQUEST,
    STAFF_EMPLOYEE_UPDATE_REQUEST,
    STAFF_SESSION_CURRENT_REQUEST,
    STAFF_SESSION_LOGIN_REQUEST,
    STAFF_SESSION_LOGOUT_REQUEST,
    AddEmployeeRequest,
    LoginRequest,
    SetEmployeeStatusRequest,
    UpdateEmployeeRequest,
)
from engines.staff.services import EmployeeRoster, Session
from projections.sales import SalesSummaryProjection

logger = logging.getLogger("till.register")


# ══════════════════════════════════════════════════════════════
# COMMAND HANDLER
# ══════════════════════════════════════════════════════════════

class _RegisterCommandHandler:
    def __init__(self, service: "RegisterService"):
        self._service = service

    def execute(self, command: Command) -> Any:
        return self._service._execute_command(command)


# ══════════════════════════════════════════════════════════════
# REGISTER SERVICE
# ══════════════════════════════════════════════════════════════

class RegisterService:
    """One register: catalog, order, ledger, drawer, staff session."""

    def __init__(
        self,
        settings: RegisterSettings | None = None,
        *,
        products: Iterable[Product] = (),
        clock: Clock | None = None,
        verifier: CredentialVerifier | None = None,
        event_dispatcher: EventDispatcher | None = None,
    ):
        self._settings = settings if settings is not None else load_settings()
        self._clock = clock or SystemClock()
        self._events = event_dispatcher or EventDispatcher()
        verifier = verifier or BcryptCredentialVerifier(
            rounds=self._settings.bcrypt_rounds
        )

        self._sales = SalesSummaryProjection()
        self._sales.subscribe(self._events)

        self._catalog = Catalog(
            products, clock=self._clock, event_dispatcher=self._events,
        )
        self._drawer = CashDrawer(
            self._settings.starting_float,
            clock=self._clock,
            event_dispatcher=self._events,
        )
        self._ledger = TransactionLedger(
            self._catalog,
            self._drawer,
            clock=self._clock,
            event_dispatcher=self._events,
        )
        self._roster = EmployeeRoster(
            verifier, clock=self._clock, event_dispatcher=self._events,
        )
        self._session = Session(
            self._roster, clock=self._clock, event_dispatcher=self._events,
        )

        self._client_settings = ClientSettings(
            free_lunch_enabled=self._settings.free_lunch_enabled,
            discounted_to_go_enabled=self._settings.discounted_to_go_enabled,
            discounted_to_go_percentage=self._settings.discounted_to_go_percentage,
        )
        self._order = OrderAggregate(
            self._catalog,
            defaults=PricingConfig(
                tax_enabled=self._settings.tax_enabled,
                tax_rate=self._settings.tax_rate,
                gratuity_enabled=self._settings.gratuity_enabled,
                gratuity_rate=self._settings.gratuity_rate,
                client_settings=self._client_settings,
            ),
        )

        dispatcher = CommandDispatcher(clock=self._clock)
        dispatcher.register_policy(permission_policy)
        self._bus = CommandBus(
            dispatcher=dispatcher,
            actor_provider=self._session.current_employee,
        )

        self._routes: Dict[str, Callable[[Command], Any]] = {
            # staff
            STAFF_SESSION_LOGIN_REQUEST: self._login,
            STAFF_SESSION_LOGOUT_REQUEST: self._logout,
            STAFF_SESSION_CURRENT_REQUEST: lambda c: self._session.current_employee(),
            STAFF_CLOCK_IN_REQUEST: lambda c: self._session.clock_in(),
            STAFF_CLOCK_OUT_REQUEST: lambda c: self._session.clock_out(),
            STAFF_EMPLOYEE_ADD_REQUEST: self._add_employee,
            STAFF_EMPLOYEE_UPDATE_REQUEST: self._update_employee,
            STAFF_EMPLOYEE_SET_STATUS_REQUEST: self._set_employee_status,
            STAFF_EMPLOYEE_LIST_REQUEST: lambda c: self._roster.employees(),
            # catalog
            CATALOG_PRODUCTS_LIST_REQUEST: lambda c: self._catalog.products(),
            CATALOG_INVENTORY_REPORT_REQUEST: lambda c: self._catalog.inventory_report(),
            CATALOG_STOCK_ADJUST_REQUEST: self._adjust_stock,
            CATALOG_PRODUCT_ADD_REQUEST: self._add_product,
            CATALOG_BUNDLE_ADD_REQUEST: self._add_bundle,
            # order
            ORDER_CART_GET_REQUEST: lambda c: self._order.lines(),
            ORDER_PRICING_GET_REQUEST: lambda c: self._order.breakdown(),
            ORDER_ITEM_ADD_REQUEST: lambda c: self._order.add_item(
                c.payload["product_id"]
            ),
            ORDER_ITEM_REMOVE_REQUEST: lambda c: self._order.remove_item(
                c.payload["product_id"]
            ),
            ORDER_CUSTOM_AMOUNT_ADD_REQUEST: lambda c: self._order.add_custom_amount(
                c.payload["amount"]
            ),
            ORDER_CART_CLEAR_REQUEST: lambda c: self._order.clear(),
            ORDER_DISCOUNT_SET_REQUEST: lambda c: self._order.set_discount(
                c.payload["discount_type"], c.payload["value"]
            ),
            ORDER_TAX_SET_ENABLED_REQUEST: lambda c: self._order.set_tax_enabled(
                c.payload["value"]
            ),
            ORDER_TAX_SET_RATE_REQUEST: lambda c: self._order.set_tax_rate(
                c.payload["value"]
            ),
            ORDER_GRATUITY_SET_ENABLED_REQUEST: lambda c: self._order.set_gratuity_enabled(
                c.payload["value"]
            ),
            ORDER_GRATUITY_SET_RATE_REQUEST: lambda c: self._order.set_gratuity_rate(
                c.payload["value"]
            ),
            ORDER_EXTRA_CHARGES_SET_REQUEST: lambda c: self._order.set_extra_charges(
                c.payload["value"]
            ),
            ORDER_EMPLOYEE_ORDER_SET_REQUEST: lambda c: self._order.set_employee_order(
                c.payload["value"]
            ),
            ORDER_CHECKOUT_BEGIN_REQUEST: lambda c: self._order.begin_checkout(),
            ORDER_CHECKOUT_CANCEL_REQUEST: lambda c: self._order.cancel_checkout(),
            # ledger
            LEDGER_RECEIPT_COMPLETE_REQUEST: self._checkout,
            LEDGER_RECEIPT_DUPLICATE_REQUEST: lambda c: self._ledger.duplicate(
                c.payload["receipt_id"], employee_id=c.actor_id
            ),
            LEDGER_RECEIPT_VOID_REQUEST: lambda c: self._ledger.void(
                c.payload["receipt_id"],
                employee_id=c.actor_id,
                reason=c.payload["reason"],
            ),
            LEDGER_RECEIPT_REFUND_REQUEST: lambda c: self._ledger.refund(
                c.payload["receipt_id"], employee_id=c.actor_id
            ),
            LEDGER_RECEIPTS_LIST_REQUEST: lambda c: self._ledger.receipts(),
            LEDGER_SALES_SUMMARY_REQUEST: lambda c: self._sales.summary(
                cash_in_register=self._drawer.balance
            ),
            # cash
            CASH_BALANCE_GET_REQUEST: lambda c: self._drawer.balance,
            CASH_MOVEMENTS_LIST_REQUEST: lambda c: self._drawer.movements(),
            CASH_DRAWER_REMOVE_REQUEST: lambda c: self._drawer.manual_removal(
                c.payload["amount"], employee_id=c.actor_id
            ),
            # settings
            SETTINGS_CLIENT_UPDATE_REQUEST: self._update_client_settings,
        }
        self._register_handlers()

    def _register_handlers(self) -> None:
        handler = _RegisterCommandHandler(self)
        for command_type in sorted(self._routes):
            self._bus.register_handler(command_type, handler)

    def _execute_command(self, command: Command) -> Any:
        route = self._routes.get(command.command_type)
        if route is None:
            raise ValueError(
                f"Unsupported register command type: {command.command_type}"
            )
        return route(command)

    # ── aggregates (engine-level access, bypasses the bus) ────

    @property
    def settings(self) -> RegisterSettings:
        return self._settings

    @property
    def client_settings(self) -> ClientSettings:
        return self._client_settings

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def order(self) -> OrderAggregate:
        return self._order

    @property
    def ledger(self) -> TransactionLedger:
        return self._ledger

    @property
    def drawer(self) -> CashDrawer:
        return self._drawer

    @property
    def roster(self) -> EmployeeRoster:
        return self._roster

    @property
    def session(self) -> Session:
        return self._session

    @property
    def events(self) -> EventDispatcher:
        return self._events

    @property
    def sales_projection(self) -> SalesSummaryProjection:
        return self._sales

    # ── command plumbing ──────────────────────────────────────

    def _submit(self, request) -> CommandResult:
        return self._bus.handle(
            request.to_command(
                actor_id=self._session.employee_id,
                command_id=uuid.uuid4(),
                issued_at=self._clock.now_utc(),
            )
        )

    def _issue(self, command_type: str, payload: Optional[dict] = None) -> CommandResult:
        return self._bus.handle(
            Command(
                command_id=uuid.uuid4(),
                command_type=command_type,
                actor_id=self._session.employee_id,
                payload=payload or {},
                issued_at=self._clock.now_utc(),
                source_engine=derive_source_engine(command_type),
            )
        )

    # ══════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════

    def get_catalog(self) -> CommandResult:
        return self._issue(CATALOG_PRODUCTS_LIST_REQUEST)

    def get_order(self) -> CommandResult:
        return self._issue(ORDER_CART_GET_REQUEST)

    def get_pricing_breakdown(self) -> CommandResult:
        return self._issue(ORDER_PRICING_GET_REQUEST)

    def get_receipts(self) -> CommandResult:
        return self._issue(LEDGER_RECEIPTS_LIST_REQUEST)

    def get_cash_balance(self) -> CommandResult:
        return self._issue(CASH_BALANCE_GET_REQUEST)

    def get_current_employee(self) -> CommandResult:
        return self._issue(STAFF_SESSION_CURRENT_REQUEST)

    def get_sales_summary(self) -> CommandResult:
        return self._issue(LEDGER_SALES_SUMMARY_REQUEST)

    def get_inventory_report(self) -> CommandResult:
        return self._issue(CATALOG_INVENTORY_REPORT_REQUEST)

    def get_drawer_movements(self) -> CommandResult:
        return self._issue(CASH_MOVEMENTS_LIST_REQUEST)

    def get_employees(self) -> CommandResult:
        return self._issue(STAFF_EMPLOYEE_LIST_REQUEST)

    # ══════════════════════════════════════════════════════════
    # ORDER COMMANDS
    # ══════════════════════════════════════════════════════════

    def add_item(self, product_id: str) -> CommandResult:
        return self._submit(AddItemRequest(product_id=product_id))

    def remove_item(self, product_id: str) -> CommandResult:
        return self._submit(RemoveItemRequest(product_id=product_id))

    def add_custom_amount(self, amount) -> CommandResult:
        return self._submit(AddCustomAmountRequest(amount=amount))

    def set_discount(self, discount_type, value) -> CommandResult:
        return self._submit(
            SetDiscountRequest(discount_type=discount_type, value=value)
        )

    def set_tax_enabled(self, enabled: bool) -> CommandResult:
        return self._submit(
            SetOrderValueRequest(ORDER_TAX_SET_ENABLED_REQUEST, enabled)
        )

    def set_tax_rate(self, rate) -> CommandResult:
        return self._submit(SetOrderValueRequest(ORDER_TAX_SET_RATE_REQUEST, rate))

    def set_gratuity_enabled(self, enabled: bool) -> CommandResult:
        return self._submit(
            SetOrderValueRequest(ORDER_GRATUITY_SET_ENABLED_REQUEST, enabled)
        )

    def set_gratuity_rate(self, rate) -> CommandResult:
        return self._submit(
            SetOrderValueRequest(ORDER_GRATUITY_SET_RATE_REQUEST, rate)
        )

    def set_extra_charges(self, amount) -> CommandResult:
        return self._submit(
            SetOrderValueRequest(ORDER_EXTRA_CHARGES_SET_REQUEST, amount)
        )

    def set_employee_order(self, enabled: bool) -> CommandResult:
        return self._submit(
            SetOrderValueRequest(ORDER_EMPLOYEE_ORDER_SET_REQUEST, enabled)
        )

    def begin_checkout(self) -> CommandResult:
        return self._issue(ORDER_CHECKOUT_BEGIN_REQUEST)

    def cancel_checkout(self) -> CommandResult:
        return self._issue(ORDER_CHECKOUT_CANCEL_REQUEST)

    def clear_order(self) -> CommandResult:
        return self._issue(ORDER_CART_CLEAR_REQUEST)

    # ══════════════════════════════════════════════════════════
    # LEDGER COMMANDS
    # ══════════════════════════════════════════════════════════

    def checkout(
        self,
        payment_method="cash",
        signature: Optional[str] = None,
        receipt_method="none",
        contact_info: Optional[str] = None,
    ) -> CommandResult:
        return self._submit(
            CheckoutRequest(
                payment_method=payment_method,
                signature=signature,
                receipt_method=receipt_method,
                contact_info=contact_info,
            )
        )

    def duplicate_receipt(self, receipt_id: str) -> CommandResult:
        return self._submit(DuplicateReceiptRequest(receipt_id=receipt_id))

    def void_receipt(self, receipt_id: str, reason: str = "") -> CommandResult:
        return self._submit(VoidReceiptRequest(receipt_id=receipt_id, reason=reason))

    def refund_receipt(self, receipt_id: str) -> CommandResult:
        return self._submit(RefundReceiptRequest(receipt_id=receipt_id))

    # ══════════════════════════════════════════════════════════
    # STAFF COMMANDS
    # ══════════════════════════════════════════════════════════

    def login(self, username: str, password: str) -> CommandResult:
        return self._submit(LoginRequest(username=username, password=password))

    def logout(self) -> CommandResult:
        return self._issue(STAFF_SESSION_LOGOUT_REQUEST)

    def clock_in(self) -> CommandResult:
        return self._issue(STAFF_CLOCK_IN_REQUEST)

    def clock_out(self) -> CommandResult:
        return self._issue(STAFF_CLOCK_OUT_REQUEST)

    def add_employee(
        self,
        username: str,
        password: str,
        role: str = "cashier",
        **contact,
    ) -> CommandResult:
        """contact: phone_number, email, address, social_security, employee_id."""
        return self._submit(
            AddEmployeeRequest(
                username=username, password=password, role=role, **contact,
            )
        )

    def update_employee(self, employee_id: str, **changes) -> CommandResult:
        return self._submit(
            UpdateEmployeeRequest(employee_id=employee_id, changes=changes)
        )

    def update_employee_status(self, employee_id: str, status: str) -> CommandResult:
        return self._submit(
            SetEmployeeStatusRequest(employee_id=employee_id, status=status)
        )

    # ══════════════════════════════════════════════════════════
    # CATALOG, CASH AND SETTINGS COMMANDS
    # ══════════════════════════════════════════════════════════

    def adjust_stock(self, product_id: str, delta: int) -> CommandResult:
        return self._submit(AdjustStockRequest(product_id=product_id, delta=delta))

    def add_product(
        self,
        name: str,
        price,
        category: str,
        stock: int = 0,
        product_id: Optional[str] = None,
    ) -> CommandResult:
        return self._submit(
            AddProductRequest(
                name=name,
                price=price,
                category=category,
                stock=stock,
                product_id=product_id,
            )
        )

    def add_bundle(
        self, name: str, price, items, product_id: Optional[str] = None,
    ) -> CommandResult:
        """items: (product_id, quantity) pairs."""
        return self._submit(
            AddBundleRequest(
                name=name, price=price, items=tuple(items), product_id=product_id,
            )
        )

    def remove_cash(self, amount) -> CommandResult:
        return self._submit(RemoveCashRequest(amount=amount))

    def update_client_settings(self, **changes) -> CommandResult:
        return self._submit(UpdateClientSettingsRequest(changes=changes))

    # ══════════════════════════════════════════════════════════
    # HANDLERS
    # ══════════════════════════════════════════════════════════

    def _login(self, command: Command):
        return self._session.login(
            command.payload["username"],
            command.payload["password"],
            abandon_order=self._order.clear,
        )

    def _logout(self, command: Command):
        return self._session.logout(abandon_order=self._order.clear)

    def _checkout(self, command: Command):
        payload = command.payload
        return self._ledger.complete(
            self._order,
            employee_id=command.actor_id,
            payment_method=payload["payment_method"],
            signature=payload["signature"],
            receipt_method=payload["receipt_method"],
            contact_info=payload["contact_info"],
        )

    def _add_employee(self, command: Command):
        payload = dict(command.payload)
        return self._roster.add(
            payload.pop("username"),
            payload.pop("password"),
            payload.pop("role"),
            actor_id=command.actor_id,
            **payload,
        )

    def _update_employee(self, command: Command):
        return self._roster.update(
            command.payload["employee_id"],
            command.payload["changes"],
            editor=self._session.current_employee(),
        )

    def _set_employee_status(self, command: Command):
        return self._roster.set_status(
            command.payload["employee_id"],
            command.payload["status"],
            actor_id=command.actor_id,
        )

    def _adjust_stock(self, command: Command):
        return self._catalog.adjust_stock(
            command.payload["product_id"],
            command.payload["delta"],
            actor_id=command.actor_id,
        )

    def _add_product(self, command: Command):
        payload = command.payload
        return self._catalog.add_product(
            payload["name"],
            payload["price"],
            payload["category"],
            payload["stock"],
            product_id=payload["product_id"],
            actor_id=command.actor_id,
        )

    def _add_bundle(self, command: Command):
        payload = command.payload
        return self._catalog.add_bundle(
            payload["name"],
            payload["price"],
            [tuple(pair) for pair in payload["items"]],
            product_id=payload["product_id"],
            actor_id=command.actor_id,
        )

    def _update_client_settings(self, command: Command) -> ClientSettings:
        changes = command.payload["changes"]
        if not changes:
            raise ValidationError("No client settings to update.")

        updated = replace(self._client_settings, **changes)
        self._client_settings = updated
        self._order.set_client_settings(updated)

        logger.info(f"Client settings updated: {sorted(changes)}")
        self._events.emit(
            SETTINGS_CLIENT_UPDATED_V1,
            build_client_settings_updated_payload(updated, changes.keys()),
            occurred_at=self._clock.now_utc(),
            actor_id=command.actor_id,
        )
        return updated
